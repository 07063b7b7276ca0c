"""
Data Models for the e.g.o Upload Workflow

Dataclass-based models shared by the API client, the consent manager
and the upload orchestrator.
"""

from dataclasses import dataclass, asdict
from enum import Enum
from typing import Dict, List, Optional


DEFAULT_API_URL = "https://extensions.gnome.org"

# Field keys of the confirmations e.g.o requires before accepting an upload,
# in the order they are prompted.
CONFIRMATION_FIELDS = ("shell_license_compliant", "tos_compliant")


class WorkflowState(Enum):
    """Upload workflow states"""
    IDLE = "idle"
    CONSENT_CHECKED = "consent_checked"
    AUTHENTICATED = "authenticated"
    UPLOADED = "uploaded"
    METADATA_FETCHED = "metadata_fetched"
    LOGGED_OUT = "logged_out"
    ABORTED = "aborted"


@dataclass
class EGOConfig:
    """Configuration for e.g.o API operations"""
    api_url: str = DEFAULT_API_URL
    request_timeout: int = 30

    def get_headers(self) -> Dict[str, str]:
        """Headers sent with every API request"""
        return {"Accept": "application/json"}

    def extension_url(self, extension_id: int) -> str:
        """Human-facing page of an extension"""
        return f"{self.api_url.rstrip('/')}/extension/{extension_id}/"


@dataclass(frozen=True)
class UserAuthentication:
    """User credentials for e.g.o; never persisted"""
    username: str
    password: str

    def __repr__(self) -> str:
        return f"UserAuthentication(username={self.username!r}, password='***')"


@dataclass(frozen=True)
class UploadedExtension:
    """Result of a successful upload"""
    extension: str
    version: int


@dataclass(frozen=True)
class ExtensionMetadata:
    """Extension metadata looked up after an upload"""
    id: int
    uuid: str


@dataclass(frozen=True)
class ConfirmationPrompts:
    """Human-readable prompts the user has to confirm in order to upload"""
    shell_license_compliant: str
    tos_compliant: str

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)

    def matches(self, record: Dict[str, object]) -> bool:
        """Whether a saved record holds exactly the current prompt texts"""
        return all(record.get(field) == getattr(self, field) for field in CONFIRMATION_FIELDS)


@dataclass
class ValidationResult:
    """File validation result"""
    is_valid: bool
    error_message: Optional[str] = None
    file_path: Optional[str] = None
    validation_type: Optional[str] = None


@dataclass
class UploadResult:
    """Overall upload operation result"""
    success: bool
    state: WorkflowState = WorkflowState.IDLE
    uploaded: Optional[UploadedExtension] = None
    metadata: Optional[ExtensionMetadata] = None
    extension_url: Optional[str] = None
    error: Optional[str] = None
    errors: Optional[List[str]] = None
    metadata_error: Optional[str] = None
    logout_error: Optional[str] = None
    total_time_seconds: Optional[float] = None
