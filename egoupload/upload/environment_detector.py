"""
e.g.o Environment Detector

Reads the environment variables recognized by ego-upload: optional API
configuration and the credentials used when no flag supplies them.
"""

import os
from typing import Callable, List, Optional
from urllib.parse import urlparse

from .models import DEFAULT_API_URL, EGOConfig, UserAuthentication, ValidationResult
from .exceptions import EnvironmentValidationError


class EGOEnvironmentDetector:
    """Detects and validates the ego-upload environment"""
    
    USERNAME_VAR = "EGO_USERNAME"
    PASSWORD_VAR = "EGO_PASSWORD"
    
    OPTIONAL_VARS = {
        "EGO_API_URL": (DEFAULT_API_URL, str),
        "EGO_REQUEST_TIMEOUT": (30, int),
    }
    
    def validate_environment(self) -> ValidationResult:
        """Validate the optional configuration variables"""
        api_url = os.getenv("EGO_API_URL")
        if api_url and not self._validate_api_url(api_url):
            return ValidationResult(
                is_valid=False,
                error_message=f"Invalid API URL format: {api_url}",
                validation_type="environment"
            )
        
        timeout = os.getenv("EGO_REQUEST_TIMEOUT")
        if timeout and not self._validate_timeout(timeout):
            return ValidationResult(
                is_valid=False,
                error_message=f"Invalid EGO_REQUEST_TIMEOUT: {timeout}",
                validation_type="environment"
            )
        
        return ValidationResult(is_valid=True)
    
    def get_invalid_variables(self) -> List[str]:
        invalid = []
        api_url = os.getenv("EGO_API_URL")
        if api_url and not self._validate_api_url(api_url):
            invalid.append("EGO_API_URL")
        timeout = os.getenv("EGO_REQUEST_TIMEOUT")
        if timeout and not self._validate_timeout(timeout):
            invalid.append("EGO_REQUEST_TIMEOUT")
        return invalid
    
    def get_config(self) -> EGOConfig:
        """Extract and validate configuration from environment"""
        validation = self.validate_environment()
        if not validation.is_valid:
            raise EnvironmentValidationError(
                validation.error_message,
                invalid_vars=self.get_invalid_variables()
            )
        
        config_kwargs = {}
        for var_name, (default_value, var_type) in self.OPTIONAL_VARS.items():
            env_value = os.getenv(var_name)
            config_kwargs[self._env_var_to_param(var_name)] = var_type(env_value) if env_value else default_value
        
        return EGOConfig(**config_kwargs)
    
    def resolve_authentication(
        self,
        username: Optional[str],
        prompt_username: Callable[[], str],
        prompt_password: Callable[[str], str],
    ) -> UserAuthentication:
        """Fill in credentials: flag first, then environment, then prompt"""
        username = username or os.getenv(self.USERNAME_VAR) or prompt_username()
        password = os.getenv(self.PASSWORD_VAR) or prompt_password(username)
        return UserAuthentication(username=username, password=password)
    
    def _validate_api_url(self, url: Optional[str]) -> bool:
        """Validate API URL format"""
        if not url:
            return False
        
        parsed = urlparse(url)
        return all([
            parsed.scheme in ['http', 'https'],
            parsed.netloc,
            not parsed.path or parsed.path == '/'
        ])
    
    def _validate_timeout(self, value: str) -> bool:
        try:
            return int(value) > 0
        except ValueError:
            return False
    
    def _env_var_to_param(self, env_var: str) -> str:
        """Convert environment variable name to parameter name"""
        # EGO_REQUEST_TIMEOUT -> request_timeout
        return env_var.replace("EGO_", "", 1).lower()
    
    def get_environment_summary(self) -> dict:
        """Get summary of environment configuration for debugging"""
        summary = {
            "detected_variables": {},
            "invalid_variables": self.get_invalid_variables(),
        }
        
        summary["detected_variables"][self.USERNAME_VAR] = os.getenv(self.USERNAME_VAR)
        # Never show the password itself
        summary["detected_variables"][self.PASSWORD_VAR] = "***" if os.getenv(self.PASSWORD_VAR) else None
        
        for var in self.OPTIONAL_VARS:
            summary["detected_variables"][var] = os.getenv(var)
        
        return summary
