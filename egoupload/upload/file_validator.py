"""
File Validator for e.g.o Upload

Validates the extension package before upload: it must exist, be a
readable zip archive and carry the extension's metadata.json.
"""

import os
import zipfile
from pathlib import Path

from .models import ValidationResult
from .exceptions import PackageReadError, PermissionDeniedError


class FileValidator:
    """Validates extension packages before upload"""
    
    ALLOWED_EXTENSIONS = [".zip"]
    REQUIRED_MEMBER = "metadata.json"
    
    def validate_file_exists(self, file_path: str) -> ValidationResult:
        """Ensure the package is an existing, readable file"""
        if not os.path.exists(file_path):
            return ValidationResult(
                is_valid=False,
                error_message=f"File not found: {file_path}",
                file_path=file_path,
                validation_type="existence"
            )
        
        if not os.path.isfile(file_path):
            return ValidationResult(
                is_valid=False,
                error_message=f"Not a regular file: {file_path}",
                file_path=file_path,
                validation_type="existence"
            )
        
        if not os.access(file_path, os.R_OK):
            return ValidationResult(
                is_valid=False,
                error_message=f"Read permission to {file_path} denied",
                file_path=file_path,
                validation_type="permission"
            )
        
        return ValidationResult(is_valid=True)
    
    def validate_file_format(self, file_path: str) -> ValidationResult:
        """Verify file extension"""
        if Path(file_path).suffix.lower() not in self.ALLOWED_EXTENSIONS:
            return ValidationResult(
                is_valid=False,
                error_message=f"{file_path} does not appear to be a zip file",
                file_path=file_path,
                validation_type="format"
            )
        
        return ValidationResult(is_valid=True)
    
    def validate_zip_structure(self, file_path: str) -> ValidationResult:
        """Validate zip syntax and the presence of metadata.json"""
        try:
            with zipfile.ZipFile(file_path) as archive:
                names = archive.namelist()
        except zipfile.BadZipFile as e:
            return ValidationResult(
                is_valid=False,
                error_message=f"Invalid zip archive: {str(e)}",
                file_path=file_path,
                validation_type="zip_structure"
            )
        except OSError as e:
            return ValidationResult(
                is_valid=False,
                error_message=f"Error reading zip archive: {str(e)}",
                file_path=file_path,
                validation_type="zip_structure"
            )
        
        if self.REQUIRED_MEMBER not in names:
            return ValidationResult(
                is_valid=False,
                error_message=f"Package does not contain {self.REQUIRED_MEMBER}",
                file_path=file_path,
                validation_type="zip_structure"
            )
        
        return ValidationResult(is_valid=True)
    
    def validate_package(self, file_path: str) -> ValidationResult:
        """Comprehensive validation of an extension package"""
        format_result = self.validate_file_format(file_path)
        if not format_result.is_valid:
            return format_result
        
        exists_result = self.validate_file_exists(file_path)
        if not exists_result.is_valid:
            return exists_result
        
        return self.validate_zip_structure(file_path)
    
    def read_package(self, file_path: str) -> bytes:
        """Read the package contents for upload"""
        try:
            with open(file_path, 'rb') as f:
                return f.read()
        except PermissionError as e:
            raise PermissionDeniedError(f"Read permission to {file_path} denied", path=file_path) from e
        except OSError as e:
            raise PackageReadError(f"Failed to read {file_path}: {e.strerror or e}", path=file_path) from e
