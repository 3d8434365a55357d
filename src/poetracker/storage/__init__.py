"""
Storage Module

Evidence upload validation and file storage.
"""

from .files import ALLOWED_FILE_TYPES, FileIntake, StoredFile

__all__ = ["ALLOWED_FILE_TYPES", "FileIntake", "StoredFile"]
