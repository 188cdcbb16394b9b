from __future__ import annotations

import re
from typing import Any, Mapping, Optional, Pattern, Union

from pydantic import BaseModel, ConfigDict, ValidationInfo, field_validator

from attachkit.module.config_handler import parse_mode, settings


class AttachkitError(Exception):
    """Base exception for attachkit errors."""


class InvalidInputError(AttachkitError, TypeError):
    """Raised when a wrapped value offers none of the read, size or path capabilities."""


class SanitizedFileOptions(BaseModel):
    """Construction-time configuration for a SanitizedFile."""

    model_config = ConfigDict(extra="forbid", frozen=True, arbitrary_types_allowed=True)

    permissions: Optional[int] = None
    directory_permissions: Optional[int] = None
    sanitize_pattern: Optional[Pattern[str]] = None

    @field_validator("permissions", "directory_permissions", mode="before")
    @classmethod
    def _parse_mode(cls, value: Any, info: ValidationInfo) -> Optional[int]:
        return parse_mode(value, info.field_name)

    @field_validator("sanitize_pattern", mode="before")
    @classmethod
    def _compile_pattern(cls, value: Any) -> Optional[Pattern[str]]:
        if isinstance(value, str):
            return re.compile(value)
        return value

    @classmethod
    def from_settings(cls) -> "SanitizedFileOptions":
        return cls(
            permissions=settings.files.permissions,
            directory_permissions=settings.files.directory_permissions,
        )

    @classmethod
    def coerce(cls, value: Union["SanitizedFileOptions", Mapping[str, Any], None]) -> "SanitizedFileOptions":
        if value is None:
            return cls.from_settings()
        if isinstance(value, cls):
            return value
        return cls(**{**cls.from_settings().model_dump(exclude_unset=True), **dict(value)})


class UploadBundle(BaseModel):
    """Temporary handle plus the filename and content type declared by the uploading client."""

    model_config = ConfigDict(extra="forbid", frozen=True, arbitrary_types_allowed=True)

    tempfile: Any
    filename: Optional[str] = None
    content_type: Optional[str] = None


class FileDescriptor(BaseModel):
    """Snapshot of the metadata resolved for a SanitizedFile."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    original_filename: Optional[str] = None
    filename: Optional[str] = None
    basename: Optional[str] = None
    extension: Optional[str] = None
    content_type: Optional[str] = None
    path: Optional[str] = None
    size: int = 0
    exists: bool = False
    path_based: bool = False


__all__ = [
    "AttachkitError",
    "FileDescriptor",
    "InvalidInputError",
    "SanitizedFileOptions",
    "UploadBundle",
]
