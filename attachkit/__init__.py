"""attachkit: a uniform sanitized-file abstraction for upload and attachment handling."""

from attachkit.module.file_handlers.filenames import sanitize_filename, split_extension
from attachkit.module.file_handlers.models import (
    AttachkitError,
    FileDescriptor,
    InvalidInputError,
    SanitizedFileOptions,
    UploadBundle,
)
from attachkit.module.file_handlers.sanitized_file import SanitizedFile

__version__ = "0.1.0"

__all__ = [
    "AttachkitError",
    "FileDescriptor",
    "InvalidInputError",
    "SanitizedFile",
    "SanitizedFileOptions",
    "UploadBundle",
    "sanitize_filename",
    "split_extension",
]
