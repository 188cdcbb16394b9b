from __future__ import annotations

import hashlib
import os
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from attachkit.module.file_handlers import storage
from attachkit.module.file_handlers.filenames import sanitize_filename, split_extension
from attachkit.module.file_handlers.models import FileDescriptor, InvalidInputError, SanitizedFileOptions
from attachkit.module.file_handlers.sources import PathSource, Source, StreamSource, UploadSource, normalize_source
from attachkit.module.logging import LoggingInterceptor

logger = LoggingInterceptor("file_handlers_sanitized_file")

CHUNK_SIZE = 1024 * 1024

OptionsLike = Union[SanitizedFileOptions, Mapping[str, Any], None]


class SanitizedFile:
    """One API over paths, byte streams, open files and upload bundles.

    Naming and metadata are resolved on every access from the current source,
    so nothing goes stale after ``move_to``. Open streams stay owned by the
    caller; this class only reads and rewinds them.
    """

    def __init__(self, file: Any, options: OptionsLike = None) -> None:
        self.options = SanitizedFileOptions.coerce(options)
        self._source: Optional[Source] = normalize_source(file)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} filename={self.filename!r} path={self.path!r}>"

    @property
    def source(self) -> Optional[Source]:
        return self._source

    @property
    def file(self) -> Any:
        """The wrapped path or stream, with any upload bundle unwrapped."""
        active = self._active()
        if isinstance(active, PathSource):
            return active.path
        if isinstance(active, StreamSource):
            return active.stream
        return None

    def _active(self) -> Optional[Union[PathSource, StreamSource]]:
        if isinstance(self._source, UploadSource):
            return self._source.inner
        return self._source

    def _stream(self) -> Optional[StreamSource]:
        active = self._active()
        return active if isinstance(active, StreamSource) else None

    # -- naming ---------------------------------------------------------

    @property
    def original_filename(self) -> Optional[str]:
        """The client-supplied name, unsanitized.

        Declared upload name, then the stream's own filename, then the last
        component of ``path``.
        """
        if isinstance(self._source, UploadSource) and self._source.original_filename is not None:
            return self._source.original_filename
        stream = self._stream()
        if stream is not None:
            name = stream.original_filename()
            if name:
                return name
        path = self.path
        if path:
            return os.path.basename(path)
        return None

    @property
    def filename(self) -> Optional[str]:
        original = self.original_filename
        if original is None:
            return None
        return sanitize_filename(original, self.options.sanitize_pattern)

    identifier = filename

    @property
    def basename(self) -> Optional[str]:
        filename = self.filename
        return split_extension(filename)[0] if filename is not None else None

    @property
    def extension(self) -> Optional[str]:
        filename = self.filename
        return split_extension(filename)[1] if filename is not None else None

    @property
    def content_type(self) -> Optional[str]:
        """Declared upload type, then the stream's own content type (right-stripped)."""
        if isinstance(self._source, UploadSource) and self._source.content_type is not None:
            return self._source.content_type
        stream = self._stream()
        if stream is not None:
            return stream.content_type()
        return None

    @property
    def path(self) -> Optional[str]:
        """Absolute location of the file, or None for purely in-memory sources."""
        active = self._active()
        if active is None:
            return None
        if isinstance(active, PathSource):
            return None if active.blank else storage.expand_path(active.path)
        stream_path = active.path()
        return storage.expand_path(stream_path) if stream_path else None

    # -- queries --------------------------------------------------------

    def is_path_based(self) -> bool:
        active = self._active()
        return isinstance(active, PathSource) and not active.blank

    def exists(self) -> bool:
        path = self.path
        if path is None:
            return False
        return os.path.exists(path)

    def size(self) -> int:
        """Stream-reported size, then on-disk size, then 0."""
        stream = self._stream()
        if stream is not None:
            size = stream.size()
            if size is not None:
                return size
        if self.exists():
            return os.path.getsize(self.path)
        return 0

    def empty(self) -> bool:
        if self._active() is None:
            return True
        return not self.size()

    def read(self) -> bytes:
        """Return the full contents.

        Raises:
            OSError: the path is missing or unreadable, or the stream is closed.
            InvalidInputError: the wrapped value cannot be read at all.
        """
        if self.is_path_based():
            with open(self.path, "rb") as handle:
                return handle.read()
        stream = self._stream()
        if stream is None or not stream.capabilities.readable:
            raise InvalidInputError(f"Cannot read from {type(self.file).__name__} value")
        if stream.closed:
            raise IOError(f"Cannot read from closed stream {stream.stream!r}")
        stream.rewind()
        data = stream.stream.read()
        if isinstance(data, str):
            data = data.encode("utf-8")
        return data

    def checksum(self) -> str:
        """SHA-256 hex digest of the contents."""
        digest = hashlib.sha256()
        if self.is_path_based():
            with open(self.path, "rb") as handle:
                for chunk in iter(lambda: handle.read(CHUNK_SIZE), b""):
                    digest.update(chunk)
        else:
            digest.update(self.read())
        return digest.hexdigest()

    def describe(self) -> FileDescriptor:
        return FileDescriptor(
            original_filename=self.original_filename,
            filename=self.filename,
            basename=self.basename,
            extension=self.extension,
            content_type=self.content_type,
            path=self.path,
            size=self.size(),
            exists=self.exists(),
            path_based=self.is_path_based(),
        )

    # -- mutation -------------------------------------------------------

    def _transfer(self, new_path: Union[str, os.PathLike], *, move: bool) -> Optional[Path]:
        if self.empty():
            logger.info("Skipping transfer of empty file", target=os.fspath(new_path), move=move)
            return None
        target = Path(storage.expand_path(new_path))
        try:
            storage.ensure_parent_directory(target, mode=self.options.directory_permissions)
            if self.exists():
                current = Path(self.path)
                if current != target:
                    if move:
                        storage.move_file(current, target)
                    else:
                        storage.atomic_copy(current, target)
            else:
                storage.atomic_write_bytes(target, self.read())
            storage.apply_permissions(target, self.options.permissions)
        except OSError:
            logger.exception("File transfer failed", source=self.path, target=str(target), move=move)
            raise
        return target

    def move_to(self, new_path: Union[str, os.PathLike]) -> None:
        """Move the file to new_path and point this instance at it.

        In-memory sources are written out; upload-declared name and content
        type are dropped once the file lives at its new path.
        """
        target = self._transfer(new_path, move=True)
        if target is None:
            return
        self._source = PathSource(str(target))
        logger.info("File moved", path=str(target))

    def copy_to(self, new_path: Union[str, os.PathLike]) -> Optional["SanitizedFile"]:
        """Copy the file to new_path and return a new instance for the copy."""
        target = self._transfer(new_path, move=False)
        if target is None:
            return None
        logger.info("File copied", source=self.path, path=str(target))
        return type(self)(str(target), options=self.options)

    def delete(self) -> None:
        if not self.exists():
            return
        path = Path(self.path)
        try:
            storage.remove_file(path)
        except OSError:
            logger.exception("File delete failed", path=str(path))
            raise


__all__ = ["SanitizedFile"]
