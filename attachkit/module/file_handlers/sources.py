from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union

from attachkit.module.file_handlers.models import UploadBundle

UPLOAD_HANDLE_KEYS = ("tempfile", "file")
UPLOAD_FILENAME_KEY = "filename"
UPLOAD_CONTENT_TYPE_KEY = "content_type"

# Size probes, in order of preference.
SIZE_ATTRIBUTE = "attribute"
SIZE_BUFFER = "buffer"
SIZE_SEEK = "seek"


@dataclass(frozen=True)
class PathSource:
    """A filesystem location that has not been checked for existence."""

    path: Union[str, os.PathLike]

    @property
    def blank(self) -> bool:
        return not os.fspath(self.path).strip()


@dataclass(frozen=True)
class StreamCapabilities:
    """Which optional operations a stream offers, and through which attribute."""

    readable: bool = False
    size: Optional[str] = None
    rewind: Optional[str] = None
    content_type: bool = False
    original_filename: Optional[str] = None
    path: Optional[str] = None


@dataclass(frozen=True)
class StreamSource:
    """An open byte stream plus the capabilities probed on it."""

    stream: Any
    capabilities: StreamCapabilities

    @property
    def closed(self) -> bool:
        return bool(getattr(self.stream, "closed", False))

    def size(self) -> Optional[int]:
        kind = self.capabilities.size
        if kind == SIZE_ATTRIBUTE:
            value = self.stream.size
            if callable(value):
                value = value()
            return int(value) if value is not None else None
        if kind == SIZE_BUFFER:
            try:
                with self.stream.getbuffer() as view:
                    return view.nbytes
            except ValueError:
                return None
        if kind == SIZE_SEEK:
            try:
                if not _is_seekable(self.stream):
                    return None
                position = self.stream.tell()
                end = self.stream.seek(0, os.SEEK_END)
                self.stream.seek(position)
                return end
            except (OSError, ValueError):
                return None
        return None

    def rewind(self) -> None:
        kind = self.capabilities.rewind
        if kind == "rewind":
            self.stream.rewind()
        elif kind == "seek" and _is_seekable(self.stream):
            self.stream.seek(0)

    def content_type(self) -> Optional[str]:
        if not self.capabilities.content_type:
            return None
        value = getattr(self.stream, "content_type", None)
        return str(value).rstrip() if value else None

    def original_filename(self) -> Optional[str]:
        attribute = self.capabilities.original_filename
        if attribute is None:
            return None
        value = getattr(self.stream, attribute, None)
        return str(value) if value else None

    def path(self) -> Optional[str]:
        attribute = self.capabilities.path
        if attribute is None:
            return None
        value = getattr(self.stream, attribute, None)
        if isinstance(value, os.PathLike):
            value = os.fspath(value)
        if isinstance(value, str) and value.strip():
            return value
        return None


@dataclass(frozen=True)
class UploadSource:
    """A stream delivered by an upload layer with client-declared name and type."""

    inner: Optional[Union[PathSource, StreamSource]]
    original_filename: Optional[str] = None
    content_type: Optional[str] = None


Source = Union[PathSource, StreamSource, UploadSource]


def _is_seekable(stream: Any) -> bool:
    seekable = getattr(stream, "seekable", None)
    if callable(seekable):
        return bool(seekable())
    return True


def probe_stream(stream: Any) -> StreamSource:
    """Record the optional capabilities of a stream-like value without using them."""
    has_seek = callable(getattr(stream, "seek", None)) and callable(getattr(stream, "tell", None))

    if hasattr(stream, "size"):
        size = SIZE_ATTRIBUTE
    elif callable(getattr(stream, "getbuffer", None)):
        size = SIZE_BUFFER
    elif has_seek:
        size = SIZE_SEEK
    else:
        size = None

    if callable(getattr(stream, "rewind", None)):
        rewind = "rewind"
    elif callable(getattr(stream, "seek", None)):
        rewind = "seek"
    else:
        rewind = None

    if hasattr(stream, "original_filename"):
        original_filename = "original_filename"
    elif hasattr(stream, "filename"):
        original_filename = "filename"
    else:
        original_filename = None

    if hasattr(stream, "path"):
        path = "path"
    elif isinstance(getattr(stream, "name", None), (str, os.PathLike)):
        path = "name"
    else:
        path = None

    return StreamSource(
        stream=stream,
        capabilities=StreamCapabilities(
            readable=callable(getattr(stream, "read", None)),
            size=size,
            rewind=rewind,
            content_type=hasattr(stream, "content_type"),
            original_filename=original_filename,
            path=path,
        ),
    )


def _upload_handle_key(value: Mapping[str, Any]) -> Optional[str]:
    if UPLOAD_FILENAME_KEY not in value or UPLOAD_CONTENT_TYPE_KEY not in value:
        return None
    for key in UPLOAD_HANDLE_KEYS:
        if key in value:
            return key
    return None


def _normalize_plain(value: Any) -> Optional[Union[PathSource, StreamSource]]:
    if value is None:
        return None
    if isinstance(value, (str, os.PathLike)):
        return PathSource(value)
    return probe_stream(value)


def normalize_source(value: Any) -> Optional[Source]:
    """Classify an input value, in order:

    1. an ``UploadBundle`` or a mapping carrying a handle, ``filename`` and
       ``content_type`` becomes an ``UploadSource``;
    2. ``str`` and ``os.PathLike`` values become a ``PathSource``;
    3. ``None`` means there is no source;
    4. anything else is wrapped as a ``StreamSource``.
    """
    if isinstance(value, UploadBundle):
        return UploadSource(
            inner=_normalize_plain(value.tempfile),
            original_filename=value.filename,
            content_type=value.content_type,
        )
    if isinstance(value, Mapping):
        key = _upload_handle_key(value)
        if key is not None:
            return UploadSource(
                inner=_normalize_plain(value[key]),
                original_filename=value[UPLOAD_FILENAME_KEY],
                content_type=value[UPLOAD_CONTENT_TYPE_KEY],
            )
    return _normalize_plain(value)


__all__ = [
    "PathSource",
    "Source",
    "StreamCapabilities",
    "StreamSource",
    "UploadSource",
    "normalize_source",
    "probe_stream",
]
