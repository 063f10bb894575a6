"""Attachment data models."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class FileKind(Enum):
    """Classification of an attached file by extension."""
    IMAGE = "image"
    PDF = "pdf"
    FILE = "file"


@dataclass(frozen=True)
class SelectedFile:
    """
    A file handed to the engine by a file picker or upload.

    Attributes:
        name: Original filename
        size_bytes: Size reported by the picker
        content_type: MIME type reported by the picker
        data: File content, needed only for image previews
    """
    name: str
    size_bytes: int
    content_type: str = "application/octet-stream"
    data: bytes = b""

    @classmethod
    def from_bytes(cls, name: str, data: bytes, content_type: str = "application/octet-stream") -> "SelectedFile":
        return cls(name=name, size_bytes=len(data), content_type=content_type, data=data)


@dataclass(frozen=True)
class FileCheck:
    """
    Outcome of checking a file against the attachment constraints.

    Attributes:
        accepted: Whether the file may be attached
        kind: Classification derived from the filename
        error: Message shown under the attachment field when rejected
    """
    accepted: bool
    kind: FileKind
    error: Optional[str] = None


@dataclass
class Attachment:
    """
    The currently attached proof file.

    Attributes:
        file_name: Filename shown to the user
        size_bytes: File size
        kind: Classification derived from the filename
        stamp: Attachment generation this record belongs to
        preview_data: Data URL for image previews, once decoded
        preview_loaded: False while an image preview is still decoding
    """
    file_name: str
    size_bytes: int
    kind: FileKind
    stamp: int
    preview_data: Optional[str] = None
    preview_loaded: bool = True

    def to_dict(self) -> dict:
        return {
            "fileName": self.file_name,
            "sizeBytes": self.size_bytes,
            "kind": self.kind.value,
            "previewData": self.preview_data,
            "previewLoaded": self.preview_loaded,
        }
