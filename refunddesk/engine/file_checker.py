"""Attachment constraint checks."""

from typing import Iterable, Optional

from ..models.attachment import FileCheck, FileKind, SelectedFile


MAX_FILE_SIZE = 5 * 1024 * 1024
ACCEPTED_EXTENSIONS = (".jpg", ".jpeg", ".png", ".pdf")
IMAGE_EXTENSIONS = {"jpg", "jpeg", "png", "gif", "bmp", "webp"}
FILE_TOO_LARGE = "File must be 5MB or smaller."


def classify_file(file_name: str) -> FileKind:
    """
    Classify a file by its extension.

    Args:
        file_name: Filename, possibly without an extension

    Returns:
        FileKind.IMAGE, FileKind.PDF, or FileKind.FILE for anything else
    """
    if "." not in file_name:
        return FileKind.FILE
    suffix = file_name.rsplit(".", 1)[-1].lower()
    if suffix in IMAGE_EXTENSIONS:
        return FileKind.IMAGE
    if suffix == "pdf":
        return FileKind.PDF
    return FileKind.FILE


def size_error(max_size: int) -> str:
    if max_size == MAX_FILE_SIZE:
        return FILE_TOO_LARGE
    return f"File must be {max_size // (1024 * 1024)}MB or smaller."


def check_file(file: SelectedFile, max_size: int = MAX_FILE_SIZE) -> FileCheck:
    """
    Check an attachment against the size ceiling and classify it.

    The extension filter lives at the picker boundary; only the size is
    enforced here.

    Args:
        file: Selected file metadata
        max_size: Largest accepted size in bytes (inclusive)

    Returns:
        FileCheck with the classification and, on rejection, the error
    """
    kind = classify_file(file.name)
    if file.size_bytes > max_size:
        return FileCheck(accepted=False, kind=kind, error=size_error(max_size))
    return FileCheck(accepted=True, kind=kind)


def picker_accept(extensions: Optional[Iterable[str]] = None) -> str:
    """Return the ``accept`` filter string for the file picker."""
    return ",".join(extensions or ACCEPTED_EXTENSIONS)
