"""Tests for attachment checks, the attachment controller and preview decoding."""

import asyncio
import base64
import io

import pytest
from PIL import Image

from refunddesk.engine.attachment import FileAttachmentController, decode_preview
from refunddesk.engine.file_checker import (
    FILE_TOO_LARGE,
    MAX_FILE_SIZE,
    check_file,
    classify_file,
    picker_accept,
)
from refunddesk.engine.form_store import FormStateStore
from refunddesk.models.attachment import FileKind, SelectedFile


def make_png(width: int = 64, height: int = 32) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), (14, 165, 233)).save(buffer, format="PNG")
    return buffer.getvalue()


def image_file(name: str = "receipt.png", width: int = 64, height: int = 32) -> SelectedFile:
    return SelectedFile.from_bytes(name, make_png(width, height), "image/png")


@pytest.fixture
def controller():
    return FileAttachmentController(FormStateStore())


# File constraint checks

def test_size_boundary_is_inclusive():
    at_limit = SelectedFile("statement.pdf", MAX_FILE_SIZE)
    over_limit = SelectedFile("statement.pdf", MAX_FILE_SIZE + 1)

    assert MAX_FILE_SIZE == 5242880
    assert check_file(at_limit).accepted is True
    result = check_file(over_limit)
    assert result.accepted is False
    assert result.error == FILE_TOO_LARGE == "File must be 5MB or smaller."


@pytest.mark.parametrize(
    "name,kind",
    [
        ("photo.JPG", FileKind.IMAGE),
        ("scan.jpeg", FileKind.IMAGE),
        ("screen.webp", FileKind.IMAGE),
        ("invoice.pdf", FileKind.PDF),
        ("notes", FileKind.FILE),
        ("archive.tar.gz", FileKind.FILE),
    ],
)
def test_classify_file(name, kind):
    assert classify_file(name) is kind


def test_picker_accept_filter():
    assert picker_accept() == ".jpg,.jpeg,.png,.pdf"


# Controller

def test_accepting_a_pdf(controller):
    job = controller.attach(SelectedFile("invoice.pdf", 1024))

    assert job is None
    assert controller.attachment.file_name == "invoice.pdf"
    assert controller.attachment.kind is FileKind.PDF
    assert controller.attachment.preview_loaded is True
    assert controller.store.get("proofFileName") == "invoice.pdf"
    assert controller.error is None


def test_rejection_then_acceptance(controller):
    store = controller.store

    controller.attach(SelectedFile("huge.pdf", 6 * 1024 * 1024))
    assert controller.attachment is None
    assert store.get("proofFileName") == ""
    assert store.attachment_error == FILE_TOO_LARGE
    assert store.visible_error("proofFileName") == FILE_TOO_LARGE
    assert store.file_input_key == 1

    controller.attach(SelectedFile("small.pdf", 1024 * 1024))
    assert controller.attachment.file_name == "small.pdf"
    assert store.get("proofFileName") == "small.pdf"
    assert store.attachment_error is None
    assert store.file_input_key == 1


def test_image_preview_is_installed(controller):
    job = controller.attach(image_file())

    assert job is not None
    assert controller.attachment.preview_loaded is False
    assert controller.complete_preview(job.stamp, job.decode()) is True
    assert controller.attachment.preview_loaded is True
    assert controller.attachment.preview_data.startswith("data:image/png;base64,")


def test_stale_preview_is_discarded(controller):
    first = controller.attach(image_file("first.png"))
    second = controller.attach(image_file("second.png", 20, 20))

    assert controller.complete_preview(second.stamp, "data:second") is True
    assert controller.complete_preview(first.stamp, "data:first") is False
    assert controller.attachment.file_name == "second.png"
    assert controller.attachment.preview_data == "data:second"


def test_preview_after_removal_is_discarded(controller):
    job = controller.attach(image_file())
    controller.remove()

    assert controller.complete_preview(job.stamp, "data:late") is False
    assert controller.attachment is None


def test_preview_for_replaced_pdf_is_discarded(controller):
    job = controller.attach(image_file())
    controller.attach(SelectedFile("statement.pdf", 2048))

    assert controller.complete_preview(job.stamp, "data:late") is False
    assert controller.attachment.preview_data is None


def test_cancelled_picker_behaves_like_remove():
    cancelled = FileAttachmentController(FormStateStore())
    removed = FileAttachmentController(FormStateStore())
    for ctl in (cancelled, removed):
        ctl.attach(SelectedFile("huge.pdf", MAX_FILE_SIZE + 1))

    assert cancelled.attach(None) is None
    removed.remove()

    assert cancelled.attachment is removed.attachment is None
    assert cancelled.store.values == removed.store.values
    assert cancelled.store.errors == removed.store.errors == {}
    assert cancelled.store.touched == removed.store.touched
    assert cancelled.store.file_input_key == removed.store.file_input_key == 2


def test_removal_clears_attachment_error(controller):
    controller.attach(SelectedFile("huge.pdf", MAX_FILE_SIZE + 1))
    controller.remove()
    assert controller.error is None
    assert not controller.store.touched["proofFileName"]


def test_drag_state(controller):
    controller.drag_enter()
    assert controller.is_dragging
    controller.drag_leave()
    assert not controller.is_dragging

    controller.drag_enter()
    controller.attach(SelectedFile("invoice.pdf", 10))
    assert not controller.is_dragging


def test_load_preview_runs_decode_off_loop(controller):
    job = controller.attach(image_file())
    installed = asyncio.run(controller.load_preview(job))

    assert installed is True
    assert controller.attachment.preview_loaded is True


# Preview decoding

def test_decode_preview_downscales():
    data_url = decode_preview(image_file(width=1200, height=600), max_dimension=480)
    header, encoded = data_url.split(",", 1)

    assert header == "data:image/png;base64"
    with Image.open(io.BytesIO(base64.b64decode(encoded))) as img:
        assert max(img.size) <= 480
        assert img.size == (480, 240)


def test_decode_preview_falls_back_to_raw_bytes(caplog):
    broken = SelectedFile.from_bytes("broken.png", b"not really a png", "image/png")

    data_url = decode_preview(broken)

    assert data_url == "data:image/png;base64," + base64.b64encode(b"not really a png").decode()
    assert "preview decode" in caplog.text
