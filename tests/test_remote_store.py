"""Tests for the HTTP remote store adapter."""

import base64

import httpx
import pytest

from archivist.catalog import ArchiveImage, ArchiveObject, ImageState
from archivist.config.models import RemoteSettings
from archivist.remote import (
    RemoteStore,
    RemoteStoreError,
    SheetTable,
    SheetTransport,
    UploadUnavailableError,
)

ENDPOINT = "https://script.example/exec"


def _samples() -> list[ArchiveObject]:
    return [ArchiveObject(id="sample", title="Sample")]


def _sheet_store(**settings: object) -> tuple[RemoteStore, SheetTransport]:
    transport = SheetTransport(SheetTable())
    store = RemoteStore(
        RemoteSettings(endpoint_url=ENDPOINT, **settings),
        transport=transport,
        samples=_samples,
    )
    return store, transport


def _failing_store(handler, **settings: object) -> RemoteStore:
    return RemoteStore(
        RemoteSettings(endpoint_url=ENDPOINT, **settings),
        transport=httpx.MockTransport(handler),
        samples=_samples,
    )


def _server_error(request: httpx.Request) -> httpx.Response:
    return httpx.Response(500, text="boom", request=request)


def _unreachable(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("connection refused", request=request)


def test_unconfigured_store_uses_local_fallbacks() -> None:
    store = RemoteStore(RemoteSettings(), samples=_samples)

    assert not store.configured
    assert [obj.id for obj in store.fetch_all()] == ["sample"]
    created = store.create(ArchiveObject(title="Offline"))
    assert created.id
    assert store.delete("anything") is True
    with pytest.raises(UploadUnavailableError):
        store.upload_image(filename="a.jpg", mime_type="image/jpeg", data=b"x")


def test_create_then_fetch_round_trips_through_sheet() -> None:
    store, transport = _sheet_store()
    obj = ArchiveObject(
        id="100",
        title="Copper Lantern",
        keywords=["copper", "lighting"],
        images=[ArchiveImage(url="https://img.example/l.jpg", is_primary=True)],
    )

    saved = store.create(obj)
    fetched = store.fetch_all()

    assert saved.id == "100"
    assert saved.created_at is not None
    assert [item.title for item in fetched] == ["Copper Lantern"]
    assert fetched[0].keywords == ["copper", "lighting"]
    assert fetched[0].images[0].is_primary
    body = transport.requests[0]["body"]
    assert body["action"] == "create"
    assert body["object"]["keywords"] == ["copper", "lighting"]


def test_update_replaces_row() -> None:
    store, _ = _sheet_store()
    saved = store.create(ArchiveObject(id="5", title="Hinge"))

    store.update(saved.model_copy(update={"title": "Iron Hinge"}))

    assert [obj.title for obj in store.fetch_all()] == ["Iron Hinge"]


@pytest.mark.parametrize("handler", [_server_error, _unreachable])
def test_fetch_failure_falls_back_to_samples(handler) -> None:
    store = _failing_store(handler)

    assert [obj.id for obj in store.fetch_all()] == ["sample"]


def test_write_failure_returns_unsaved_object() -> None:
    store = _failing_store(_unreachable)
    obj = ArchiveObject(id="8", title="Sideboard")

    assert store.update(obj) == obj
    created = store.create(ArchiveObject(title="New"))
    assert created.id
    assert created.title == "New"


def test_unsuccessful_envelope_is_treated_as_failure() -> None:
    def _rejecting(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"success": False, "error": "Sheet locked"})

    store = _failing_store(_rejecting)

    assert store.fetch_all()[0].id == "sample"
    assert store.delete("1") is False


def test_delete_reports_remote_outcome() -> None:
    store, _ = _sheet_store()
    store.create(ArchiveObject(id="42", title="Blueprint"))

    assert store.delete("42") is True
    assert store.delete("42") is False
    assert _failing_store(_server_error).delete("42") is False


def test_upload_image_returns_link() -> None:
    store, transport = _sheet_store(upload_images=True)

    result = store.upload_image(filename="beam.jpg", mime_type="image/jpeg", data=b"jpeg-bytes")

    assert result.url
    assert result.name == "beam.jpg"
    body = transport.requests[-1]["body"]
    assert body["action"] == "uploadImage"
    assert base64.b64decode(body["data"]) == b"jpeg-bytes"
    assert body["mimeType"] == "image/jpeg"


def test_upload_image_disabled_raises() -> None:
    store, transport = _sheet_store(upload_images=False)

    with pytest.raises(UploadUnavailableError):
        store.upload_image(filename="a.jpg", mime_type="image/jpeg", data=b"x")
    assert transport.requests == []


@pytest.mark.parametrize("handler", [_server_error, _unreachable])
def test_upload_image_failure_raises(handler) -> None:
    store = _failing_store(handler, upload_images=True)

    with pytest.raises(RemoteStoreError):
        store.upload_image(filename="a.jpg", mime_type="image/jpeg", data=b"x")


def test_local_images_keep_state_through_sheet() -> None:
    store, _ = _sheet_store()
    local = ArchiveImage(url="data:image/jpeg;base64,AAAA", state=ImageState.LOCAL)

    store.create(ArchiveObject(id="1", title="Full", images=[local]))

    assert store.fetch_all()[0].images[0].is_local
