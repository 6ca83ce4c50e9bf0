# ruff: noqa: S101
"""Tests for the caller registry store."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import pytest

from custom_components.filesystem_broker.const import STORE_KEY, STORE_VERSION
from custom_components.filesystem_broker.registry.exceptions import (
    RegistryConsistencyError,
    StorageUnavailable,
)
from custom_components.filesystem_broker.registry.models import AccessRecord
from custom_components.filesystem_broker.registry.store import RegistryStore

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant


def _stored(data: Any) -> dict[str, Any]:
    return {"version": STORE_VERSION, "minor_version": 1, "key": STORE_KEY, "data": data}


@pytest.mark.asyncio
async def test_missing_registry_loads_empty_and_logs(
    hass: HomeAssistant, caplog: pytest.LogCaptureFixture
) -> None:
    store = RegistryStore(hass)

    with caplog.at_level(logging.ERROR):
        assert await store.async_load() == {}
    assert "No caller registry found" in caplog.text


@pytest.mark.asyncio
async def test_missing_registry_is_quiet_when_seeding(
    hass: HomeAssistant, caplog: pytest.LogCaptureFixture
) -> None:
    store = RegistryStore(hass)

    with caplog.at_level(logging.ERROR):
        assert await store.async_load(setting_defaults=True) == {}
    assert "No caller registry found" not in caplog.text


@pytest.mark.asyncio
async def test_save_then_load(hass: HomeAssistant, hass_storage: dict[str, Any]) -> None:
    store = RegistryStore(hass)
    records = {
        "ext_a": AccessRecord(id="ext_a", name="A", allow_access=True),
        "self": AccessRecord(id="self", name="Self", allow_access=True, locked=True),
    }

    await store.async_save(records)

    persisted = hass_storage[STORE_KEY]["data"]
    assert persisted["ext_a"]["allow_access"] is True
    assert persisted["self"]["locked"] is True
    assert await store.async_load() == records


@pytest.mark.asyncio
async def test_record_without_id_takes_key(
    hass: HomeAssistant, hass_storage: dict[str, Any]
) -> None:
    hass_storage[STORE_KEY] = _stored({"ext_a": {"name": "A", "allow_access": True}})

    records = await RegistryStore(hass).async_load()

    assert records["ext_a"].id == "ext_a"
    assert records["ext_a"].allow_access is True


@pytest.mark.asyncio
async def test_mismatched_key_is_rejected(
    hass: HomeAssistant, hass_storage: dict[str, Any]
) -> None:
    hass_storage[STORE_KEY] = _stored({"ext_a": {"id": "ext_b", "name": "B"}})

    with pytest.raises(RegistryConsistencyError):
        await RegistryStore(hass).async_load()


@pytest.mark.asyncio
async def test_non_mapping_record_is_rejected(
    hass: HomeAssistant, hass_storage: dict[str, Any]
) -> None:
    hass_storage[STORE_KEY] = _stored({"ext_a": ["not", "a", "record"]})

    with pytest.raises(RegistryConsistencyError):
        await RegistryStore(hass).async_load()


@pytest.mark.asyncio
async def test_save_refuses_mismatched_key(hass: HomeAssistant) -> None:
    store = RegistryStore(hass)

    with pytest.raises(RegistryConsistencyError):
        await store.async_save({"ext_a": AccessRecord(id="ext_b", name="B")})


@pytest.mark.asyncio
async def test_write_failure_surfaces_as_storage_unavailable(
    hass: HomeAssistant, monkeypatch: pytest.MonkeyPatch
) -> None:
    store = RegistryStore(hass)

    async def _boom(_data: Any) -> None:
        msg = "disk full"
        raise OSError(msg)

    monkeypatch.setattr(store._store, "async_save", _boom)  # noqa: SLF001

    with pytest.raises(StorageUnavailable):
        await store.async_save({"ext_a": AccessRecord(id="ext_a", name="A")})


@pytest.mark.asyncio
async def test_clear_removes_everything(
    hass: HomeAssistant, hass_storage: dict[str, Any]
) -> None:
    store = RegistryStore(hass)
    await store.async_save({"ext_a": AccessRecord(id="ext_a", name="A")})

    await store.async_clear()

    assert await store.async_load(setting_defaults=True) == {}
