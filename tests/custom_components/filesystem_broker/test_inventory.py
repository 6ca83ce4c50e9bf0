# ruff: noqa: S101
"""Tests for the Home Assistant backed caller inventory."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import pytest
from homeassistant.config_entries import ConfigEntryDisabler
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.filesystem_broker.registry import inventory as inventory_module
from custom_components.filesystem_broker.registry.exceptions import (
    InventoryUnavailable,
)
from custom_components.filesystem_broker.registry.inventory import (
    HomeAssistantInventory,
    index_inventory,
)

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant


@dataclass
class DummyIntegration:
    """Loader integration stand-in."""

    domain: str
    name: str
    version: str | None = "1.0.0"
    documentation: str | None = None


def _patch_components(
    monkeypatch: pytest.MonkeyPatch, integrations: list[DummyIntegration]
) -> None:
    async def _components(_hass: Any) -> dict[str, DummyIntegration]:
        return {i.domain: i for i in integrations}

    monkeypatch.setattr(inventory_module, "async_get_custom_components", _components)


@pytest.mark.asyncio
async def test_lists_custom_integrations(
    hass: HomeAssistant, monkeypatch: pytest.MonkeyPatch
) -> None:
    _patch_components(
        monkeypatch,
        [
            DummyIntegration("ext_a", "Ext A", documentation="https://ext-a.invalid"),
            DummyIntegration("ext_b", "Ext B", version=None),
        ],
    )

    entries = index_inventory(await HomeAssistantInventory(hass).async_list_installed())

    assert set(entries) == {"ext_a", "ext_b"}
    assert entries["ext_a"].description == "https://ext-a.invalid"
    assert entries["ext_a"].version == "1.0.0"
    assert entries["ext_a"].enabled is True
    assert entries["ext_b"].version == ""


@pytest.mark.asyncio
async def test_disabled_entries_mark_caller_disabled(
    hass: HomeAssistant, monkeypatch: pytest.MonkeyPatch
) -> None:
    MockConfigEntry(domain="ext_a", disabled_by=ConfigEntryDisabler.USER).add_to_hass(
        hass
    )
    _patch_components(monkeypatch, [DummyIntegration("ext_a", "Ext A")])

    (entry,) = await HomeAssistantInventory(hass).async_list_installed()

    assert entry.enabled is False


@pytest.mark.asyncio
async def test_slow_listing_is_unavailable(
    hass: HomeAssistant, monkeypatch: pytest.MonkeyPatch
) -> None:
    async def _hang(_hass: Any) -> dict[str, Any]:
        await asyncio.sleep(1)
        return {}

    monkeypatch.setattr(inventory_module, "async_get_custom_components", _hang)

    with pytest.raises(InventoryUnavailable, match="timed out"):
        await HomeAssistantInventory(hass, timeout=0.01).async_list_installed()


@pytest.mark.asyncio
async def test_loader_failure_is_unavailable(
    hass: HomeAssistant, monkeypatch: pytest.MonkeyPatch
) -> None:
    async def _fail(_hass: Any) -> dict[str, Any]:
        msg = "custom_components unreadable"
        raise OSError(msg)

    monkeypatch.setattr(inventory_module, "async_get_custom_components", _fail)

    with pytest.raises(InventoryUnavailable):
        await HomeAssistantInventory(hass).async_list_installed()
