# ruff: noqa: S101
"""Tests for the FileSystem Broker config and options flows."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pytest
from homeassistant.data_entry_flow import AbortFlow
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.filesystem_broker.config_flow import (
    DEFAULT_OPTIONS,
    FileSystemBrokerConfigFlow,
    FileSystemBrokerOptionsFlow,
    auto_remove_days,
)
from custom_components.filesystem_broker.const import (
    CONF_ACCESS_CONTROL_ENABLED,
    CONF_AUTO_REMOVE_DAYS,
    DOMAIN,
    RECOMMENDED_AUTO_REMOVE_DAYS,
)

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant


def _stub_results(flow: Any) -> None:
    """Replace flow result builders with plain dicts."""
    flow.async_show_form = lambda **kwargs: {  # type: ignore[assignment]
        "type": "form",
        "step_id": kwargs["step_id"],
        "data_schema": kwargs["data_schema"],
    }
    flow.async_create_entry = lambda **kwargs: {  # type: ignore[assignment]
        "type": "create_entry",
        "title": kwargs.get("title"),
        "data": kwargs.get("data"),
        "options": kwargs.get("options"),
    }


@pytest.mark.parametrize(
    ("options", "expected"),
    [
        ({}, RECOMMENDED_AUTO_REMOVE_DAYS),
        ({CONF_AUTO_REMOVE_DAYS: 7}, 7),
        ({CONF_AUTO_REMOVE_DAYS: 3.0}, 3),
        ({CONF_AUTO_REMOVE_DAYS: -5}, -1),
        ({CONF_AUTO_REMOVE_DAYS: 10_000}, 365),
        ({CONF_AUTO_REMOVE_DAYS: "soon"}, RECOMMENDED_AUTO_REMOVE_DAYS),
        ({CONF_AUTO_REMOVE_DAYS: None}, RECOMMENDED_AUTO_REMOVE_DAYS),
    ],
)
def test_auto_remove_days(options: dict[str, Any], expected: int) -> None:
    assert auto_remove_days(options) == expected


@pytest.mark.asyncio
async def test_user_step_creates_entry_with_defaults(hass: HomeAssistant) -> None:
    flow = FileSystemBrokerConfigFlow()
    flow.hass = hass
    flow.handler = DOMAIN
    flow.context = {"source": "user"}
    _stub_results(flow)

    form = await flow.async_step_user()
    assert form["type"] == "form"

    result = await flow.async_step_user({})
    assert result["type"] == "create_entry"
    assert result["options"] == DEFAULT_OPTIONS


@pytest.mark.asyncio
async def test_user_step_is_single_instance(hass: HomeAssistant) -> None:
    MockConfigEntry(domain=DOMAIN, unique_id=DOMAIN).add_to_hass(hass)
    flow = FileSystemBrokerConfigFlow()
    flow.hass = hass
    flow.handler = DOMAIN
    flow.context = {"source": "user"}
    _stub_results(flow)

    with pytest.raises(AbortFlow):
        await flow.async_step_user({})


@pytest.mark.asyncio
async def test_options_flow_normalizes_days(hass: HomeAssistant) -> None:
    entry = MockConfigEntry(domain=DOMAIN, options=dict(DEFAULT_OPTIONS))
    entry.add_to_hass(hass)
    flow = FileSystemBrokerOptionsFlow()
    flow.hass = hass
    flow.handler = entry.entry_id
    _stub_results(flow)

    form = await flow.async_step_init()
    assert form["step_id"] == "init"

    result = await flow.async_step_init(
        {CONF_ACCESS_CONTROL_ENABLED: False, CONF_AUTO_REMOVE_DAYS: 5.0}
    )
    assert result["data"][CONF_ACCESS_CONTROL_ENABLED] is False
    assert result["data"][CONF_AUTO_REMOVE_DAYS] == 5
    assert isinstance(result["data"][CONF_AUTO_REMOVE_DAYS], int)
