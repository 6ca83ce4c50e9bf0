"""FileSystem Broker Initialization."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import voluptuous as vol
from homeassistant.config_entries import SIGNAL_CONFIG_ENTRY_CHANGED, ConfigEntryChange
from homeassistant.const import EVENT_COMPONENT_LOADED
from homeassistant.core import CALLBACK_TYPE, SupportsResponse, callback
from homeassistant.exceptions import ConfigEntryNotReady
from homeassistant.helpers import config_validation as cv
from homeassistant.helpers.dispatcher import async_dispatcher_connect
from homeassistant.loader import async_get_integration

from .config_flow import auto_remove_days
from .const import (
    ATTR_ALLOW_ACCESS,
    ATTR_CALLER_ID,
    ATTR_CALLER_IDS,
    ATTR_NAME,
    ATTR_NUM_DAYS,
    ATTR_OLD_CALLER_ID,
    ATTR_SORT_BY,
    AUTO_REMOVE_DAYS_DISABLED,
    AUTO_REMOVE_DAYS_MAX,
    CONF_ACCESS_CONTROL_ENABLED,
    DATA_RUNTIME,
    DATA_VIEW_REGISTERED,
    DOMAIN,
    SERVICE_ADD_OR_UPDATE,
    SERVICE_ALLOW_ACCESS,
    SERVICE_ALLOW_ALL,
    SERVICE_ALLOW_SELECTED,
    SERVICE_DELETE,
    SERVICE_DELETE_SELECTED,
    SERVICE_DISALLOW_ACCESS,
    SERVICE_DISALLOW_ALL,
    SERVICE_DISALLOW_SELECTED,
    SERVICE_LIST_CALLERS,
    SERVICE_RESET,
    SERVICE_SWEEP,
    SORT_BY_ID,
    SORT_BY_NAME,
)
from .core.error_handlers import ErrorHandler
from .core.runtime import FSBConfigEntry, FSBData
from .http import AccessCheckView
from .registry import (
    AccessRegistry,
    AccessRegistryError,
    HomeAssistantInventory,
    LifecycleSweeper,
    RegistryStore,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from homeassistant.config_entries import ConfigEntry
    from homeassistant.core import Event, HomeAssistant, ServiceCall, ServiceResponse

LOGGER = logging.getLogger(__name__)

CALLER_SCHEMA = vol.Schema({vol.Required(ATTR_CALLER_ID): cv.string})
CALLERS_SCHEMA = vol.Schema(
    {vol.Required(ATTR_CALLER_IDS): vol.All(cv.ensure_list, [cv.string])}
)
ADD_OR_UPDATE_SCHEMA = vol.Schema(
    {
        vol.Optional(ATTR_OLD_CALLER_ID): cv.string,
        vol.Required(ATTR_CALLER_ID): vol.All(cv.string, vol.Length(min=1)),
        vol.Required(ATTR_NAME): vol.All(cv.string, vol.Length(min=1)),
        vol.Optional(ATTR_ALLOW_ACCESS, default=True): cv.boolean,
    }
)
SWEEP_SCHEMA = vol.Schema(
    {
        vol.Optional(ATTR_NUM_DAYS): vol.All(
            vol.Coerce(int),
            vol.Range(min=AUTO_REMOVE_DAYS_DISABLED, max=AUTO_REMOVE_DAYS_MAX),
        ),
    }
)
LIST_SCHEMA = vol.Schema(
    {
        vol.Optional(ATTR_SORT_BY, default=SORT_BY_ID): vol.In(
            [SORT_BY_ID, SORT_BY_NAME]
        ),
    }
)
EMPTY_SCHEMA = vol.Schema({})

SERVICES = (
    SERVICE_ALLOW_ACCESS,
    SERVICE_DISALLOW_ACCESS,
    SERVICE_ALLOW_ALL,
    SERVICE_DISALLOW_ALL,
    SERVICE_ALLOW_SELECTED,
    SERVICE_DISALLOW_SELECTED,
    SERVICE_ADD_OR_UPDATE,
    SERVICE_DELETE,
    SERVICE_DELETE_SELECTED,
    SERVICE_SWEEP,
    SERVICE_LIST_CALLERS,
    SERVICE_RESET,
)


def _register_services(hass: HomeAssistant, entry: FSBConfigEntry) -> None:
    """Register the administrative services."""

    def _registry() -> AccessRegistry:
        return entry.runtime_data.registry

    async def _handle_allow_access(call: ServiceCall) -> ServiceResponse:
        ok = await _registry().async_allow_access(call.data[ATTR_CALLER_ID])
        return {"success": ok}

    async def _handle_disallow_access(call: ServiceCall) -> ServiceResponse:
        ok = await _registry().async_disallow_access(call.data[ATTR_CALLER_ID])
        return {"success": ok}

    async def _handle_allow_all(_call: ServiceCall) -> ServiceResponse:
        return {"changed": await _registry().async_allow_access_all()}

    async def _handle_disallow_all(_call: ServiceCall) -> ServiceResponse:
        return {"changed": await _registry().async_disallow_access_all()}

    async def _handle_allow_selected(call: ServiceCall) -> ServiceResponse:
        ids = call.data[ATTR_CALLER_IDS]
        return {"changed": await _registry().async_allow_access_selected(ids)}

    async def _handle_disallow_selected(call: ServiceCall) -> ServiceResponse:
        ids = call.data[ATTR_CALLER_IDS]
        return {"changed": await _registry().async_disallow_access_selected(ids)}

    async def _handle_add_or_update(call: ServiceCall) -> ServiceResponse:
        record = await _registry().async_add_or_update_caller(
            call.data.get(ATTR_OLD_CALLER_ID),
            call.data[ATTR_CALLER_ID],
            call.data[ATTR_NAME],
            call.data[ATTR_ALLOW_ACCESS],
        )
        return {"record": record.as_dict()}

    async def _handle_delete(call: ServiceCall) -> ServiceResponse:
        record = await _registry().async_delete_caller(call.data[ATTR_CALLER_ID])
        return {"deleted": record.as_dict() if record is not None else None}

    async def _handle_delete_selected(call: ServiceCall) -> ServiceResponse:
        ids = call.data[ATTR_CALLER_IDS]
        return {"deleted": await _registry().async_delete_selected(ids)}

    async def _handle_sweep(call: ServiceCall) -> ServiceResponse:
        sweeper = entry.runtime_data.sweeper
        result = await sweeper.async_run_now(num_days=call.data.get(ATTR_NUM_DAYS))
        return result.as_dict()

    async def _handle_list_callers(call: ServiceCall) -> ServiceResponse:
        records = await _registry().async_list_records(call.data[ATTR_SORT_BY])
        return {"callers": [record.as_dict() for record in records]}

    async def _handle_reset(_call: ServiceCall) -> None:
        data = entry.runtime_data
        await data.registry.async_reset(data.self_id, data.self_name, data.version)

    handlers: dict[str, tuple[Any, vol.Schema, SupportsResponse]] = {
        SERVICE_ALLOW_ACCESS: (
            _handle_allow_access,
            CALLER_SCHEMA,
            SupportsResponse.OPTIONAL,
        ),
        SERVICE_DISALLOW_ACCESS: (
            _handle_disallow_access,
            CALLER_SCHEMA,
            SupportsResponse.OPTIONAL,
        ),
        SERVICE_ALLOW_ALL: (_handle_allow_all, EMPTY_SCHEMA, SupportsResponse.OPTIONAL),
        SERVICE_DISALLOW_ALL: (
            _handle_disallow_all,
            EMPTY_SCHEMA,
            SupportsResponse.OPTIONAL,
        ),
        SERVICE_ALLOW_SELECTED: (
            _handle_allow_selected,
            CALLERS_SCHEMA,
            SupportsResponse.OPTIONAL,
        ),
        SERVICE_DISALLOW_SELECTED: (
            _handle_disallow_selected,
            CALLERS_SCHEMA,
            SupportsResponse.OPTIONAL,
        ),
        SERVICE_ADD_OR_UPDATE: (
            _handle_add_or_update,
            ADD_OR_UPDATE_SCHEMA,
            SupportsResponse.OPTIONAL,
        ),
        SERVICE_DELETE: (_handle_delete, CALLER_SCHEMA, SupportsResponse.OPTIONAL),
        SERVICE_DELETE_SELECTED: (
            _handle_delete_selected,
            CALLERS_SCHEMA,
            SupportsResponse.OPTIONAL,
        ),
        SERVICE_SWEEP: (_handle_sweep, SWEEP_SCHEMA, SupportsResponse.OPTIONAL),
        SERVICE_LIST_CALLERS: (
            _handle_list_callers,
            LIST_SCHEMA,
            SupportsResponse.ONLY,
        ),
        SERVICE_RESET: (_handle_reset, EMPTY_SCHEMA, SupportsResponse.NONE),
    }

    for service, (handler, schema, supports_response) in handlers.items():
        hass.services.async_register(
            DOMAIN,
            service,
            handler,
            schema=schema,
            supports_response=supports_response,
        )


def _listen_for_installs(
    hass: HomeAssistant, registry: AccessRegistry
) -> CALLBACK_TYPE:
    """Cancel pending removals when a recorded caller is loaded again."""

    @callback
    def _handle_component_loaded(event: Event) -> None:
        domain = str(event.data.get("component", "")).partition(".")[0]
        if not domain or not registry.has_record(domain):
            return
        hass.async_create_task(
            ErrorHandler.execute_with_standard_handling(
                registry.async_handle_installed(domain),
                f"Reinstating caller {domain}",
            )
        )

    return hass.bus.async_listen(EVENT_COMPONENT_LOADED, _handle_component_loaded)


def _listen_for_removals(
    hass: HomeAssistant, registry: AccessRegistry, num_days_getter: Callable[[], int]
) -> CALLBACK_TYPE:
    """Treat removal of a recorded caller's last config entry as an uninstall."""

    @callback
    def _handle_entry_changed(change: ConfigEntryChange, changed: ConfigEntry) -> None:
        if change is not ConfigEntryChange.REMOVED:
            return
        domain = changed.domain
        if domain == DOMAIN or not registry.has_record(domain):
            return
        if any(
            other.entry_id != changed.entry_id
            for other in hass.config_entries.async_entries(domain)
        ):
            return
        hass.async_create_task(
            ErrorHandler.execute_with_standard_handling(
                registry.async_mark_uninstalled(domain, num_days_getter()),
                f"Marking caller {domain} uninstalled",
            )
        )

    return async_dispatcher_connect(
        hass, SIGNAL_CONFIG_ENTRY_CHANGED, _handle_entry_changed
    )


async def async_setup_entry(hass: HomeAssistant, entry: FSBConfigEntry) -> bool:
    """Set up FileSystem Broker from a config entry."""
    domain_data = hass.data.setdefault(DOMAIN, {})

    # Options override data.
    conf = {**entry.data, **entry.options}

    integration = await async_get_integration(hass, DOMAIN)
    version = str(integration.version) if integration.version else ""

    registry = AccessRegistry(RegistryStore(hass), HomeAssistantInventory(hass))
    try:
        await registry.async_setup_defaults(DOMAIN, integration.name, version)
    except AccessRegistryError as err:
        msg = f"Caller registry unavailable: {err}"
        raise ConfigEntryNotReady(msg) from err

    def num_days() -> int:
        return auto_remove_days(conf)

    sweeper = LifecycleSweeper(hass, registry, num_days)

    entry.runtime_data = FSBData(
        options=conf,
        registry=registry,
        sweeper=sweeper,
        self_id=DOMAIN,
        self_name=integration.name,
        version=version,
    )
    entry.runtime_data.unsubscribers.extend(
        (
            _listen_for_installs(hass, registry),
            _listen_for_removals(hass, registry, num_days),
        )
    )
    domain_data[DATA_RUNTIME] = entry.runtime_data

    _register_services(hass, entry)

    if not domain_data.get(DATA_VIEW_REGISTERED):
        hass.http.register_view(AccessCheckView(hass))
        domain_data[DATA_VIEW_REGISTERED] = True

    sweeper.start()
    entry.async_create_background_task(
        hass,
        ErrorHandler.execute_with_standard_handling(
            sweeper.async_run_now(), "Startup caller registry sweep"
        ),
        "filesystem_broker_startup_sweep",
    )

    LOGGER.info(
        "FileSystem Broker initialized: access_control=%s, auto_remove_days=%s.",
        conf.get(CONF_ACCESS_CONTROL_ENABLED),
        auto_remove_days(conf),
    )
    return True


async def async_unload_entry(hass: HomeAssistant, entry: FSBConfigEntry) -> bool:
    """Unload the config entry."""
    domain_data = hass.data.get(DOMAIN, {})
    if domain_data.get(DATA_RUNTIME) is entry.runtime_data:
        domain_data.pop(DATA_RUNTIME)
    entry.runtime_data.sweeper.stop()
    for unsub in entry.runtime_data.unsubscribers:
        unsub()
    entry.runtime_data.unsubscribers.clear()
    for service in SERVICES:
        hass.services.async_remove(DOMAIN, service)
    return True
