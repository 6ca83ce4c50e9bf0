"""Config flow for FileSystem Broker integration."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import voluptuous as vol
from homeassistant.config_entries import (
    ConfigEntry,
    ConfigFlow,
    ConfigFlowResult,
    OptionsFlow,
    OptionsFlowWithReload,
)
from homeassistant.helpers.selector import (
    BooleanSelector,
    NumberSelector,
    NumberSelectorConfig,
    NumberSelectorMode,
)

from .const import (
    AUTO_REMOVE_DAYS_DISABLED,
    AUTO_REMOVE_DAYS_MAX,
    CONF_ACCESS_CONTROL_ENABLED,
    CONF_AUTO_REMOVE_DAYS,
    CONF_SHOW_GRANT_ACCESS_PROMPT,
    CONFIG_ENTRY_VERSION,
    DOMAIN,
    INTEGRATION_TITLE,
    RECOMMENDED_ACCESS_CONTROL_ENABLED,
    RECOMMENDED_AUTO_REMOVE_DAYS,
    RECOMMENDED_SHOW_GRANT_ACCESS_PROMPT,
)

if TYPE_CHECKING:
    from collections.abc import Mapping

    from homeassistant.helpers.typing import VolDictType

LOGGER = logging.getLogger(__name__)

DEFAULT_OPTIONS = {
    CONF_ACCESS_CONTROL_ENABLED: RECOMMENDED_ACCESS_CONTROL_ENABLED,
    CONF_SHOW_GRANT_ACCESS_PROMPT: RECOMMENDED_SHOW_GRANT_ACCESS_PROMPT,
    CONF_AUTO_REMOVE_DAYS: RECOMMENDED_AUTO_REMOVE_DAYS,
}


def auto_remove_days(options: Mapping[str, Any]) -> int:
    """Return the configured grace days, clamped to the supported range."""
    try:
        days = int(options.get(CONF_AUTO_REMOVE_DAYS, RECOMMENDED_AUTO_REMOVE_DAYS))
    except (TypeError, ValueError):
        LOGGER.warning("Invalid auto-remove days option; using the default.")
        return RECOMMENDED_AUTO_REMOVE_DAYS
    return max(AUTO_REMOVE_DAYS_DISABLED, min(days, AUTO_REMOVE_DAYS_MAX))


def _schema_for_options(opts: Mapping[str, Any]) -> VolDictType:
    """Generate the options schema."""
    return {
        vol.Optional(
            CONF_ACCESS_CONTROL_ENABLED,
            description={"suggested_value": opts.get(CONF_ACCESS_CONTROL_ENABLED)},
            default=RECOMMENDED_ACCESS_CONTROL_ENABLED,
        ): BooleanSelector(),
        vol.Optional(
            CONF_SHOW_GRANT_ACCESS_PROMPT,
            description={"suggested_value": opts.get(CONF_SHOW_GRANT_ACCESS_PROMPT)},
            default=RECOMMENDED_SHOW_GRANT_ACCESS_PROMPT,
        ): BooleanSelector(),
        vol.Optional(
            CONF_AUTO_REMOVE_DAYS,
            description={"suggested_value": opts.get(CONF_AUTO_REMOVE_DAYS)},
            default=RECOMMENDED_AUTO_REMOVE_DAYS,
        ): NumberSelector(
            NumberSelectorConfig(
                min=AUTO_REMOVE_DAYS_DISABLED,
                max=AUTO_REMOVE_DAYS_MAX,
                step=1,
                mode=NumberSelectorMode.BOX,
            )
        ),
    }


class FileSystemBrokerConfigFlow(ConfigFlow, domain=DOMAIN):
    """Handle a config flow for FileSystem Broker."""

    VERSION = CONFIG_ENTRY_VERSION

    async def async_step_user(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """Handle the initial step."""
        await self.async_set_unique_id(DOMAIN)
        self._abort_if_unique_id_configured()

        if user_input is None:
            return self.async_show_form(step_id="user", data_schema=vol.Schema({}))

        return self.async_create_entry(
            title=INTEGRATION_TITLE,
            data={},
            options=dict(DEFAULT_OPTIONS),
        )

    @staticmethod
    def async_get_options_flow(config_entry: ConfigEntry) -> OptionsFlow:
        """Create the options flow."""
        _ = config_entry
        return FileSystemBrokerOptionsFlow()


class FileSystemBrokerOptionsFlow(OptionsFlowWithReload):
    """Handle options flow for FileSystem Broker."""

    def _base_options(self) -> dict[str, Any]:
        options = dict(DEFAULT_OPTIONS)
        options.update(self.config_entry.options)
        return options

    async def async_step_init(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """Handle the options flow init step."""
        options = self._base_options()

        if user_input is None:
            return self.async_show_form(
                step_id="init",
                data_schema=vol.Schema(_schema_for_options(options)),
            )

        options.update(user_input)
        # NumberSelector hands back floats.
        options[CONF_AUTO_REMOVE_DAYS] = auto_remove_days(options)
        return self.async_create_entry(title="", data=options)
