"""HTTP endpoints for FileSystem Broker."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from aiohttp import web
from homeassistant.helpers.http import HomeAssistantView

from .const import (
    ACCESS_DENIED,
    ACCESS_GRANTED,
    CONF_ACCESS_CONTROL_ENABLED,
    CONF_SHOW_GRANT_ACCESS_PROMPT,
    DATA_RUNTIME,
    DOMAIN,
    EVENT_ACCESS_REQUESTED,
    HTTP_STATUS_OK,
    RECOMMENDED_ACCESS_CONTROL_ENABLED,
    RECOMMENDED_SHOW_GRANT_ACCESS_PROMPT,
)

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant

    from .core.runtime import FSBData

LOGGER = logging.getLogger(__name__)


def _decision(caller_id: str, access: str) -> web.Response:
    return web.json_response(
        {"caller_id": caller_id, "access": access}, status=HTTP_STATUS_OK
    )


class AccessCheckView(HomeAssistantView):
    """
    Answer the broker's question: may this caller use the shared storage?

    The view outlives config entries, so the runtime data of the currently
    loaded entry is looked up on every request.
    """

    url = "/api/filesystem_broker/access/{caller_id}"
    name = "api:filesystem_broker:access"
    requires_auth = True

    def __init__(self, hass: HomeAssistant) -> None:
        """Initialize access check view."""
        self._hass = hass

    def _runtime(self) -> FSBData | None:
        return self._hass.data.get(DOMAIN, {}).get(DATA_RUNTIME)

    async def get(self, _request: web.Request, caller_id: str) -> web.Response:
        """Handle GET request for a caller's access decision."""
        data = self._runtime()
        if data is None:
            LOGGER.warning("No loaded entry; denying access for caller %s.", caller_id)
            return _decision(caller_id, ACCESS_DENIED)

        if not data.options.get(
            CONF_ACCESS_CONTROL_ENABLED, RECOMMENDED_ACCESS_CONTROL_ENABLED
        ):
            return _decision(caller_id, ACCESS_GRANTED)

        if data.registry.is_allow_access(caller_id):
            return _decision(caller_id, ACCESS_GRANTED)

        LOGGER.info("Access denied for caller %s.", caller_id)
        if not data.registry.has_record(caller_id) and data.options.get(
            CONF_SHOW_GRANT_ACCESS_PROMPT, RECOMMENDED_SHOW_GRANT_ACCESS_PROMPT
        ):
            self._hass.bus.async_fire(EVENT_ACCESS_REQUESTED, {"caller_id": caller_id})

        return _decision(caller_id, ACCESS_DENIED)
