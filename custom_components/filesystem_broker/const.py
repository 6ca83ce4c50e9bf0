"""Constants for FileSystem Broker."""

from typing import Final

DOMAIN = "filesystem_broker"
INTEGRATION_TITLE = "FileSystem Broker"

HTTP_STATUS_OK = 200

CONFIG_ENTRY_VERSION = 1

# ---- Registry persistence ----
STORE_VERSION = 1
STORE_KEY = "filesystem_broker_callers"

# ---- Access control ----
CONF_ACCESS_CONTROL_ENABLED = "access_control_enabled"
RECOMMENDED_ACCESS_CONTROL_ENABLED: bool = True

CONF_SHOW_GRANT_ACCESS_PROMPT = "show_grant_access_prompt"
RECOMMENDED_SHOW_GRANT_ACCESS_PROMPT: bool = False

# ---- Auto-remove of uninstalled callers ----
# -1 disables the sweep, 0 removes on the pass that detects the absence.
CONF_AUTO_REMOVE_DAYS = "auto_remove_uninstalled_days"
RECOMMENDED_AUTO_REMOVE_DAYS = 2
AUTO_REMOVE_DAYS_DISABLED = -1
AUTO_REMOVE_DAYS_MAX = 365

# ---- Inventory ----
# Only custom integrations can act as callers; built-ins never ask for storage.
CALLER_TYPE = "custom_integration"
INVENTORY_TIMEOUT_SECONDS = 10

# ---- Services ----
SERVICE_ALLOW_ACCESS = "allow_access"
SERVICE_DISALLOW_ACCESS = "disallow_access"
SERVICE_ALLOW_ALL = "allow_all"
SERVICE_DISALLOW_ALL = "disallow_all"
SERVICE_ALLOW_SELECTED = "allow_selected"
SERVICE_DISALLOW_SELECTED = "disallow_selected"
SERVICE_ADD_OR_UPDATE = "add_or_update"
SERVICE_DELETE = "delete"
SERVICE_DELETE_SELECTED = "delete_selected"
SERVICE_SWEEP = "sweep"
SERVICE_LIST_CALLERS = "list_callers"
SERVICE_RESET = "reset"

ATTR_CALLER_ID = "caller_id"
ATTR_CALLER_IDS = "caller_ids"
ATTR_OLD_CALLER_ID = "old_caller_id"
ATTR_NAME = "name"
ATTR_ALLOW_ACCESS = "allow_access"
ATTR_NUM_DAYS = "num_days"
ATTR_SORT_BY = "sort_by"

SORT_BY_ID = "id"
SORT_BY_NAME = "name"

# ---- hass.data keys ----
DATA_VIEW_REGISTERED = "view_registered"
DATA_RUNTIME = "runtime"

# ---- Events ----
EVENT_ACCESS_REQUESTED: Final = "filesystem_broker_access_requested"
EVENT_REGISTRY_SWEPT: Final = "filesystem_broker_registry_swept"

# ---- HTTP ----
ACCESS_GRANTED = "granted"
ACCESS_DENIED = "denied"
