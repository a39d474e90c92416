"""Constants used across the pruxy package."""

from __future__ import annotations

from pathlib import Path

APP_NAME = "pruxy"
DEFAULT_CONFIG_FILENAME = f"{APP_NAME}.cfg"
DEFAULT_CONFIG_PATH = Path.home() / ".config" / APP_NAME / DEFAULT_CONFIG_FILENAME

PASSWORD_ENV_VAR = "PRUSA_LINK_PASSWORD"

DEFAULT_BIND = ":8080"
DEFAULT_METRICS_PATH = "/metrics"
DEFAULT_USERNAME = "maker"
DEFAULT_TIMEOUT_SECONDS = 15.0

INFO_PATH = "/api/v1/info"
STATUS_PATH = "/api/v1/status"
JOB_PATH = "/api/v1/job"

METRIC_PREFIX = "prusa_"
