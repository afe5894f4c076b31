"""Configuration management for Cadence."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from .core.calendar import DEFAULT_COLOR
from .core.recurrence import MAX_OCCURRENCES

logger = logging.getLogger(__name__)

CADENCE_HOME = Path(os.environ.get("CADENCE_HOME", Path.home() / "cadence"))
CONFIG_FILE = CADENCE_HOME / "config" / "cadence.conf"
DATA_DIR = CADENCE_HOME / "data"


@dataclass
class Config:
    """Cadence configuration."""

    supabase_url: str = ""
    supabase_key: str = ""
    supabase_access_token: str = ""
    workspace_id: str = ""
    user_id: str = ""
    events_file: str = ""
    default_color: str = DEFAULT_COLOR
    max_occurrences: int = MAX_OCCURRENCES
    month_padding: int = 1

    @property
    def uses_supabase(self) -> bool:
        return bool(self.supabase_url)

    def events_path(self) -> Path:
        """Location of the local events file."""
        if self.events_file:
            return Path(self.events_file).expanduser()
        return DATA_DIR / "events.json"


def _parse_int(key: str, value: str, default: int, minimum: int) -> int:
    try:
        parsed = int(value)
    except ValueError:
        logger.warning(f"Ignoring non-integer {key.upper()}: {value!r}")
        return default
    if parsed < minimum:
        logger.warning(f"Ignoring {key.upper()} below {minimum}: {parsed}")
        return default
    return parsed


def load_config(path: Path | None = None) -> Config:
    """Load configuration from cadence.conf file."""
    config = Config()
    path = path or CONFIG_FILE

    if not path.exists():
        return config

    for line in path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        if "=" not in line:
            continue

        key, _, value = line.partition("=")
        key = key.strip().lower()
        value = value.strip()

        # Handle quoted values with inline comments: "value" # comment
        if value.startswith('"'):
            end_quote = value.find('"', 1)
            if end_quote != -1:
                value = value[1:end_quote]
            else:
                value = value[1:]
        elif value.startswith("'"):
            end_quote = value.find("'", 1)
            if end_quote != -1:
                value = value[1:end_quote]
            else:
                value = value[1:]
        else:
            # Unquoted: strip inline comments
            if "#" in value:
                value = value.split("#")[0].strip()

        match key:
            case "supabase_url":
                config.supabase_url = value.rstrip("/")
            case "supabase_key":
                config.supabase_key = value
            case "supabase_access_token":
                config.supabase_access_token = value
            case "workspace_id":
                config.workspace_id = value
            case "user_id":
                config.user_id = value
            case "events_file":
                config.events_file = value
            case "default_color":
                config.default_color = value or DEFAULT_COLOR
            case "max_occurrences":
                config.max_occurrences = _parse_int(key, value, MAX_OCCURRENCES, 1)
            case "month_padding":
                config.month_padding = _parse_int(key, value, 1, 0)
            case _:
                logger.debug(f"Unknown config key: {key}")

    return config
