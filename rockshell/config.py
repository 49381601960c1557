# rockshell/config.py
import os
import logging
import re

from dotenv import find_dotenv, load_dotenv

from .constants import DEFAULT_CATALOG, DEFAULT_COMMAND_NAME, DEFAULT_HISTORY_FILE, DEFAULT_LOG_FILE

logger = logging.getLogger(__name__)

# User command names must start with an uppercase letter
_COMMAND_NAME_RE = re.compile(r"^[A-Z][A-Za-z0-9]*$")


def load_env(path: str | None = None) -> bool:
    """Load a .env file (current directory by default). Returns True if one was found."""
    loaded = load_dotenv(path or find_dotenv(usecwd=True), override=True)
    if loaded:
        logger.info(".env loaded.")
    return loaded


def is_valid_command_name(name: str) -> bool:
    return bool(_COMMAND_NAME_RE.fullmatch(name))


def get_command_name(override: str | None = None) -> str:
    """Top-level command name from *override* or ROCKSHELL_COMMAND, falling back to the default."""
    name = override or os.getenv("ROCKSHELL_COMMAND", DEFAULT_COMMAND_NAME)
    if not is_valid_command_name(name):
        logger.warning(f"Command name '{name}' is not valid (must start with an uppercase letter). Using default '{DEFAULT_COMMAND_NAME}'.")
        return DEFAULT_COMMAND_NAME
    return name


def get_catalog() -> list[str]:
    """Default rock catalog plus comma-separated extras from ROCKSHELL_CATALOG."""
    catalog = list(DEFAULT_CATALOG)
    extra = os.getenv("ROCKSHELL_CATALOG", "")
    for raw in extra.split(","):
        rock = raw.strip()
        if not rock:
            continue
        if any(ch.isspace() for ch in rock):
            logger.warning(f"Ignoring catalog entry with whitespace: '{rock}'")
            continue
        if rock not in catalog:
            catalog.append(rock)
    return catalog


def get_history_file() -> str:
    return os.getenv("ROCKSHELL_HISTORY_FILE", DEFAULT_HISTORY_FILE)


def get_log_settings() -> dict[str, object]:
    """Log level and log file path for the shell's handlers."""
    level_name = os.getenv("LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, None)
    if not isinstance(level, int):
        logger.debug(f"Unknown LOG_LEVEL '{level_name}', using INFO.")
        level = logging.INFO
    return {"level": level, "file": os.getenv("ROCKSHELL_LOG_FILE", DEFAULT_LOG_FILE)}


def get_state_dump_path() -> str | None:
    """Where to dump session state on exit, or None to skip."""
    return os.getenv("ROCKSHELL_STATE_DUMP") or None
