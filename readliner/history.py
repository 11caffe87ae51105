"""History file management for the line reader.

History is read once when the reader starts and written once when it
closes. Neither step is allowed to fail the reader: a missing file just
means no prior history, and an unwritable path means history is not kept.
The engines store history as prompt_toolkit FileHistory files.
"""

import logging
import os

from .engine import LineEngine

logger = logging.getLogger(__name__)

# Environment variable that overrides the default history location.
HISTORY_ENV_VAR = "READLINER_HISTORY"


def default_history_path(name: str = "readliner") -> str:
    """Return the history file path for an application.

    Uses $READLINER_HISTORY when set, otherwise ~/.<name>_history.
    """
    override = os.environ.get(HISTORY_ENV_VAR)
    if override:
        return os.path.expanduser(override)
    return os.path.expanduser(f"~/.{name}_history")


def load_history(engine: LineEngine, path: str | None) -> int:
    """Load history from path into the engine's store.

    Returns:
        Number of entries loaded; 0 if the path is unset or unreadable.
    """
    if not path:
        return 0

    try:
        count = engine.load_history(path)
    except OSError as exc:
        logger.debug("No history loaded from %s: %s", path, exc)
        return 0

    logger.debug("Loaded %d history entries from %s", count, path)
    return count


def save_history(engine: LineEngine, path: str | None) -> bool:
    """Write the engine's history store to path, replacing its contents.

    Returns:
        True if the file was written, False if the path is unset or the
        file could not be created.
    """
    if not path:
        return False

    try:
        count = engine.save_history(path)
    except OSError as exc:
        logger.debug("History not saved to %s: %s", path, exc)
        return False

    logger.debug("Saved %d history entries to %s", count, path)
    return True
