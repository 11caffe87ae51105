"""readliner: a byte stream of interactively edited lines.

LineReader prompts the user through a line-editing engine (history recall,
tab completion) and serves the entered lines as a readable io stream, so
any line-oriented consumer can read from it like a file.
"""

from .adapter import DEFAULT_EOL, LineReader, ReadResult, open_lines
from .completion import DELIMITERS, complete
from .engine import LineEngine, PromptToolkitEngine, StreamEngine, default_engine
from .errors import (
    AbortedError,
    EndOfInputError,
    EngineIOError,
    LineEncodingError,
    ReadlinerError,
)
from .history import default_history_path

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_EOL",
    "DELIMITERS",
    "AbortedError",
    "EndOfInputError",
    "EngineIOError",
    "LineEncodingError",
    "LineEngine",
    "LineReader",
    "PromptToolkitEngine",
    "ReadResult",
    "ReadlinerError",
    "StreamEngine",
    "complete",
    "default_engine",
    "default_history_path",
    "open_lines",
]
