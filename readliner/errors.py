"""Exceptions raised by line engines and surfaced by the line reader.

Engines translate their library-specific failures (KeyboardInterrupt,
EOFError, OSError) into these classes so the reader can latch a single
error type regardless of which engine produced it.
"""


class ReadlinerError(Exception):
    """Base class for all readliner errors."""


class AbortedError(ReadlinerError):
    """Raised when the user aborts line entry (Ctrl-C)."""

    def __init__(self, message: str = "prompt aborted") -> None:
        super().__init__(message)


class EndOfInputError(ReadlinerError, EOFError):
    """Raised when the input source has no more lines (Ctrl-D, closed pipe)."""

    def __init__(self, message: str = "end of input") -> None:
        super().__init__(message)


class EngineIOError(ReadlinerError, OSError):
    """Raised when the engine cannot read from or write to its device."""


class LineEncodingError(ReadlinerError, ValueError):
    """Raised when an entered line cannot be encoded into the output bytes."""
