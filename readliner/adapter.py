"""Byte-stream reader over an interactive line-editing engine.

LineReader turns "prompt and get a line" requests into the io.RawIOBase
read contract. Each blocking request produces one full line plus the EOL
marker, which is then drained across as many reads as the caller needs.
Wrap it with io.BufferedReader / io.TextIOWrapper (or open_lines) to
iterate over lines::

    with LineReader("> ", default_history_path("myapp")) as reader:
        reader.set_completions(["help", "quit"], anchored=True)
        for line in open_lines(reader):
            handle(line)
"""

import io
import logging
from collections.abc import Sequence
from dataclasses import dataclass

from .completion import word_completer
from .engine import LineEngine, default_engine
from .errors import EndOfInputError, EngineIOError, LineEncodingError, ReadlinerError
from .history import load_history, save_history

logger = logging.getLogger(__name__)

DEFAULT_EOL = "\n"
DEFAULT_ENCODING = "utf-8"


@dataclass(frozen=True, slots=True)
class ReadResult:
    """Outcome of one read_into call.

    Attributes:
        count: Number of bytes copied into the caller's buffer.
        error: The latched error, or None if the read succeeded.
    """

    count: int
    error: ReadlinerError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class LineReader(io.RawIOBase):
    """Readable raw stream fed by an interactive line engine.

    Args:
        prompt: Text shown before each line.
        history_path: History file to load now and save on close. Empty
            disables persistence.
        engine: Line engine to read from. Defaults to default_engine(),
            which the reader then owns and shuts down.
        eol: Marker appended to every line.
        encoding: Encoding used to turn lines into bytes.

    Once the engine reports an error (abort, end of input, I/O failure), or
    a line cannot be encoded, the error is latched: every later read returns
    it without asking the engine for another line.
    """

    def __init__(
        self,
        prompt: str = "",
        history_path: str | None = "",
        *,
        engine: LineEngine | None = None,
        eol: str = DEFAULT_EOL,
        encoding: str = DEFAULT_ENCODING,
    ) -> None:
        super().__init__()
        owns_engine = engine is None
        if engine is None:
            try:
                engine = default_engine()
            except BaseException:
                super().close()
                raise
        self._engine = engine
        self._prompt = prompt
        self._cont_prompt: str | None = None
        self._first = True
        self._eol = eol
        self._encoding = encoding
        self._completions: Sequence[str] | None = None
        self._anchored = False
        self._history_path = ""
        self._pending = bytearray()
        self._error: ReadlinerError | None = None

        try:
            self._engine.set_interrupt_aborts(True)
            # History is only kept for interactive sessions
            if self._engine.is_terminal and history_path:
                self._history_path = history_path
                load_history(self._engine, self._history_path)
        except BaseException:
            if owns_engine:
                self._engine.shutdown()
            self._history_path = ""
            super().close()
            raise

    # --- Configuration ---

    @property
    def engine(self) -> LineEngine:
        return self._engine

    @property
    def prompt(self) -> str:
        return self._prompt

    @property
    def eol(self) -> str:
        return self._eol

    @property
    def encoding(self) -> str:
        return self._encoding

    @property
    def completions(self) -> Sequence[str] | None:
        return self._completions

    @property
    def anchored(self) -> bool:
        return self._anchored

    @property
    def history_path(self) -> str:
        return self._history_path

    def set_prompt(self, prompt: str) -> None:
        """Change the prompt shown before the first line of an entry."""
        self._prompt = prompt

    def set_cont_prompt(self, prompt: str | None) -> None:
        """Change the prompt shown for continuation lines.

        After each line the reader switches to this prompt until newline()
        is called. None means continuation lines use the normal prompt.
        """
        self._cont_prompt = prompt

    def newline(self) -> None:
        """Start a new entry: the next line uses the normal prompt."""
        self._first = True

    def current_prompt(self) -> str:
        if self._first or self._cont_prompt is None:
            return self._prompt
        return self._cont_prompt

    def set_eol(self, eol: str) -> None:
        self._eol = eol

    def set_completions(self, completions: Sequence[str] | None, anchored: bool = False) -> None:
        """Complete from a list of words.

        Args:
            completions: Lower-case candidate words, offered in this order.
                None or empty turns completion off.
            anchored: If True, complete the whole line (command names).
                If False, complete only the last word.
        """
        self._completions = completions
        self._anchored = anchored

        if completions:
            self._engine.set_completer(word_completer(completions, anchored))
        else:
            self._engine.set_completer(None)

    def is_terminal(self) -> bool:
        """True if input is edited on a terminal.

        History is not loaded or saved when this is False.
        """
        return self._engine.is_terminal

    def history(self) -> list[str]:
        """Return the engine's history, oldest entry first."""
        return self._engine.history_entries()

    # --- Reading ---

    def readable(self) -> bool:
        return True

    def read_into(self, buffer) -> ReadResult:
        """Fill buffer with bytes from the current line.

        Blocks for a new line only when nothing is pending. Returns the
        number of bytes copied, or the latched error.
        """
        if self.closed:
            raise ValueError("I/O operation on closed LineReader")

        if self._error is not None:
            return ReadResult(0, self._error)

        while not self._pending:
            try:
                line = self._engine.request_line(self.current_prompt())
            except ReadlinerError as exc:
                return self._latch(exc)
            except OSError as exc:
                error = EngineIOError(str(exc))
                error.__cause__ = exc
                return self._latch(error)

            # Lines from a surrogateescape-decoded stdin keep their raw bytes
            try:
                data = (line + self._eol).encode(self._encoding, "surrogateescape")
            except UnicodeEncodeError as exc:
                error = LineEncodingError(str(exc))
                error.__cause__ = exc
                return self._latch(error)

            logger.debug("Got line from engine (%d bytes)", len(data))
            self._engine.append_history(line)
            self._pending = bytearray(data)
            self._first = False

        view = memoryview(buffer).cast("B")
        count = min(len(view), len(self._pending))
        view[:count] = self._pending[:count]
        del self._pending[:count]
        return ReadResult(count)

    def readinto(self, buffer) -> int:
        """io.RawIOBase.readinto: end of input reads as 0 bytes (EOF).

        Other latched errors are raised again on every call.
        """
        result = self.read_into(buffer)
        if result.ok:
            return result.count
        if isinstance(result.error, EndOfInputError):
            return 0
        raise result.error

    def _latch(self, error: ReadlinerError) -> ReadResult:
        logger.debug("Line request failed, closing input: %r", error)
        self._error = error
        return ReadResult(0, error)

    # --- Lifecycle ---

    def close(self) -> None:
        """Save history and release the engine.

        Failing to write the history file is not an error. Only a failing
        engine shutdown is raised, and the reader is closed either way.
        """
        if self.closed:
            return

        try:
            save_history(self._engine, self._history_path)
        finally:
            try:
                self._engine.shutdown()
            finally:
                super().close()


def open_lines(reader: LineReader, encoding: str | None = None) -> io.TextIOWrapper:
    """Wrap a LineReader in a text stream that iterates over lines.

    Closing the returned stream closes the reader.
    """
    return io.TextIOWrapper(
        io.BufferedReader(reader),
        encoding=encoding or reader.encoding,
    )
