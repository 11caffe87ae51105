"""Line-editing engines used by the line reader.

An engine prints a prompt, lets the user edit one line, and returns it.
It also owns the in-memory history store and its on-disk format. The
reader only talks to engines through the LineEngine interface, so tests
can substitute a scripted engine for the real terminal.

History files are prompt_toolkit FileHistory files, so a file written
here can be used by any prompt_toolkit application and vice versa.
"""

import logging
import sys
from abc import ABC, abstractmethod
from collections import deque
from typing import TextIO

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.history import FileHistory, History

from .completion import CompletionCallback
from .errors import AbortedError, EndOfInputError, EngineIOError

logger = logging.getLogger(__name__)

# Maximum entries kept in the in-memory history store.
MAX_HISTORY_ENTRIES = 1000


def _storable(entry: str) -> str:
    # FileHistory writes UTF-8; undecodable bytes kept as surrogates become U+FFFD
    return entry.encode("utf-8", "surrogateescape").decode("utf-8", "replace")


class LineEngine(ABC):
    """Interface between the line reader and a line-editing backend."""

    @abstractmethod
    def request_line(self, prompt: str) -> str:
        """Show the prompt and block until the user completes a line.

        Returns:
            The line without its terminating newline.

        Raises:
            AbortedError: The user interrupted entry.
            EndOfInputError: No more input is available.
            EngineIOError: The device could not be read or written.
        """

    @abstractmethod
    def set_completer(self, completer: CompletionCallback | None) -> None:
        """Install a completion callback, or remove it with None."""

    @abstractmethod
    def set_interrupt_aborts(self, aborts: bool) -> None:
        """Choose whether Ctrl-C aborts the current request."""

    @abstractmethod
    def append_history(self, line: str) -> None:
        """Record one line in the in-memory history store."""

    @abstractmethod
    def history_entries(self) -> list[str]:
        """Return the history store, oldest entry first."""

    @property
    @abstractmethod
    def is_terminal(self) -> bool:
        """True if the engine edits lines on a real terminal."""

    def shutdown(self) -> None:
        """Release terminal resources. Safe to call more than once."""

    def load_history(self, path: str) -> int:
        """Add the entries of a FileHistory file to the store.

        A missing file holds no entries.

        Returns:
            Number of entries added to the store.

        Raises:
            OSError: The file exists but cannot be read.
        """
        # FileHistory yields newest first
        entries = list(FileHistory(path).load_history_strings())
        for entry in reversed(entries):
            self.append_history(entry)
        return len(entries)

    def save_history(self, path: str) -> int:
        """Replace the contents of path with the history store.

        Returns:
            Number of entries written.

        Raises:
            OSError: The file cannot be created.
        """
        entries = self.history_entries()
        with open(path, "wb"):
            pass
        history = FileHistory(path)
        for entry in entries:
            history.store_string(_storable(entry))
        return len(entries)


class _RecallHistory(History):
    """Bounded history store that only grows through record().

    PromptSession appends every accepted line to its history on its own;
    that path is disabled so the reader controls exactly what is stored,
    empty lines included.
    """

    def __init__(self, max_entries: int = MAX_HISTORY_ENTRIES) -> None:
        super().__init__()
        self._entries: deque[str] = deque(maxlen=max_entries)

    @property
    def max_entries(self) -> int:
        return self._entries.maxlen

    async def load(self):
        # Always serve the live store, newest first
        for entry in reversed(self._entries):
            yield entry

    def load_history_strings(self):
        yield from reversed(self._entries)

    def get_strings(self) -> list[str]:
        return list(self._entries)

    def append_string(self, string: str) -> None:
        pass

    def store_string(self, string: str) -> None:
        pass

    def record(self, string: str) -> None:
        self._entries.append(string)


class _CallbackCompleter(Completer):
    """Adapts a text -> replacement-lines callback to prompt_toolkit.

    Each replacement covers everything before the cursor.
    """

    def __init__(self, callback: CompletionCallback) -> None:
        self.callback = callback

    def get_completions(self, document, complete_event):
        text = document.text_before_cursor
        for replacement in self.callback(text):
            yield Completion(replacement, start_position=-len(text))


class PromptToolkitEngine(LineEngine):
    """Terminal engine built on prompt_toolkit's PromptSession.

    Args:
        input: prompt_toolkit Input to read keys from (default: stdin).
        output: prompt_toolkit Output to render to (default: stdout).
        max_entries: Size limit of the history store.
    """

    def __init__(self, input=None, output=None, *, max_entries: int = MAX_HISTORY_ENTRIES) -> None:
        self._history = _RecallHistory(max_entries)
        self._session: PromptSession = PromptSession(
            history=self._history,
            complete_while_typing=False,
            input=input,
            output=output,
        )
        self._interrupt_aborts = True
        self._closed = False

    @property
    def session(self) -> PromptSession:
        return self._session

    @property
    def is_terminal(self) -> bool:
        return True

    def request_line(self, prompt: str) -> str:
        if self._closed:
            raise EngineIOError("engine has been shut down")

        while True:
            try:
                return self._session.prompt(prompt)
            except KeyboardInterrupt:
                if self._interrupt_aborts:
                    raise AbortedError() from None
                # Ctrl-C without abort: drop the line and prompt again
                logger.debug("Interrupt ignored, prompting again")
            except EOFError:
                raise EndOfInputError() from None
            except OSError as exc:
                raise EngineIOError(str(exc)) from exc

    def set_completer(self, completer: CompletionCallback | None) -> None:
        self._session.completer = _CallbackCompleter(completer) if completer else None

    def set_interrupt_aborts(self, aborts: bool) -> None:
        self._interrupt_aborts = aborts

    def append_history(self, line: str) -> None:
        self._history.record(line)

    def history_entries(self) -> list[str]:
        return self._history.get_strings()

    def shutdown(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._session.completer = None
        self._session.output.flush()


class StreamEngine(LineEngine):
    """Engine for input that is not a terminal (pipes, files).

    Prints the prompt, reads one line, and does no editing. Completion
    callbacks are accepted but never consulted.

    Args:
        stdin: Text stream to read lines from (default: sys.stdin).
        stdout: Text stream for prompts (default: sys.stdout).
        max_entries: Size limit of the history store.
    """

    def __init__(
        self,
        stdin: TextIO | None = None,
        stdout: TextIO | None = None,
        *,
        max_entries: int = MAX_HISTORY_ENTRIES,
    ) -> None:
        self._stdin = stdin if stdin is not None else sys.stdin
        self._stdout = stdout if stdout is not None else sys.stdout
        self._entries: list[str] = []
        self._max_entries = max_entries
        self._completer: CompletionCallback | None = None
        self._interrupt_aborts = True

    @property
    def is_terminal(self) -> bool:
        return False

    def request_line(self, prompt: str) -> str:
        while True:
            try:
                if prompt:
                    self._stdout.write(prompt)
                    self._stdout.flush()
                line = self._stdin.readline()
            except KeyboardInterrupt:
                if self._interrupt_aborts:
                    raise AbortedError() from None
                continue
            except OSError as exc:
                raise EngineIOError(str(exc)) from exc

            if not line:
                raise EndOfInputError()
            if line.endswith("\r\n"):
                return line[:-2]
            if line.endswith("\n"):
                return line[:-1]
            return line

    def set_completer(self, completer: CompletionCallback | None) -> None:
        self._completer = completer

    def set_interrupt_aborts(self, aborts: bool) -> None:
        self._interrupt_aborts = aborts

    def append_history(self, line: str) -> None:
        self._entries.append(line)
        if len(self._entries) > self._max_entries:
            del self._entries[: -self._max_entries]

    def history_entries(self) -> list[str]:
        return list(self._entries)


def default_engine() -> LineEngine:
    """Return a terminal engine when stdin is a tty, else a stream engine."""
    try:
        terminal = sys.stdin is not None and sys.stdin.isatty()
    except ValueError:
        # stdin already closed
        terminal = False

    if terminal:
        return PromptToolkitEngine()
    logger.debug("stdin is not a terminal, using plain stream engine")
    return StreamEngine()
