"""Shared test fixtures for the readliner test suite."""

import pytest
from prompt_toolkit.input import create_pipe_input
from prompt_toolkit.output import DummyOutput

from readliner.engine import LineEngine, PromptToolkitEngine
from readliner.errors import EndOfInputError


class FakeEngine(LineEngine):
    """Scripted engine: returns queued lines, raises queued exceptions.

    Runs out of script with EndOfInputError, like a closed pipe.
    """

    def __init__(self, lines=(), *, terminal=True):
        self.script = list(lines)
        self.prompts = []
        self.entries = []
        self.completer = None
        self.completer_installs = 0
        self.interrupt_aborts = None
        self.shutdown_calls = 0
        self.terminal = terminal

    @property
    def is_terminal(self):
        return self.terminal

    def request_line(self, prompt):
        self.prompts.append(prompt)
        if not self.script:
            raise EndOfInputError()
        item = self.script.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item

    def set_completer(self, completer):
        self.completer = completer
        self.completer_installs += 1

    def set_interrupt_aborts(self, aborts):
        self.interrupt_aborts = aborts

    def append_history(self, line):
        self.entries.append(line)

    def history_entries(self):
        return list(self.entries)

    def shutdown(self):
        self.shutdown_calls += 1


@pytest.fixture
def make_engine():
    """Factory for scripted engines: make_engine(["line", AbortedError()])."""
    return FakeEngine


@pytest.fixture
def pipe_input():
    """A prompt_toolkit pipe input to type keys into."""
    with create_pipe_input() as inp:
        yield inp


@pytest.fixture
def pt_engine(pipe_input):
    """A PromptToolkitEngine reading from a pipe and rendering nowhere."""
    engine = PromptToolkitEngine(input=pipe_input, output=DummyOutput())
    yield engine
    engine.shutdown()
