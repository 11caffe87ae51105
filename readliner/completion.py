"""Word completion over a fixed vocabulary.

Two anchor modes are supported:

- anchored: the whole input is matched against the vocabulary (command
  names typed at the start of the line).
- trailing word: only the text after the last delimiter is matched, and
  the text up to and including that delimiter is kept as a prefix.

Candidates are compared as stored; only the typed fragment is lower-cased.
Callers are expected to supply a lower-case vocabulary.
"""

from collections.abc import Callable, Sequence

# Characters that end a word in trailing-word mode.
DELIMITERS = " \t!@#$%^&*()-_=+[]{}:;\"'|\\,./<>"

CompletionCallback = Callable[[str], list[str]]


def split_fragment(text: str, anchored: bool) -> tuple[str, str]:
    """Split input into (prefix, fragment) for completion.

    Args:
        text: The input typed so far.
        anchored: If True, the whole input is the fragment.

    Returns:
        The prefix to keep and the fragment to complete.
    """
    if anchored:
        return "", text

    for i in range(len(text) - 1, -1, -1):
        if text[i] in DELIMITERS:
            return text[: i + 1], text[i + 1 :]
    return "", text


def complete(text: str, vocabulary: Sequence[str], anchored: bool) -> list[str]:
    """Return full replacement lines for every candidate extending the input.

    Results keep vocabulary order. An empty fragment matches everything.
    """
    prefix, fragment = split_fragment(text, anchored)
    fragment = fragment.lower()
    return [prefix + word for word in vocabulary if word.startswith(fragment)]


def word_completer(vocabulary: Sequence[str], anchored: bool) -> CompletionCallback:
    """Build a completion callback bound to a vocabulary.

    The vocabulary is read on every call, so in-place changes to a list
    passed here show up in later completions.
    """

    def _complete(text: str) -> list[str]:
        return complete(text, vocabulary, anchored)

    return _complete
