"""Transcript normalization and command phrase matching."""

import re
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional, Sequence, Union

from voicelearn.errors import InvalidPhraseError

_NOT_ALNUM = re.compile(r"[^a-z0-9\s]")
_WHITESPACE = re.compile(r"\s+")

Action = Callable[[], Union[None, Awaitable[None]]]


def normalize(text: str) -> str:
    """Lowercase, drop everything but ASCII letters/digits/whitespace, squeeze spaces.

    Accented letters are not folded, they are dropped along with punctuation.
    """
    text = _NOT_ALNUM.sub("", text.lower())
    return _WHITESPACE.sub(" ", text).strip()


@dataclass(frozen=True)
class Command:
    """A spoken command: any of ``phrases`` triggers ``action``."""

    phrases: tuple[str, ...]
    action: Action
    _normalized: tuple[str, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        if isinstance(self.phrases, str):
            phrases = (self.phrases,)
        else:
            phrases = tuple(self.phrases)
        if not phrases:
            raise InvalidPhraseError("A command needs at least one phrase.")
        normalized = []
        for phrase in phrases:
            norm = normalize(phrase)
            if not norm:
                raise InvalidPhraseError(f"Phrase {phrase!r} has no letters or digits.")
            normalized.append(norm)
        object.__setattr__(self, "phrases", phrases)
        object.__setattr__(self, "_normalized", tuple(normalized))

    def matches(self, normalized_transcript: str) -> bool:
        """True if any phrase occurs as a substring of the normalized transcript."""
        if not normalized_transcript:
            return False
        return any(phrase in normalized_transcript for phrase in self._normalized)


def match(transcript: str, commands: Sequence[Command]) -> Optional[Command]:
    """Return the first registered command whose phrase the transcript contains."""
    said = normalize(transcript)
    if not said:
        return None
    for command in commands:
        if command.matches(said):
            return command
    return None
