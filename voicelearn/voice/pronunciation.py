"""Grading a spoken attempt against a target word or phrase."""

from dataclasses import dataclass

from voicelearn.voice.matcher import normalize

EXACT_SCORE = 1.0
PARTIAL_SCORE = 0.75


@dataclass(frozen=True)
class PronunciationResult:
    matched: bool
    score: float
    transcript: str


def score_pronunciation(expected: str, transcript: str) -> PronunciationResult:
    """Exact match scores 1.0, target embedded in extra speech 0.75, anything else 0."""
    exp = normalize(expected)
    said = normalize(transcript)
    if not exp or not said:
        return PronunciationResult(matched=False, score=0.0, transcript=transcript)
    if said == exp:
        return PronunciationResult(matched=True, score=EXACT_SCORE, transcript=transcript)
    if exp in said:
        return PronunciationResult(matched=True, score=PARTIAL_SCORE, transcript=transcript)
    return PronunciationResult(matched=False, score=0.0, transcript=transcript)
