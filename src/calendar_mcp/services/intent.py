from __future__ import annotations

from enum import Enum

AFFIRMATIVE_WORDS = ("yes", "y", "confirm", "proceed", "ok", "okay", "continue", "go", "do it")
NEGATIVE_WORDS = ("no", "n", "cancel", "abort", "stop", "nope", "negative")


class Intent(str, Enum):
    AFFIRM = "affirm"
    DENY = "deny"
    UNRECOGNIZED = "unrecognized"


def classify_response(text: str) -> Intent:
    """Classify a free-text confirmation reply by substring containment.

    The affirmative list is tested first, so a reply containing words from
    both lists ("yes, but actually no") counts as affirmative.
    """

    normalized = text.lower().strip()
    if not normalized:
        return Intent.UNRECOGNIZED
    if any(word in normalized for word in AFFIRMATIVE_WORDS):
        return Intent.AFFIRM
    if any(word in normalized for word in NEGATIVE_WORDS):
        return Intent.DENY
    return Intent.UNRECOGNIZED
