"""
Outcomes reported by the external fingerprinting engine.

The engine delivers exactly one of these per recognition attempt.
"""

from dataclasses import dataclass
from typing import Optional, Union


@dataclass(frozen=True)
class Matched:
    """The sample was identified as a known recording."""
    title: Optional[str]
    artist: Optional[str]
    artwork_url: Optional[str] = None
    purchase_url: Optional[str] = None


@dataclass(frozen=True)
class NoMatch:
    """
    Nothing was identified.

    Attributes:
        reason: Free-text error description from the engine, if any
        code: Engine error code ("internal_error", "signature_invalid", ...)
    """
    reason: Optional[str] = None
    code: Optional[str] = None


RecognitionOutcome = Union[Matched, NoMatch]

INTERNAL_ERROR = "internal_error"
SIGNATURE_INVALID = "signature_invalid"


def describe_no_match(outcome: NoMatch) -> str:
    """User-facing status message for a failed recognition."""
    if outcome.code == INTERNAL_ERROR:
        return "Shazam internal error. Please try again."
    if outcome.code == SIGNATURE_INVALID:
        return "Invalid audio signature. Try again."
    if outcome.code:
        return f"An unknown error occurred. Error Code: {outcome.code}. Try again."
    if outcome.reason:
        return f"An error occurred: {outcome.reason}"
    return "No match found. Try again."
