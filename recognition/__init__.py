"""Fingerprint outcome handling: enrichment + history for each match."""

from .outcomes import Matched, NoMatch, RecognitionOutcome, describe_no_match
from .pipeline import MatchPipeline, MatchReport

__all__ = [
    "Matched",
    "NoMatch",
    "RecognitionOutcome",
    "describe_no_match",
    "MatchPipeline",
    "MatchReport",
]
