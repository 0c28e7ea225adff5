import concurrent.futures
from unittest.mock import MagicMock

from history import HistoryStore, MemoryKeyValueStore
from recognition import MatchPipeline, Matched, NoMatch, describe_no_match
from recognition.pipeline import HISTORY_WRITE_FAILED
from shared.errors import PersistenceError
from shared.models import EnrichmentQuery


def _pipeline(provenance=None, history=None):
    enrichment = MagicMock()
    enrichment.enrich.return_value = provenance
    history = history or HistoryStore(MemoryKeyValueStore())
    return MatchPipeline(enrichment, history), enrichment, history


def test_match_is_enriched_and_saved():
    pipeline, enrichment, history = _pipeline("Movie: Wayne's World")
    report = pipeline.handle(Matched(" Bohemian Rhapsody ", "Queen", artwork_url="https://a/art.jpg"))

    enrichment.enrich.assert_called_once_with(EnrichmentQuery("Bohemian Rhapsody", "Queen"))
    assert report.matched and report.status is None
    assert report.result.provenance == "Movie: Wayne's World"
    assert report.result.artwork_url == "https://a/art.jpg"
    assert history.load() == [report.result]


def test_match_without_provenance_shows_fallback():
    pipeline, _, history = _pipeline(None)
    report = pipeline.handle(Matched(None, None))
    assert report.result.title == "Unknown Title"
    assert report.result.artist == "Unknown Artist"
    assert report.result.source == "Shazam"
    assert len(history.load()) == 1


def test_no_match_skips_enrichment_and_history():
    pipeline, enrichment, history = _pipeline("ignored")
    report = pipeline.handle(NoMatch())
    assert not report.matched
    assert report.status == "No match found. Try again."
    enrichment.enrich.assert_not_called()
    assert history.load() == []


def test_history_write_failure_still_returns_result():
    history = MagicMock()
    history.save.side_effect = PersistenceError("disk full")
    pipeline, _, _ = _pipeline("Anime Opening: Naruto", history=history)
    report = pipeline.handle(Matched("Haruka Kanata", "AKFG"))
    assert report.result.provenance == "Anime Opening: Naruto"
    assert report.status == HISTORY_WRITE_FAILED


def test_submit_accepts_outcome_or_future():
    pipeline, _, history = _pipeline("Movie: X")
    with pipeline:
        direct = pipeline.submit(Matched("A", "B"))
        pending = concurrent.futures.Future()
        deferred = pipeline.submit(pending)
        pending.set_result(NoMatch(code="signature_invalid"))
        assert direct.result(timeout=5).result.title == "A"
        assert deferred.result(timeout=5).status == "Invalid audio signature. Try again."
    assert len(history.load()) == 1


def test_describe_no_match_messages():
    assert describe_no_match(NoMatch(code="internal_error")) == "Shazam internal error. Please try again."
    assert describe_no_match(NoMatch(code="202")) == "An unknown error occurred. Error Code: 202. Try again."
    assert describe_no_match(NoMatch(reason="offline")) == "An error occurred: offline"
