from unittest.mock import MagicMock

from enrichment.providers import TmdbThemeSource, JikanThemeSource, GeminiThemeSource
from enrichment.providers.gemini_provider import build_prompt, parse_answer
from enrichment.providers.jikan_provider import opening_matches
from shared.errors import TransportError, BadResponse, DecodeError, InvalidRequest
from shared.models import EnrichmentQuery


def _client(*payloads, error=None):
    client = MagicMock()
    if error is not None:
        client.fetch_json.side_effect = error
    else:
        client.fetch_json.side_effect = list(payloads)
    return client


def _gemini_payload(text):
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


# TMDb

def test_tmdb_formats_first_result():
    client = _client({"results": [{"name": "Wayne's World", "media_type": "movie"}]})
    source = TmdbThemeSource(client, api_key="k")
    assert source.lookup(EnrichmentQuery("Bohemian Rhapsody", "Queen")) == "Movie: Wayne's World"
    _, kwargs = client.fetch_json.call_args
    assert kwargs["params"] == {"api_key": "k", "query": "Bohemian Rhapsody"}


def test_tmdb_uses_title_when_name_missing_and_only_first_result():
    client = _client({"results": [
        {"title": "Friends", "media_type": "tv"},
        {"name": "Something Else", "media_type": "movie"},
    ]})
    assert TmdbThemeSource(client, api_key="k").lookup(EnrichmentQuery("I'll Be There for You")) == "Tv: Friends"


def test_tmdb_first_result_without_name_is_no_answer():
    client = _client({"results": [{"media_type": "person"}, {"name": "Later", "media_type": "movie"}]})
    assert TmdbThemeSource(client, api_key="k").lookup(EnrichmentQuery("x")) is None


def test_tmdb_tolerates_partial_payloads():
    for payload in ({}, {"results": None}, {"results": []}, [], {"results": ["oops"]},
                    {"results": [{"name": "A"}]}):
        assert TmdbThemeSource(_client(payload), api_key="k").lookup(EnrichmentQuery("x")) is None


def test_tmdb_swallows_lookup_errors():
    for error in (TransportError("down"), BadResponse(401), DecodeError("bad"), InvalidRequest("no")):
        assert TmdbThemeSource(_client(error=error), api_key="k").lookup(EnrichmentQuery("x")) is None


def test_tmdb_without_key_is_unavailable_and_silent():
    client = _client()
    source = TmdbThemeSource(client, api_key=" ")
    assert not source.is_available
    assert source.lookup(EnrichmentQuery("x")) is None
    client.fetch_json.assert_not_called()


# Jikan

def test_opening_matches_is_loose_and_case_insensitive():
    assert opening_matches('"Unravel" by TK from Ling Tosite Sigure', "unravel", "")
    assert opening_matches('"Unravel" by TK from Ling Tosite Sigure', "Other", "tk from ling")
    assert not opening_matches('"Unravel" by TK', "Gurenge", "LiSA")
    assert not opening_matches('"Unravel" by TK', "", "")


def test_jikan_returns_first_candidate_whose_opening_mentions_title():
    client = _client({"data": [
        {"title": "Something", "theme": {"openings": ['"Other Song" by Someone']}},
        {"title": "Tokyo Ghoul", "theme": {"openings": ['1: "unravel" by TK from Ling Tosite Sigure (eps 1-12)']}},
        {"title": "Tokyo Ghoul Root A", "theme": {"openings": ['"Unravel" (acoustic)']}},
    ]})
    source = JikanThemeSource(client)
    assert source.lookup(EnrichmentQuery("Unravel", "TK")) == "Anime Opening: Tokyo Ghoul"
    _, kwargs = client.fetch_json.call_args_list[0]
    assert kwargs["params"] == {"q": "Unravel TK", "sfw": "true"}


def test_jikan_matches_on_artist():
    client = _client({"data": [{"title": "Demon Slayer", "theme": {"openings": ['"Gurenge" by LiSA']}}]})
    assert JikanThemeSource(client).lookup(EnrichmentQuery("Red Lotus", "LiSA")) == "Anime Opening: Demon Slayer"


def test_jikan_empty_artist_does_not_match_everything():
    client = _client({"data": [{"title": "Naruto", "theme": {"openings": ['"Haruka Kanata" by Asian Kung-Fu Generation']}}]})
    assert JikanThemeSource(client).lookup(EnrichmentQuery("Bohemian Rhapsody", "")) is None


def test_jikan_fetches_themes_when_not_inline():
    client = _client(
        {"data": [{"mal_id": 22319, "title": "Tokyo Ghoul"}]},
        {"data": {"openings": ['"unravel" by TK'], "endings": []}},
    )
    assert JikanThemeSource(client).lookup(EnrichmentQuery("Unravel")) == "Anime Opening: Tokyo Ghoul"
    assert client.fetch_json.call_args_list[1][0][0].endswith("/anime/22319/themes")


def test_jikan_theme_fetch_failure_skips_candidate():
    client = _client(
        {"data": [{"mal_id": 1, "title": "A"}, {"title": "B", "theme": {"openings": ['"Unravel"']}}]},
        TransportError("down"),
    )
    assert JikanThemeSource(client).lookup(EnrichmentQuery("Unravel")) == "Anime Opening: B"


def test_jikan_respects_candidate_limit():
    data = {"data": [{"title": f"Show {i}", "theme": {"openings": []}} for i in range(4)]
            + [{"title": "Late", "theme": {"openings": ['"Unravel"']}}]}
    assert JikanThemeSource(_client(data), max_candidates=3).lookup(EnrichmentQuery("Unravel")) is None


def test_jikan_tolerates_partial_payloads():
    for payload in ({}, {"data": None}, [], {"data": [None, {"theme": {"openings": ['"x"']}}]},
                    {"data": [{"title": "A", "theme": {"openings": None}}]},
                    {"data": [{"title": "A", "theme": {"openings": [3, None]}}]}):
        assert JikanThemeSource(_client(payload), fetch_missing_themes=False).lookup(EnrichmentQuery("x")) is None


def test_jikan_swallows_search_errors():
    assert JikanThemeSource(_client(error=BadResponse(500))).lookup(EnrichmentQuery("x")) is None


# Gemini

def test_gemini_formats_both_fields():
    client = _client(_gemini_payload('{"sourceTitle": "Friends", "sourceType": "TV Show"}'))
    source = GeminiThemeSource(client, api_key="g", model="m")
    assert source.lookup(EnrichmentQuery("I'll Be There for You", "The Rembrandts")) == "Friends (TV Show)"
    args, kwargs = client.fetch_json.call_args
    assert args[0].endswith("/models/m:generateContent")
    assert kwargs["method"] == "POST"
    assert kwargs["params"] == {"key": "g"}
    prompt = kwargs["body"]["contents"][0]["parts"][0]["text"]
    assert "I'll Be There for You" in prompt and "The Rembrandts" in prompt


def test_gemini_invalid_json_text_is_no_answer():
    client = _client(_gemini_payload("I think this is the Friends theme song!"))
    assert GeminiThemeSource(client, api_key="g").lookup(EnrichmentQuery("x")) is None


def test_gemini_null_fields_are_no_answer():
    for text in ('{"sourceTitle": null, "sourceType": null}',
                 '{"sourceTitle": "Friends", "sourceType": null}',
                 '{"sourceTitle": "", "sourceType": "TV Show"}',
                 '["Friends", "TV Show"]'):
        assert parse_answer(text) is None


def test_gemini_strips_code_fence():
    assert parse_answer('```json\n{"sourceTitle": "Naruto", "sourceType": "Anime"}\n```') == "Naruto (Anime)"


def test_gemini_unexpected_response_shape_is_no_answer():
    for payload in ({}, {"candidates": []}, {"candidates": [{"content": {"parts": []}}]},
                    {"candidates": [{"content": {"parts": [{"text": 5}]}}]}):
        assert GeminiThemeSource(_client(payload), api_key="g").lookup(EnrichmentQuery("x")) is None


def test_gemini_without_key_is_unavailable():
    client = _client()
    source = GeminiThemeSource(client)
    assert not source.is_available
    assert source.lookup(EnrichmentQuery("x")) is None
    client.fetch_json.assert_not_called()


def test_build_prompt_omits_missing_artist():
    assert " by " not in build_prompt(EnrichmentQuery("Song"))
