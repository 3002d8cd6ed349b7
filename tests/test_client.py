"""
Tests for llm_discovery/client.py - Model and slot listings.
"""

import pytest
import requests

from llm_discovery.client import LocalServerClient
from llm_discovery.exceptions import (
    FetchDecodeError,
    FetchError,
    FetchStatusError,
    FetchTransportError,
)

from .helpers import (
    LEGACY_URL,
    RICH_URL,
    SLOTS_URL,
    lmstudio_model,
    make_response,
    openai_model,
    slot,
)


class TestFetchModels:
    """Tests for model listings."""

    def test_rich_listing_filtered_to_llms(self, client_for):
        payload = {
            "object": "list",
            "data": [
                lmstudio_model("qwen2.5-7b-instruct"),
                lmstudio_model("nomic-embed-text", type_="embeddings"),
                lmstudio_model("llava-phi3", type_="vlm"),
                lmstudio_model("weird-artifact", object_="file"),
                lmstudio_model("mistral-7b", state="loaded"),
            ],
        }
        client, _ = client_for({RICH_URL: make_response(payload=payload)})

        models = client.fetch_models(RICH_URL)

        assert [m.id for m in models] == ["qwen2.5-7b-instruct", "mistral-7b"]
        assert all(m.object == "model" and m.type == "llm" for m in models)

    def test_legacy_listing_not_filtered(self, client_for):
        payload = {"object": "list", "data": [openai_model("a"), openai_model("b")]}
        client, _ = client_for({LEGACY_URL: make_response(payload=payload)})

        models = client.fetch_models(LEGACY_URL)

        assert [m.id for m in models] == ["a", "b"]
        assert models[0].type == ""
        assert models[0].loaded_context_length == 0

    def test_fields_decoded(self, client_for):
        entry = lmstudio_model("qwen", state="loaded", loaded_context_length=8192)
        client, _ = client_for({RICH_URL: make_response(payload={"data": [entry]})})

        (model,) = client.fetch_models(RICH_URL)

        assert model.publisher == "lmstudio-community"
        assert model.arch == "llama"
        assert model.compatibility_type == "gguf"
        assert model.quantization == "Q4_K_M"
        assert model.state == "loaded"
        assert model.max_context_length == 32768
        assert model.loaded_context_length == 8192

    def test_null_fields_use_defaults(self, client_for):
        entry = {"id": "m", "object": "model", "type": "llm", "state": None,
                 "max_context_length": None}
        client, _ = client_for({RICH_URL: make_response(payload={"data": [entry]})})

        (model,) = client.fetch_models(RICH_URL)

        assert model.state == ""
        assert model.max_context_length == 0

    def test_missing_or_null_data_is_empty(self, client_for):
        client, _ = client_for(
            {
                RICH_URL: make_response(payload={"object": "list"}),
                LEGACY_URL: make_response(payload={"data": None}),
            }
        )
        assert client.fetch_models(RICH_URL) == []
        assert client.fetch_models(LEGACY_URL) == []

    def test_null_entry_skipped_on_rich_listing(self, client_for):
        payload = {"data": [lmstudio_model("a"), None, lmstudio_model("b")]}
        client, _ = client_for({RICH_URL: make_response(payload=payload)})

        assert [m.id for m in client.list_models(RICH_URL)] == ["a", "b"]

    def test_null_entry_decodes_empty_on_legacy_listing(self, client_for):
        payload = {"data": [openai_model("a"), None]}
        client, _ = client_for({LEGACY_URL: make_response(payload=payload)})

        models = client.fetch_models(LEGACY_URL)

        assert [m.id for m in models] == ["a", ""]

    def test_timeout_passed_to_session(self, client_for):
        client, session = client_for({LEGACY_URL: make_response(payload={"data": []})})
        client.fetch_models(LEGACY_URL)
        session.get.assert_called_once_with(LEGACY_URL, timeout=1.0)

    def test_filter_applies_with_trailing_slash_and_query(self):
        client = LocalServerClient(session=object())
        assert client.is_filtered(RICH_URL)
        assert client.is_filtered(RICH_URL + "/")
        assert client.is_filtered(RICH_URL + "?verbose=1")
        assert not client.is_filtered(LEGACY_URL)


class TestFetchFailures:
    """Failures raise FetchError subclasses from fetch_* methods."""

    def test_connection_error(self, client_for):
        client, _ = client_for({})
        with pytest.raises(FetchTransportError) as exc_info:
            client.fetch_models(RICH_URL)
        assert exc_info.value.endpoint == RICH_URL

    def test_timeout(self, client_for):
        client, _ = client_for({RICH_URL: requests.Timeout("read timed out")})
        with pytest.raises(FetchTransportError):
            client.fetch_models(RICH_URL)

    def test_non_200_status(self, client_for):
        client, _ = client_for({RICH_URL: make_response(404, body=b"Not Found")})
        with pytest.raises(FetchStatusError) as exc_info:
            client.fetch_models(RICH_URL)
        assert exc_info.value.status_code == 404

    def test_other_success_status_rejected(self, client_for):
        client, _ = client_for({RICH_URL: make_response(204, body=b"")})
        with pytest.raises(FetchStatusError):
            client.fetch_models(RICH_URL)

    def test_invalid_json(self, client_for):
        client, _ = client_for({RICH_URL: make_response(body=b"<html>LM Studio</html>")})
        with pytest.raises(FetchDecodeError):
            client.fetch_models(RICH_URL)

    def test_schema_mismatch(self, client_for):
        client, _ = client_for(
            {
                RICH_URL: make_response(payload=[{"id": "a"}]),
                LEGACY_URL: make_response(payload={"data": [{"id": 42}]}),
            }
        )
        with pytest.raises(FetchDecodeError):
            client.fetch_models(RICH_URL)
        with pytest.raises(FetchDecodeError):
            client.fetch_models(LEGACY_URL)

    def test_fetch_errors_share_base(self):
        for exc_type in (FetchTransportError, FetchStatusError, FetchDecodeError):
            assert issubclass(exc_type, FetchError)


class TestListModels:
    """list_models never raises and degrades to an empty list."""

    @pytest.mark.parametrize(
        "route",
        [
            None,
            requests.ConnectionError("refused"),
            make_response(500, body=b"boom"),
            make_response(body=b"{not json"),
            make_response(payload={"data": "nope"}),
        ],
    )
    def test_failures_yield_empty(self, client_for, route):
        routes = {} if route is None else {RICH_URL: route}
        client, _ = client_for(routes)
        assert client.list_models(RICH_URL) == []

    def test_failures_logged_at_debug(self, client_for, caplog):
        client, _ = client_for({})
        with caplog.at_level("DEBUG", logger="llm_discovery.client"):
            client.list_models(RICH_URL)
        records = [r for r in caplog.records if "Failed to list local models" in r.getMessage()]
        assert records
        assert all(r.levelname == "DEBUG" for r in records)


class TestSlots:
    """Tests for slot listings."""

    def test_order_preserved(self, client_for):
        payload = [slot(0, 4096), slot(1, 8192), slot(2, 2048)]
        client, _ = client_for({SLOTS_URL: make_response(payload=payload)})

        slots = client.list_slots(SLOTS_URL)

        assert [s.n_ctx for s in slots] == [4096, 8192, 2048]
        assert [s.id for s in slots] == [0, 1, 2]

    def test_opaque_fields_passed_through(self, client_for):
        entry = slot(0, 4096)
        entry["id_slot_extra"] = "kept"
        client, _ = client_for({SLOTS_URL: make_response(payload=[entry])})

        (raw,) = client.fetch_slots(SLOTS_URL)

        assert raw.params["samplers"] == ["top_k", "top_p"]
        assert raw.next_token["has_next_token"] is True
        assert raw.model_extra == {"id_slot_extra": "kept"}

    def test_only_n_ctx_required(self, client_for):
        client, _ = client_for({SLOTS_URL: make_response(payload=[{"n_ctx": 1024}])})
        (raw,) = client.fetch_slots(SLOTS_URL)
        assert raw.n_ctx == 1024
        assert raw.params == {}

    def test_null_slot_decodes_empty(self, client_for):
        client, _ = client_for({SLOTS_URL: make_response(payload=[slot(0, 4096), None])})

        slots = client.fetch_slots(SLOTS_URL)

        assert [s.n_ctx for s in slots] == [4096, 0]

    @pytest.mark.parametrize(
        "route",
        [
            None,
            make_response(501, payload={"error": {"message": "slots endpoint is disabled"}}),
            make_response(payload={"data": []}),
            make_response(body=b""),
        ],
    )
    def test_failures_yield_empty(self, client_for, route):
        routes = {} if route is None else {SLOTS_URL: route}
        client, _ = client_for(routes)
        assert client.list_slots(SLOTS_URL) == []


class TestClientLifecycle:
    """Session ownership."""

    def test_injected_session_not_closed(self, client_for):
        client, session = client_for({})
        client.close()
        session.close.assert_not_called()

    def test_owned_session_closed(self, monkeypatch):
        closed = []
        monkeypatch.setattr(requests.Session, "close", lambda self: closed.append(self))
        with LocalServerClient() as client:
            assert isinstance(client.session, requests.Session)
        assert closed == [client.session]
