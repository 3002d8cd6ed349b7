"""Mock local-server payloads and HTTP session helpers for tests."""

import json
import threading
from unittest.mock import Mock

import requests

ENDPOINT = "http://localhost:1234"
RICH_URL = f"{ENDPOINT}/api/v0/models"
LEGACY_URL = f"{ENDPOINT}/v1/models"
SLOTS_URL = f"{ENDPOINT}/slots"


def make_response(status_code=200, payload=None, body=None):
    """Build a mock requests.Response."""
    response = Mock()
    response.status_code = status_code
    if body is None:
        body = json.dumps(payload).encode()
    response.content = body
    return response


def make_session(routes):
    """Build a mock requests.Session serving ``routes``.

    ``routes`` maps URL to a Response mock or an exception to raise.
    Unknown URLs raise ConnectionError, like a closed port.
    """
    session = Mock()

    def get(url, timeout=None):
        route = routes.get(url)
        if route is None:
            raise requests.ConnectionError(f"Connection refused: {url}")
        if isinstance(route, Exception):
            raise route
        return route

    session.get.side_effect = get
    return session


def requested_urls(session):
    """URLs requested from a mock session, in order."""
    return [c.args[0] for c in session.get.call_args_list]


def lmstudio_model(model_id, state="not-loaded", object_="model", type_="llm", **extra):
    """Entry of an LM Studio api/v0/models listing."""
    entry = {
        "id": model_id,
        "object": object_,
        "type": type_,
        "publisher": "lmstudio-community",
        "arch": "llama",
        "compatibility_type": "gguf",
        "quantization": "Q4_K_M",
        "state": state,
        "max_context_length": 32768,
    }
    entry.update(extra)
    return entry


def openai_model(model_id):
    """Entry of an OpenAI-compatible v1/models listing."""
    return {"id": model_id, "object": "model", "owned_by": "llamacpp", "created": 1718000000}


def slot(slot_id, n_ctx):
    """Entry of a llama-server /slots listing."""
    return {
        "id": slot_id,
        "id_task": -1,
        "n_ctx": n_ctx,
        "speculative": False,
        "is_processing": False,
        "params": {"n_predict": -1, "temperature": 0.8, "samplers": ["top_k", "top_p"]},
        "prompt": "",
        "next_token": {"has_next_token": True, "n_remain": -1},
    }


class GatedLock:
    """Lock stand-in that blocks entry until ``release`` is set."""

    def __init__(self):
        self.entered = threading.Event()
        self.release = threading.Event()

    def __enter__(self):
        self.entered.set()
        self.release.wait(5)
        return self

    def __exit__(self, *exc_info):
        return False
