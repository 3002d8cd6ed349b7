"""
HTTP client for the local inference server's listing endpoints.

Two levels are offered. ``fetch_models`` / ``fetch_slots`` raise a
``FetchError`` describing what went wrong. ``list_models`` / ``list_slots``
are what discovery uses: every failure is logged at DEBUG and collapses to
an empty list, so an absent or unsupported server simply contributes nothing.
"""

import logging
from urllib.parse import urlsplit

import requests
from pydantic import ValidationError as PydanticValidationError

from .exceptions import FetchDecodeError, FetchError, FetchStatusError, FetchTransportError
from .schemas.local import RawModel, RawModelList, RawSlot, SlotListAdapter

logger = logging.getLogger(__name__)

# LM Studio's richer listing also reports embeddings and other artifacts.
RICH_MODELS_PATH = "api/v0/models"
LEGACY_MODELS_PATH = "v1/models"
SLOTS_PATH = "/slots"

DEFAULT_TIMEOUT = 5.0

_LOG_BODY_LIMIT = 2000


class LocalServerClient:
    """
    Synchronous client for model and slot listings.

    Example:
        >>> with LocalServerClient(timeout=2.0) as client:
        ...     models = client.list_models("http://localhost:1234/api/v0/models")
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
        filtered_path: str = RICH_MODELS_PATH,
    ):
        """
        Args:
            timeout: Connect and read timeout per request, in seconds
            session: Session to reuse; one is created and owned otherwise
            filtered_path: Listing path whose entries are restricted to LLMs
        """
        self.timeout = timeout
        self.filtered_path = filtered_path.strip("/")
        self._owns_session = session is None
        self.session = session or requests.Session()

    def _get(self, url: str) -> bytes:
        """GET ``url`` and return the body of a 200 response."""
        try:
            response = self.session.get(url, timeout=self.timeout)
            try:
                body = response.content
            finally:
                response.close()
        except requests.RequestException as e:
            raise FetchTransportError(
                f"Request failed: {e}", {"endpoint": url, "error": str(e)}
            ) from e

        if response.status_code != 200:
            raise FetchStatusError(
                f"Unexpected status {response.status_code}",
                {"endpoint": url, "status": response.status_code},
            )
        return body

    def is_filtered(self, url: str) -> bool:
        """True if ``url`` targets the listing that mixes LLMs with other artifacts."""
        return urlsplit(url).path.rstrip("/").endswith(self.filtered_path)

    def fetch_models(self, url: str) -> list[RawModel]:
        """
        Fetch a model listing.

        Args:
            url: Fully qualified model-list URL

        Returns:
            Models in server order, restricted to LLMs for the richer listing

        Raises:
            FetchTransportError: Server unreachable or timed out
            FetchStatusError: Non-200 response
            FetchDecodeError: Body is not a model listing
        """
        logger.debug(f"Requesting models from {url}")
        body = self._get(url)
        logger.debug(f"Model list from server: {body[:_LOG_BODY_LIMIT]!r}")

        try:
            listing = RawModelList.model_validate_json(body)
        except PydanticValidationError as e:
            raise FetchDecodeError(
                f"Invalid model list: {e.error_count()} errors", {"endpoint": url, "error": str(e)}
            ) from e

        if not self.is_filtered(url):
            return list(listing.data)

        supported = []
        for model in listing.data:
            if not model.is_llm():
                logger.debug(
                    f"Skipping unsupported model {model.id!r} from {url} "
                    f"(object={model.object!r}, type={model.type!r})"
                )
                continue
            supported.append(model)
        return supported

    def fetch_slots(self, url: str) -> list[RawSlot]:
        """
        Fetch the slot listing.

        Args:
            url: Fully qualified slots URL

        Returns:
            Slots in server order

        Raises:
            FetchTransportError: Server unreachable or timed out
            FetchStatusError: Non-200 response
            FetchDecodeError: Body is not a slot listing
        """
        logger.debug(f"Requesting slots from {url}")
        body = self._get(url)

        try:
            slots = SlotListAdapter.validate_json(body)
        except PydanticValidationError as e:
            raise FetchDecodeError(
                f"Invalid slot list: {e.error_count()} errors", {"endpoint": url, "error": str(e)}
            ) from e

        logger.debug(f"Got {len(slots)} slots: {[slot.n_ctx for slot in slots]}")
        return slots

    def list_models(self, url: str) -> list[RawModel]:
        """Like ``fetch_models`` but returns an empty list on any failure."""
        try:
            return self.fetch_models(url)
        except FetchError as e:
            logger.debug(f"Failed to list local models: {e.message} (endpoint={url})")
            return []

    def list_slots(self, url: str) -> list[RawSlot]:
        """Like ``fetch_slots`` but returns an empty list on any failure."""
        try:
            return self.fetch_slots(url)
        except FetchError as e:
            logger.debug(f"Failed to list local slots: {e.message} (endpoint={url})")
            return []

    def close(self) -> None:
        """Close the session if this client created it."""
        if self._owns_session:
            self.session.close()

    def __enter__(self) -> "LocalServerClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


__all__ = [
    "DEFAULT_TIMEOUT",
    "LEGACY_MODELS_PATH",
    "RICH_MODELS_PATH",
    "SLOTS_PATH",
    "LocalServerClient",
]
