# src/forge_k8s/clients/rest_client.py
"""
Minimal asynchronous client for the node REST API.

Only the calls the adapter needs for liveness are implemented.
"""

import logging

from pydantic import ValidationError

from ..models.ledger import LedgerInformation
from ..utils.http_client import get_async_http_client

logger = logging.getLogger(__name__)


class RestClient:
    """Talks to a single node REST endpoint, e.g. `http://127.0.0.1:40001/`."""

    def __init__(self, base_url: str):
        self.base_url = base_url if base_url.endswith("/") else f"{base_url}/"

    def __repr__(self) -> str:
        return f"RestClient({self.base_url!r})"

    async def get_ledger_information(self) -> LedgerInformation:
        """
        Fetches the ledger summary from the API index.

        Raises:
            httpx.HTTPError: On transport errors or non-2xx responses.
            ValueError: If the payload is not valid JSON or lacks ledger fields.
        """
        url = f"{self.base_url}v1"
        async with get_async_http_client() as client:
            response = await client.get(url)
            response.raise_for_status()
            try:
                payload = response.json()
            except ValueError as e:
                raise ValueError(f"Ledger information from {url} is not JSON: {e}") from e

        try:
            info = LedgerInformation.model_validate(payload)
        except ValidationError as e:
            raise ValueError(f"Unexpected ledger information from {url}: {e}") from e
        logger.debug("Ledger at %s: version=%s epoch=%s", url, info.ledger_version, info.epoch)
        return info
