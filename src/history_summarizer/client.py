"""HTTP client for the block summarization endpoint."""

from __future__ import annotations

import logging
from typing import Optional

import requests
from requests.exceptions import ConnectionError, RequestException, Timeout

from history_summarizer.blocks.models import Block
from history_summarizer.errors import NotConfiguredError, SummarizationError

LOGGER = logging.getLogger(__name__)

# Characters of payload/summary echoed into debug logs
LOG_PREVIEW_CHARS = 100


class SummarizationClient:
    """Posts one block to the summarization endpoint and returns its summary.

    A single attempt is made per call; callers decide about retries.
    """

    def __init__(
        self,
        api_url: str = "",
        timeout: float = 60.0,
        session: Optional[requests.Session] = None,
    ):
        self.api_url = api_url.strip()
        self.timeout = timeout
        self._session = session or requests.Session()

    @property
    def is_configured(self) -> bool:
        return bool(self.api_url)

    @property
    def session(self) -> requests.Session:
        return self._session

    def build_payload(self, block: Block, target_summary_size: Optional[int] = None) -> dict:
        """Request body for a block."""
        payload: dict[str, object] = {
            "block_content": block.render(),
            "block_details": block.details(),
        }
        if target_summary_size:
            payload["target_summary_size"] = target_summary_size
        return payload

    def summarize(self, block: Block, target_summary_size: Optional[int] = None) -> str:
        """Return the endpoint's summary for `block`.

        Raises:
            NotConfiguredError: No endpoint URL is set; nothing is sent.
            SummarizationError: Non-2xx status, network failure, or a body
                without a usable `summary`.
        """
        if not self.is_configured:
            raise NotConfiguredError("Summarization API URL is not set")

        payload = self.build_payload(block, target_summary_size)
        LOGGER.debug(
            "Sending block %s to %s: %s...",
            block.hash[:12],
            self.api_url,
            block.render()[:LOG_PREVIEW_CHARS],
        )

        try:
            response = self._session.post(
                self.api_url,
                json=payload,
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
        except Timeout:
            raise SummarizationError(f"Request to {self.api_url} timed out")
        except ConnectionError:
            raise SummarizationError(f"Cannot connect to {self.api_url}")
        except RequestException as exc:
            raise SummarizationError(f"Request failed: {exc}")

        if not 200 <= response.status_code < 300:
            raise SummarizationError(
                f"API response {response.status_code} {response.reason}: {response.text}"
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise SummarizationError(f"Malformed response body: {exc}")

        summary = data.get("summary") if isinstance(data, dict) else None
        if not isinstance(summary, str) or not summary.strip():
            raise SummarizationError("Response body has no summary")

        LOGGER.debug("Received summary: %s...", summary[:LOG_PREVIEW_CHARS])
        return summary

    def health_check(self) -> bool:
        """Return True if the endpoint answers without a server error."""
        if not self.is_configured:
            return False
        try:
            resp = self._session.get(self.api_url, timeout=5)
            return resp.status_code < 500
        except RequestException:
            return False
