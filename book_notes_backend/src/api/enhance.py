"""
Client for the external AI webhook that rewrites a note into an enhanced summary.

The webhook is opaque: text goes in, text comes out, and the call may fail or
time out.
"""

from typing import Optional

import httpx
from fastapi import Request

from src.api.errors import (
    EnhancementNotConfiguredError,
    EnhancementTimeoutError,
    EnhancementUnavailableError,
)
from src.api.logging import get_logger

logger = get_logger(__name__)

DEFAULT_TIMEOUT_SECONDS = 25.0
RESULT_KEYS = ("text", "output", "summary")


class EnhancementClient:
    """Posts note text to the webhook and returns its rewrite."""

    def __init__(
        self,
        url: str,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.url = url
        self.timeout = timeout
        self._transport = transport

    def enhance(self, text: str) -> str:
        """
        Raises:
            EnhancementTimeoutError: no answer within the timeout.
            EnhancementUnavailableError: transport failure, non-2xx status or empty result.
        """
        try:
            with httpx.Client(timeout=httpx.Timeout(self.timeout), transport=self._transport) as client:
                response = client.post(self.url, json={"text": text})
                response.raise_for_status()
        except httpx.TimeoutException:
            logger.warning("enhance_failed", reason="timeout", timeout=self.timeout)
            raise EnhancementTimeoutError()
        except httpx.HTTPStatusError as e:
            logger.warning("enhance_failed", reason="status", status_code=e.response.status_code)
            raise EnhancementUnavailableError()
        except httpx.HTTPError as e:
            logger.warning("enhance_failed", reason="transport", error=str(e))
            raise EnhancementUnavailableError()

        result = self._extract_text(response)
        if not result:
            logger.warning("enhance_failed", reason="empty_result")
            raise EnhancementUnavailableError()
        return result

    @staticmethod
    def _extract_text(response: httpx.Response) -> str:
        content_type = response.headers.get("content-type", "")
        if "json" not in content_type:
            return response.text.strip()
        try:
            data = response.json()
        except ValueError:
            return ""
        if isinstance(data, str):
            return data.strip()
        if isinstance(data, dict):
            for key in RESULT_KEYS:
                value = data.get(key)
                if isinstance(value, str) and value.strip():
                    return value.strip()
        return ""


def get_enhancement_client(request: Request) -> EnhancementClient:
    """Configured client, looked up once the request body has been validated."""
    client = request.app.state.enhancer
    if client is None:
        raise EnhancementNotConfiguredError()
    return client
