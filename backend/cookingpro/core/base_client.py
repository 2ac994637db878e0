"""
Base client for AI operations.
Provides the shared HTTP plumbing and error classification for model clients.
"""
from typing import Dict, Any, Optional
import httpx
from cookingpro.core.config import Settings, get_settings
from cookingpro.core.exceptions import ModelRequestError, TransientModelError
from cookingpro.core.logging import get_logger

logger = get_logger("core.base_client")

# Worth another attempt: request timeout, rate limiting, server side failures
TRANSIENT_STATUS_CODES = {408, 429}


class BaseAIClient:
    """Base client for interacting with AI Models."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings or get_settings()
        self.timeout = self.settings.llm_timeout_seconds
        self._transport = transport

    async def _make_request(
        self,
        url: str,
        payload: Dict[str, Any],
        headers: Optional[Dict[str, str]] = None,
        log_prefix: str = "AI Client"
    ) -> Dict[str, Any]:
        """
        Make a generic HTTP POST request to the AI provider.

        Args:
            url: The full API endpoint URL.
            payload: The JSON payload to send.
            headers: Extra request headers (credentials).
            log_prefix: Prefix for log messages.

        Returns:
            The parsed JSON response.

        Raises:
            TransientModelError: On transport failures, timeouts, 408/429 and 5xx.
            ModelRequestError: On any other error status or an unreadable body.
        """
        logger.debug(f"[{log_prefix}] Calling {url}")

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(url, json=payload, headers=headers)
        except httpx.TransportError as e:
            raise TransientModelError(f"{log_prefix} request failed: {e!r}") from e

        logger.debug(f"[{log_prefix}] Response status: {response.status_code}")
        if response.status_code != 200:
            logger.error(f"[{log_prefix}] Error response: {response.text[:500]}")

        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = response.status_code
            message = f"{log_prefix} returned HTTP {status}"
            if status in TRANSIENT_STATUS_CODES or status >= 500:
                raise TransientModelError(message, status_code=status) from e
            raise ModelRequestError(message, status_code=status) from e

        try:
            return response.json()
        except ValueError as e:
            raise ModelRequestError(f"{log_prefix} returned a non-JSON body") from e
