"""Shared JSON-over-HTTP helper for upstream collaborators.

Requests run in a worker thread so the event loop keeps serving sibling
accounts, and transient failures are retried with exponential backoff.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any, Mapping

import backoff
import requests

from ..constants import RETRYABLE_STATUS_CODES
from ..logger import get_logger

logger = get_logger(__name__)


class UpstreamPayloadError(ValueError):
    """Raised when an upstream responds with something that is not usable JSON."""

    pass


def _giveup(exc: Exception) -> bool:
    """Stop retrying on HTTP errors that will not change on a second attempt."""
    return (
        isinstance(exc, requests.exceptions.HTTPError)
        and exc.response is not None
        and exc.response.status_code not in RETRYABLE_STATUS_CODES
    )


async def get_json(
    url: str,
    *,
    params: Mapping[str, Any] | None = None,
    headers: Mapping[str, str] | None = None,
    timeout: float = 10.0,
    max_tries: int = 1,
) -> Any:
    """GET ``url`` and decode the JSON body.

    Args:
        url: Absolute URL to request
        params: Optional query parameters
        headers: Optional request headers
        timeout: Per-attempt timeout in seconds
        max_tries: Total attempts for retryable failures (429, 5xx, network)

    Returns:
        The decoded JSON document

    Raises:
        requests.exceptions.RequestException: If every attempt failed
        UpstreamPayloadError: If the body is not valid JSON
    """

    def _on_backoff(details: Any) -> None:
        logger.debug(
            "Retrying %s after attempt %d: %s",
            url,
            details["tries"],
            details.get("exception"),
        )

    @backoff.on_exception(
        backoff.expo,
        requests.exceptions.RequestException,
        max_tries=max_tries,
        giveup=_giveup,
        jitter=backoff.full_jitter,
        on_backoff=_on_backoff,
    )
    async def _fetch() -> requests.Response:
        logger.debug(f"Calling {url}")
        response = await asyncio.to_thread(
            requests.get,
            url,
            params=dict(params) if params else None,
            headers=dict(headers) if headers else None,
            timeout=timeout,
        )
        response.raise_for_status()
        return response

    response = await _fetch()

    try:
        return response.json()
    except (json.JSONDecodeError, requests.exceptions.JSONDecodeError) as e:
        raise UpstreamPayloadError(f"Invalid JSON from {url}") from e
