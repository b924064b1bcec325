"""Helper utilities.

This module centralises common helper functions such as creating a
configured HTTP session and applying the retry policy to network calls.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

import requests
from requests import Response
from tenacity import (after_log, retry, retry_if_exception_type,
                      stop_after_attempt, wait_exponential)

from .config import FETCH_ATTEMPTS, USER_AGENT


logger = logging.getLogger(__name__)


def get_http_session() -> requests.Session:
    """Return a new HTTP session with sensible defaults.

    The session sets a realistic User-Agent header and asks for HTML.
    Caller is responsible for closing the session or letting it be
    garbage collected.
    """
    session = requests.Session()
    session.headers.update(
        {
            "User-Agent": USER_AGENT,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        }
    )
    return session


class HTTPError(Exception):
    """Raised when an HTTP request fails."""


def _raise_for_status(resp: Response) -> None:
    try:
        resp.raise_for_status()
    except requests.RequestException as e:
        raise HTTPError(str(e)) from e


def retryable_request(method: Callable[..., Response]) -> Callable[..., Response]:
    """Decorator applying the fetch policy to HTTP calls.

    The decorated function must accept a `requests.Session` as its first
    argument, followed by URL and optional kwargs, and return a
    `requests.Response`.  Any non-2xx status becomes :class:`HTTPError`.
    Network errors and HTTP errors are retried up to ``FETCH_ATTEMPTS``
    total attempts (default 1, i.e. no retry) with exponential back-off
    between 1 and 10 seconds; the last error is re-raised.
    """

    @retry(
        reraise=True,
        stop=stop_after_attempt(FETCH_ATTEMPTS),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=(
            retry_if_exception_type(requests.RequestException)
            | retry_if_exception_type(HTTPError)
        ),
        after=after_log(logger, logging.WARNING),
    )
    def wrapper(session: requests.Session, url: str, **kwargs: Any) -> Response:
        response = method(session, url, **kwargs)
        _raise_for_status(response)
        return response

    return wrapper


__all__ = ["get_http_session", "retryable_request", "HTTPError"]
