"""
Shared HTTP session for outbound UV requests.

Transient upstream failures (429 and 502-504, dropped connections) are
retried by urllib3 with exponential backoff, and every request gets a
default timeout. Nothing above this layer retries: the UV cache only decides
when a fetch is due and falls back to cached data when one fails.

Usage::

    from daylight_dose.services.http import session

    resp = session.get(FORECAST_URL, params=params)
    resp.raise_for_status()
"""

from __future__ import annotations

from typing import Any

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

#: Three attempts at 0s, 1s and 2s; a UV reading older than that is already stale.
DEFAULT_RETRY = Retry(
    total=3,
    backoff_factor=1,
    status_forcelist=[429, 502, 503, 504],
    allowed_methods=["GET", "HEAD", "OPTIONS"],
    respect_retry_after_header=True,
    raise_on_status=False,
)

DEFAULT_TIMEOUT = 15  # seconds

USER_AGENT = "daylight-dose/0.1"


class TimeoutHTTPAdapter(HTTPAdapter):
    """Retrying adapter that fills in a timeout when the caller gives none."""

    def __init__(self, timeout: float, **kwargs: Any) -> None:
        self.timeout = timeout
        super().__init__(**kwargs)

    def send(self, request: requests.PreparedRequest, **kwargs: Any) -> requests.Response:
        if kwargs.get("timeout") is None:
            kwargs["timeout"] = self.timeout
        return super().send(request, **kwargs)


def create_session(
    retry: Retry | None = None,
    timeout: float = DEFAULT_TIMEOUT,
    user_agent: str = USER_AGENT,
) -> requests.Session:
    """
    Build a ``requests.Session`` with the retrying adapter mounted.

    Args:
        retry: Custom retry strategy (defaults to ``DEFAULT_RETRY``).
        timeout: Timeout for requests that do not pass their own.
        user_agent: Value of the ``User-Agent`` header.
    """
    s = requests.Session()
    adapter = TimeoutHTTPAdapter(timeout, max_retries=retry or DEFAULT_RETRY)
    s.mount("https://", adapter)
    s.mount("http://", adapter)
    s.headers["User-Agent"] = user_agent
    return s


#: Shared by the Open-Meteo datasource.
session: requests.Session = create_session()
