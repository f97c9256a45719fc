"""Shared HTTP session for provider calls."""

from __future__ import annotations

from requests import Session
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from hazard_risk import __version__

USER_AGENT = f"hazard-risk/{__version__}"


def create_session(
    retries: int = 2,
    backoff_factor: float = 0.3,
    status_forcelist: tuple[int, ...] = (429, 500, 502, 503, 504),
) -> Session:
    """Create a Session that retries idempotent GETs with backoff.

    Retries are kept short: each ingestion call also carries its own
    timeout, and a failed fetch falls back to the cache rather than
    waiting on the provider.
    """
    retry = Retry(
        total=retries,
        backoff_factor=backoff_factor,
        status_forcelist=status_forcelist,
        allowed_methods=["GET"],
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry)
    session = Session()
    session.headers["User-Agent"] = USER_AGENT
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session
