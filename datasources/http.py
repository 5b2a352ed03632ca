"""Single HTTP session shared by the quote fetches.

Quote requests come from the ticker thread and the event worker, and the
presenter's refresh lock never lets them overlap, so one pooled session is
enough for the whole process.
"""

import logging
import threading
from typing import Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

log = logging.getLogger(__name__)

USER_AGENT = "CryptoPortfolioTracker/1.0"

_lock = threading.Lock()
_session: Optional[requests.Session] = None


def build_session(retries: int = 2, backoff: float = 0.5) -> requests.Session:
    """Return a session retrying idempotent GETs on throttling and 5xx answers."""
    retry = Retry(
        total=retries,
        backoff_factor=backoff,
        status_forcelist=[429, 502, 503, 504],
        allowed_methods=["GET"],
        respect_retry_after_header=True,
        raise_on_status=False,
    )
    session = requests.Session()
    session.mount("https://", HTTPAdapter(pool_connections=1, pool_maxsize=2, max_retries=retry))
    session.headers.update({"User-Agent": USER_AGENT, "Accept": "application/json"})
    return session


def get_shared_session() -> requests.Session:
    global _session
    with _lock:
        if _session is None:
            _session = build_session()
            log.debug("Created shared HTTP session")
        return _session


def close_shared_session() -> None:
    """Close the shared session; the next ``get_shared_session`` builds a new one."""
    global _session
    with _lock:
        session, _session = _session, None
    if session is not None:
        session.close()
