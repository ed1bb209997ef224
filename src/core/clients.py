"""Lazy-initialized shared clients, reused across warm Lambda invocations."""

import threading
from functools import lru_cache
from typing import Any

import boto3
import requests

from core.config import get_config

USER_AGENT = "farewatch-fare-check/1.0"

_thread_state = threading.local()


@lru_cache(maxsize=1)
def get_secrets_client() -> Any:
    config = get_config()
    return boto3.client("secretsmanager", region_name=config.aws_region)


def get_http_session() -> requests.Session:
    """Return the calling thread's session.

    Fare-check workers run in a thread pool and requests.Session is not
    thread-safe, so each thread keeps its own.
    """
    session = getattr(_thread_state, "session", None)
    if session is None:
        session = requests.Session()
        session.headers.update({"User-Agent": USER_AGENT, "Accept": "application/json"})
        _thread_state.session = session
    return session
