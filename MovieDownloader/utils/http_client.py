# 14.10.26

import logging
from typing import Dict, Optional


# External libraries
import httpx


# Internal utilities
from .config_json import config_manager


# Variable
logger = logging.getLogger(__name__)
UNAVAILABLE_STATUS = (401, 403, 404, 410, 451)


def get_userAgent() -> str:
    return config_manager.get("REQUESTS", "user_agent")


def get_headers() -> Dict[str, str]:
    return {
        "user-agent": get_userAgent(),
        "accept-language": "it-IT,it;q=0.9,en-US;q=0.8,en;q=0.7"
    }


def create_client(headers: Optional[Dict[str, str]] = None, timeout: Optional[float] = None, follow_redirects: bool = True,
    transport: Optional[httpx.BaseTransport] = None, verify: Optional[bool] = None) -> httpx.Client:
    """
    Build a configured httpx client.

    Parameters:
        - headers (dict, optional): Request headers, defaults to get_headers().
        - timeout (float, optional): Timeout in seconds for connect/read/write/pool.
        - follow_redirects (bool): Follow 3xx responses.
        - transport (httpx.BaseTransport, optional): Custom transport, used by tests.
        - verify (bool, optional): TLS verification, defaults to REQUESTS.verify.
    """
    if timeout is None:
        timeout = config_manager.get_float("REQUESTS", "timeout", 20)
    if verify is None:
        verify = config_manager.get_bool("REQUESTS", "verify", True)

    kwargs = {
        "headers": headers if headers is not None else get_headers(),
        "timeout": httpx.Timeout(timeout),
        "follow_redirects": follow_redirects,
        "verify": verify
    }
    if transport is not None:
        kwargs["transport"] = transport

    return httpx.Client(**kwargs)


def is_retryable_status(status_code: int) -> bool:
    return status_code == 429 or status_code >= 500


def is_retryable_error(error: Exception) -> bool:
    """
    Decide whether an httpx failure is worth another attempt.
    Timeouts and transport failures are treated the same as 5xx and 429 answers.
    """
    if isinstance(error, httpx.HTTPStatusError):
        return is_retryable_status(error.response.status_code)
    return isinstance(error, httpx.TransportError)
