"""
HTTP transport for the SOMweb gateway client.

DeviceSession owns one of these sessions for its whole life: the login
cookies live in its jar and every status query and door command reuses its
keep-alive connection.
"""

import requests

# Headers the gateway's web UI sends from a desktop browser.
GATEWAY_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/120.0.0.0 Safari/537.36"
    ),
    "Connection": "keep-alive",
}


def build_session() -> requests.Session:
    """
    Return a requests.Session for talking to one gateway.

    The stock adapters are left in place, so a request is tried exactly
    once; a refused connection or timeout reaches DeviceSession, which turns
    it into AuthError, QueryError or CommandError.
    """
    session = requests.Session()
    session.headers.update(GATEWAY_HEADERS)
    return session


def base_url(host: str) -> str:
    """``http://<host>``; the gateway only serves plain HTTP."""
    return f"http://{host}"
