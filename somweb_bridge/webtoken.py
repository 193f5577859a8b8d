"""
somweb_bridge.webtoken
======================
Scrapes the anti-CSRF ``webtoken`` out of the gateway's login page.

The gateway has no structured login API: after a successful form POST it
serves the full web UI, which embeds the token as

    <input id="webtoken" type="hidden" value="...">

The token is matched with a regular expression.  ``id`` must come before
``value`` inside the same tag, whitespace around ``<``, ``input``, ``id`` and
``=`` is tolerated, and the first matching tag wins.

When no token is found the page is most likely the login form again (bad
credentials) or an error page; ``describe_page`` pulls its title and any
error text with BeautifulSoup so the failure can be reported meaningfully.
"""

import re

from bs4 import BeautifulSoup

WEBTOKEN_RE = re.compile(
    r'<\s*input\s+id\s*=\s*"webtoken"[^>]*?\bvalue\s*=\s*"(?P<webtoken>\w+)"',
    re.IGNORECASE,
)

_BS4_PARSER = "lxml"

# Elements the web UI uses for login errors
_ERROR_SELECTORS = (".error", ".alert", "#error", ".login-error")


def extract_webtoken(html: str) -> "str | None":
    """Return the first webtoken value in *html*, or None when there is none."""
    m = WEBTOKEN_RE.search(html)
    return m.group("webtoken") if m else None


def describe_page(html: str, limit: int = 120) -> str:
    """
    Summarise a page that did not carry a webtoken.

    Returns ``title: error text`` (either part may be missing) truncated to
    *limit* characters, or ``"empty response"`` for a blank body.
    """
    if not html.strip():
        return "empty response"

    soup = BeautifulSoup(html, _BS4_PARSER)
    parts = []
    if soup.title and soup.title.string:
        parts.append(soup.title.string.strip())
    for selector in _ERROR_SELECTORS:
        el = soup.select_one(selector)
        if el:
            text = " ".join(el.get_text(" ").split())
            if text:
                parts.append(text)
                break
    if soup.find("input", attrs={"name": "pass"}):
        parts.append("login form returned")

    summary = ": ".join(parts) if parts else "unrecognised page"
    return summary[:limit]
