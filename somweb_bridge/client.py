"""
somweb_bridge.client
====================
Stateful HTTP client for the SOMweb garage-door gateway.

Responsibilities
----------------
* Log in through the HTML form at ``/index.php`` and keep every cookie the
  gateway sets during that exchange.
* Scrape the anti-CSRF webtoken from the login response and keep it current:
  the gateway hands out a new token with every status response and rejects
  requests carrying a stale one.
* Query all door states (``/isg/statusDoorAll.php``) and send door commands
  (``/isg/opendoor.php``).
* Offer idempotent open / close / toggle operations on top of those two.

A DeviceSession is not thread-safe.  The token changes on every status call,
so callers sharing one instance must serialise access themselves (the MQTT
bridge does this with a single lock).
"""

from __future__ import annotations

import logging
from http.cookiejar import Cookie

import requests

from .config import (
    LOGIN_PAGE, STATUS_URL, COMMAND_URL, LOGIN_MARKER,
    STATUS_OPEN, STATUS_CLOSED,
)
from .doors import parse_status
from .errors import AuthError, QueryError, CommandError, DoorNotFoundError
from .session import build_session, base_url
from .webtoken import extract_webtoken, describe_page

log = logging.getLogger("somweb-bridge")


class DeviceSession:
    """
    Authenticated session against one gateway.

    Construction logs in; if that fails AuthError is raised and no session
    object is returned.
    """

    def __init__(
        self,
        host: str,
        username: str,
        password: str,
        *,
        http: "requests.Session | None" = None,
        timeout: "float | None" = None,
        strict_doors: bool = False,
    ) -> None:
        self.host = host
        self.username = username
        self.password = password
        self.base = base_url(host)
        self.timeout = timeout
        self.strict_doors = strict_doors
        self.http = http if http is not None else build_session()

        self.cookies: list[Cookie] = []
        self.webtoken: str = ""

        self._authenticate()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def get_door_states(self) -> dict[str, bool]:
        """
        Fetch the state of every door (True = closed, False = open).

        The webtoken from the response replaces the stored one, even though
        this is a read.
        """
        params = {
            "access": "1",
            "login": self.username,
            "webtoken": self.webtoken,
        }
        try:
            resp = self._get(STATUS_URL, params)
        except requests.RequestException as exc:
            raise QueryError(f"unable to get all doors: {exc}") from exc

        states, token = parse_status(resp.text)
        self.webtoken = token
        log.debug("Doors: %s (webtoken %s…)", states, token[:6])
        return states

    def close_door(self, door: str) -> bool:
        """Close *door* unless it already reports closed.  Returns True if a command was sent."""
        log.info("Close door %s", door)
        if self._current_state(door):
            log.debug("Door %s already closed", door)
            return False
        self.set_door_state(door, STATUS_CLOSED)
        return True

    def open_door(self, door: str) -> bool:
        """Open *door* unless it already reports open.  Returns True if a command was sent."""
        log.info("Open door %s", door)
        if not self._current_state(door):
            log.debug("Door %s already open", door)
            return False
        self.set_door_state(door, STATUS_OPEN)
        return True

    def toggle_door(self, door: str) -> bool:
        """Send *door* to the opposite of its current state.  Always sends a command."""
        log.info("Toggle door %s", door)
        closed = self._current_state(door)
        self.set_door_state(door, STATUS_OPEN if closed else STATUS_CLOSED)
        return True

    def set_door_state(self, door: str, status: str) -> None:
        """
        Send a raw door command.

        *status* uses the gateway's convention: ``"0"`` drives the door to its
        open side, ``"1"`` to its closed side.  The response body is not
        checked; only transport failures raise CommandError.
        """
        params = {
            "numdoor": door,
            "status": status,
            "webtoken": self.webtoken,
        }
        try:
            resp = self._get(COMMAND_URL, params)
        except requests.RequestException as exc:
            raise CommandError(f"unable to change door state: {exc}") from exc
        log.debug("Door %s status=%s → HTTP %s %r",
                  door, status, resp.status_code, resp.text[:80])

    def close(self) -> None:
        self.http.close()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _authenticate(self) -> None:
        form = {
            "login": self.username,
            "pass": self.password,
            "send-login": LOGIN_MARKER,
        }
        try:
            resp = self.http.post(self.base + LOGIN_PAGE, data=form, timeout=self.timeout)
        except requests.RequestException as exc:
            raise AuthError(f"unable to send login request: {exc}") from exc

        # Cookies set on redirect hops count too; keep them all, in order,
        # with their domain and path, in the jar every later request uses.
        self.cookies = [
            cookie for r in (*resp.history, resp) for cookie in r.cookies
        ]
        for cookie in self.cookies:
            self.http.cookies.set_cookie(cookie)

        token = extract_webtoken(resp.text)
        if token is None:
            raise AuthError(
                "unable to find webtoken in login response "
                f"(HTTP {resp.status_code}, {describe_page(resp.text)})"
            )
        self.webtoken = token
        log.info("Logged in to %s as %s (cookies: %s)",
                 self.base, self.username, [c.name for c in self.cookies])

    def _get(self, path: str, params: dict[str, str]) -> requests.Response:
        return self.http.get(
            self.base + path,
            params=params,
            timeout=self.timeout,
        )

    def _current_state(self, door: str) -> bool:
        states = self.get_door_states()
        if door not in states:
            if self.strict_doors:
                raise DoorNotFoundError(door)
            log.warning("Door %s is not reported by the gateway; treating it as open", door)
        return states.get(door, False)
