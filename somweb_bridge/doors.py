"""
somweb_bridge.doors
===================
Decoding of the gateway's ``statusDoorAll.php`` response.

The response is a flat JSON object.  Keys ``"1"``..``"10"`` hold the door
states, but the firmware is inconsistent about their encoding: a door may be
reported as the number ``1``/``0``, the string ``"1"``/``"0"``, ``null``, or
left out entirely.  Key ``"11"`` carries the next webtoken.

Every raw value is first classified into one of four shapes (``Absent``,
``Number``, ``Text``, ``Other``) and then mapped to a bool by a single total
function, so an unexpected encoding decodes to "open" rather than raising.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Union

from .config import DOOR_IDS, TOKEN_KEY
from .errors import QueryError


@dataclass(frozen=True)
class Absent:
    """Key missing from the response, or ``null``."""


@dataclass(frozen=True)
class Number:
    value: float


@dataclass(frozen=True)
class Text:
    value: str


@dataclass(frozen=True)
class Other:
    """Any other JSON value (bool, list, object)."""

    value: Any


DoorValue = Union[Absent, Number, Text, Other]

_MISSING = object()


def classify(raw: Any = _MISSING) -> DoorValue:
    """Sort a raw JSON value into one of the four door-value shapes."""
    if raw is _MISSING or raw is None:
        return Absent()
    # bool is an int subclass; JSON true/false is not a numeric encoding
    if isinstance(raw, bool):
        return Other(raw)
    if isinstance(raw, (int, float)):
        return Number(raw)
    if isinstance(raw, str):
        return Text(raw)
    return Other(raw)


def door_closed(value: DoorValue) -> bool:
    """
    Map a classified value to a door state: True = closed, False = open.

    Only the number 1 and the string "1" mean closed.
    """
    if isinstance(value, Number):
        return value.value == 1
    if isinstance(value, Text):
        return value.value == "1"
    return False


def decode_door_state(data: dict[str, Any], door: str) -> bool:
    """Decode the state of *door* from a status response object."""
    if door in data:
        return door_closed(classify(data[door]))
    return door_closed(classify())


def parse_status(body: str) -> tuple[dict[str, bool], str]:
    """
    Parse a ``statusDoorAll.php`` body into ``(states, next_token)``.

    Raises QueryError when the body is not a JSON object or the token key is
    missing or not a string.
    """
    try:
        data = json.loads(body)
    except ValueError as exc:
        raise QueryError(f"unable to decode doors response: {exc}") from exc

    if not isinstance(data, dict):
        raise QueryError(
            f"unexpected doors response: expected an object, got {type(data).__name__}"
        )

    token = data.get(TOKEN_KEY)
    if not isinstance(token, str):
        raise QueryError(f"doors response has no webtoken under key {TOKEN_KEY!r}")

    states = {door: decode_door_state(data, door) for door in DOOR_IDS}
    return states, token


def state_payload(closed: bool) -> str:
    """Bus payload for a door state: "1" closed, "0" open."""
    return "1" if closed else "0"
