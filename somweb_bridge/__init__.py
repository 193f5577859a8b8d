"""
somweb_bridge
=============
Python package bridging a SOMweb garage-door gateway to an MQTT broker.

Package structure
-----------------
somweb_bridge/
├── __init__.py       – package init and public API
├── config.py         – endpoint paths, defaults, env-driven BridgeConfig
├── logging_setup.py  – colorlog handler for the "somweb-bridge" logger
├── errors.py         – AuthError / QueryError / CommandError
├── session.py        – requests.Session factory
├── webtoken.py       – webtoken scraping from the login page
├── doors.py          – door-state decoding of statusDoorAll.php
├── client.py         – DeviceSession: login, query, open/close/toggle
├── bridge.py         – MQTT poll loop and command routing
└── cli.py            – argparse CLI (``python -m somweb_bridge``)

Quick start
-----------
    from somweb_bridge import DeviceSession

    device = DeviceSession("192.168.1.50", "user", "secret")
    print(device.get_door_states())
    device.close_door("1")
"""

from .client import DeviceSession
from .bridge import Bridge
from .errors import (
    SomwebError, AuthError, QueryError, CommandError, DoorNotFoundError,
)
from .webtoken import extract_webtoken
from .doors import parse_status

__all__ = [
    "DeviceSession",
    "Bridge",
    "SomwebError",
    "AuthError",
    "QueryError",
    "CommandError",
    "DoorNotFoundError",
    "extract_webtoken",
    "parse_status",
]
