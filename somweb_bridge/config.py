"""Configuration constants and environment-driven settings for somweb-bridge."""

import os
from dataclasses import dataclass

# Device endpoints (relative to http://<host>)
LOGIN_PAGE   = "/index.php"
STATUS_URL   = "/isg/statusDoorAll.php"
COMMAND_URL  = "/isg/opendoor.php"

# Value of the submit button on the login form
LOGIN_MARKER = "Sign in"

# Key of the status response that carries the next webtoken
TOKEN_KEY = "11"

# The gateway reports ten door slots, "1".."10"
DOOR_IDS: tuple[str, ...] = tuple(str(n) for n in range(1, 11))

# Status flags understood by opendoor.php
STATUS_OPEN   = "0"
STATUS_CLOSED = "1"

DEFAULT_POLL_INTERVAL = 5.0     # seconds between state publications
DEFAULT_MQTT_PORT     = 1883
DEFAULT_TOPIC_PREFIX  = "somweb"
MQTT_CLIENT_ID        = "somweb"
MQTT_KEEPALIVE        = 60

# Inbound payload that triggers an action; anything else is ignored
TRIGGER_PAYLOAD = "1"


@dataclass
class BridgeConfig:
    """Everything needed to run the bridge, usually read from the environment."""

    host: str = ""
    username: str = ""
    password: str = ""
    broker: str = "localhost"
    port: int = DEFAULT_MQTT_PORT
    mqtt_user: str = ""
    mqtt_password: str = ""
    topic_prefix: str = DEFAULT_TOPIC_PREFIX
    interval: float = DEFAULT_POLL_INTERVAL
    timeout: "float | None" = None
    strict_doors: bool = False

    @classmethod
    def from_env(cls, environ=None) -> "BridgeConfig":
        """
        Build a config from ``SOMWEB_*`` and ``MQTT_*`` environment variables.

        Unset variables fall back to the dataclass defaults.  ``MQTT_PORT``
        must be an integer when present; ValueError otherwise.
        """
        env = os.environ if environ is None else environ
        raw_port = env.get("MQTT_PORT") or ""
        try:
            port = int(raw_port) if raw_port else DEFAULT_MQTT_PORT
        except ValueError:
            raise ValueError(f"MQTT_PORT must be an integer, got {raw_port!r}") from None
        return cls(
            host=env.get("SOMWEB_HOST", ""),
            username=env.get("SOMWEB_USERNAME", ""),
            password=env.get("SOMWEB_PASSWORD", ""),
            broker=env.get("MQTT_BROKER") or "localhost",
            port=port,
            mqtt_user=env.get("MQTT_USER", ""),
            mqtt_password=env.get("MQTT_PASS", ""),
        )

    def missing(self) -> list[str]:
        """
        Names of the required device settings that are still empty.

        The password is not listed; the CLI prompts for it instead.
        """
        return [name for name in ("host", "username") if not getattr(self, name)]
