"""
Command-line interface for somweb-bridge.

Provides argument parsing and main execution flow.
"""

import argparse
import getpass
import logging
import signal
import sys

from somweb_bridge.bridge import Bridge, build_mqtt_client
from somweb_bridge.client import DeviceSession
from somweb_bridge.config import BridgeConfig
from somweb_bridge.errors import AuthError
from somweb_bridge.logging_setup import setup_logging

log = logging.getLogger("somweb-bridge")

_REQUIRED_HINTS = {
    "host": "--host (or SOMWEB_HOST)",
    "username": "--user (or SOMWEB_USERNAME)",
}


def parse_args(argv=None, env=None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Defaults come from the SOMWEB_* / MQTT_* environment variables.

    Returns:
        Parsed arguments namespace
    """
    env_error = None
    try:
        defaults = BridgeConfig.from_env(env)
    except ValueError as exc:
        defaults, env_error = BridgeConfig(), str(exc)
    parser = argparse.ArgumentParser(
        description="Bridge a SOMweb garage-door gateway to MQTT.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Settings can also be provided via SOMWEB_HOST, SOMWEB_USERNAME,\n"
            "SOMWEB_PASSWORD, MQTT_BROKER, MQTT_PORT, MQTT_USER and MQTT_PASS.\n"
            "If the password is not supplied and not in the environment, "
            "you will be prompted for it."
        ),
    )
    parser.add_argument(
        "--host", default=defaults.host,
        help="Gateway address (default: $SOMWEB_HOST)",
    )
    parser.add_argument(
        "--user", default=defaults.username,
        help="Gateway username (default: $SOMWEB_USERNAME)",
    )
    parser.add_argument(
        "--password", default=defaults.password,
        help="Gateway password (overrides SOMWEB_PASSWORD env var)",
    )
    parser.add_argument(
        "--broker", default=defaults.broker,
        help=f"MQTT broker host (default: {defaults.broker})",
    )
    parser.add_argument(
        "--port", type=int, default=None if env_error else defaults.port,
        help=f"MQTT broker port (default: {defaults.port})",
    )
    parser.add_argument(
        "--mqtt-user", default=defaults.mqtt_user,
        help="MQTT username (default: $MQTT_USER)",
    )
    parser.add_argument(
        "--mqtt-password", default=defaults.mqtt_password,
        help="MQTT password (default: $MQTT_PASS)",
    )
    parser.add_argument(
        "--topic-prefix", default=defaults.topic_prefix,
        help=f"MQTT topic prefix (default: {defaults.topic_prefix})",
    )
    parser.add_argument(
        "--interval", type=float, default=defaults.interval,
        help=f"Seconds between door state publications (default: {defaults.interval:g})",
    )
    parser.add_argument(
        "--timeout", type=float, default=defaults.timeout,
        help="HTTP timeout in seconds for gateway requests (default: none)",
    )
    parser.add_argument(
        "--strict-doors", action="store_true", default=False,
        help="Reject commands for door ids the gateway does not report",
    )
    parser.add_argument(
        "--debug", action="store_true",
        help="Enable verbose debug logging",
    )
    args = parser.parse_args(argv)
    if args.port is None:
        parser.error(env_error)
    for name in config_from_args(args).missing():
        parser.error(f"{_REQUIRED_HINTS[name]} is required")
    return args


def config_from_args(args: argparse.Namespace) -> BridgeConfig:
    return BridgeConfig(
        host=args.host,
        username=args.user,
        password=args.password,
        broker=args.broker,
        port=args.port,
        mqtt_user=args.mqtt_user,
        mqtt_password=args.mqtt_password,
        topic_prefix=args.topic_prefix,
        interval=args.interval,
        timeout=args.timeout,
        strict_doors=args.strict_doors,
    )


def main(argv=None) -> None:
    """
    Main entry point for the bridge CLI.
    """
    args = parse_args(argv)

    setup_logging(debug=args.debug)

    if not args.password:
        args.password = getpass.getpass("Gateway password: ")

    cfg = config_from_args(args)

    try:
        device = DeviceSession(
            cfg.host, cfg.username, cfg.password,
            timeout=cfg.timeout, strict_doors=cfg.strict_doors,
        )
    except AuthError as exc:
        log.error("Login to %s failed: %s", cfg.host, exc)
        sys.exit(1)

    bridge = Bridge(
        device,
        build_mqtt_client(cfg.mqtt_user, cfg.mqtt_password),
        interval=cfg.interval,
        topic_prefix=cfg.topic_prefix,
    )

    def _handle_signal(signum, frame):
        log.info("Received signal %s, shutting down", signum)
        bridge.request_stop()

    signal.signal(signal.SIGINT, _handle_signal)
    signal.signal(signal.SIGTERM, _handle_signal)

    try:
        bridge.start(cfg.broker, cfg.port)
    except OSError as exc:
        log.error("Unable to connect to MQTT broker %s:%s: %s", cfg.broker, cfg.port, exc)
        device.close()
        sys.exit(1)

    bridge.wait()
    bridge.stop()


if __name__ == "__main__":
    main()
