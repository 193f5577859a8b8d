"""
Logging for somweb-bridge.

Every module logs through the one ``"somweb-bridge"`` logger; the CLI calls
``setup_logging`` once at start-up to attach a coloured console handler.
"""

import logging

import colorlog

log = logging.getLogger("somweb-bridge")

_FORMAT = "%(log_color)s%(asctime)s [%(levelname)s]%(reset)s %(message)s"
_LEVEL_COLOURS = {
    "DEBUG":    "cyan",
    "INFO":     "green",
    "WARNING":  "yellow",
    "ERROR":    "red",
    "CRITICAL": "bold_red",
}


def setup_logging(debug: bool = False) -> None:
    """
    Attach a colorlog console handler to the bridge logger.

    Calling it again replaces the handler rather than adding a second one.
    With *debug* the bridge logs every door snapshot and command response,
    and urllib3 is raised to DEBUG too so each request line to the gateway
    (including its webtoken query string) shows up in the output.
    """
    handler = colorlog.StreamHandler()
    handler.setFormatter(
        colorlog.ColoredFormatter(_FORMAT, datefmt="%H:%M:%S", log_colors=_LEVEL_COLOURS)
    )
    log.handlers[:] = [handler]
    log.setLevel(logging.DEBUG if debug else logging.INFO)

    if debug:
        logging.getLogger("urllib3").setLevel(logging.DEBUG)
