"""
somweb_bridge.bridge
====================
Connects a DeviceSession to an MQTT broker.

* Every ``interval`` seconds the door states are fetched and published to
  ``<prefix>/door/<id>`` as ``"1"`` (closed) or ``"0"`` (open).
* Messages on ``<prefix>/open/<id>``, ``<prefix>/close/<id>`` and
  ``<prefix>/toggle/<id>`` with payload ``"1"`` run the matching door
  operation.

The poll thread and paho's network thread share one DeviceSession, whose
webtoken rotates on every request.  All session calls therefore go through
``self.lock`` so exactly one request is in flight at a time.
"""

from __future__ import annotations

import logging
import threading

import paho.mqtt.client as mqtt

from .client import DeviceSession
from .config import (
    DOOR_IDS, DEFAULT_POLL_INTERVAL, DEFAULT_TOPIC_PREFIX,
    MQTT_CLIENT_ID, MQTT_KEEPALIVE, TRIGGER_PAYLOAD,
)
from .doors import state_payload
from .errors import SomwebError

log = logging.getLogger("somweb-bridge")

ACTIONS = ("open", "close", "toggle")


def build_mqtt_client(username: str = "", password: str = "") -> mqtt.Client:
    client = mqtt.Client(
        callback_api_version=mqtt.CallbackAPIVersion.VERSION2,
        client_id=MQTT_CLIENT_ID,
    )
    if username:
        client.username_pw_set(username, password or None)
    return client


class Bridge:
    """Polls the gateway and routes bus commands to it."""

    def __init__(
        self,
        device: DeviceSession,
        mqtt_client: mqtt.Client,
        interval: float = DEFAULT_POLL_INTERVAL,
        topic_prefix: str = DEFAULT_TOPIC_PREFIX,
    ) -> None:
        self.device = device
        self.mqtt = mqtt_client
        self.interval = interval
        self.prefix = topic_prefix.rstrip("/")
        self.lock = threading.Lock()

        self._stop = threading.Event()
        self._poll_thread: "threading.Thread | None" = None

        self.mqtt.on_connect = self._on_connect
        self.mqtt.on_disconnect = self._on_disconnect
        self.mqtt.on_message = self._on_message
        for action in ACTIONS:
            self.mqtt.message_callback_add(
                f"{self.prefix}/{action}/#", self._make_action_handler(action)
            )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self, broker: str, port: int, keepalive: int = MQTT_KEEPALIVE) -> None:
        log.info("Connecting to MQTT broker %s:%s", broker, port)
        self.mqtt.connect(broker, port, keepalive=keepalive)
        self.mqtt.loop_start()
        self._stop.clear()
        self._poll_thread = threading.Thread(
            target=self._poll_loop, name="somweb-poll", daemon=True
        )
        self._poll_thread.start()

    def stop(self) -> None:
        """
        Stop polling, wait for any in-flight gateway call, then disconnect.

        The broker connection is torn down without holding the lock: paho's
        network thread runs the command handlers, and ``loop_stop()`` joins
        that thread.  Handlers that reach the lock after the stop flag is set
        return without touching the device.
        """
        self._stop.set()
        if self._poll_thread is not None:
            self._poll_thread.join()
            self._poll_thread = None
        with self.lock:
            log.debug("No gateway call in flight, disconnecting")
        self.mqtt.disconnect()
        self.mqtt.loop_stop()
        with self.lock:
            self.device.close()
        log.info("Bridge stopped")

    def wait(self) -> None:
        """Block until stop() is requested from another thread."""
        self._stop.wait()

    def request_stop(self) -> None:
        self._stop.set()

    # ------------------------------------------------------------------
    # Polling
    # ------------------------------------------------------------------

    def poll_once(self) -> None:
        """Fetch all door states and publish one message per door."""
        with self.lock:
            states = self.device.get_door_states()
        for door in DOOR_IDS:
            self.mqtt.publish(
                f"{self.prefix}/door/{door}",
                state_payload(states.get(door, False)),
                qos=0,
                retain=False,
            )

    def _poll_loop(self) -> None:
        while not self._stop.wait(self.interval):
            try:
                self.poll_once()
            except SomwebError as exc:
                log.error("Error polling door states: %s", exc)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def handle_command(self, action: str, door: str, payload: str) -> bool:
        """
        Run *action* on *door* if *payload* is the trigger value.

        Returns True when the device operation ran, False when the payload
        was ignored or the bridge is shutting down.  Device errors propagate.
        """
        if payload != TRIGGER_PAYLOAD:
            log.debug("Ignoring %s/%s with payload %r", action, door, payload)
            return False
        operation = {
            "open": self.device.open_door,
            "close": self.device.close_door,
            "toggle": self.device.toggle_door,
        }[action]
        with self.lock:
            if self._stop.is_set():
                log.info("Shutting down, dropping %s for door %s", action, door)
                return False
            operation(door)
        return True

    def _make_action_handler(self, action: str):
        topic_base = f"{self.prefix}/{action}/"

        def handler(client, userdata, msg):
            door = msg.topic[len(topic_base):]
            payload = msg.payload.decode("utf-8", errors="replace")
            try:
                self.handle_command(action, door, payload)
            except SomwebError as exc:
                log.error("Error running %s on door %s: %s", action, door, exc)

        return handler

    # ------------------------------------------------------------------
    # paho callbacks
    # ------------------------------------------------------------------

    def _on_connect(self, client, userdata, flags, reason_code, properties=None):
        log.info("Connected to MQTT broker (rc=%s)", reason_code)
        # Subscribing here re-establishes subscriptions after a reconnect.
        client.subscribe([(f"{self.prefix}/{action}/#", 0) for action in ACTIONS])

    def _on_disconnect(self, client, userdata, flags, reason_code, properties=None):
        if reason_code != 0:
            log.warning("MQTT connection lost: %s", reason_code)

    def _on_message(self, client, userdata, msg):
        log.debug("Received message %r on %s", msg.payload, msg.topic)
