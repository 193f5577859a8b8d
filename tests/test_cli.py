"""
Tests for configuration loading and the command-line front end.
"""

import unittest
from unittest.mock import patch

from somweb_bridge.cli import config_from_args, main, parse_args
from somweb_bridge.config import BridgeConfig, DEFAULT_MQTT_PORT
from somweb_bridge.errors import AuthError

ENV = {
    "SOMWEB_HOST": "192.168.1.50",
    "SOMWEB_USERNAME": "alice",
    "SOMWEB_PASSWORD": "s3cret",
    "MQTT_BROKER": "mqtt.local",
    "MQTT_PORT": "1884",
    "MQTT_USER": "bridge",
    "MQTT_PASS": "pw",
}


class TestBridgeConfig(unittest.TestCase):
    def test_from_env(self):
        cfg = BridgeConfig.from_env(ENV)
        self.assertEqual(cfg.host, "192.168.1.50")
        self.assertEqual(cfg.username, "alice")
        self.assertEqual(cfg.password, "s3cret")
        self.assertEqual(cfg.broker, "mqtt.local")
        self.assertEqual(cfg.port, 1884)
        self.assertEqual(cfg.mqtt_user, "bridge")
        self.assertEqual(cfg.mqtt_password, "pw")

    def test_defaults(self):
        cfg = BridgeConfig.from_env({})
        self.assertEqual(cfg.broker, "localhost")
        self.assertEqual(cfg.port, DEFAULT_MQTT_PORT)
        self.assertEqual(cfg.interval, 5.0)
        self.assertIsNone(cfg.timeout)
        self.assertEqual(cfg.missing(), ["host", "username"])

    def test_empty_port_uses_default(self):
        cfg = BridgeConfig.from_env({"MQTT_PORT": ""})
        self.assertEqual(cfg.port, DEFAULT_MQTT_PORT)

    def test_non_numeric_port(self):
        with self.assertRaises(ValueError) as ctx:
            BridgeConfig.from_env({"MQTT_PORT": "mqtt"})
        self.assertIn("MQTT_PORT", str(ctx.exception))

    def test_missing_ignores_password(self):
        cfg = BridgeConfig(host="10.0.0.2", username="alice")
        self.assertEqual(cfg.missing(), [])


class TestParseArgs(unittest.TestCase):
    def test_env_defaults(self):
        args = parse_args([], env=ENV)
        cfg = config_from_args(args)
        self.assertEqual(cfg.host, "192.168.1.50")
        self.assertEqual(cfg.username, "alice")
        self.assertEqual(cfg.port, 1884)
        self.assertFalse(cfg.strict_doors)

    def test_flags_override_env(self):
        args = parse_args(
            ["--host", "10.0.0.2", "--port", "1999", "--interval", "2.5",
             "--timeout", "4", "--strict-doors", "--topic-prefix", "garage"],
            env=ENV,
        )
        cfg = config_from_args(args)
        self.assertEqual(cfg.host, "10.0.0.2")
        self.assertEqual(cfg.port, 1999)
        self.assertEqual(cfg.interval, 2.5)
        self.assertEqual(cfg.timeout, 4.0)
        self.assertTrue(cfg.strict_doors)
        self.assertEqual(cfg.topic_prefix, "garage")

    def test_missing_host_is_usage_error(self):
        with patch("sys.stderr"):
            with self.assertRaises(SystemExit):
                parse_args([], env={"SOMWEB_USERNAME": "alice"})

    def test_missing_user_is_usage_error(self):
        with patch("sys.stderr"):
            with self.assertRaises(SystemExit):
                parse_args(["--host", "10.0.0.2"], env={})

    def test_missing_setting_reported_by_flag(self):
        with patch("sys.stderr") as stderr:
            with self.assertRaises(SystemExit) as ctx:
                parse_args(["--user", "alice"], env={})
        self.assertEqual(ctx.exception.code, 2)
        written = "".join(c.args[0] for c in stderr.write.call_args_list)
        self.assertIn("--host (or SOMWEB_HOST) is required", written)

    def test_bad_env_port_is_usage_error(self):
        with patch("sys.stderr") as stderr:
            with self.assertRaises(SystemExit) as ctx:
                parse_args([], env={**ENV, "MQTT_PORT": "mqtt"})
        self.assertEqual(ctx.exception.code, 2)
        written = "".join(c.args[0] for c in stderr.write.call_args_list)
        self.assertIn("MQTT_PORT must be an integer", written)

    def test_port_flag_overrides_bad_env_port(self):
        args = parse_args(["--port", "1885"], env={**ENV, "MQTT_PORT": "mqtt"})
        self.assertEqual(args.port, 1885)


class TestMain(unittest.TestCase):
    @patch("somweb_bridge.cli.setup_logging")
    @patch("somweb_bridge.cli.DeviceSession", side_effect=AuthError("no webtoken"))
    def test_auth_failure_exits(self, mock_device, mock_logging):
        with patch.dict("os.environ", ENV, clear=True):
            with self.assertRaises(SystemExit) as ctx:
                main([])
        self.assertEqual(ctx.exception.code, 1)

    @patch("somweb_bridge.cli.signal.signal")
    @patch("somweb_bridge.cli.setup_logging")
    @patch("somweb_bridge.cli.build_mqtt_client")
    @patch("somweb_bridge.cli.Bridge")
    @patch("somweb_bridge.cli.DeviceSession")
    def test_runs_bridge(self, mock_device, mock_bridge, mock_mqtt, mock_logging, mock_signal):
        with patch.dict("os.environ", ENV, clear=True):
            main(["--timeout", "3"])

        mock_device.assert_called_once_with(
            "192.168.1.50", "alice", "s3cret", timeout=3.0, strict_doors=False,
        )
        mock_mqtt.assert_called_once_with("bridge", "pw")
        bridge = mock_bridge.return_value
        bridge.start.assert_called_once_with("mqtt.local", 1884)
        bridge.wait.assert_called_once_with()
        bridge.stop.assert_called_once_with()

    @patch("somweb_bridge.cli.signal.signal")
    @patch("somweb_bridge.cli.setup_logging")
    @patch("somweb_bridge.cli.build_mqtt_client")
    @patch("somweb_bridge.cli.Bridge")
    @patch("somweb_bridge.cli.DeviceSession")
    @patch("somweb_bridge.cli.getpass.getpass", return_value="typed")
    def test_prompts_for_password(self, mock_getpass, mock_device, *mocks):
        env = dict(ENV)
        del env["SOMWEB_PASSWORD"]
        with patch.dict("os.environ", env, clear=True):
            main([])
        mock_getpass.assert_called_once()
        self.assertEqual(mock_device.call_args.args[2], "typed")

    @patch("somweb_bridge.cli.signal.signal")
    @patch("somweb_bridge.cli.setup_logging")
    @patch("somweb_bridge.cli.build_mqtt_client")
    @patch("somweb_bridge.cli.Bridge")
    @patch("somweb_bridge.cli.DeviceSession")
    def test_broker_unreachable_exits(self, mock_device, mock_bridge, *mocks):
        mock_bridge.return_value.start.side_effect = ConnectionRefusedError("refused")
        with patch.dict("os.environ", ENV, clear=True):
            with self.assertRaises(SystemExit) as ctx:
                main([])
        self.assertEqual(ctx.exception.code, 1)
        mock_device.return_value.close.assert_called_once_with()


if __name__ == "__main__":
    unittest.main()
