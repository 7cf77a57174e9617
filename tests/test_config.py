"""
Tests for resolving command line values into a CatConfig.
"""

import dataclasses
import unittest

import pytest

from buscat.config import (
    DEFAULT_CLIENT_ID,
    DEFAULT_CLUSTER_ID,
    DEFAULT_SERVER_URL,
    CatConfig,
    Mode,
    resolve_config,
    select_mode,
)
from buscat.exceptions import ConfigError


class TestModeSelection(unittest.TestCase):
    """Test which mode each flag combination selects."""

    def test_listen_wins_over_everything(self):
        self.assertEqual(select_mode(True, "hello", True), Mode.LISTEN)
        self.assertEqual(select_mode(True, None, False), Mode.LISTEN)

    def test_message_selects_explicit(self):
        self.assertEqual(select_mode(False, "hello", False), Mode.PUBLISH_EXPLICIT)

    def test_empty_message_falls_back_to_stdin(self):
        self.assertEqual(select_mode(False, "", False), Mode.PUBLISH_RAW_STDIN)
        self.assertEqual(select_mode(False, "", True), Mode.PUBLISH_BUFFERED_STDIN)

    def test_buffered_flag_splits_stdin_modes(self):
        self.assertEqual(select_mode(False, None, True), Mode.PUBLISH_BUFFERED_STDIN)
        self.assertEqual(select_mode(False, None, False), Mode.PUBLISH_RAW_STDIN)


class TestResolveConfig(unittest.TestCase):
    """Test resolve_config validation and normalisation."""

    def test_defaults(self):
        config = resolve_config("orders")

        self.assertEqual(config.subject, "orders")
        self.assertEqual(config.mode, Mode.PUBLISH_RAW_STDIN)
        self.assertEqual(config.server_urls, DEFAULT_SERVER_URL)
        self.assertEqual(config.cluster_id, DEFAULT_CLUSTER_ID)
        self.assertEqual(config.client_id, DEFAULT_CLIENT_ID)
        self.assertIsNone(config.explicit_message)
        self.assertFalse(config.buffered)
        self.assertFalse(config.verbose)

    def test_message_flag(self):
        config = resolve_config("greet", message="hello")

        self.assertEqual(config.mode, Mode.PUBLISH_EXPLICIT)
        self.assertEqual(config.explicit_message, "hello")
        self.assertFalse(config.buffered)

    def test_positional_args_are_joined_and_force_buffered(self):
        config = resolve_config("greet", args=["hello", "world"])

        self.assertEqual(config.mode, Mode.PUBLISH_EXPLICIT)
        self.assertEqual(config.explicit_message, "hello world")
        self.assertTrue(config.buffered)

    def test_positional_args_replace_message_flag(self):
        config = resolve_config("greet", message="ignored", args=["hello"])

        self.assertEqual(config.explicit_message, "hello")

    def test_positional_args_ignored_when_listening(self):
        config = resolve_config("greet", listen=True, args=["hello", "world"])

        self.assertEqual(config.mode, Mode.LISTEN)
        self.assertIsNone(config.explicit_message)
        self.assertFalse(config.buffered)

    def test_listen_keeps_buffered_flag(self):
        config = resolve_config("greet", listen=True, buffered=True)

        self.assertEqual(config.mode, Mode.LISTEN)
        self.assertTrue(config.buffered)

    def test_missing_subject(self):
        with self.assertRaises(ConfigError) as ctx:
            resolve_config("")
        self.assertEqual(str(ctx.exception), "missing subject")

        with self.assertRaises(ConfigError):
            resolve_config(None, listen=True)

    def test_transport_settings_pass_through(self):
        config = resolve_config(
            "orders",
            server_urls="amqp://a/%2F,amqp://b/%2F",
            cluster_id="prod",
            client_id="me",
            verbose=True,
        )

        self.assertEqual(config.server_urls, "amqp://a/%2F,amqp://b/%2F")
        self.assertEqual(config.cluster_id, "prod")
        self.assertEqual(config.client_id, "me")
        self.assertTrue(config.verbose)

    def test_config_is_immutable(self):
        config = resolve_config("orders")

        with self.assertRaises(dataclasses.FrozenInstanceError):
            config.subject = "other"  # type: ignore[misc]


@pytest.mark.parametrize("subject", ["orders.*", "orders.>", "*", ">", "a.*.c"])
def test_wildcard_rejected_when_publishing(subject):
    with pytest.raises(ConfigError, match="wildcard subject not allowed when publishing"):
        resolve_config(subject)

    with pytest.raises(ConfigError):
        resolve_config(subject, message="hello")

    with pytest.raises(ConfigError):
        resolve_config(subject, buffered=True)


@pytest.mark.parametrize("subject", ["orders.*", "orders.>", "*.created", "orders"])
def test_wildcard_accepted_when_listening(subject):
    config = resolve_config(subject, listen=True)

    assert config.mode is Mode.LISTEN
    assert config.subject == subject


def test_plain_subject_accepted_in_every_publish_mode():
    assert resolve_config("orders.created").mode is Mode.PUBLISH_RAW_STDIN
    assert resolve_config("orders.created", buffered=True).mode is Mode.PUBLISH_BUFFERED_STDIN
    assert resolve_config("orders.created", message="x").mode is Mode.PUBLISH_EXPLICIT


def test_mode_is_publish():
    assert not Mode.LISTEN.is_publish
    assert all(
        mode.is_publish
        for mode in (
            Mode.PUBLISH_EXPLICIT,
            Mode.PUBLISH_BUFFERED_STDIN,
            Mode.PUBLISH_RAW_STDIN,
        )
    )


def test_catconfig_direct_construction():
    config = CatConfig(subject="orders", mode=Mode.LISTEN)

    assert config.server_urls == DEFAULT_SERVER_URL
    assert config.explicit_message is None
