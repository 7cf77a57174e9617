"""
Mode dispatch for a buscat invocation.

CatService opens one connection, runs the mode chosen by the resolved
configuration, and closes the connection on the way out of every publish
mode. Errors are raised, never turned into exits here.
"""

import logging
import sys
import threading
from typing import BinaryIO, Callable, Optional

from buscat.config import CatConfig, Mode
from buscat.exceptions import TransportError
from buscat.framing import iter_lines, make_writer, read_all
from buscat.repository.rabbitmq import BusConnection, connect

logger = logging.getLogger(__name__)

Connector = Callable[[str, str, str], BusConnection]


class CatService:
    """
    Moves bytes between standard streams and the bus in one of four modes.
    """

    def __init__(
        self,
        config: CatConfig,
        connector: Connector = connect,
        stdin: Optional[BinaryIO] = None,
        stdout: Optional[BinaryIO] = None,
        stop_event: Optional[threading.Event] = None,
    ) -> None:
        """
        :param config: Resolved configuration for this invocation.
        :param connector: Opens the bus connection from (server_urls, cluster_id, client_id).
        :param stdin: Binary input for the stdin publish modes, defaults to sys.stdin.
        :param stdout: Binary output for listen mode, defaults to sys.stdout.
        :param stop_event: Set to end listen mode.
        """
        self._config = config
        self._connector = connector
        self._stdin = stdin
        self._stdout = stdout
        self._stop_event = stop_event if stop_event is not None else threading.Event()
        self._subscription_error: Optional[Exception] = None

        self._handlers = {
            Mode.LISTEN: self._listen,
            Mode.PUBLISH_EXPLICIT: self._publish_explicit,
            Mode.PUBLISH_BUFFERED_STDIN: self._publish_buffered_stdin,
            Mode.PUBLISH_RAW_STDIN: self._publish_raw_stdin,
        }

    @property
    def config(self) -> CatConfig:
        return self._config

    def stop(self) -> None:
        """Ask a listening service to return."""
        self._stop_event.set()

    def run(self) -> int:
        """
        Run the configured mode.

        :return: Number of messages published, 0 for listen mode.
        :raises TransportError: On any connect, publish or subscribe failure.
        """
        handler = self._handlers[self._config.mode]
        logger.debug("Running in %s mode", self._config.mode.value)

        with self._connector(
            self._config.server_urls,
            self._config.cluster_id,
            self._config.client_id,
        ) as connection:
            logger.info("Connected to %s", connection.connected_url)
            return handler(connection)

    def _input(self) -> BinaryIO:
        return self._stdin if self._stdin is not None else sys.stdin.buffer

    def _output(self) -> BinaryIO:
        return self._stdout if self._stdout is not None else sys.stdout.buffer

    def _listen(self, connection: BusConnection) -> int:
        subject = self._config.subject
        logger.info(
            "Listening on [%s], buffered %s", subject, self._config.buffered
        )
        connection.subscribe(
            subject,
            make_writer(self._config.buffered, self._output()),
            on_error=self._on_subscription_error,
        )

        self._stop_event.wait()

        if self._subscription_error is not None:
            raise TransportError(
                f"subscription to [{subject}] failed", self._subscription_error
            )
        logger.info("Stopped listening on [%s]", subject)
        return 0

    def _on_subscription_error(self, error: Exception) -> None:
        self._subscription_error = error
        self._stop_event.set()

    def _publish_explicit(self, connection: BusConnection) -> int:
        subject = self._config.subject
        message = self._config.explicit_message
        connection.publish(subject, message.encode("utf-8"))
        logger.info("[%s] Wrote '%s'", subject, message)
        return 1

    def _publish_buffered_stdin(self, connection: BusConnection) -> int:
        subject = self._config.subject
        count = 0
        for line in iter_lines(self._input()):
            connection.publish(subject, line)
            count += 1
        logger.info("[%s] Wrote %d lines", subject, count)
        return count

    def _publish_raw_stdin(self, connection: BusConnection) -> int:
        subject = self._config.subject
        payload = read_all(self._input())
        connection.publish(subject, payload)
        logger.info("[%s] Wrote %d bytes", subject, len(payload))
        return 1
