"""
RabbitMQ connection for a single buscat invocation.

There is no reconnection: any failure to connect, publish or subscribe is
raised as a TransportError and ends the invocation.
"""

import logging
from typing import Callable, Optional

from amqpstorm import AMQPError, Connection, UriConnection

from buscat.exceptions import TransportError
from buscat.repository.rabbitmq.base import Message
from buscat.repository.rabbitmq.config import (
    BindingConfig,
    ExchangeConfig,
    listen_queue_config,
)
from buscat.repository.rabbitmq.publisher import RabbitPublisher
from buscat.repository.rabbitmq.subscriber import RabbitSubscriber
from buscat.repository.rabbitmq.util import (
    redact_url,
    split_server_urls,
    subject_to_routing_key,
)

logger = logging.getLogger(__name__)


def connect(server_urls: str, cluster_id: str, client_id: str) -> "BusConnection":
    """
    Open a connection to the first reachable server.

    :param server_urls: Comma-separated AMQP URIs, tried in order.
    :param cluster_id: Name of the topic exchange that carries every subject.
    :param client_id: Reported to the broker as the connection name.
    :raises TransportError: If no server accepts the connection.
    """
    urls = split_server_urls(server_urls)
    if not urls:
        raise TransportError("no server URL given")

    last_error: Optional[Exception] = None
    for url in urls:
        try:
            connection = UriConnection(
                url,
                client_properties={"connection_name": client_id},
            )
        except (AMQPError, ValueError) as e:
            logger.debug("Unable to connect to %s: %s", redact_url(url), e)
            last_error = e
            continue

        return BusConnection(
            connection,
            exchange_config=ExchangeConfig(name=cluster_id),
            connected_url=url,
        )

    raise TransportError("unable to connect", last_error)


class BusConnection:
    """
    Publish and subscribe over one AMQP connection.

    The exchange named by the cluster id carries every subject; the subject
    is the routing key.
    """

    def __init__(
        self,
        connection: Connection,
        exchange_config: ExchangeConfig,
        connected_url: Optional[str] = None,
    ):
        self._connection = connection
        self._exchange_config = exchange_config
        self._connected_url = connected_url
        self._publisher: Optional[RabbitPublisher] = None
        self._subscribers: list[RabbitSubscriber] = []

    @property
    def connected_url(self) -> Optional[str]:
        if self._connected_url is None:
            return None
        return redact_url(self._connected_url)

    @property
    def is_open(self) -> bool:
        return self._connection.is_open

    def publish(self, subject: str, payload: bytes) -> None:
        """
        Publish one message.

        :raises TransportError: If the broker rejects the publish or the connection is gone.
        """
        try:
            if self._publisher is None:
                self._publisher = RabbitPublisher(self._connection, self._exchange_config)
            self._publisher.publish(subject, payload)
        except AMQPError as e:
            raise TransportError(f"unable to publish to [{subject}]", e) from e

    def subscribe(
        self,
        subject: str,
        on_message: Callable[[Message], None],
        on_error: Optional[Callable[[Exception], None]] = None,
    ) -> RabbitSubscriber:
        """
        Start delivering messages whose subject matches a pattern.

        :param subject: Subject or wildcard pattern.
        :param on_message: Called on the consumer thread for each message, in order.
        :param on_error: Called on the consumer thread if consuming fails.
        :raises TransportError: If the subscription cannot be set up.
        """
        binding = BindingConfig(
            exchange=self._exchange_config,
            routing_keys=[subject_to_routing_key(subject)],
        )
        subscriber = RabbitSubscriber(
            self._connection,
            binding_config=binding,
            queue_config=listen_queue_config(),
            on_message=on_message,
            on_error=on_error,
        )
        try:
            subscriber.start()
        except (AMQPError, TransportError) as e:
            raise TransportError(f"unable to subscribe to [{subject}]", e) from e
        self._subscribers.append(subscriber)
        return subscriber

    def close(self) -> None:
        """Close subscriptions, the publisher channel and the connection."""
        for subscriber in self._subscribers:
            subscriber.shutdown()
        self._subscribers.clear()

        if self._publisher is not None:
            self._publisher.shutdown()
            self._publisher = None

        try:
            if self._connection.is_open:
                self._connection.close()
        except AMQPError as e:
            logger.debug("Error closing connection: %s", e)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
