"""
RabbitMQ publisher implementation.

Publishes opaque payloads to the bus exchange, using the subject as the
routing key.
"""

import logging

from amqpstorm import Channel, Connection

from buscat.repository.rabbitmq.base import MessagePublisherInterface
from buscat.repository.rabbitmq.config import ExchangeConfig
from buscat.repository.rabbitmq.util import declare_exchange

logger = logging.getLogger(__name__)


class RabbitPublisher(MessagePublisherInterface):
    """
    Publishes messages to a single topic exchange over one channel.
    """

    def __init__(
        self,
        connection: Connection,
        exchange_config: ExchangeConfig,
    ) -> None:
        self._exchange_config = exchange_config
        self._channel: Channel = connection.channel()
        declare_exchange(self._channel, self._exchange_config)

        logger.debug("RabbitPublisher initialized with channel %s", self._channel)

    def publish(self, subject: str, payload: bytes) -> None:
        """
        Publish a payload to the exchange.

        :param subject: Routing key for the message.
        :param payload: Message body, sent unchanged.
        """
        self._channel.basic.publish(
            body=payload,
            routing_key=subject,
            exchange=self._exchange_config.name,
        )
        logger.debug(
            "Message of %d bytes published to exchange %s with routing key %s",
            len(payload),
            self._exchange_config.name,
            subject,
        )

    def shutdown(self) -> None:
        """
        Shutdown the publisher by closing the channel.
        """
        try:
            if self._channel.is_open:
                self._channel.close()
                logger.debug("Publisher channel closed.")
        except Exception as e:
            logger.debug("Error closing publisher channel: %s", e)
