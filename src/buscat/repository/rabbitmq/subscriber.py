"""
RabbitMQ subscriber implementation.

Consumes from an exclusive queue bound to the bus exchange and hands each
delivery to a callback on a single consumer thread, in delivery order.
"""

import logging
import threading
from typing import Callable, Optional

from amqpstorm import Channel, Connection
from amqpstorm import Message as AmqpMessage

from buscat.repository.rabbitmq.base import Message, MessageSubscriberInterface
from buscat.repository.rabbitmq.config import BindingConfig, QueueConfig
from buscat.repository.rabbitmq.util import bind_queue, declare_exchange, declare_queue

logger = logging.getLogger(__name__)


class RabbitSubscriber(MessageSubscriberInterface):
    """
    Delivers messages matching a binding to a callback.

    The callback runs only on the consumer thread, one message at a time, so
    it is the single writer for whatever it writes to.
    """

    def __init__(
        self,
        connection: Connection,
        binding_config: BindingConfig,
        queue_config: QueueConfig,
        on_message: Callable[[Message], None],
        on_error: Optional[Callable[[Exception], None]] = None,
    ) -> None:
        self._connection = connection
        self._binding_config = binding_config
        self._queue_config = queue_config
        self._on_message = on_message
        self._on_error = on_error

        self._channel: Channel = None
        self._consumer_tag: str = None
        self._consumer_thread: threading.Thread = None

        self._lock = threading.RLock()
        self._is_shutting_down = False
        self.error: Optional[Exception] = None

    @property
    def queue_name(self) -> Optional[str]:
        return self._queue_config.actual_queue_name

    def start(self) -> None:
        """
        Declare and bind the queue, register the consumer and start the
        consumer thread.
        """
        with self._lock:
            self._channel = self._connection.channel()

            # one unacknowledged message at a time keeps delivery serial
            self._channel.basic.qos(prefetch_count=1)

            declare_exchange(self._channel, self._binding_config.exchange)
            self._queue_config.actual_queue_name = declare_queue(
                self._channel,
                queue_name=self._queue_config.build_name(),
                durable=self._queue_config.durable,
                auto_delete=self._queue_config.auto_delete,
                exclusive=self._queue_config.exclusive,
            )
            bind_queue(self._channel, self.queue_name, self._binding_config)

            self._consumer_tag = self._channel.basic.consume(
                callback=self._message_handler,
                queue=self.queue_name,
            )

            self._consumer_thread = threading.Thread(
                target=self._consuming_loop,
                name=f"rmq-subscriber-{self.queue_name}",
                daemon=True,
            )
            self._consumer_thread.start()

        logger.debug("RabbitSubscriber consuming from queue %s", self.queue_name)

    def _consuming_loop(self) -> None:
        try:
            # payloads stay bytes
            self._channel.start_consuming(auto_decode=False)
        except Exception as e:
            if self._is_shutting_down:
                logger.debug("Consuming stopped during shutdown: %s", e)
                return
            self.error = e
            if self._on_error:
                self._on_error(e)
            return

        if not self._is_shutting_down:
            self.error = RuntimeError("consuming stopped unexpectedly")
            if self._on_error:
                self._on_error(self.error)

    def _message_handler(self, message: AmqpMessage) -> None:
        subject = message.method.get("routing_key", "")
        self._on_message(Message(subject=subject, payload=message.body))
        message.ack()

    def shutdown(self) -> None:
        """
        Shutdown the subscriber by cancelling the consumer and closing the channel.
        """
        with self._lock:
            if self._is_shutting_down:
                return
            self._is_shutting_down = True

        if self._channel and self._channel.is_open:
            try:
                self._channel.stop_consuming()
            except Exception as e:
                logger.debug("Error stopping consuming: %s", e)

            try:
                self._channel.close()
            except Exception as e:
                logger.debug("Error closing channel: %s", e)

        if self._consumer_thread and self._consumer_thread.is_alive():
            self._consumer_thread.join(timeout=5.0)

        logger.debug("RabbitSubscriber shutdown complete")
