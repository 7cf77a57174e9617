import logging
from typing import Optional

from buscat.exceptions import TransportError
from buscat.repository.rabbitmq.config import (
    BindingConfig,
    ExchangeConfig,
    SubjectWildcard,
    TopicWildcard,
)

logger = logging.getLogger(__name__)

SUBJECT_SEPARATOR = "."


def subject_to_routing_key(subject: str) -> str:
    """
    Translate a subject pattern into an AMQP topic binding key.

    '*' matches one token in both syntaxes. A '>' token matches the rest of
    the subject and becomes '#'.

    :param subject: The subject, possibly containing wildcard tokens.
    :return: The equivalent routing key.
    """
    tokens = subject.split(SUBJECT_SEPARATOR)
    return SUBJECT_SEPARATOR.join(
        TopicWildcard.ALL.value if token == SubjectWildcard.TAIL.value else token
        for token in tokens
    )


def split_server_urls(server_urls: Optional[str]) -> list[str]:
    """
    Split a comma-separated server list, dropping blanks.

    :param server_urls: e.g. "amqp://a:5672/%2F, amqp://b:5672/%2F"
    :return: The individual URIs in the order given.
    """
    if server_urls is None:
        return []
    return [url.strip() for url in server_urls.split(",") if url.strip()]


def redact_url(url: str) -> str:
    """Hide the password portion of a URI before it is logged."""
    scheme, sep, rest = url.partition("://")
    if not sep or "@" not in rest:
        return url
    credentials, _, host = rest.rpartition("@")
    username = credentials.split(":", 1)[0]
    return f"{scheme}://{username}:***@{host}"


def declare_exchange(channel, exchange_config: ExchangeConfig) -> None:
    """
    Declare an exchange.

    :param channel: The AMQP channel to use for declaration.
    :param exchange_config: Name and settings of the exchange.
    """
    channel.exchange.declare(
        exchange=exchange_config.name,
        exchange_type=exchange_config.exchange_type,
        durable=exchange_config.durable,
        auto_delete=exchange_config.auto_delete,
    )
    logger.debug("Exchange declared: %s", exchange_config.name)


def declare_queue(
    channel,
    queue_name: Optional[str] = None,
    durable: bool = False,
    auto_delete: bool = False,
    exclusive: bool = False,
) -> str:
    """
    Declare a queue.

    :param channel: The AMQP channel to use for declaration.
    :param queue_name: Name of the queue. If None, a random name will be generated.
    :return: The name of the declared queue.
    :raises TransportError: If the broker returns no declaration result.
    """
    result = channel.queue.declare(
        queue=queue_name or "",
        durable=durable,
        auto_delete=auto_delete,
        exclusive=exclusive,
    )
    if not result:
        logger.error("Unable to declare queue with name %s", queue_name)
        raise TransportError("unable to declare queue")

    declared_queue_name = result["queue"]
    logger.debug("Queue declared: %s", declared_queue_name)
    return declared_queue_name


def bind_queue(channel, queue_name: str, binding_config: BindingConfig) -> None:
    """
    Bind a queue to an exchange with each of the binding's routing keys.

    :param channel: The AMQP channel to use for binding.
    :param queue_name: Name of the queue to bind.
    :param binding_config: Exchange and routing keys to bind with.
    """
    for routing_key in binding_config.routing_keys:
        channel.queue.bind(
            exchange=binding_config.exchange.name,
            queue=queue_name,
            routing_key=routing_key,
        )
        logger.debug(
            "Queue %s bound to exchange %s with routing key '%s'",
            queue_name,
            binding_config.exchange.name,
            routing_key,
        )
