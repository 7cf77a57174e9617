"""
Abstract base classes and common types for RabbitMQ messaging.

This module defines the interfaces for message publishers and subscribers,
along with the message type passed between the transport and the framing code.
"""

import abc
from typing import NamedTuple


class Message(NamedTuple):
    """A message received from, or bound for, a subject. The payload is opaque."""

    subject: str
    payload: bytes


class MessagePublisherInterface(abc.ABC):
    @abc.abstractmethod
    def publish(self, subject: str, payload: bytes) -> None:
        pass


class MessageSubscriberInterface(abc.ABC):
    @abc.abstractmethod
    def start(self) -> None:
        """
        Begin delivering messages to the subscriber callback.

        Non-blocking
        """
        pass

    @abc.abstractmethod
    def shutdown(self) -> None:
        """
        Stop delivery and release the subscription's channel.
        """
        pass
