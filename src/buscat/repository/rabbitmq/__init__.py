"""
RabbitMQ messaging implementation.

Public API:
    - connect: Open a BusConnection to the first reachable server
    - BusConnection: Publish and subscribe by subject
    - Message: A subject and its opaque payload
    - RabbitPublisher, RabbitSubscriber: Channel-level publisher and subscriber
"""

from .base import Message, MessagePublisherInterface, MessageSubscriberInterface
from .connection import BusConnection, connect
from .publisher import RabbitPublisher
from .subscriber import RabbitSubscriber

__all__ = [
    # Abstract base classes
    "MessagePublisherInterface",
    "MessageSubscriberInterface",
    # Data types
    "Message",
    # Concrete implementations
    "BusConnection",
    "RabbitPublisher",
    "RabbitSubscriber",
    "connect",
]
