from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class TopicWildcard(Enum):
    # AMQP topic wildcards
    ALL = "#"
    ANY = "*"


class SubjectWildcard(Enum):
    # subject syntax accepted on the command line
    TAIL = ">"
    ANY = "*"


@dataclass
class ExchangeConfig:
    name: str
    exchange_type: str = "topic"
    durable: bool = True
    auto_delete: bool = False


@dataclass
class QueueConfig:
    # empty name lets the broker generate one
    name: str

    durable: bool
    exclusive: bool
    auto_delete: bool

    actual_queue_name: Optional[str] = field(default=None, init=False)

    def build_name(self):
        return self.name


@dataclass
class BindingConfig:
    exchange: ExchangeConfig
    routing_keys: list[str]


def listen_queue_config() -> QueueConfig:
    """Queue for a single listener, removed by the broker when the listener goes away."""
    return QueueConfig(
        name="",
        durable=False,
        exclusive=True,
        auto_delete=True,
    )
