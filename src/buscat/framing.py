"""
Framing between byte streams and bus messages.

Buffered framing maps one line to one message. Raw framing maps the whole
input stream to a single message, and writes each received payload back out
untouched.
"""

import logging
from typing import BinaryIO, Callable, Iterator

from buscat.repository.rabbitmq.base import Message

logger = logging.getLogger(__name__)

LINE_TERMINATOR = b"\n"
CARRIAGE_RETURN = b"\r"


def strip_line_terminator(line: bytes) -> bytes:
    """
    Drop a trailing LF, then one trailing CR, if present.

    A line without an LF only comes from the end of the stream, where a
    dangling CR is dropped as well. A CR anywhere else is kept.
    """
    if line.endswith(LINE_TERMINATOR):
        line = line[:-1]
    if line.endswith(CARRIAGE_RETURN):
        line = line[:-1]
    return line


def iter_lines(stream: BinaryIO) -> Iterator[bytes]:
    """
    Yield each line of a binary stream without its terminator.

    Empty lines are yielded as empty payloads. A final line with no
    terminator is still yielded at end of stream.
    """
    while True:
        line = stream.readline()
        if len(line) == 0:
            return
        yield strip_line_terminator(line)


def read_all(stream: BinaryIO) -> bytes:
    """Read a binary stream to end of stream as a single payload."""
    # the whole input is held in memory before it is published
    return stream.read()


def write_buffered(stream: BinaryIO, payload: bytes) -> None:
    """Write a payload followed by a line terminator."""
    stream.write(payload)
    stream.write(LINE_TERMINATOR)
    stream.flush()


def write_raw(stream: BinaryIO, payload: bytes) -> None:
    """Write a payload exactly as received."""
    stream.write(payload)
    stream.flush()


def make_writer(buffered: bool, stream: BinaryIO) -> Callable[[Message], None]:
    """
    Build the per-message callback for listening.

    :param buffered: Terminate each payload with a line feed.
    :param stream: Binary output stream, normally stdout.
    :return: Callable that writes one received message to the stream.
    """
    write = write_buffered if buffered else write_raw

    def on_message(message: Message) -> None:
        if logger.isEnabledFor(logging.INFO):
            logger.info(
                "[%s] %s",
                message.subject,
                message.payload.decode("utf-8", errors="replace"),
            )
        write(stream, message.payload)

    return on_message
