"""In-process message passing between numbered ranks, with tagged point-to-point messages."""

from __future__ import annotations

import threading
from collections import deque
from dataclasses import dataclass
from typing import Any, Deque, List, Optional

from shardkv.types import RequestType, TwoPC

ANY_SOURCE = -1

_INT_MIN = -(2**31)
_INT_MAX = 2**31 - 1


class CommunicatorClosed(Exception):
    """Raised when sending or waiting on a world that has been closed."""


@dataclass(eq=False)
class _Envelope:
    source: int
    tag: int
    payload: Any


class World:
    """A fixed group of ranks, each with its own mailbox."""

    def __init__(self, size: int) -> None:
        if size < 1:
            raise ValueError(f"world size must be positive, got {size}")
        self.size = size
        self._cond = threading.Condition()
        self._mailboxes: List[Deque[_Envelope]] = [deque() for _ in range(size)]
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def comm(self, rank: int) -> "Communicator":
        """The communicator endpoint of ``rank``."""
        return Communicator(self, rank)

    def close(self) -> None:
        """Stop the world: further sends fail and idle receivers are woken with an error."""
        with self._cond:
            self._closed = True
            self._cond.notify_all()

    def __enter__(self) -> "World":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _check_rank(self, rank: int) -> None:
        if not 0 <= rank < self.size:
            raise ValueError(f"rank {rank} outside world of size {self.size}")

    def _post(self, source: int, dest: int, tag: int, payload: Any) -> None:
        self._check_rank(dest)
        with self._cond:
            if self._closed:
                raise CommunicatorClosed("world is closed")
            self._mailboxes[dest].append(_Envelope(source, tag, payload))
            self._cond.notify_all()

    def _take(self, dest: int, source: int, tag: int) -> Any:
        if source != ANY_SOURCE:
            self._check_rank(source)
        mailbox = self._mailboxes[dest]
        with self._cond:
            while True:
                envelope = next(
                    (
                        env
                        for env in mailbox
                        if env.tag == tag and source in (ANY_SOURCE, env.source)
                    ),
                    None,
                )
                if envelope is not None:
                    mailbox.remove(envelope)
                    return envelope.payload
                if self._closed:
                    raise CommunicatorClosed("world is closed")
                self._cond.wait()


def _check_int(value: int) -> int:
    value = int(value)
    if not _INT_MIN <= value <= _INT_MAX:
        raise OverflowError(f"{value} does not fit in a 32-bit integer")
    return value


class Communicator:
    """The endpoint one rank uses to send and receive typed values."""

    def __init__(self, world: World, rank: int) -> None:
        world._check_rank(rank)
        self.world = world
        self.rank = rank

    @property
    def size(self) -> int:
        return self.world.size

    def send(self, value: Any, dest: int, tag: int) -> None:
        """Deliver ``value`` to ``dest`` under ``tag`` without waiting for it to be received."""
        self.world._post(self.rank, dest, tag, value)

    def receive(self, source: int, tag: int) -> Any:
        """Wait for the oldest message from ``source`` (or :data:`ANY_SOURCE`) with ``tag``."""
        return self.world._take(self.rank, source, tag)

    def send_string(self, text: str, dest: int, tag: int) -> None:
        """Send the byte length under ``2*tag`` and, if non-empty, the bytes under ``2*tag+1``."""
        data = text.encode("utf-8")
        self.send(_check_int(len(data)), dest, tag * 2)
        if data:
            self.send(data, dest, tag * 2 + 1)

    def receive_string(self, source: int, tag: int) -> str:
        length = int(self.receive(source, tag * 2))
        if length > 0:
            data = self.receive(source, tag * 2 + 1)
            return bytes(data[:length]).decode("utf-8")
        return ""

    def send_bool(self, value: bool, dest: int, tag: int) -> None:
        self.send(bool(value), dest, tag)

    def receive_bool(self, source: int, tag: int) -> bool:
        return bool(self.receive(source, tag))

    def send_int(self, value: int, dest: int, tag: int) -> None:
        self.send(_check_int(value), dest, tag)

    def receive_int(self, source: int, tag: int) -> int:
        return int(self.receive(source, tag))

    def send_enum(self, value: Optional[int], dest: int, tag: int) -> None:
        """Send an enum as its integer value; ``None`` goes as zero."""
        self.send(_check_int(0 if value is None else value), dest, tag)

    def receive_request_type(self, source: int, tag: int) -> Optional[RequestType]:
        value = self.receive_int(source, tag)
        return RequestType(value) if value else None

    def receive_phase_type(self, source: int, tag: int) -> Optional[TwoPC]:
        value = self.receive_int(source, tag)
        return TwoPC(value) if value else None