"""Message kinds, operation enums and the records exchanged between ranks."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional


class MessageType(IntEnum):
    """Base tags of the four kinds of message on the wire."""

    CLIENT_REQUEST = 0
    CLIENT_RESPONSE = 1
    NODE_REQUEST = 2
    NODE_RESPONSE = 3


class RequestType(IntEnum):
    """Operations a client may ask of the store."""

    CREATE = 1
    READ = 2
    UPDATE = 3
    DELETE = 4


class TwoPC(IntEnum):
    """Phases of the two-phase commit protocol."""

    PREPARE = 1
    COMMIT = 2
    ROLLBACK = 3


@dataclass
class NodeResponse:
    """Outcome of an operation, as reported by a node or the coordinator."""

    success: bool = False
    value: str = ""


@dataclass
class ClientRequest:
    """A request sent by a client to the coordinator."""

    client_rank: int = 0
    type: Optional[RequestType] = None
    key: int = 0
    value: str = ""


@dataclass
class NodeRequest:
    """A request sent by the coordinator to a storage node.

    ``state`` is ``None`` for requests outside the commit protocol, such as reads.
    """

    type: Optional[RequestType] = None
    key: int = 0
    value: str = ""
    state: Optional[TwoPC] = None