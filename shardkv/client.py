"""Client: runs a fixed sequence of operations against the coordinator."""

from __future__ import annotations

from typing import List, Optional

from shardkv.logger import Logger
from shardkv.messages import receive_node_response, send_client_request
from shardkv.transport import Communicator
from shardkv.types import ClientRequest, MessageType, NodeResponse, RequestType

COORDINATOR_RANK = 0

_OPERATIONS = (
    ("CREATE", RequestType.CREATE, 1, "Hello world"),
    ("READ", RequestType.READ, 1, ""),
    ("UPDATE", RequestType.UPDATE, 1, "Hello paxos"),
    ("Second READ", RequestType.READ, 1, ""),
    ("DELETE", RequestType.DELETE, 2, ""),
)


def client(comm: Communicator, rank: int, logger: Optional[Logger] = None) -> List[NodeResponse]:
    """Send create, read, update, read and delete requests; return the replies in order."""
    logger = logger if logger is not None else Logger.get_instance()
    logger.info(f"Client {rank} started...", rank)

    responses: List[NodeResponse] = []
    for label, kind, key, value in _OPERATIONS:
        send_client_request(
            comm, ClientRequest(rank, kind, key, value), COORDINATOR_RANK, MessageType.CLIENT_REQUEST
        )
        response = receive_node_response(comm, COORDINATOR_RANK, MessageType.CLIENT_RESPONSE)
        outcome = "Success" if response.success else "Failed"
        logger.info(f"{label} Response: {outcome}, Value: {response.value}", rank)
        responses.append(response)

    logger.info("Exiting client...", rank)
    return responses