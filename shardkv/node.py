"""Storage node: keeps a key-value shard and takes part in two-phase commit."""

from __future__ import annotations

import threading
from typing import Dict, List, Optional, Set

from shardkv.logger import Logger
from shardkv.messages import receive_node_request, send_node_response
from shardkv.transport import Communicator, CommunicatorClosed
from shardkv.types import MessageType, NodeRequest, NodeResponse, RequestType, TwoPC

COORDINATOR_RANK = 0


class Node:
    """One shard replica holding a key-value store and the keys it has prepared."""

    def __init__(self, rank: int, logger: Optional[Logger] = None) -> None:
        self.rank = rank
        self.logger = logger if logger is not None else Logger.get_instance()
        self.store: Dict[int, str] = {}
        self.prepared: Set[int] = set()
        self._lock = threading.Lock()

    def handle(self, request: NodeRequest) -> List[NodeResponse]:
        """Apply one request and return the responses to send back, in order."""
        responses: List[NodeResponse] = []
        with self._lock:
            if request.type is RequestType.READ:
                responses.append(self._read(request.key))
            if request.state is TwoPC.PREPARE:
                responses.append(self._prepare(request))
            if request.state is TwoPC.COMMIT:
                responses.append(self._commit(request))
            if request.state is TwoPC.ROLLBACK:
                responses.append(self._rollback(request.key))
        return responses

    def serve(self, comm: Communicator) -> None:
        """Answer requests from the coordinator until the world is closed."""
        try:
            while True:
                request = receive_node_request(comm, COORDINATOR_RANK, MessageType.NODE_REQUEST)
                for response in self.handle(request):
                    send_node_response(comm, response, COORDINATOR_RANK, MessageType.NODE_RESPONSE)
        except CommunicatorClosed:
            return

    def _read(self, key: int) -> NodeResponse:
        if key in self.store:
            self.logger.debug(f"READ success for key: {key}", self.rank)
            return NodeResponse(True, self.store[key])
        self.logger.debug(f"READ failed - key not found: {key}", self.rank)
        return NodeResponse(False, "Key not found")

    def _prepare(self, request: NodeRequest) -> NodeResponse:
        key = request.key
        if key in self.prepared:
            self.logger.warning(f"Key {key} already in PREPARE state", self.rank)
            return NodeResponse(False, "Already in PREPARE state")

        if request.type is RequestType.CREATE:
            can_proceed = key not in self.store
        elif request.type in (RequestType.UPDATE, RequestType.DELETE):
            can_proceed = key in self.store
        else:
            can_proceed = False

        if can_proceed:
            self.prepared.add(key)
            self.logger.info(f"PREPARE success for key: {key}", self.rank)
            return NodeResponse(True, "PREPARE success")
        self.logger.warning(f"PREPARE failed for key: {key}", self.rank)
        return NodeResponse(False, "PREPARE failed")

    def _commit(self, request: NodeRequest) -> NodeResponse:
        key = request.key
        if key not in self.prepared:
            self.logger.error(f"COMMIT failed - key not prepared: {key}", self.rank)
            return NodeResponse(False, "Not prepared")

        if request.type in (RequestType.CREATE, RequestType.UPDATE):
            self.store[key] = request.value
            action = "Created" if request.type is RequestType.CREATE else "Updated"
            self.logger.info(
                f"COMMIT success - {action} key: {key} with value: {request.value}", self.rank
            )
            response = NodeResponse(True, request.value)
        elif request.type is RequestType.DELETE:
            self.store.pop(key, None)
            self.logger.info(f"COMMIT success - Deleted key: {key}", self.rank)
            response = NodeResponse(True, "Deleted")
        else:
            self.logger.error(f"COMMIT failed - Invalid operation for key: {key}", self.rank)
            response = NodeResponse(False, "Invalid operation")

        self.prepared.discard(key)
        return response

    def _rollback(self, key: int) -> NodeResponse:
        self.prepared.discard(key)
        self.logger.info(f"ROLLBACK executed for key: {key}", self.rank)
        return NodeResponse(False, "Rolled back")


def node(comm: Communicator, rank: int, logger: Optional[Logger] = None) -> None:
    """Run a storage node on ``comm`` until the world is closed."""
    logger = logger if logger is not None else Logger.get_instance()
    logger.info(f"Node {rank} started...", rank)
    Node(rank, logger).serve(comm)