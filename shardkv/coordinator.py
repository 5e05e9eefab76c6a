"""Coordinator: routes client requests to the shard nodes and runs two-phase commit."""

from __future__ import annotations

import threading
from typing import Dict, List, Optional

from shardkv.logger import Logger
from shardkv.messages import (
    receive_client_request,
    receive_node_response,
    send_client_response,
    send_node_request,
)
from shardkv.transport import ANY_SOURCE, Communicator, CommunicatorClosed
from shardkv.types import (
    ClientRequest,
    MessageType,
    NodeRequest,
    NodeResponse,
    RequestType,
    TwoPC,
)


class KeyLocks:
    """Thread-safe table of keys held by an ongoing transaction."""

    def __init__(self) -> None:
        self._locked: Dict[int, bool] = {}
        self._mutex = threading.Lock()

    def is_locked(self, key: int) -> bool:
        with self._mutex:
            return self._locked.get(key, False)

    def lock(self, key: int) -> None:
        with self._mutex:
            self._locked[key] = True

    def unlock(self, key: int) -> None:
        with self._mutex:
            self._locked[key] = False


class Coordinator:
    """Serves client requests against ``nodes`` shard nodes at ranks 1 to ``nodes``."""

    def __init__(self, comm: Communicator, nodes: int, logger: Optional[Logger] = None) -> None:
        self.comm = comm
        self.nodes = nodes
        self.logger = logger if logger is not None else Logger.get_instance()
        self.locks = KeyLocks()

    @property
    def _node_ids(self) -> range:
        return range(1, self.nodes + 1)

    def handle(self, request: ClientRequest) -> NodeResponse:
        """Carry out one client request and return the reply for the client."""
        if request.type is RequestType.READ:
            return self._read(request.key)
        return self._transact(request)

    def serve(self) -> None:
        """Answer client requests until the world is closed."""
        try:
            while True:
                request = receive_client_request(self.comm, ANY_SOURCE, MessageType.CLIENT_REQUEST)
                response = self.handle(request)
                send_client_response(
                    self.comm, response, request.client_rank, MessageType.CLIENT_RESPONSE
                )
        except CommunicatorClosed:
            return

    def _read(self, key: int) -> NodeResponse:
        responses: List[NodeResponse] = []
        for node_id in self._node_ids:
            send_node_request(
                self.comm, NodeRequest(RequestType.READ, key, ""), node_id, MessageType.NODE_REQUEST
            )
            responses.append(receive_node_response(self.comm, node_id, MessageType.NODE_RESPONSE))

        found = next((response for response in responses if response.success), None)
        if found is not None:
            return NodeResponse(True, found.value)
        return NodeResponse(False, "Key not found")

    def _transact(self, request: ClientRequest) -> NodeResponse:
        key = request.key
        if self.locks.is_locked(key):
            self.logger.warning(f"Key {key} is already locked, rejecting request", 0)
            return NodeResponse(False, "Key is locked by another transaction")

        self.locks.lock(key)
        self.logger.debug(f"Locked key: {key}", 0)

        for node_id in self._node_ids:
            send_node_request(
                self.comm,
                NodeRequest(request.type, key, request.value, TwoPC.PREPARE),
                node_id,
                MessageType.NODE_REQUEST,
            )

        prepare_success = True
        for node_id in self._node_ids:
            reply = receive_node_response(self.comm, node_id, MessageType.NODE_RESPONSE)
            self.logger.info(f"Received from node {node_id}: {reply.value}", 0)
            prepare_success = prepare_success and reply.success

        self.logger.info(f"Prepare phase success = {'true' if prepare_success else 'false'}", 0)

        next_phase = TwoPC.COMMIT if prepare_success else TwoPC.ROLLBACK
        self.logger.info(f"Starting {next_phase.name} phase", 0)

        for node_id in self._node_ids:
            send_node_request(
                self.comm,
                NodeRequest(request.type, key, request.value, next_phase),
                node_id,
                MessageType.NODE_REQUEST,
            )
            receive_node_response(self.comm, node_id, MessageType.NODE_RESPONSE)

        self.locks.unlock(key)
        self.logger.info(f"Starting {next_phase.name} phase", 0)

        return NodeResponse(prepare_success, request.value if prepare_success else "Operation failed")


def coordinator(comm: Communicator, nodes: int, logger: Optional[Logger] = None) -> None:
    """Run the coordinator on ``comm`` until the world is closed."""
    logger = logger if logger is not None else Logger.get_instance()
    logger.info("Coordinator started...\n", 0)
    Coordinator(comm, nodes, logger).serve()