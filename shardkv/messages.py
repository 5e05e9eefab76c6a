"""Sending and receiving whole requests and responses as sequences of tagged fields."""

from __future__ import annotations

from shardkv.transport import Communicator
from shardkv.types import ClientRequest, NodeRequest, NodeResponse


def send_client_request(comm: Communicator, request: ClientRequest, dest: int, tag: int) -> None:
    comm.send_int(request.client_rank, dest, tag)
    comm.send_enum(request.type, dest, tag + 1)
    comm.send_int(request.key, dest, tag + 2)
    comm.send_string(request.value, dest, tag + 3)


def receive_client_request(comm: Communicator, source: int, tag: int) -> ClientRequest:
    client_rank = comm.receive_int(source, tag)
    request_type = comm.receive_request_type(source, tag + 1)
    key = comm.receive_int(source, tag + 2)
    value = comm.receive_string(source, tag + 3)
    return ClientRequest(client_rank, request_type, key, value)


def send_client_response(comm: Communicator, response: NodeResponse, dest: int, tag: int) -> None:
    comm.send_bool(response.success, dest, tag)
    comm.send_string(response.value, dest, tag + 1)


def send_node_request(comm: Communicator, request: NodeRequest, dest: int, tag: int) -> None:
    comm.send_enum(request.type, dest, tag)
    comm.send_int(request.key, dest, tag + 1)
    comm.send_string(request.value, dest, tag + 2)
    comm.send_enum(request.state, dest, tag + 3)


def receive_node_request(comm: Communicator, source: int, tag: int) -> NodeRequest:
    request_type = comm.receive_request_type(source, tag)
    key = comm.receive_int(source, tag + 1)
    value = comm.receive_string(source, tag + 2)
    state = comm.receive_phase_type(source, tag + 3)
    return NodeRequest(request_type, key, value, state)


def send_node_response(comm: Communicator, response: NodeResponse, dest: int, tag: int) -> None:
    comm.send_bool(response.success, dest, tag)
    comm.send_string(response.value, dest, tag + 1)


def receive_node_response(comm: Communicator, source: int, tag: int) -> NodeResponse:
    success = comm.receive_bool(source, tag)
    value = comm.receive_string(source, tag + 1)
    return NodeResponse(success, value)