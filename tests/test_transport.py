import threading

import pytest

from shardkv.transport import ANY_SOURCE, CommunicatorClosed, World
from shardkv.types import RequestType, TwoPC


@pytest.fixture
def world():
    with World(3) as w:
        yield w


def test_send_and_receive(world):
    world.comm(0).send("payload", 1, 5)
    assert world.comm(1).receive(0, 5) == "payload"


def test_messages_with_same_tag_keep_order(world):
    sender = world.comm(0)
    for n in range(5):
        sender.send_int(n, 1, 9)
    receiver = world.comm(1)
    assert [receiver.receive_int(0, 9) for _ in range(5)] == list(range(5))


def test_receive_selects_by_tag(world):
    sender = world.comm(0)
    sender.send_int(10, 1, 1)
    sender.send_int(20, 1, 2)
    receiver = world.comm(1)
    assert receiver.receive_int(0, 2) == 20
    assert receiver.receive_int(0, 1) == 10


def test_receive_selects_by_source(world):
    world.comm(0).send_int(1, 2, 4)
    world.comm(1).send_int(2, 2, 4)
    receiver = world.comm(2)
    assert receiver.receive_int(1, 4) == 2
    assert receiver.receive_int(0, 4) == 1


def test_any_source(world):
    world.comm(2).send_int(42, 0, 0)
    assert world.comm(0).receive_int(ANY_SOURCE, 0) == 42


def test_string_round_trip(world):
    world.comm(0).send_string("Hello world", 1, 3)
    assert world.comm(1).receive_string(0, 3) == "Hello world"


def test_string_unicode_round_trip(world):
    world.comm(0).send_string("héllo ✓", 1, 3)
    assert world.comm(1).receive_string(0, 3) == "héllo ✓"


def test_string_wire_layout(world):
    world.comm(0).send_string("abc", 1, 3)
    receiver = world.comm(1)
    assert receiver.receive(0, 6) == 3
    assert receiver.receive(0, 7) == b"abc"


def test_empty_string_sends_only_length(world):
    world.comm(0).send_string("", 1, 3)
    world.comm(0).send_string("next", 1, 3)
    receiver = world.comm(1)
    assert receiver.receive_string(0, 3) == ""
    assert receiver.receive_string(0, 3) == "next"


def test_bool_round_trip(world):
    world.comm(0).send_bool(True, 1, 0)
    world.comm(0).send_bool(False, 1, 0)
    receiver = world.comm(1)
    assert receiver.receive_bool(0, 0) is True
    assert receiver.receive_bool(0, 0) is False


def test_int_out_of_range_rejected(world):
    with pytest.raises(OverflowError):
        world.comm(0).send_int(2**31, 1, 0)


def test_enum_round_trips(world):
    sender = world.comm(0)
    sender.send_enum(RequestType.UPDATE, 1, 0)
    sender.send_enum(TwoPC.ROLLBACK, 1, 1)
    sender.send_enum(None, 1, 2)
    receiver = world.comm(1)
    assert receiver.receive_request_type(0, 0) is RequestType.UPDATE
    assert receiver.receive_phase_type(0, 1) is TwoPC.ROLLBACK
    assert receiver.receive_phase_type(0, 2) is None


def test_invalid_rank_rejected(world):
    with pytest.raises(ValueError):
        world.comm(3)
    with pytest.raises(ValueError):
        world.comm(0).send_int(1, 7, 0)


def test_invalid_world_size():
    with pytest.raises(ValueError):
        World(0)


def test_receive_blocks_until_sent(world):
    sender = threading.Timer(0.05, world.comm(0).send_int, args=(99, 1, 8))
    sender.start()
    try:
        value = world.comm(1).receive_int(0, 8)
    finally:
        sender.join(timeout=5)
    assert value == 99


def test_close_wakes_waiting_receiver(world):
    closer = threading.Timer(0.05, world.close)
    closer.start()
    try:
        with pytest.raises(CommunicatorClosed):
            world.comm(1).receive(0, 8)
    finally:
        closer.join(timeout=5)


def test_send_after_close_fails(world):
    world.close()
    with pytest.raises(CommunicatorClosed):
        world.comm(0).send_int(1, 1, 0)


def test_queued_message_still_delivered_after_close(world):
    world.comm(0).send_int(5, 1, 0)
    world.close()
    assert world.comm(1).receive_int(0, 0) == 5
    with pytest.raises(CommunicatorClosed):
        world.comm(1).receive_int(0, 0)