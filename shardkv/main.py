"""Starts the coordinator, the shard nodes and the clients, one thread per rank."""

from __future__ import annotations

import argparse
import threading
from functools import partial
from typing import Callable, Dict, List, Optional, Sequence

from shardkv.client import client
from shardkv.coordinator import coordinator
from shardkv.logger import Logger
from shardkv.node import node
from shardkv.transport import World
from shardkv.types import NodeResponse

NODE_RANKS = (1, 2)


def run(size: int = 4, logger: Optional[Logger] = None) -> Dict[int, List[NodeResponse]]:
    """Run a world of ``size`` ranks until every client is done.

    Rank 0 coordinates, ranks 1 and 2 hold shards, and the rest are clients.
    Returns each client's replies keyed by its rank.
    """
    shard_nodes = size - 2
    if shard_nodes > len(NODE_RANKS):
        raise ValueError(
            f"world of size {size} asks for {shard_nodes} shard nodes, "
            f"but only {len(NODE_RANKS)} ranks run nodes"
        )
    logger = logger if logger is not None else Logger.get_instance()

    results: Dict[int, List[NodeResponse]] = {}
    errors: List[BaseException] = []

    def guarded(target: Callable[[], object]) -> None:
        try:
            target()
        except BaseException as exc:  # reported to the caller after joining
            errors.append(exc)

    def run_client(comm, rank: int) -> None:
        results[rank] = client(comm, rank, logger)

    world = World(size)
    servers: List[threading.Thread] = []
    clients: List[threading.Thread] = []
    try:
        for rank in range(size):
            comm = world.comm(rank)
            if rank == 0:
                target = partial(coordinator, comm, shard_nodes, logger)
                group = servers
            elif rank in NODE_RANKS:
                target = partial(node, comm, rank, logger)
                group = servers
            else:
                target = partial(run_client, comm, rank)
                group = clients
            thread = threading.Thread(target=guarded, args=(target,), daemon=True)
            group.append(thread)
            thread.start()

        for thread in clients:
            thread.join()
    finally:
        world.close()
        for thread in servers:
            thread.join()

    if errors:
        raise errors[0]
    return results


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="shardkv", description="Sharded key-value store with two-phase commit."
    )
    parser.add_argument("-n", "--size", type=int, default=4, help="number of ranks (default: 4)")
    parser.add_argument("--log-file", help="also append log lines to this file")
    args = parser.parse_args(argv)

    try:
        if args.log_file:
            with Logger(path=args.log_file) as logger:
                run(args.size, logger)
        else:
            run(args.size)
    except ValueError as exc:
        parser.error(str(exc))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())