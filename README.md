# shardkv

A small key-value store kept as a copy on each shard node. Every change goes
through a coordinator using two-phase commit. The coordinator, the nodes and
the clients run as ranks in an in-process message-passing world. Each rank is
a thread, and ranks exchange tagged point-to-point messages.

## Roles

- **Rank 0: coordinator.** It receives client requests from any rank.
  - A read asks every node in turn and returns the first value found, or
    "Key not found".
  - A create, update or delete first checks the key. If the key is locked,
    the request is rejected with "Key is locked by another transaction".
    Otherwise the coordinator locks the key and sends `PREPARE` to every node.
    If all nodes agree, it sends `COMMIT`; otherwise it sends `ROLLBACK`. It
    then releases the lock and answers the client. The answer carries the
    request's value on success and "Operation failed" otherwise.
- **Ranks 1 and 2: nodes.** Each node keeps its own store and the set of keys
  it has prepared.
  - `CREATE` prepares only if the key is absent.
  - `UPDATE` and `DELETE` prepare only if the key is present.
  - A key that is already prepared refuses a second `PREPARE`.
- **Remaining ranks: clients.** A client runs this sequence and logs every
  reply:
  1. create key 1 with "Hello world"
  2. read key 1
  3. update key 1 to "Hello paxos"
  4. read key 1 again
  5. delete key 2

  In the default world, the first four succeed. The delete fails with
  "Operation failed", because key 2 was never created.

## Installing

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Running

```
shardkv
```

This starts a world of four ranks: one coordinator, two nodes and one client.
Log lines from the client, the coordinator and the nodes go to standard output.

Options:

- `-n`, `--size`: number of ranks (default 4). The coordinator uses
  `size - 2` shard nodes, and only ranks 1 and 2 run nodes, so a size above 4
  is rejected.
- `--log-file PATH`: also append log lines to this file.

## Using it from Python

```python
from shardkv.logger import Logger
from shardkv.main import run

replies = run(4, Logger())
for rank, responses in replies.items():
    for response in responses:
        print(rank, response.success, response.value)
```

`run(size, logger)` returns each client's replies, as a list of
`NodeResponse`, keyed by the client's rank. It raises the first error that any
rank raised.

Lower-level pieces:

- `shardkv.types`
  - `MessageType`, `RequestType` and `TwoPC` are integer enums.
  - The dataclasses `ClientRequest`, `NodeRequest` and `NodeResponse` are the
    records exchanged between ranks.
- `shardkv.transport`
  - `World(size)` holds one mailbox per rank.
  - `World.comm(rank)` returns that rank's `Communicator`.
  - `World.close()` stops the world. After that, sends raise
    `CommunicatorClosed`, and so do waiting receives once no matching message
    is left.
  - `Communicator` sends and receives tagged values. It has `send` and
    `receive`, plus typed helpers for strings, bools, 32-bit ints and enums.
    `ANY_SOURCE` receives from any rank.
- `shardkv.messages`: functions that send and receive whole `ClientRequest`,
  `NodeRequest` and `NodeResponse` values as sequences of tagged fields.
- `shardkv.node`
  - `Node.handle(request)` applies one `NodeRequest` and returns the
    responses to send.
  - `Node.serve(comm)` answers the coordinator until the world closes.
  - `node(comm, rank, logger)` starts a node.
- `shardkv.coordinator`
  - `Coordinator.handle(request)` runs one `ClientRequest` through the nodes.
  - `Coordinator.serve()` loops until the world closes.
  - `KeyLocks` is the coordinator's table of locked keys.
  - `coordinator(comm, nodes, logger)` starts a coordinator.
- `shardkv.client`: `client(comm, rank, logger)` runs the fixed sequence above
  and returns the replies.
- `shardkv.logger`
  - `Logger(console_output, stream, path)` writes lines of the form
    `[YYYY-MM-DD HH:MM:SS] [LEVEL] [Node r] message`. The rank part is
    omitted when the rank is negative.
  - The DEBUG, WARNING and ERROR labels are coloured with ANSI codes.
  - `Logger.get_instance()` returns a shared logger.

## What it does not do

- All ranks are threads in one process. Nothing is sent over a network.
- The stores live only in memory and are lost when `run` returns.
- Clients run only the fixed sequence above. There is no interactive client
  and no command for issuing arbitrary requests.