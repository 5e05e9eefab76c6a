import io

import pytest

from shardkv.logger import Logger
from shardkv.main import main, run
from shardkv.types import NodeResponse


def test_run_four_ranks():
    results = run(4, Logger(stream=io.StringIO()))
    assert list(results) == [3]
    assert results[3][0] == NodeResponse(True, "Hello world")
    assert results[3][3] == NodeResponse(True, "Hello paxos")
    assert results[3][4] == NodeResponse(False, "Operation failed")


def test_run_without_clients_returns_empty():
    assert run(3, Logger(stream=io.StringIO())) == {}


def test_run_rejects_too_many_shard_nodes():
    with pytest.raises(ValueError):
        run(5, Logger(stream=io.StringIO()))


def test_run_rejects_empty_world():
    with pytest.raises(ValueError):
        run(0, Logger(stream=io.StringIO()))


def test_main_prints_log(capsys):
    assert main(["--size", "4"]) == 0
    out = capsys.readouterr().out
    assert "Coordinator started..." in out
    assert "Exiting client..." in out


def test_main_writes_log_file(tmp_path, capsys):
    log_file = tmp_path / "run.log"
    assert main(["-n", "4", "--log-file", str(log_file)]) == 0
    text = log_file.read_text(encoding="utf-8")
    assert "CREATE Response: Success, Value: Hello world" in text
    assert "Exiting client..." in capsys.readouterr().out


def test_main_bad_size_exits():
    with pytest.raises(SystemExit) as excinfo:
        main(["--size", "6"])
    assert excinfo.value.code == 2