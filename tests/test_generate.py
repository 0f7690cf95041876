import logging

import pytest

from expohisto.config import Settings
from expohisto.constants import GetTable, ReadTable
from expohisto.float_bits import HIDDEN_BIT
from expohisto.generate import EstimateThreshold, Generate, Main, Partition, Progress


def test_estimate() -> None:
    assert EstimateThreshold(1, 0, 40) == HIDDEN_BIT
    # floor(sqrt(2) * 2^52)
    assert EstimateThreshold(1, 1, 40) == HIDDEN_BIT + 0x6A09E667F3BCC


def test_partition() -> None:
    assert Partition(10, 3) == [(0, 3), (3, 6), (6, 10)]
    assert Partition(4, 16) == [(0, 1), (1, 2), (2, 3), (3, 4)]
    assert Partition(8, 0) == [(0, 8)]


@pytest.mark.parametrize("scale", range(1, 7))
def test_generate_matches_runtime_table(scale: int) -> None:
    settings = Settings(workers=1, slices_per_worker=3)
    assert list(Generate(scale, settings)) == list(GetTable(scale))


def test_generate_in_parallel() -> None:
    settings = Settings(workers=2, slices_per_worker=4)
    assert list(Generate(5, settings)) == list(GetTable(5))


def test_progress(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.INFO, logger="expohisto.generate"):
        progress = Progress(10, 0.0)
        progress.Add(5)
        progress.Add(5)
    messages = [r.getMessage() for r in caplog.records]
    assert len(messages) == 1
    assert "5 @ " in messages[0]
    assert "50.0000% complete" in messages[0]


def test_progress_waits_for_interval(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.INFO, logger="expohisto.generate"):
        progress = Progress(10, 3600.0)
        progress.Add(5)
    assert caplog.records == []


def test_main(settings_env: pytest.MonkeyPatch, capsys: pytest.CaptureFixture) -> None:
    settings_env.setenv("EXPOHISTO_WORKERS", "1")
    assert Main(["3"]) == 0
    out, _ = capsys.readouterr()
    assert ReadTable(out) == (3, GetTable(3).obj)


@pytest.mark.parametrize("argv", [[], ["x"], ["0"], ["-1"], ["21"], ["1.5"], ["1", "2"]])
def test_main_usage(argv, capsys: pytest.CaptureFixture) -> None:
    assert Main(argv) == 2
    out, err = capsys.readouterr()
    assert out == ""
    assert "usage" in err
