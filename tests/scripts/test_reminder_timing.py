from __future__ import annotations

from datetime import datetime

import pytest
import pytz


def _module():
    return __import__("scripts.reminder_timing", fromlist=["main"])


def _row(label: str, value: str) -> str:
    return f"{label:<21} {value}"


def test_prints_schedule_in_requested_timezone(capsys: pytest.CaptureFixture[str]) -> None:
    module = _module()
    now = datetime(2024, 1, 1, 9, 0, tzinfo=pytz.UTC)

    exit_code = module.main(["2", "30", "--tz", "UTC"], now=now)

    out = capsys.readouterr().out
    assert exit_code == 0
    assert _row("Now:", "2024-01-01 09:00:00") in out
    assert _row("Start at:", "2024-01-01 09:02:00") in out
    assert _row("End at:", "2024-01-01 09:32:00") in out
    assert "Start (datetime-local): 2024-01-01T09:02" in out
    assert "End   (datetime-local): 2024-01-01T09:32" in out
    assert _row("30 minutes before:", "2024-01-01 08:32:00") in out
    assert _row("10 minutes before:", "2024-01-01 08:52:00") in out
    assert _row("At start:", "2024-01-01 09:02:00") in out
    assert "10 minutes before end: 2024-01-01 09:22:00" in out
    assert _row("At end:", "2024-01-01 09:32:00") in out


def test_defaults_start_in_two_minutes_for_an_hour(
    capsys: pytest.CaptureFixture[str],
) -> None:
    module = _module()
    now = datetime(2024, 6, 1, 12, 0, tzinfo=pytz.UTC)

    assert module.main(["--tz", "Europe/Amsterdam"], now=now) == 0

    out = capsys.readouterr().out
    assert _row("Start at:", "2024-06-01 14:02:00") in out
    assert _row("End at:", "2024-06-01 15:02:00") in out


@pytest.mark.parametrize(
    "argv",
    [["abc"], ["2", "soon"], ["nan"], ["2", "inf"], ["1e20"], ["2", "-1e15"], ["5e9"]],
)
def test_invalid_numbers_exit_with_usage(
    argv: list[str], capsys: pytest.CaptureFixture[str]
) -> None:
    module = _module()

    with pytest.raises(SystemExit) as exc_info:
        module.main(argv)

    captured = capsys.readouterr()
    assert exc_info.value.code != 0
    assert "usage:" in captured.err
    assert "Start at" not in captured.out
