import pytest

from ycsb.cli import (
    main,
    parse_command_line,
    rate_limit_thread,
    status_thread,
    usage_message,
)
from ycsb.sync import CountDownLatch
from ycsb.utils import YcsbError


class _RecordingLimiter:
    def __init__(self):
        self.rates = []

    def set_rate(self, rate):
        self.rates.append(rate)


class _FixedMeasurements:
    def status_message(self):
        return "0 operations;"


def test_parse_sets_phases_and_options():
    props = parse_command_line(
        ["-load", "-run", "-threads", "4", "-db", "basic", "-s"]
    )
    assert props.get("doload") == "true"
    assert props.get("dotransaction") == "true"
    assert props.get("threadcount") == "4"
    assert props.get("dbname") == "basic"
    assert props.get("status") == "true"


def test_parse_t_is_same_as_run():
    props = parse_command_line(["-t"])
    assert props.get("dotransaction") == "true"
    assert "doload" not in props


def test_parse_p_trims_name_and_value():
    props = parse_command_line(["-load", "-p", " recordcount = 99999 "])
    assert props.get("recordcount") == "99999"


def test_parse_p_without_equals_raises():
    with pytest.raises(YcsbError, match="key=value"):
        parse_command_line(["-p", "operationcount"])


def test_parse_property_file_then_override(tmp_path):
    path = tmp_path / "workload.properties"
    path.write_text("# comment\nrecordcount=100\nfieldcount = 3\n", encoding="utf-8")
    props = parse_command_line(["-P", str(path), "-p", "recordcount=7"])
    assert props.get("recordcount") == "7"
    assert props.get("fieldcount") == "3"


def test_parse_missing_property_file_raises(tmp_path):
    with pytest.raises(YcsbError):
        parse_command_line(["-P", str(tmp_path / "absent.properties")])


@pytest.mark.parametrize(
    "argv",
    [[], ["-bogus"], ["-threads"], ["-db"], ["-load", "extra"]],
)
def test_parse_rejects_bad_command_lines(argv):
    with pytest.raises(YcsbError):
        parse_command_line(argv)


def test_usage_message_lists_options():
    text = usage_message("ycsb")
    assert text.startswith("Usage: ycsb [options]\n")
    assert "  -threads n: execute using n threads (default: 1)" in text
    assert "  -run: same as -t" in text


def test_main_without_arguments_prints_usage(capsys):
    assert main([]) == 0
    assert "Usage:" in capsys.readouterr().out


def test_main_unknown_option_reports_it(capsys):
    assert main(["-nope"]) == 0
    captured = capsys.readouterr()
    assert "Unknown option '-nope'" in captured.err


def test_main_without_phase_fails(capsys):
    assert main(["-s"]) == 1
    assert "No operation to do" in capsys.readouterr().err


def test_main_unknown_database_fails(capsys):
    code = main(
        ["-load", "-db", "nosuchdb", "-p", "measurementtype=basic", "-p", "recordcount=5"]
    )
    assert code == 1
    assert "nosuchdb" in capsys.readouterr().err


def test_main_load_and_run_with_basic_db(capsys):
    code = main(
        [
            "-load",
            "-run",
            "-threads",
            "3",
            "-db",
            "basic",
            "-p",
            "basic.silent=true",
            "-p",
            "measurementtype=basic",
            "-p",
            "recordcount=10",
            "-p",
            "operationcount=20",
            "-p",
            "fieldlength=8",
        ]
    )
    assert code == 0
    out = capsys.readouterr().out
    assert "Load operations(ops): 10" in out
    assert "Run operations(ops): 20" in out
    assert "Load runtime(sec): " in out
    assert "Run throughput(ops/sec): " in out


def test_status_thread_prints_final_line_when_latch_open(capsys):
    latch = CountDownLatch(0)
    status_thread(_FixedMeasurements(), latch, 10)
    lines = capsys.readouterr().out.splitlines()
    assert len(lines) == 2
    assert all(line.endswith(" 0 sec: 0 operations;") for line in lines)


def test_rate_limit_thread_splits_rate_among_limiters(tmp_path):
    path = tmp_path / "rates.txt"
    path.write_text("1 100\n", encoding="utf-8")
    limiters = [_RecordingLimiter(), _RecordingLimiter()]
    rate_limit_thread(str(path), limiters, CountDownLatch(1))
    assert [lim.rates for lim in limiters] == [[50], [50]]


def test_rate_limit_thread_stops_when_latch_open(tmp_path):
    path = tmp_path / "rates.txt"
    path.write_text("1 100\n2 200\n", encoding="utf-8")
    limiter = _RecordingLimiter()
    rate_limit_thread(str(path), [limiter], CountDownLatch(0))
    assert limiter.rates == []


def test_rate_limit_thread_rejects_non_increasing_times(tmp_path):
    path = tmp_path / "rates.txt"
    path.write_text("0 10\n", encoding="utf-8")
    with pytest.raises(YcsbError, match="invalid rate file"):
        rate_limit_thread(str(path), [_RecordingLimiter()], CountDownLatch(1))


def test_rate_limit_thread_missing_file(tmp_path):
    with pytest.raises(YcsbError, match="failed to open"):
        rate_limit_thread(str(tmp_path / "none.txt"), [], CountDownLatch(1))