"""Command-line driver: parses options, runs the load and transaction phases, prints results."""

from __future__ import annotations

import sys
import threading
import time
from concurrent.futures import Future
from typing import Callable, Sequence, TypeVar

from ycsb.client import client_thread
from ycsb.core_workload import OPERATION_COUNT_PROPERTY, RECORD_COUNT_PROPERTY, CoreWorkload
from ycsb.db import DB
from ycsb.db_factory import create_db
from ycsb.measurements import Measurements, create_measurements
from ycsb.properties import Properties
from ycsb.sync import CountDownLatch, RateLimiter, Timer
from ycsb.utils import YcsbError, trim

__all__ = [
    "parse_command_line",
    "usage_message",
    "status_thread",
    "rate_limit_thread",
    "main",
]

PROG = "ycsb"

T = TypeVar("T")


class _UsageError(YcsbError):
    """The command line could not be understood; the usage text should be shown."""


def usage_message(command: str) -> str:
    """Return the usage text for ``command``."""
    return (
        f"Usage: {command} [options]\n"
        "Options:\n"
        "  -load: run the loading phase of the workload\n"
        "  -t: run the transactions phase of the workload\n"
        "  -run: same as -t\n"
        "  -threads n: execute using n threads (default: 1)\n"
        "  -db dbname: specify the name of the DB to use (default: basic)\n"
        "  -P propertyfile: load properties from the given file. Multiple files can\n"
        "                   be specified, and will be processed in the order specified\n"
        "  -p name=value: specify a property to be passed to the DB and workloads\n"
        "                 multiple properties can be specified, and override any\n"
        "                 values in the propertyfile\n"
        "  -s: print status every 10 seconds (use status.interval prop to override)"
    )


def parse_command_line(argv: Sequence[str]) -> Properties:
    """Build properties from the arguments that follow the program name.

    Raises :class:`YcsbError` when the command line is malformed.
    """
    props = Properties()
    args = list(argv)
    index = 0

    def value_for(option: str) -> str:
        if index + 1 >= len(args):
            raise _UsageError(f"Missing argument value for {option}")
        return args[index + 1]

    while index < len(args) and args[index].startswith("-"):
        option = args[index]
        if option == "-load":
            props.set("doload", "true")
            index += 1
        elif option in ("-run", "-t"):
            props.set("dotransaction", "true")
            index += 1
        elif option == "-threads":
            props.set("threadcount", value_for(option))
            index += 2
        elif option == "-db":
            props.set("dbname", value_for(option))
            index += 2
        elif option == "-P":
            path = value_for(option)
            try:
                with open(path, encoding="utf-8") as stream:
                    props.load(stream)
            except OSError:
                raise YcsbError("File not open!") from None
            index += 2
        elif option == "-p":
            prop = value_for(option)
            name, sep, value = prop.partition("=")
            if not sep:
                raise YcsbError(
                    "Argument '-p' expected to be in key=value format "
                    "(e.g., -p operationcount=99999)"
                )
            props.set(trim(name), trim(value))
            index += 2
        elif option == "-s":
            props.set("status", "true")
            index += 1
        else:
            raise _UsageError(f"Unknown option '{option}'")

    if index == 0 or index != len(args):
        raise _UsageError("")
    return props


def status_thread(measurements: Measurements, latch: CountDownLatch, interval: float) -> None:
    """Print a status line every ``interval`` seconds, and once more when the latch opens."""
    start = time.monotonic()
    done = False
    while True:
        stamp = time.strftime("%Y-%m-%d %H:%M:%S", time.localtime())
        elapsed = int(time.monotonic() - start)
        print(f"{stamp} {elapsed} sec: {measurements.status_message()}", flush=True)
        if done:
            break
        done = latch.wait_for(interval)


def _trunc_div(a: int, b: int) -> int:
    quotient = abs(a) // abs(b)
    return quotient if (a >= 0) == (b > 0) else -quotient


def _read_rate_file(rate_file: str) -> list[tuple[int, int]]:
    try:
        with open(rate_file, encoding="utf-8") as stream:
            tokens = stream.read().split()
    except OSError:
        raise YcsbError("failed to open: " + rate_file) from None
    try:
        numbers = [int(token) for token in tokens]
    except ValueError:
        raise YcsbError("invalid rate file") from None
    return list(zip(numbers[0::2], numbers[1::2]))


def rate_limit_thread(
    rate_file: str,
    rate_limiters: Sequence[RateLimiter | None],
    latch: CountDownLatch,
) -> None:
    """Apply the ``time_sec ops_per_second`` schedule in ``rate_file`` to every limiter."""
    schedule = _read_rate_file(rate_file)
    num_threads = len(rate_limiters)
    last_time = 0
    for next_time, next_rate in schedule:
        if next_time <= last_time:
            raise YcsbError("invalid rate file")
        if latch.wait_for(next_time - last_time):
            break
        last_time = next_time
        for limiter in rate_limiters:
            if limiter is not None:
                limiter.set_rate(_trunc_div(next_rate, num_threads))


def _run_async(fn: Callable[..., T], *args: object) -> Future[T]:
    future: Future[T] = Future()

    def runner() -> None:
        if not future.set_running_or_notify_cancel():
            return
        try:
            future.set_result(fn(*args))
        except BaseException as exc:  # handed back to the waiting thread
            future.set_exception(exc)

    threading.Thread(target=runner, daemon=True).start()
    return future


def _int_prop(props: Properties, name: str, default: str | None = None) -> int:
    if default is None:
        if name not in props:
            raise YcsbError(f"Missing property: {name}")
        text = props[name]
    else:
        text = props.get(name, default)
    try:
        return int(trim(text))
    except ValueError:
        raise YcsbError(f"Invalid integer for {name}: {text!r}") from None


def _thread_share(total: int, num_threads: int, index: int) -> int:
    share = total // num_threads
    return share + 1 if index < total % num_threads else share


def _report(phase: str, runtime: float, ops: int) -> None:
    throughput = ops / runtime if runtime > 0 else float("inf")
    print(f"{phase} runtime(sec): {runtime:g}")
    print(f"{phase} operations(ops): {ops}")
    print(f"{phase} throughput(ops/sec): {throughput:g}", flush=True)


def _run(props: Properties) -> int:
    do_load = props.get("doload", "false") == "true"
    do_transaction = props.get("dotransaction", "false") == "true"
    if not do_load and not do_transaction:
        print("No operation to do", file=sys.stderr)
        return 1

    num_threads = _int_prop(props, "threadcount", "1")
    if num_threads <= 0:
        raise YcsbError(f"Invalid thread count: {num_threads}")

    measurements = create_measurements(props)
    if measurements is None:
        print("Unknown measurements name", file=sys.stderr)
        return 1

    dbs: list[DB] = [create_db(props, measurements) for _ in range(num_threads)]
    workload = CoreWorkload(props)

    show_status = props.get("status", "false") == "true"
    status_interval = _int_prop(props, "status.interval", "10")

    if do_load:
        total_ops = _int_prop(props, RECORD_COUNT_PROPERTY)
        latch = CountDownLatch(num_threads)
        timer = Timer()
        timer.start()
        status_future = (
            _run_async(status_thread, measurements, latch, status_interval)
            if show_status
            else None
        )
        clients = [
            _run_async(
                client_thread,
                db,
                workload,
                _thread_share(total_ops, num_threads, i),
                True,
                True,
                not do_transaction,
                latch,
                None,
            )
            for i, db in enumerate(dbs)
        ]
        total = sum(future.result() for future in clients)
        runtime = timer.end()
        if status_future is not None:
            status_future.result()
        _report("Load", runtime, total)

    measurements.reset()
    time.sleep(_int_prop(props, "sleepafterload", "0"))

    if do_transaction:
        ops_limit = _int_prop(props, "limit.ops", "0")
        rate_file = props.get("limit.file", "")
        total_ops = _int_prop(props, OPERATION_COUNT_PROPERTY)

        latch = CountDownLatch(num_threads)
        timer = Timer()
        timer.start()
        status_future = (
            _run_async(status_thread, measurements, latch, status_interval)
            if show_status
            else None
        )
        clients = []
        rate_limiters: list[RateLimiter | None] = []
        for i, db in enumerate(dbs):
            limiter = None
            if ops_limit > 0 or rate_file != "":
                per_thread_ops = _trunc_div(ops_limit, num_threads)
                limiter = RateLimiter(per_thread_ops, per_thread_ops)
            rate_limiters.append(limiter)
            clients.append(
                _run_async(
                    client_thread,
                    db,
                    workload,
                    _thread_share(total_ops, num_threads, i),
                    False,
                    not do_load,
                    True,
                    latch,
                    limiter,
                )
            )

        rate_future = (
            _run_async(rate_limit_thread, rate_file, rate_limiters, latch)
            if rate_file != ""
            else None
        )

        total = sum(future.result() for future in clients)
        runtime = timer.end()
        if status_future is not None:
            status_future.result()
        _report("Run", runtime, total)
        if rate_future is not None:
            rate_future.result()

    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Run the benchmark; return the process exit status."""
    args = sys.argv[1:] if argv is None else list(argv)
    try:
        props = parse_command_line(args)
    except _UsageError as err:
        print(usage_message(PROG), flush=True)
        if str(err):
            print(err, file=sys.stderr)
        return 0
    except YcsbError as err:
        print(err, file=sys.stderr)
        return 0

    try:
        return _run(props)
    except YcsbError as err:
        print(err, file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())