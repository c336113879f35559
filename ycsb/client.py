"""The body of one benchmark client thread."""

from __future__ import annotations

import sys

from ycsb.core_workload import CoreWorkload
from ycsb.db import DB
from ycsb.sync import CountDownLatch, RateLimiter
from ycsb.utils import YcsbError

__all__ = ["client_thread"]


def client_thread(
    db: DB,
    workload: CoreWorkload,
    num_ops: int,
    is_loading: bool,
    init_db: bool,
    cleanup_db: bool,
    latch: CountDownLatch,
    rate_limiter: RateLimiter | None,
) -> int:
    """Run ``num_ops`` operations against ``db`` and return how many were issued.

    A benchmark error is reported on standard error and ends the run with exit status 1.
    """
    try:
        if init_db:
            db.init()

        ops = 0
        for _ in range(num_ops):
            if rate_limiter is not None:
                rate_limiter.consume(1)
            if is_loading:
                workload.do_insert(db)
            else:
                workload.do_transaction(db)
            ops += 1

        if cleanup_db:
            db.cleanup()

        latch.count_down()
        return ops
    except YcsbError as err:
        print(f"Caught exception: {err}", file=sys.stderr)
        raise SystemExit(1) from err