"""
Run the dispatch worker: forward score-completed events from Redis to the
results email, webhook and CRM sync functions.

Usage:
    python -m assessment_scoring.scripts.run_dispatch_worker
    python -m assessment_scoring.scripts.run_dispatch_worker --once   # handle one event and exit

Stops cleanly on SIGINT / SIGTERM.
"""

import argparse
import signal
import sys

import structlog

from assessment_scoring.core.logging import configure_logging
from assessment_scoring.shutdown import set_shutdown

logger = structlog.get_logger(__name__)


def _install_signal_handlers():
    def _handler(signum, frame):
        logger.info("shutdown_signal_received", signal=signal.Signals(signum).name)
        set_shutdown()

    for sig in (signal.SIGINT, signal.SIGTERM):
        signal.signal(sig, _handler)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Dispatch score-completed events downstream")
    parser.add_argument("--once", action="store_true", help="Handle at most one event, then exit")
    args = parser.parse_args(argv)

    configure_logging()

    from assessment_scoring.services.dispatch_queue import DispatchQueue
    from assessment_scoring.services.dispatch_worker import DispatchWorker

    worker = DispatchWorker(DispatchQueue())
    try:
        if args.once:
            worker.run_once()
        else:
            _install_signal_handlers()
            worker.run_forever()
    finally:
        worker.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
