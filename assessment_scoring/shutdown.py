"""
assessment_scoring/shutdown.py

Shared shutdown flag for graceful termination of background work.
main.py and the dispatch worker both import from here.
"""

import threading

_shutdown_event = threading.Event()


def set_shutdown():
    """Signal that the process is shutting down."""
    _shutdown_event.set()


def is_shutting_down() -> bool:
    """Check if the process is shutting down. Polled by the dispatch worker."""
    return _shutdown_event.is_set()


def reset_shutdown():
    """Clear the flag (tests and worker restarts)."""
    _shutdown_event.clear()
