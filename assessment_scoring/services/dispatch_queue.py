"""
Dispatch Queue - Assessment Scoring Engine
assessment_scoring/services/dispatch_queue.py

Redis list carrying ScoreCompletedEvent messages from the scoring engine to
the dispatch worker. Producers LPUSH, the worker BRPOPs, so events are
delivered oldest first.
"""

from functools import lru_cache
from typing import Optional

import redis
import structlog
from pydantic import ValidationError

from assessment_scoring.config import settings
from assessment_scoring.models.score import ScoreCompletedEvent

logger = structlog.get_logger(__name__)


class DispatchQueue:
    def __init__(self, client: Optional[redis.Redis] = None, key: Optional[str] = None):
        self.client = client or redis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_connect_timeout=5,
        )
        self.key = key or settings.DISPATCH_QUEUE_KEY

    def publish(self, event: ScoreCompletedEvent) -> None:
        """Enqueue a completion event."""
        self.client.lpush(self.key, event.model_dump_json())

    def consume(self, timeout: int = 5) -> Optional[ScoreCompletedEvent]:
        """
        Block up to ``timeout`` seconds for the next event.

        Returns None on timeout. A payload that is not a valid event has
        already been popped; it is logged and dropped, also returning None.
        """
        item = self.client.brpop(self.key, timeout=timeout)
        if item is None:
            return None
        _, payload = item
        try:
            return ScoreCompletedEvent.model_validate_json(payload)
        except ValidationError as e:
            logger.error(
                "dispatch_event_invalid",
                queue=self.key,
                payload=str(payload)[:500],
                error=str(e),
            )
            return None

    def depth(self) -> int:
        """Number of events waiting."""
        return self.client.llen(self.key)


# ---- FastAPI dependency singleton ----
@lru_cache
def get_dispatch_queue() -> DispatchQueue:
    return DispatchQueue()
