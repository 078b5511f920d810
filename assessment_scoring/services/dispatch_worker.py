"""
Dispatch Worker - Assessment Scoring Engine
assessment_scoring/services/dispatch_worker.py

Consumes ScoreCompletedEvent messages and forwards {"lead_id": ...} to every
enabled downstream channel (results email, webhook, CRM sync).

Each channel is attempted independently; one channel failing never blocks
the others or stops the loop. The loop exits once the shared shutdown flag
is set.
"""

import time
from typing import Dict, Optional

import httpx
import redis
import structlog

from assessment_scoring.config import settings
from assessment_scoring.models.score import ScoreCompletedEvent
from assessment_scoring.services.dispatch_queue import DispatchQueue
from assessment_scoring.shutdown import is_shutting_down

logger = structlog.get_logger(__name__)


class DispatchWorker:
    """Forward completion events to downstream delivery functions."""

    def __init__(
        self,
        queue: DispatchQueue,
        client: Optional[httpx.Client] = None,
        endpoints: Optional[Dict[str, str]] = None,
        service_key: Optional[str] = None,
    ):
        self.queue = queue
        self.client = client or httpx.Client(timeout=settings.DISPATCH_TIMEOUT_SECONDS)
        self.endpoints = endpoints if endpoints is not None else settings.dispatch_endpoints
        if service_key is None and settings.DISPATCH_SERVICE_KEY is not None:
            service_key = settings.DISPATCH_SERVICE_KEY.get_secret_value()
        self.service_key = service_key

    @property
    def headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.service_key:
            headers["Authorization"] = f"Bearer {self.service_key}"
        return headers

    def dispatch(self, event: ScoreCompletedEvent) -> Dict[str, bool]:
        """
        POST the event's lead id to every channel.

        Returns:
            Channel name -> delivered successfully
        """
        results: Dict[str, bool] = {}
        for channel, url in self.endpoints.items():
            try:
                response = self.client.post(url, json={"lead_id": event.lead_id}, headers=self.headers)
                response.raise_for_status()
                results[channel] = True
                logger.info("dispatch_sent", channel=channel, lead_id=event.lead_id)
            except httpx.HTTPStatusError as e:
                results[channel] = False
                logger.error(
                    "dispatch_failed",
                    channel=channel,
                    lead_id=event.lead_id,
                    status_code=e.response.status_code,
                    body=e.response.text[:200],
                )
            except httpx.HTTPError as e:
                results[channel] = False
                logger.error("dispatch_failed", channel=channel, lead_id=event.lead_id, error=str(e))
        return results

    def run_once(self, timeout: Optional[int] = None) -> Optional[Dict[str, bool]]:
        """Handle at most one event. Returns None when the queue was empty."""
        event = self.queue.consume(timeout=timeout or settings.DISPATCH_POLL_TIMEOUT_SECONDS)
        if event is None:
            return None
        return self.dispatch(event)

    def run_forever(self) -> int:
        """Process events until shutdown. Returns the number of events handled."""
        handled = 0
        logger.info("dispatch_worker_started", channels=list(self.endpoints))
        while not is_shutting_down():
            try:
                if self.run_once() is not None:
                    handled += 1
            except redis.RedisError as e:
                logger.error("dispatch_queue_unavailable", error=str(e))
                time.sleep(settings.DISPATCH_POLL_TIMEOUT_SECONDS)
        logger.info("dispatch_worker_stopped", handled=handled)
        return handled

    def close(self) -> None:
        self.client.close()
