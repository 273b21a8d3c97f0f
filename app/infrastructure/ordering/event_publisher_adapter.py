"""
Adapters: Outbox relay targets.

Implement the EventPublisher port used by the outbox dispatcher.
    LoggingEventPublisherAdapter -- writes each event to the log.
    WebhookEventPublisherAdapter -- POSTs each event to an HTTP endpoint.
"""

import logging
from typing import Any

import httpx

from app.domain.ordering.entities import OutboxRecord
from app.domain.ordering.errors import EventPublicationError
from app.domain.ordering.ports import EventPublisher

logger = logging.getLogger(__name__)


def record_to_dict(record: OutboxRecord) -> dict[str, Any]:
    """Convert an outbox record to a JSON-serializable dict."""
    return {
        "id": record.id,
        "type": record.type,
        "payload": record.payload,
        "occurred_at": record.occurred_at.isoformat(),
    }


class LoggingEventPublisherAdapter(EventPublisher):
    """Relays events to the application log."""

    async def deliver(self, record: OutboxRecord) -> None:
        logger.info("Domain event %s id=%s", record.type, record.id)


class WebhookEventPublisherAdapter(EventPublisher):
    """Relays events to a webhook; a 2xx answer confirms delivery."""

    def __init__(self, client: httpx.AsyncClient, url: str) -> None:
        self._client = client
        self._url = url

    async def deliver(self, record: OutboxRecord) -> None:
        try:
            response = await self._client.post(
                self._url,
                json=record_to_dict(record),
                headers={"X-Order-Event": record.type},
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise EventPublicationError(
                f"Webhook delivery of {record.id} to {self._url} failed: {exc}"
            ) from exc
