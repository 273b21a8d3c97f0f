"""
Adapters: Pricing service.

Implement the PricingService port.
    HttpPricingAdapter   -- queries the external pricing API over HTTP.
    StaticPricingAdapter -- serves prices from a configured catalogue.
"""

import logging
from decimal import Decimal, InvalidOperation
from typing import Mapping, Optional

import httpx

from app.domain.ordering.entities import Money
from app.domain.ordering.errors import PricingUnavailableError
from app.domain.ordering.ports import PricingService

logger = logging.getLogger(__name__)

HTTP_NOT_FOUND = 404


class HttpPricingAdapter(PricingService):
    """Calls ``GET {base_url}/prices/{sku}?currency=XXX``.

    Expects a JSON body ``{"amount": <number|string>, "currency": "EUR"}``.
    A 404 means the product has no price; anything else that is not a
    2xx response is a backend failure. No retries are made here.
    """

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def get_current_price(self, sku: str, currency: str) -> Optional[Money]:
        try:
            response = await self._client.get(
                f"/prices/{sku}", params={"currency": currency}
            )
        except httpx.HTTPError as exc:
            logger.warning("Pricing request for %s failed: %s", sku, exc)
            raise PricingUnavailableError(sku, "Pricing service unreachable") from exc

        if response.status_code == HTTP_NOT_FOUND:
            return None
        if response.is_error:
            raise PricingUnavailableError(
                sku, f"Pricing service answered {response.status_code}"
            )

        try:
            body = response.json()
            amount = Decimal(str(body["amount"]))
        except (ValueError, KeyError, TypeError, InvalidOperation) as exc:
            raise PricingUnavailableError(
                sku, "Pricing service returned a malformed body"
            ) from exc

        return Money(amount=amount, currency=body.get("currency") or currency)


class StaticPricingAdapter(PricingService):
    """Looks prices up in a ``{sku: {currency: amount}}`` catalogue."""

    def __init__(self, prices: Optional[Mapping[str, Mapping[str, Decimal]]] = None) -> None:
        self._prices = {
            sku: {cur: Decimal(str(amount)) for cur, amount in by_currency.items()}
            for sku, by_currency in (prices or {}).items()
        }

    async def get_current_price(self, sku: str, currency: str) -> Optional[Money]:
        amount = self._prices.get(sku, {}).get(currency)
        if amount is None:
            return None
        return Money(amount=amount, currency=currency)
