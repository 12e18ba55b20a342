"""Rate conversion adapter (Frankfurter ``/latest``)."""

from __future__ import annotations

import logging

from atlas.shared.infrastructure.http.base import ConversionUnsupported, JSONServiceClient, TransportFailure

logger = logging.getLogger(__name__)


class RateConversionClient(JSONServiceClient):
    """Converts an amount between two currency codes."""

    SERVICE_NAME = "rates"

    async def convert(self, amount: float, source: str, target: str) -> float:
        """Return ``amount`` expressed in ``target``.

        Raises:
            ConversionUnsupported: Non-success status or target missing from ``rates``
            TransportFailure: Network-level failure or unreadable body
        """
        response = await self._get(
            "latest",
            params={"amount": amount, "from": source, "to": target},
        )
        if response.is_error:
            raise ConversionUnsupported(
                f"Conversion {source}->{target} rejected with HTTP {response.status_code}",
                service=self.SERVICE_NAME,
                status_code=response.status_code,
            )

        data = self._json(response)
        rates = data.get("rates") if isinstance(data, dict) else None
        if not isinstance(rates, dict) or target not in rates:
            raise ConversionUnsupported(
                f"Rate service returned no {target} rate",
                service=self.SERVICE_NAME,
            )

        try:
            return float(rates[target])
        except (TypeError, ValueError) as e:
            raise TransportFailure(
                f"Rate for {target} is not numeric: {rates[target]!r}",
                service=self.SERVICE_NAME,
            ) from e
