"""Country lookup adapter (restcountries v3.1 ``/name/{name}``)."""

from __future__ import annotations

import logging
from urllib.parse import quote

from atlas.shared.domain.models import Country
from atlas.shared.infrastructure.http.base import JSONServiceClient, LookupFailure

logger = logging.getLogger(__name__)


class CountryLookupClient(JSONServiceClient):
    """Looks countries up by display name."""

    SERVICE_NAME = "countries"

    async def lookup(self, name: str) -> Country:
        """Return the first candidate for ``name``.

        Raises:
            LookupFailure: Non-success status, empty result or unusable candidate
            TransportFailure: Network-level failure
        """
        response = await self._get(f"name/{quote(name, safe='')}")
        if response.status_code == 404:
            raise LookupFailure(f"No country named {name!r}", service=self.SERVICE_NAME, status_code=404)
        if response.is_error:
            raise LookupFailure(
                f"Lookup for {name!r} failed with HTTP {response.status_code}",
                service=self.SERVICE_NAME,
                status_code=response.status_code,
            )

        candidates = self._json(response)
        if not isinstance(candidates, list) or not candidates:
            raise LookupFailure(f"No candidate returned for {name!r}", service=self.SERVICE_NAME)

        try:
            return Country.from_api(candidates[0])
        except (ValueError, TypeError, AttributeError) as e:
            raise LookupFailure(
                f"Unusable candidate for {name!r}: {e}",
                service=self.SERVICE_NAME,
            ) from e
