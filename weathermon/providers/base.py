"""Interface the fetcher expects from a weather provider."""

from __future__ import annotations

from typing import Any, Dict, Protocol

from weathermon.models import Observation


class WeatherProvider(Protocol):
    """Anything that can return current conditions and a forecast for a location."""

    def current(self, location: str) -> Observation:
        """Return the current observation, temperatures already in display units.

        Raises UpstreamUnavailable or MalformedUpstreamData.
        """
        ...

    def forecast(self, location: str) -> Dict[str, Any]:
        """Return the provider-native forecast payload."""
        ...
