"""
Exceptions raised by the weather monitor.
"""


class WeatherMonitorError(Exception):
    """Base exception for weather monitor errors."""

    pass


class InvalidInput(WeatherMonitorError):
    """Caller supplied a malformed argument (e.g. a bad date string)."""

    pass


class InvalidLocation(InvalidInput):
    """Location is not part of the monitored set."""

    def __init__(self, location: str):
        super().__init__(f"Invalid location: {location!r}")
        self.location = location


class NotFound(WeatherMonitorError):
    """No stored observation exists yet."""

    pass


class NoDataForWindow(WeatherMonitorError):
    """A summary was requested for a window with no observations."""

    def __init__(self, location: str, day):
        super().__init__(f"No observations for {location} on {day}")
        self.location = location
        self.day = day


class UpstreamError(WeatherMonitorError):
    """Base for failures talking to the weather provider."""

    pass


class UpstreamUnavailable(UpstreamError):
    """Provider could not be reached, timed out, or answered with an HTTP error."""

    pass


class MalformedUpstreamData(UpstreamError):
    """Provider answered, but the payload is not shaped as expected."""

    pass


class PersistenceFailure(WeatherMonitorError):
    """Writing to the durable store failed."""

    pass
