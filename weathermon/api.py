"""HTTP API for the weather monitor."""

import datetime as dt
from dataclasses import asdict
from typing import Any, Dict, List, NoReturn, Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from pydantic import BaseModel

from .errors import (
    InvalidInput,
    NoDataForWindow,
    NotFound,
    PersistenceFailure,
    UpstreamError,
    WeatherMonitorError,
)
from .models import DailySummary, Observation
from .rate_limit import RateLimiter
from .service import WeatherService
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="api")


def get_rate_limiter(request: Request) -> Optional[RateLimiter]:
    """Return the limiter built at start-up, or None when limiting is off."""
    components = getattr(request.app.state, "components", None)
    return getattr(components, "rate_limiter", None)


def enforce_rate_limit(
    request: Request,
    response: Response,
    limiter: Optional[RateLimiter] = Depends(get_rate_limiter),
) -> None:
    """Count the request against its client and answer 429 once over the limit."""
    if limiter is None:
        return
    client = request.client.host if request.client else "unknown"
    result = limiter.hit(client)
    headers = {"X-RateLimit-Limit": str(result.limit), "X-RateLimit-Remaining": str(result.remaining)}
    if not result.allowed:
        logger.warning("Rate limit exceeded", extra={"client": client, "path": request.url.path})
        headers["Retry-After"] = str(result.retry_after_seconds)
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many requests, please try again later",
            headers=headers,
        )
    response.headers.update(headers)


router = APIRouter(dependencies=[Depends(enforce_rate_limit)])


class ObservationResponse(BaseModel):
    """Latest stored reading for a location; temperatures in °C."""
    location: str
    condition: str
    temperature: float
    feels_like: float
    humidity: float
    wind_speed: float
    observed_at: int
    recorded_at: dt.datetime

    @classmethod
    def from_observation(cls, obs: Observation) -> "ObservationResponse":
        return cls(**{**obs.to_dict(), "recorded_at": obs.recorded_at})


class SummaryResponse(BaseModel):
    """Daily statistics for one location."""
    location: str
    date: dt.date
    start: dt.datetime
    end: dt.datetime
    avg_temp: float
    max_temp: float
    min_temp: float
    dominant_condition: str
    avg_humidity: float
    avg_wind_speed: float
    sample_count: int

    @classmethod
    def from_summary(cls, summary: DailySummary) -> "SummaryResponse":
        return cls(**asdict(summary))


class LocationsResponse(BaseModel):
    locations: List[str]


def get_service(request: Request) -> WeatherService:
    """Return the WeatherService built at application start-up."""
    return request.app.state.components.service


def _raise_http(exc: WeatherMonitorError) -> NoReturn:
    """Translate a domain error into an HTTPException."""
    if isinstance(exc, InvalidInput):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    if isinstance(exc, (NotFound, NoDataForWindow)):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    if isinstance(exc, UpstreamError):
        logger.error("Upstream failure: %s", exc)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Weather provider unavailable") from exc
    if isinstance(exc, PersistenceFailure):
        logger.error("Storage failure: %s", exc)
    else:
        logger.error("Unhandled weather monitor error: %s", exc)
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error") from exc


@router.get("/locations", response_model=LocationsResponse)
def list_locations(service: WeatherService = Depends(get_service)):
    """Return the monitored locations in polling order."""
    return LocationsResponse(locations=service.locations())


@router.get("/weather/{location}", response_model=ObservationResponse)
def latest_weather(location: str, service: WeatherService = Depends(get_service)):
    """Return the most recent stored observation for a location."""
    try:
        observation = service.get_latest(location)
    except WeatherMonitorError as exc:
        _raise_http(exc)
    return ObservationResponse.from_observation(observation)


@router.get("/summary/{location}/{date}", response_model=SummaryResponse)
def daily_summary(location: str, date: str, service: WeatherService = Depends(get_service)):
    """Return the daily summary for a location and YYYY-MM-DD date."""
    try:
        summary = service.get_summary(location, date)
    except WeatherMonitorError as exc:
        _raise_http(exc)
    return SummaryResponse.from_summary(summary)


@router.get("/forecast/{location}")
def forecast(location: str, service: WeatherService = Depends(get_service)) -> Dict[str, Any]:
    """Return the provider's forecast payload, cached for 30 minutes."""
    try:
        return service.get_forecast(location)
    except WeatherMonitorError as exc:
        _raise_http(exc)
