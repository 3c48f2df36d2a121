"""Build the pipeline's collaborators once, from settings."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import redis

from weathermon import config
from weathermon.aggregator import DailyAggregator
from weathermon.alerts import AlertTracker
from weathermon.cache_store import CacheStore, InMemoryCacheStore, RedisCacheStore
from weathermon.fetcher import WeatherFetcher
from weathermon.notifier import Notifier, build_notifier
from weathermon.observation_store import ObservationStore, SqlObservationStore
from weathermon.providers import OpenWeatherProvider, WeatherProvider
from weathermon.rate_limit import RateLimiter, build_rate_limiter
from weathermon.scheduler import PollScheduler
from weathermon.service import WeatherService
from weathermon.writer import ObservationWriter
from utils.logging_utils import get_tagged_logger, mask_url

logger = get_tagged_logger(__name__, tag="components")


def build_cache_store(settings: config.Settings) -> CacheStore:
    """Use Redis when configured and reachable, otherwise an in-memory cache."""
    if settings.redis_url:
        try:
            client = redis.Redis.from_url(settings.redis_url)
            client.ping()
            logger.info("Using RedisCacheStore", extra={"redis_url": mask_url(settings.redis_url)})
            return RedisCacheStore(client)
        except (redis.RedisError, ValueError) as exc:
            logger.warning("Falling back to InMemoryCacheStore (Redis unavailable)", extra={"error": str(exc)})
    return InMemoryCacheStore()


@dataclass
class Components:
    """Everything the API and the poller share; one AlertTracker per process."""
    settings: config.Settings
    cache: CacheStore
    store: ObservationStore
    provider: WeatherProvider
    fetcher: WeatherFetcher
    writer: ObservationWriter
    aggregator: DailyAggregator
    tracker: AlertTracker
    notifier: Notifier
    scheduler: PollScheduler
    service: WeatherService
    rate_limiter: Optional[RateLimiter] = None


def build_components(
    settings: config.Settings | None = None,
    *,
    cache: CacheStore | None = None,
    store: ObservationStore | None = None,
    provider: WeatherProvider | None = None,
    notifier: Notifier | None = None,
    rate_limiter: RateLimiter | None = None,
) -> Components:
    """Wire the pipeline; any collaborator can be passed in to replace the default."""
    settings = settings or config.settings
    locations = list(settings.locations)

    cache = cache if cache is not None else build_cache_store(settings)
    store = store if store is not None else SqlObservationStore.from_url(settings.database_url)
    provider = provider if provider is not None else OpenWeatherProvider.from_settings(settings)
    notifier = notifier if notifier is not None else build_notifier(settings)

    fetcher = WeatherFetcher(
        provider,
        cache,
        locations,
        current_ttl_seconds=settings.current_ttl_seconds,
        forecast_ttl_seconds=settings.forecast_ttl_seconds,
    )
    writer = ObservationWriter(store)
    aggregator = DailyAggregator(store, settings.timezone)
    tracker = AlertTracker(settings.alert_threshold_celsius, settings.alert_consecutive_readings)
    scheduler = PollScheduler(
        locations,
        fetcher,
        writer,
        tracker,
        notifier,
        interval_seconds=settings.poll_interval_seconds,
        poll_on_start=settings.poll_on_start,
    )
    service = WeatherService(locations, store, aggregator, fetcher)
    if rate_limiter is None:
        # reuse the cache's Redis connection when there is one
        redis_client = cache.client if isinstance(cache, RedisCacheStore) else None
        rate_limiter = build_rate_limiter(settings, redis_client)
    logger.info("Components ready", extra={"locations": locations, **settings.masked_urls()})
    return Components(
        settings=settings,
        cache=cache,
        store=store,
        provider=provider,
        fetcher=fetcher,
        writer=writer,
        aggregator=aggregator,
        tracker=tracker,
        notifier=notifier,
        scheduler=scheduler,
        service=service,
        rate_limiter=rate_limiter,
    )
