"""Persist fetched observations to the durable store."""

from weathermon.errors import PersistenceFailure
from weathermon.models import Observation
from weathermon.observation_store import ObservationStore
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="writer")


class ObservationWriter:
    """Thin wrapper that turns any store error into PersistenceFailure."""

    def __init__(self, store: ObservationStore) -> None:
        self.store = store

    def persist(self, observation: Observation) -> None:
        """Append `observation`; its `recorded_at` is derived from `observed_at`."""
        try:
            self.store.save(observation)
        except Exception as exc:
            raise PersistenceFailure(
                f"Could not store observation for {observation.location} at {observation.observed_at}: {exc}"
            ) from exc
        logger.debug(
            "Stored observation",
            extra={"location": observation.location, "recorded_at": observation.recorded_at.isoformat()},
        )
