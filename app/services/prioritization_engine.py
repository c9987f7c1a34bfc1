"""
Prioritization Engine - the facade consumed by the dashboard.

DESIGN PRINCIPLES:
- Weights live in ONE slot; replacement is a single reference swap
- Every operation reads the slot ONCE at its start and uses that snapshot
- An invalid replacement is rejected BEFORE the swap; old weights stay in effect
- Ranking is a full recomputation on every call
- Capacity projection is a read-only reporting query
"""

from datetime import datetime, timedelta
from fractions import Fraction
from typing import Callable, Dict, List, Optional, Union
import logging

from app.core.settings import settings
from app.models.priority import (
    InvalidWeightsError,
    PrioritizedRequest,
    ProjectionResult,
    RankingFilters,
    RankingSummary,
    WeightSet,
)
from app.services.capacity_projection import as_rate, crews_to_capacity, measure_throughput, project
from app.services.metric_extraction import RECURRENCE_WINDOW_DAYS, RiskLookup
from app.services.ranking import apply_filters, in_scope, rank, summarize
from app.services.repositories.base import (
    NeighborhoodRiskRegistry,
    ServiceRequestRepository,
    neighborhood_key,
)
from app.utils.time_helpers import utc_now

logger = logging.getLogger(__name__)


class PrioritizationEngine:
    """
    Holds the current WeightSet and runs ranking/projection passes against
    the collaborators' published snapshots.
    """

    def __init__(
        self,
        repository: ServiceRequestRepository,
        risk_registry: NeighborhoodRiskRegistry,
        weights: Optional[WeightSet] = None,
        clock: Callable[[], datetime] = utc_now,
        throughput_window_days: Optional[int] = None,
        crew_daily_throughput: Optional[float] = None,
    ):
        self.repository = repository
        self.risk_registry = risk_registry
        self.clock = clock
        self.throughput_window_days = throughput_window_days or settings.THROUGHPUT_WINDOW_DAYS
        self.crew_daily_throughput = (
            crew_daily_throughput if crew_daily_throughput is not None else settings.CREW_DAILY_THROUGHPUT
        )
        self._weights: WeightSet = weights or default_weights()

    # Weights

    def get_weights(self) -> WeightSet:
        return self._weights

    def set_weights(self, new_weights: Union[WeightSet, Dict]) -> WeightSet:
        """
        Replace the current weights wholesale.

        Raises:
            InvalidWeightsError: the replacement is malformed; nothing changes
        """
        try:
            validated = WeightSet.create(new_weights)
        except InvalidWeightsError as e:
            logger.warning(f"Rejected weight replacement: {e}")
            raise

        previous = self._weights
        self._weights = validated
        logger.info(f"Weights replaced: {previous.as_dict()} -> {validated.as_dict()}")
        return validated

    def reset_weights(self) -> WeightSet:
        return self.set_weights(default_weights())

    # Ranking

    def _risk_lookup(self) -> RiskLookup:
        """Snapshot the registry once so a pass never sees a half-updated registry."""
        records = {neighborhood_key(r.neighborhood): r for r in self.risk_registry.list_records()}
        return lambda neighborhood: records.get(neighborhood_key(neighborhood))

    def _rank_backlog(self, now: datetime) -> List[PrioritizedRequest]:
        weights = self._weights
        open_requests = self.repository.list_open_requests()
        history = self.repository.list_resolved_requests(since=now - timedelta(days=RECURRENCE_WINDOW_DAYS))
        return rank(open_requests, weights, self._risk_lookup(), now, history=history)

    def get_ranked_list(self, filters: Optional[RankingFilters] = None) -> List[PrioritizedRequest]:
        now = self.clock()
        ranked = self._rank_backlog(now)
        visible = apply_filters(ranked, filters)
        if filters is not None:
            logger.debug(f"Filters kept {len(visible)} of {len(ranked)} ranked requests")
        return visible

    def get_summary(self, filters: Optional[RankingFilters] = None) -> RankingSummary:
        return summarize(self.get_ranked_list(filters))

    # Capacity

    def current_throughput(
        self,
        now: Optional[datetime] = None,
        filters: Optional[RankingFilters] = None,
    ) -> Fraction:
        """Resolutions per day over the trailing window, limited to the filters' scope."""
        now = now or self.clock()
        since = now - timedelta(days=self.throughput_window_days)
        resolved = [
            request for request in self.repository.list_resolved_requests(since=since)
            if in_scope(request, filters)
        ]
        return measure_throughput(resolved, since, now)

    def project_capacity(
        self,
        capacity_delta: float = 0,
        extra_crews: int = 0,
        filters: Optional[RankingFilters] = None,
    ) -> ProjectionResult:
        """
        What-if clearance estimate for the current backlog.

        Args:
            capacity_delta: Extra resolutions per day
            extra_crews: Extra crews, converted with CREW_DAILY_THROUGHPUT
            filters: Scope of the projection, e.g. one secretariat. The backlog
                is filtered like the ranked list and throughput only counts
                resolved requests of the same secretariat, category and neighborhood
        """
        now = self.clock()
        backlog = apply_filters(self._rank_backlog(now), filters)
        delta = crews_to_capacity(extra_crews, self.crew_daily_throughput) + as_rate(capacity_delta)
        return project(backlog, self.current_throughput(now, filters), delta)


def default_weights() -> WeightSet:
    return WeightSet.create(settings.default_weights())


# Global engine instance (singleton pattern)
_engine: Optional[PrioritizationEngine] = None


def get_prioritization_engine() -> PrioritizationEngine:
    """
    Get or create the PrioritizationEngine singleton.

    Returns:
        PrioritizationEngine: The global engine instance
    """
    global _engine
    if _engine is None:
        from app.services.repositories import get_collaborators

        repository, risk_registry = get_collaborators()
        _engine = PrioritizationEngine(repository, risk_registry)
    return _engine
