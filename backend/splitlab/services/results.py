"""Results aggregation over the exposure and event logs."""
from typing import Dict, List, Optional

from splitlab.middleware.logging import get_logger
from splitlab.schemas.experiment import VARIANTS, ExperimentDefinition
from splitlab.schemas.records import EventRecord, ExposureRecord, utc_now
from splitlab.schemas.results import ExperimentResult, ResultsSummary, VariantResult
from splitlab.services.experiment_config import ExperimentConfigStore
from splitlab.services.log_store import ExperimentLogStore

logger = get_logger()


def conversion_rate(events: int, exposures: int) -> float:
    """events / exposures, or 0.0 when nothing was exposed."""
    return events / exposures if exposures else 0.0


def leading_variant(results: Dict[str, VariantResult]) -> Optional[str]:
    """
    Variant with the strictly higher raw conversion rate.

    None when both rates are zero or they are equal. This is a display
    hint, not a significance test.
    """
    rate_a = results["A"].conversion_rate
    rate_b = results["B"].conversion_rate
    if rate_a == rate_b:
        return None
    return "A" if rate_a > rate_b else "B"


class ResultsAggregator:
    """
    Computes per-experiment, per-variant exposure/event counts on demand.

    Nothing is cached or maintained incrementally: each call scans both logs
    once, so results can never drift from the logs they summarize. Safe to
    call concurrently with writers.
    """

    def __init__(self, config_store: ExperimentConfigStore, log_store: ExperimentLogStore):
        self.config_store = config_store
        self.log_store = log_store

    def compute_results(self) -> ResultsSummary:
        """
        Aggregate results for every configured experiment.

        Only events whose test_id matches and whose name is the experiment's
        target_event count as conversions; events without a variant are
        included in total_events but never in a per-variant count.

        Raises:
            ExperimentStoreError: If either log cannot be scanned
        """
        experiments = self.config_store.get_experiments()
        exposures = self.log_store.list_exposures()
        events = self.log_store.list_events()

        summary = ResultsSummary(
            experiments=[self._aggregate(exp, exposures, events) for exp in experiments],
            total_exposures=len(exposures),
            total_events=len(events),
            generated_at=utc_now()
        )

        logger.info(
            "results_computed",
            experiments=len(summary.experiments),
            total_exposures=summary.total_exposures,
            total_events=summary.total_events
        )
        return summary

    def _aggregate(
        self,
        experiment: ExperimentDefinition,
        exposures: List[ExposureRecord],
        events: List[EventRecord]
    ) -> ExperimentResult:
        counts = {variant: {"exposures": 0, "events": 0} for variant in VARIANTS}

        for exposure in exposures:
            if exposure.test_id == experiment.test_id and exposure.variant in counts:
                counts[exposure.variant]["exposures"] += 1

        for event in events:
            if (
                event.test_id == experiment.test_id
                and event.event_name == experiment.target_event
                and event.variant in counts
            ):
                counts[event.variant]["events"] += 1

        results = {
            variant: VariantResult(
                exposures=c["exposures"],
                events=c["events"],
                conversion_rate=conversion_rate(c["events"], c["exposures"])
            )
            for variant, c in counts.items()
        }

        return ExperimentResult(
            test_id=experiment.test_id,
            description=experiment.description,
            target_event=experiment.target_event,
            variants={variant: experiment.label(variant) for variant in VARIANTS},
            results=results,
            leading_variant=leading_variant(results)
        )
