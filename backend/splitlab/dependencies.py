"""Service wiring for FastAPI routes.

Each long-lived collaborator is created once per process and handed to
routes through Depends(); tests swap them with app.dependency_overrides.
"""
from fastapi import Depends
from functools import lru_cache

from splitlab.config import get_settings
from splitlab.services.assignment import AssignmentEngine
from splitlab.services.event_logger import EventRecorder
from splitlab.services.experiment_config import ExperimentConfigStore
from splitlab.services.exposure_logger import ExposureRecorder
from splitlab.services.log_store import ExperimentLogStore, get_log_store
from splitlab.services.results import ResultsAggregator


@lru_cache()
def get_config_store() -> ExperimentConfigStore:
    """Experiment definitions from settings.experiments_config_path."""
    return ExperimentConfigStore(get_settings().experiments_config_path)


@lru_cache()
def get_assignment_engine() -> AssignmentEngine:
    return AssignmentEngine()


def get_exposure_recorder(store: ExperimentLogStore = Depends(get_log_store)) -> ExposureRecorder:
    return ExposureRecorder(store)


def get_event_recorder(store: ExperimentLogStore = Depends(get_log_store)) -> EventRecorder:
    return EventRecorder(store)


def get_results_aggregator(
    config_store: ExperimentConfigStore = Depends(get_config_store),
    store: ExperimentLogStore = Depends(get_log_store)
) -> ResultsAggregator:
    return ResultsAggregator(config_store, store)
