"""Pydantic schemas for request/response validation."""
from splitlab.schemas.experiment import ExperimentConfig, ExperimentDefinition, VARIANTS
from splitlab.schemas.records import EventRecord, ExposureRecord
from splitlab.schemas.results import ExperimentResult, ResultsResponse, ResultsSummary, VariantResult
from splitlab.schemas.views import (
    ConfigResponse,
    DashboardViewResponse,
    EventLogRequest,
    EventLogResponse,
    PricingViewResponse,
)

__all__ = [
    "ExperimentConfig", "ExperimentDefinition", "VARIANTS",
    "EventRecord", "ExposureRecord",
    "ExperimentResult", "ResultsResponse", "ResultsSummary", "VariantResult",
    "ConfigResponse", "DashboardViewResponse", "EventLogRequest", "EventLogResponse", "PricingViewResponse",
]
