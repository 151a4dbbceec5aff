"""Aggregated A/B results schemas."""
from pydantic import Field
from typing import Dict, List, Optional
from datetime import datetime

from splitlab.schemas.views import CamelModel


class VariantResult(CamelModel):
    exposures: int = 0
    events: int = 0
    conversion_rate: float = 0.0


class ExperimentResult(CamelModel):
    test_id: str
    description: str
    target_event: str
    variants: Dict[str, str]
    results: Dict[str, VariantResult]
    # Display hint only: higher raw conversion rate, no significance test
    leading_variant: Optional[str] = None


class ResultsSummary(CamelModel):
    experiments: List[ExperimentResult] = Field(default_factory=list)
    total_exposures: int = 0
    total_events: int = 0
    generated_at: datetime


class ResultsResponse(ResultsSummary):
    success: bool = True
