"""Response schemas for the experiment view and event endpoints."""
from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel
from typing import Any, Dict, List, Optional


class CamelModel(BaseModel):
    """Serializes with camelCase keys; accepts either casing on input."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class VariantDescription(CamelModel):
    variant: str
    description: str


class DashboardViewResponse(CamelModel):
    """Variants the visitor should see on the dashboard."""

    success: bool = True
    variants: Dict[str, str]
    variant_descriptions: Dict[str, VariantDescription]
    message: str = "Dashboard view with experiment variants; exposure has been logged."

    class Config:
        json_schema_extra = {
            "example": {
                "success": True,
                "variants": {"kpi_scorecard_layout": "B"},
                "variantDescriptions": {
                    "kpi_scorecard_layout": {"variant": "B", "description": "detailed_scorecard"}
                },
                "message": "Dashboard view with experiment variants; exposure has been logged."
            }
        }


class PricingViewResponse(CamelModel):
    """Single-experiment variant for the pricing page."""

    success: bool = True
    test_id: str
    variant: str
    description: str
    message: str = "Exposure logged for pricing view; log subscription_upgrade when user completes upgrade."


class EventLogRequest(CamelModel):
    """
    Body of POST /api/experiments/events.

    `event` and `variant` are left untyped so the route can answer a
    malformed value with a 400 instead of a schema error.
    """

    event: Optional[Any] = None
    test_id: Optional[str] = None
    variant: Optional[Any] = None

    class Config:
        json_schema_extra = {
            "example": {
                "event": "kpi_click",
                "testId": "kpi_scorecard_layout"
            }
        }


class EventLogResponse(CamelModel):
    success: bool = True
    message: str = "Event logged"
    event: str
    test_id: Optional[str] = None
    variant: Optional[str] = None


class ConfigResponse(BaseModel):
    """Active experiment definitions, as written in the config file."""

    success: bool = True
    experiments: List[Dict[str, Any]]
