"""Experiment endpoints.

End-to-end flow:
- GET /dashboard and /pricing-view assign variants and log exposure on load
- POST /events logs a tracked action, attributed to the visitor's variant
- GET /results aggregates both logs (API key required)
"""
from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from typing import Optional

from splitlab.config import Settings, get_settings
from splitlab.dependencies import get_config_store, get_event_recorder, get_results_aggregator
from splitlab.middleware.ab_assignment import get_variant_context, write_assignment_cookies
from splitlab.middleware.auth import get_current_user
from splitlab.middleware.exposure_logging import ExposureLogging
from splitlab.middleware.logging import get_logger
from splitlab.models.user import User
from splitlab.schemas.experiment import is_valid_variant
from splitlab.schemas.results import ResultsResponse
from splitlab.schemas.views import (
    ConfigResponse,
    DashboardViewResponse,
    EventLogRequest,
    EventLogResponse,
    PricingViewResponse,
    VariantDescription,
)
from splitlab.services.assignment import AssignmentResult
from splitlab.services.event_logger import EventRecorder, InvalidEventError, resolve_variant
from splitlab.services.experiment_config import ExperimentConfigStore
from splitlab.services.log_store import ExperimentStoreError
from splitlab.services.results import ResultsAggregator

router = APIRouter(prefix="/api/experiments")
logger = get_logger()

PRICING_EXPERIMENT_ID = "pricing_cta_upgrade"
PRICING_FALLBACK_DESCRIPTIONS = {"A": "standard_cta", "B": "value_cta"}


@router.get(
    "/dashboard",
    response_model=DashboardViewResponse,
    dependencies=[Depends(ExposureLogging())]
)
def dashboard_view(context: AssignmentResult = Depends(get_variant_context)):
    """
    Dashboard view with experiment variants.

    Assignment runs first, then exposure is logged for every configured
    experiment; the client renders the layout/onboarding it is told to.
    """
    variant_descriptions = {}
    for exp in context.experiments:
        variant = context.variants.get(exp.test_id, "A")
        variant_descriptions[exp.test_id] = VariantDescription(
            variant=variant,
            description=exp.variants.get(variant) or exp.variants["A"]
        )

    return DashboardViewResponse(
        variants=context.variants,
        variant_descriptions=variant_descriptions
    )


def _bad_request(error: str, context: AssignmentResult, settings: Settings) -> JSONResponse:
    response = JSONResponse(status_code=400, content={"success": False, "error": error})
    # A directly returned response skips the dependency's cookies
    write_assignment_cookies(response, context, settings)
    return response


@router.post("/events", response_model=EventLogResponse)
def log_event(
    payload: Optional[EventLogRequest] = None,
    context: AssignmentResult = Depends(get_variant_context),
    recorder: EventRecorder = Depends(get_event_recorder),
    settings: Settings = Depends(get_settings)
):
    """
    Log a user interaction event (e.g. KPI click, tooltip open, upgrade).

    Body: {"event": str, "testId"?: str, "variant"?: "A" | "B"}.
    Assignment runs first so the event can inherit the visitor's variant.
    """
    payload = payload or EventLogRequest()

    if payload.variant is not None and not is_valid_variant(payload.variant):
        logger.warning("event_rejected", reason="invalid_variant", test_id=payload.test_id)
        return _bad_request('Invalid "variant" in body; expected "A" or "B"', context, settings)

    try:
        recorder.log_event(
            context.visitor_id,
            payload.event,
            context.variants,
            test_id=payload.test_id,
            variant=payload.variant
        )
    except InvalidEventError as e:
        logger.warning("event_rejected", reason="invalid_event", test_id=payload.test_id)
        return _bad_request(str(e), context, settings)

    return EventLogResponse(
        event=payload.event,
        test_id=payload.test_id or None,
        variant=resolve_variant(payload.test_id, payload.variant, context.variants)
    )


@router.get(
    "/pricing-view",
    response_model=PricingViewResponse,
    dependencies=[Depends(ExposureLogging([PRICING_EXPERIMENT_ID]))]
)
def pricing_view(context: AssignmentResult = Depends(get_variant_context)):
    """
    Pricing page for the subscription-upgrade flow.

    Logs exposure for pricing_cta_upgrade only. The client logs
    subscription_upgrade via POST /events when the upgrade completes.
    """
    variant = context.variants.get(PRICING_EXPERIMENT_ID, "A")
    experiment = context.experiment(PRICING_EXPERIMENT_ID)
    description = (experiment.variants.get(variant) if experiment else None) \
        or PRICING_FALLBACK_DESCRIPTIONS[variant]

    return PricingViewResponse(
        test_id=PRICING_EXPERIMENT_ID,
        variant=variant,
        description=description
    )


@router.get("/config", response_model=ConfigResponse)
def experiments_config(config_store: ExperimentConfigStore = Depends(get_config_store)):
    """Active experiments, for clients or traffic simulation."""
    return ConfigResponse(experiments=[
        exp.model_dump(exclude_unset=True) for exp in config_store.get_experiments()
    ])


@router.get("/results", response_model=ResultsResponse)
def experiment_results(
    user: User = Depends(get_current_user),
    aggregator: ResultsAggregator = Depends(get_results_aggregator)
):
    """
    Aggregated A/B results: exposures, events and conversion rate per variant.

    Raw rates only; leadingVariant is a display hint, not a significance claim.
    """
    try:
        summary = aggregator.compute_results()
    except ExperimentStoreError as e:
        logger.error("results_failed", user_id=str(user.id), error=str(e))
        raise HTTPException(
            status_code=503,
            detail="Experiment logs are unavailable. Please try again shortly."
        )

    return ResultsResponse(**summary.model_dump())
