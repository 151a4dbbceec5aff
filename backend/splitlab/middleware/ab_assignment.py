"""A/B assignment dependency.

Runs before any handler that needs experiment context: reads the visitor
and per-experiment cookies, lets the AssignmentEngine recall or draw
variants, writes cookies for anything new, and publishes the result on
request.state (experiment_visitor_id, ab_variants) for exposure logging,
event logging and any other handler.

Two concurrent first requests from the same new visitor can each draw a
variant; whichever Set-Cookie the client stores last wins. Stickiness holds
from the next request on. No server-side assignment record is kept.
"""
import hashlib
import hmac
from fastapi import Depends, Request, Response
from typing import Optional

from splitlab.config import Settings, get_settings
from splitlab.dependencies import get_assignment_engine, get_config_store
from splitlab.services.assignment import AssignmentEngine, AssignmentResult
from splitlab.services.experiment_config import ExperimentConfigStore

VISITOR_COOKIE_NAME = "ab_visitor_id"
VARIANT_COOKIE_PREFIX = "ab_"


def variant_cookie_name(test_id: str) -> str:
    return f"{VARIANT_COOKIE_PREFIX}{test_id}"


def _signature(value: str, secret: str) -> str:
    return hmac.new(secret.encode(), value.encode(), hashlib.sha256).hexdigest()


def sign_value(value: str, secret: str) -> str:
    """Append an HMAC-SHA256 signature; no-op when secret is empty."""
    if not secret:
        return value
    return f"{value}.{_signature(value, secret)}"


def unsign_value(raw: Optional[str], secret: str) -> Optional[str]:
    """
    Return the original value, or None if the signature does not verify.

    Tampered or unsigned cookies read as absent and get a fresh assignment.
    This includes cookies issued before a secret was configured.
    """
    if not raw or not secret:
        return raw or None

    value, sep, signature = raw.rpartition(".")
    if not sep or not hmac.compare_digest(signature, _signature(value, secret)):
        return None
    return value


def write_assignment_cookies(response: Response, result: AssignmentResult, settings: Settings) -> None:
    """Set cookies for a newly minted visitor id and newly drawn variants."""
    max_age = settings.cookie_max_age_days * 24 * 60 * 60
    cookies = {
        variant_cookie_name(test_id): variant
        for test_id, variant in result.new_assignments.items()
    }
    if result.new_visitor:
        cookies[VISITOR_COOKIE_NAME] = result.visitor_id

    for name, value in cookies.items():
        response.set_cookie(
            name,
            sign_value(value, settings.cookie_secret),
            max_age=max_age,
            httponly=True,
            samesite="lax",
            secure=settings.cookie_secure
        )


def get_variant_context(
    request: Request,
    response: Response,
    engine: AssignmentEngine = Depends(get_assignment_engine),
    config_store: ExperimentConfigStore = Depends(get_config_store),
    settings: Settings = Depends(get_settings)
) -> AssignmentResult:
    """
    Dependency that assigns variants for every active experiment.

    Usage:
        @router.get("/widget")
        def widget(context: AssignmentResult = Depends(get_variant_context)):
            return {"variant": context.variants.get("my_test")}
    """
    secret = settings.cookie_secret
    experiments = config_store.get_experiments()

    visitor_token = unsign_value(request.cookies.get(VISITOR_COOKIE_NAME), secret)
    variant_tokens = {
        exp.test_id: unsign_value(request.cookies.get(variant_cookie_name(exp.test_id)), secret)
        for exp in experiments
    }

    result = engine.assign(visitor_token, variant_tokens, experiments)
    write_assignment_cookies(response, result, settings)

    request.state.experiment_visitor_id = result.visitor_id
    request.state.ab_variants = result.variants
    return result
