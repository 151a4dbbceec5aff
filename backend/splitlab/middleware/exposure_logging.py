"""Exposure logging dependency.

Declared per route after assignment. Logs one exposure per in-scope
experiment on every visit, even if the visitor then does nothing.
"""
from fastapi import Depends
from typing import Optional, Sequence

from splitlab.dependencies import get_exposure_recorder
from splitlab.middleware.ab_assignment import get_variant_context
from splitlab.services.assignment import AssignmentResult
from splitlab.services.exposure_logger import ExposureRecorder


class ExposureLogging:
    """
    Route dependency that records exposures for a fixed or dynamic set of tests.

    Args:
        test_ids: Experiments this route exposes. None means every experiment
            the request was assigned against, so new experiments need no route change.

    Usage:
        @router.get("/pricing-view", dependencies=[Depends(ExposureLogging(["pricing_cta_upgrade"]))])
    """

    def __init__(self, test_ids: Optional[Sequence[str]] = None):
        self.test_ids = list(test_ids) if test_ids is not None else None

    def __call__(
        self,
        context: AssignmentResult = Depends(get_variant_context),
        recorder: ExposureRecorder = Depends(get_exposure_recorder)
    ) -> int:
        test_ids = self.test_ids
        if test_ids is None:
            test_ids = [exp.test_id for exp in context.experiments]
        if not test_ids:
            return 0
        return recorder.log_exposure(context.visitor_id, test_ids, context.variants)
