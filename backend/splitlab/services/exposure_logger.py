"""Exposure recording: which variant a visitor was shown on a route visit."""
from typing import Iterable, Mapping, Optional

from splitlab.middleware.logging import get_logger
from splitlab.schemas.records import ExposureRecord, utc_now
from splitlab.services.log_store import ExperimentLogStore, ExperimentStoreError

logger = get_logger()


class ExposureRecorder:
    """Best-effort exposure telemetry; never fails the request it runs in."""

    def __init__(self, store: ExperimentLogStore):
        self.store = store

    def log_exposure(
        self,
        visitor_id: Optional[str],
        test_ids: Iterable[str],
        variants: Mapping[str, str]
    ) -> int:
        """
        Append one exposure per test_id that has a resolved variant.

        Repeat visits append repeat exposures; the conversion-rate
        denominator is exposure events, not unique visitors.

        Returns:
            Number of records appended (0 when assignment has not run)
        """
        if not visitor_id:
            return 0

        timestamp = utc_now()
        logged = 0
        for test_id in test_ids:
            variant = variants.get(test_id)
            if not variant:
                continue
            try:
                self.store.append_exposure(ExposureRecord(
                    user_or_session_id=visitor_id,
                    test_id=test_id,
                    variant=variant,
                    timestamp=timestamp
                ))
            except ExperimentStoreError as e:
                logger.warning(
                    "exposure_log_failed",
                    visitor_id=visitor_id,
                    test_id=test_id,
                    error=str(e)
                )
                continue
            logged += 1

        if logged:
            logger.info("exposure_logged", visitor_id=visitor_id, count=logged)
        return logged
