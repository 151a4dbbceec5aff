"""Sticky A/B variant assignment."""
import random
import time
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional

from splitlab.middleware.logging import get_logger
from splitlab.schemas.experiment import ExperimentDefinition, is_valid_variant

logger = get_logger()


@dataclass
class AssignmentResult:
    """Outcome of one assignment pass over all active experiments."""

    visitor_id: str
    variants: Dict[str, str] = field(default_factory=dict)
    # Set when the caller must persist a new visitor token
    new_visitor: bool = False
    # test_id -> variant for tokens the caller must persist
    new_assignments: Dict[str, str] = field(default_factory=dict)
    # Definitions this pass was computed from; one config read per request
    experiments: List[ExperimentDefinition] = field(default_factory=list)

    def experiment(self, test_id: str) -> Optional[ExperimentDefinition]:
        for exp in self.experiments:
            if exp.test_id == test_id:
                return exp
        return None


class AssignmentEngine:
    """
    Recall or create a variant per experiment for a visitor.

    State per visitor x experiment is UNASSIGNED -> ASSIGNED(A|B). The
    engine holds no state itself: a previously issued token is the only
    record of ASSIGNED, so a valid token is always returned unchanged and a
    missing or malformed one is replaced by a fresh 50/50 draw.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        # SystemRandom in production; tests pass a seeded random.Random
        self.rng = rng or random.SystemRandom()

    def generate_visitor_id(self) -> str:
        """
        Mint a visitor id from wall-clock millis plus 48 random bits.

        Example:
            >>> engine.generate_visitor_id()
            'v_1760600000000_3fa91c0be27d'
        """
        return f"v_{int(time.time() * 1000)}_{self.rng.getrandbits(48):012x}"

    def random_variant(self) -> str:
        """Pick A or B with equal probability."""
        return "A" if self.rng.random() < 0.5 else "B"

    def assign(
        self,
        visitor_token: Optional[str],
        variant_tokens: Mapping[str, Optional[str]],
        experiments: Iterable[ExperimentDefinition]
    ) -> AssignmentResult:
        """
        Resolve the visitor id and one variant per experiment.

        Args:
            visitor_token: Previously issued visitor id, or None
            variant_tokens: Previously issued variant per test_id (raw values)
            experiments: Active experiment definitions

        Returns:
            AssignmentResult; new_visitor/new_assignments tell the caller
            which tokens to persist.
        """
        experiments = list(experiments)
        if visitor_token:
            result = AssignmentResult(visitor_id=visitor_token, experiments=experiments)
        else:
            result = AssignmentResult(
                visitor_id=self.generate_visitor_id(),
                new_visitor=True,
                experiments=experiments
            )

        for experiment in experiments:
            test_id = experiment.test_id
            variant = variant_tokens.get(test_id)

            if not is_valid_variant(variant):
                variant = self.random_variant()
                result.new_assignments[test_id] = variant
                logger.debug(
                    "variant_assigned",
                    visitor_id=result.visitor_id,
                    test_id=test_id,
                    variant=variant
                )

            result.variants[test_id] = variant

        return result
