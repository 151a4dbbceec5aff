"""Experiment definition schemas."""
from pydantic import BaseModel, Field, field_validator
from typing import Dict, List, Literal

Variant = Literal["A", "B"]

# Every experiment has exactly these two arms
VARIANTS = ("A", "B")


def is_valid_variant(value) -> bool:
    """True for the literal strings "A" and "B" only."""
    return isinstance(value, str) and value in VARIANTS


class ExperimentDefinition(BaseModel):
    """One A/B test as declared in the experiments config file."""

    test_id: str = Field(..., min_length=1, description="Unique experiment identifier")
    description: str = Field("", description="Human-readable summary")
    variants: Dict[str, str] = Field(..., description="Variant label keyed by 'A' and 'B'")
    target_event: str = Field(..., min_length=1, description="Event name that counts as a conversion")

    @field_validator('variants')
    @classmethod
    def validate_variants(cls, v):
        if set(v) != set(VARIANTS):
            raise ValueError('variants must contain exactly the keys A and B')
        return v

    def label(self, variant: str) -> str:
        """Label for a variant, falling back to the raw variant name."""
        return self.variants.get(variant) or variant

    class Config:
        # Extra keys (owner, status, ...) are kept so /config can echo them
        extra = "allow"
        json_schema_extra = {
            "example": {
                "test_id": "kpi_scorecard_layout",
                "description": "Compact KPI cards vs. detailed scorecard",
                "variants": {"A": "compact_cards", "B": "detailed_scorecard"},
                "target_event": "kpi_click"
            }
        }


class ExperimentConfig(BaseModel):
    """Top-level shape of the experiments config file."""

    experiments: List[ExperimentDefinition] = Field(default_factory=list)

    def test_ids(self) -> List[str]:
        return [exp.test_id for exp in self.experiments]

    def get(self, test_id: str):
        for exp in self.experiments:
            if exp.test_id == test_id:
                return exp
        return None
