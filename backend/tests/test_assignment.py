"""Tests for sticky variant assignment."""
import random
import re

from splitlab.services.assignment import AssignmentEngine


class ScriptedRandom(random.Random):
    """Random source whose random() replays fixed draws."""

    def __init__(self, draws):
        super().__init__(0)
        self.draws = list(draws)

    def random(self):
        return self.draws.pop(0)


def test_new_visitor_gets_id_and_one_variant_per_experiment(engine, experiments):
    """Test that a visitor with no tokens is minted an id and assigned every experiment."""
    result = engine.assign(None, {}, experiments)

    assert result.new_visitor is True
    assert re.fullmatch(r"v_\d+_[0-9a-f]{12}", result.visitor_id)
    assert set(result.variants) == {"kpi_scorecard_layout", "guided_onboarding"}
    assert all(v in ("A", "B") for v in result.variants.values())
    assert result.new_assignments == result.variants


def test_assignment_is_sticky(engine, experiments):
    """Test that stored tokens are returned unchanged on every call."""
    tokens = {"kpi_scorecard_layout": "B", "guided_onboarding": "A"}

    for _ in range(50):
        result = engine.assign("v_1_abc", tokens, experiments)
        assert result.visitor_id == "v_1_abc"
        assert result.variants == tokens
        assert result.new_visitor is False
        assert result.new_assignments == {}


def test_first_assignment_is_reused_when_tokens_are_presented(engine, experiments):
    """Test that replaying the tokens from a first visit reproduces its variants."""
    first = engine.assign(None, {}, experiments)
    second = engine.assign(first.visitor_id, first.new_assignments, experiments)

    assert second.variants == first.variants
    assert second.new_assignments == {}


def test_malformed_variant_token_is_reassigned(experiments):
    """Test that a token other than exactly "A"/"B" is treated as absent."""
    engine = AssignmentEngine(ScriptedRandom([0.9, 0.1, 0.9]))

    result = engine.assign(
        "v_1_abc",
        {"kpi_scorecard_layout": "C", "guided_onboarding": "a"},
        experiments
    )

    assert result.variants == {"kpi_scorecard_layout": "B", "guided_onboarding": "A"}
    assert result.new_assignments == result.variants


def test_partial_tokens_only_assign_missing_experiments(experiments):
    """Test that a known experiment keeps its variant while a new one is drawn."""
    engine = AssignmentEngine(ScriptedRandom([0.2]))

    result = engine.assign("v_1_abc", {"kpi_scorecard_layout": "B"}, experiments)

    assert result.variants == {"kpi_scorecard_layout": "B", "guided_onboarding": "A"}
    assert result.new_assignments == {"guided_onboarding": "A"}


def test_no_experiments_gives_empty_variant_map(engine):
    """Test that zero configured experiments is not an error."""
    result = engine.assign("v_1_abc", {}, [])

    assert result.variants == {}
    assert result.new_assignments == {}


def test_split_is_unbiased(experiments):
    """Test that fresh visitors split roughly 50/50."""
    engine = AssignmentEngine(random.Random(1234))
    experiment = experiments[:1]

    n = 10000
    a_count = sum(
        1 for _ in range(n)
        if engine.assign(None, {}, experiment).variants["kpi_scorecard_layout"] == "A"
    )

    assert 0.48 <= a_count / n <= 0.52, f"A should be ~50%, got {a_count / n:.2%}"


def test_seeded_engines_are_reproducible(experiments):
    """Test that the same seed yields the same sequence of variants."""
    engine1 = AssignmentEngine(random.Random(99))
    engine2 = AssignmentEngine(random.Random(99))

    seq1 = [engine1.assign("v", {}, experiments).variants for _ in range(20)]
    seq2 = [engine2.assign("v", {}, experiments).variants for _ in range(20)]

    assert seq1 == seq2


def test_visitor_ids_are_unique(engine):
    ids = {engine.generate_visitor_id() for _ in range(1000)}
    assert len(ids) == 1000


def test_concurrent_first_hits_last_write_wins(experiments):
    """
    Test the accepted first-assignment race.

    Two simultaneous first requests from one new visitor carry no tokens, so
    each draws independently. The client keeps whichever token it stores
    last, and every later request with that token is stable.
    """
    engine = AssignmentEngine(ScriptedRandom([0.1, 0.9]))
    experiment = experiments[:1]

    tab_one = engine.assign("v_1_abc", {}, experiment)
    tab_two = engine.assign("v_1_abc", {}, experiment)
    assert tab_one.variants["kpi_scorecard_layout"] == "A"
    assert tab_two.variants["kpi_scorecard_layout"] == "B"

    stored = tab_two.new_assignments
    for _ in range(10):
        again = engine.assign("v_1_abc", stored, experiment)
        assert again.variants == {"kpi_scorecard_layout": "B"}
        assert again.new_assignments == {}
