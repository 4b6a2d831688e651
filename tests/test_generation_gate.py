"""
Generation gate: one token per successful generation, nothing charged on failure.
"""
import pytest

from studio.core.errors import InsufficientBalance, GenerationUnavailable, NotFound
from studio.models import Profile
from studio.schemas.content import GenerationRequest, GeneratedVariant
from studio.services import generation_gate
from tests.conftest import TEST_PROFILE_ID

BRIEF = GenerationRequest(
    businessName="Shwe Tea House",
    productService="Mohinga",
    targetAudience="office workers",
)


def _variants(n=3):
    return [
        GeneratedVariant(id=f"v{i}", content=f"post {i}", quality_score=90, engagement_prediction=70)
        for i in range(n)
    ]


class StubEngine:
    def __init__(self, result=None, error=None, on_call=None):
        self.result = result if result is not None else _variants()
        self.error = error
        self.on_call = on_call
        self.calls = 0

    def generate(self, request):
        self.calls += 1
        if self.on_call:
            self.on_call()
        if self.error:
            raise self.error
        return self.result


def test_last_token_buys_one_generation(db, make_profile, balance_of):
    make_profile(tokens=1)
    engine = StubEngine()

    variants, balance = generation_gate.generate(db, TEST_PROFILE_ID, BRIEF, engine)
    assert len(variants) == 3
    assert balance == 0
    assert balance_of() == 0

    with pytest.raises(InsufficientBalance) as exc:
        generation_gate.generate(db, TEST_PROFILE_ID, BRIEF, engine)
    assert exc.value.balance == 0
    assert engine.calls == 1
    assert balance_of() == 0


def test_zero_balance_never_calls_the_generator(db, make_profile):
    make_profile(tokens=0)
    engine = StubEngine()
    with pytest.raises(InsufficientBalance):
        generation_gate.generate(db, TEST_PROFILE_ID, BRIEF, engine)
    assert engine.calls == 0


def test_generator_unavailable_costs_nothing(db, make_profile, balance_of):
    make_profile(tokens=3)
    engine = StubEngine(error=GenerationUnavailable())
    with pytest.raises(GenerationUnavailable):
        generation_gate.generate(db, TEST_PROFILE_ID, BRIEF, engine)
    assert balance_of() == 3


def test_unexpected_generator_error_becomes_unavailable(db, make_profile, balance_of):
    make_profile(tokens=3)
    engine = StubEngine(error=RuntimeError("boom"))
    with pytest.raises(GenerationUnavailable):
        generation_gate.generate(db, TEST_PROFILE_ID, BRIEF, engine)
    assert balance_of() == 3


def test_unknown_profile(db):
    with pytest.raises(NotFound):
        generation_gate.generate(db, "missing", BRIEF, StubEngine())


def test_balance_spent_during_generation_is_not_double_charged(db, make_profile, balance_of):
    """A concurrent request spends the last token while this generation is running."""
    make_profile(tokens=1)

    def spend_elsewhere():
        db.query(Profile).filter(Profile.id == TEST_PROFILE_ID).update(
            {Profile.tokens: 0}, synchronize_session=False
        )
        db.commit()

    engine = StubEngine(on_call=spend_elsewhere)
    with pytest.raises(InsufficientBalance):
        generation_gate.generate(db, TEST_PROFILE_ID, BRIEF, engine)
    assert engine.calls == 1
    assert balance_of() == 0
