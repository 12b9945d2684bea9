import copy

import pytest

from placecheck.analysis import plan
from placecheck.analysis.recommend import recommend
from placecheck.analysis.scoring import score_place
from placecheck.models import PlaceProfile


@pytest.fixture
def full_result():
    profile = PlaceProfile(place_url="u", description="무조건 1등맛집")
    return recommend(profile, score_place(profile, "fnb"), "fnb_restaurant")


def test_pro_is_an_equal_independent_copy(full_result):
    gated = plan.apply_plan("pro", full_result)

    assert gated == full_result
    assert gated is not full_result
    assert gated.keywords5 is not full_result.keywords5
    gated.keywords5[0].keyword = "changed"
    assert full_result.keywords5[0].keyword != "changed"


def test_free_is_truncated_and_locked(full_result):
    snapshot = copy.deepcopy(full_result)

    gated = plan.apply_plan("free", full_result)

    assert gated.keywords5 == full_result.keywords5[:3]
    assert gated.rewrite.description == plan.LOCKED_DESCRIPTION
    assert gated.rewrite.directions == plan.LOCKED_DIRECTIONS
    assert gated.todo_top5 == full_result.todo_top5[:2]
    assert gated.compliance_notes == full_result.compliance_notes[:1]
    assert full_result == snapshot


def test_unknown_plan_is_rejected(full_result):
    with pytest.raises(ValueError):
        plan.apply_plan("enterprise", full_result)
