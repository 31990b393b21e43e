import pytest

from app.core.exceptions import CriteriaWeightError, ValidationFailedError
from app.schemas.records import Criterion
from app.services.goals import commit_criteria, total_weight, validate_criteria
from tests.builders import goal


def _criteria(*weights):
    return [Criterion(id=f"c{i}", name=f"Criterion {i}", weight=w) for i, w in enumerate(weights)]


def test_commit_valid_criteria():
    original = goal("g", "p", criteria={"Old": 100})
    updated = commit_criteria(original, _criteria(60, 40))
    assert [c.weight for c in updated.criteria] == [60, 40]
    assert total_weight(updated.criteria) == 100
    # the input record is untouched
    assert [c.name for c in original.criteria] == ["Old"]


@pytest.mark.parametrize("weights", [(60, 30), (60, 50), (101,), (0, 100), (-10, 110)])
def test_rejects_bad_weights(weights):
    with pytest.raises(CriteriaWeightError):
        validate_criteria(_criteria(*weights))


def test_rejects_empty_list():
    with pytest.raises(CriteriaWeightError):
        commit_criteria(goal("g", "p"), [])


def test_rejects_duplicate_names():
    criteria = [
        Criterion(id="a", name="Quality", weight=50),
        Criterion(id="b", name="quality", weight=50),
    ]
    with pytest.raises(CriteriaWeightError):
        validate_criteria(criteria)


def test_rejects_blank_name():
    with pytest.raises(CriteriaWeightError):
        validate_criteria([Criterion(id="a", name="  ", weight=100)])


def test_error_is_a_validation_failure():
    with pytest.raises(ValidationFailedError) as exc:
        validate_criteria(_criteria(10, 10))
    assert exc.value.status_code == 422
    assert exc.value.details == {"total_weight": 20}


def test_rejects_duplicate_ids():
    criteria = [
        Criterion(id="same", name="Quality", weight=50),
        Criterion(id="same", name="Speed", weight=50),
    ]
    with pytest.raises(CriteriaWeightError):
        validate_criteria(criteria)
