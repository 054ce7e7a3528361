"""Tests for request schema validation."""

import pytest
from pydantic import ValidationError

from unitreviews.schemas.auth import UserRegisterRequest
from unitreviews.schemas.review import ReviewCreate
from unitreviews.schemas.setu import SetuCreate
from unitreviews.schemas.unit import UnitCreate, UnitUpdate

from tests.factories import review_payload


@pytest.mark.unit
class TestUnitSchemas:
    def test_unit_code_is_lowercased(self):
        unit = UnitCreate(unit_code=" FIT2099 ", name="OO Design")

        assert unit.unit_code == "fit2099"

    def test_tags_deduplicated(self):
        unit = UnitCreate(unit_code="fit2099", name="x", tags=["wam-booster", "wam-booster"])

        assert unit.tags == ["wam-booster"]

    def test_unknown_tag_rejected(self):
        with pytest.raises(ValidationError):
            UnitUpdate(tags=["easy"])

    @pytest.mark.parametrize("tags", [["most-reviews"], ["most-reviews", "controversial"]])
    def test_most_reviews_tag_rejected(self, tags):
        with pytest.raises(ValidationError, match="assigned automatically"):
            UnitUpdate(tags=tags)

    def test_assignable_tags_accepted(self):
        unit = UnitUpdate(tags=["controversial", "wam-booster"])

        assert unit.tags == ["controversial", "wam-booster"]


@pytest.mark.unit
class TestReviewSchemas:
    def test_valid_review(self):
        review = ReviewCreate(**review_payload(title="  Padded  "))

        assert review.title == "Padded"

    @pytest.mark.parametrize(
        "override",
        [
            {"semester": 3},
            {"overall_rating": 5.5},
            {"content_rating": -1},
            {"grade": 101},
            {"description": ""},
        ],
    )
    def test_out_of_range_rejected(self, override):
        with pytest.raises(ValidationError):
            ReviewCreate(**review_payload(**override))


@pytest.mark.unit
class TestRegisterSchema:
    def test_weak_password_rejected(self):
        with pytest.raises(ValidationError):
            UserRegisterRequest(email="a@student.example.edu", password="allletters")

    def test_username_optional(self):
        request = UserRegisterRequest(email="a@student.example.edu", password="passw0rd!")

        assert request.username is None


@pytest.mark.unit
class TestSetuSchema:
    def test_metrics_must_be_known_pairs(self):
        base = {
            "unit_code": "FIT2099",
            "unit_name": "OO",
            "code": "FIT2099_CLAYTON",
            "season": "2024_S1",
            "responses": 10,
            "invited": 40,
        }

        assert SetuCreate(**base, metrics={"I8": [4.1, 4.0]}).unit_code == "fit2099"
        with pytest.raises(ValidationError):
            SetuCreate(**base, metrics={"I99": [1, 1]})
        with pytest.raises(ValidationError):
            SetuCreate(**base, metrics={"I1": [1]})
