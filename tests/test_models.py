"""
Unit tests for tolerant parsing of API payloads into models.
"""
import math

import pytest

from careerhub.models import Coach, Match, MatchedJob, Question, SessionFeedback

from conftest import match_payload


pytestmark = [pytest.mark.unit]

BAD_NUMBERS = [math.nan, math.inf, -math.inf, "high", None, [], {}, True]


class TestMatchNumbers:
    """Match scores and salaries never raise on odd values."""

    @pytest.mark.parametrize("raw", BAD_NUMBERS)
    def test_bad_score_defaults_to_zero(self, raw):
        data = match_payload("j1", 0)
        data["matchScore"] = raw
        assert Match.from_dict(data).match_score == 0

    def test_numeric_string_score(self):
        data = match_payload("j1", 0)
        data["matchScore"] = "85"
        assert Match.from_dict(data).match_score == 85

    def test_score_clamped(self):
        assert Match.from_dict(match_payload("j1", 250)).match_score == 100
        assert Match.from_dict(match_payload("j1", -4)).match_score == 0

    @pytest.mark.parametrize("raw", [math.inf, math.nan, "lots"])
    def test_bad_salary_is_missing(self, raw):
        job = MatchedJob.from_dict({"id": "j", "salaryLow": raw, "salaryHigh": 100000})
        assert job.salary_low is None
        assert job.salary_high == 100000


class TestFeedbackNumbers:

    @pytest.mark.parametrize("raw", BAD_NUMBERS)
    def test_bad_overall_score(self, raw):
        fb = SessionFeedback.from_dict({"overallScore": raw})
        assert fb.overall_score == 0
        assert fb.percent == "0%"

    def test_fractional_score_rounds(self):
        assert SessionFeedback.from_dict({"overallScore": 84.6}).overall_score == 85

    def test_bad_per_question_score(self):
        fb = SessionFeedback.from_dict({"overallScore": 70, "questionFeedback": [{"questionId": "q1", "score": math.inf}]})
        assert fb.question_feedback[0].score == 0


class TestQuestionTimeLimit:

    @pytest.mark.parametrize("raw", [math.nan, math.inf, "two minutes", 0, -30, None])
    def test_bad_limit_uses_default(self, raw):
        q = Question.from_dict({"id": "q1", "question": "Why?", "timeLimit": raw}, default_time_limit=75)
        assert q.time_limit == 75

    def test_valid_limit_kept(self):
        assert Question.from_dict({"id": "q1", "timeLimit": 45}).time_limit == 45


def test_coach_rating_not_finite():
    assert Coach.from_dict({"id": "c", "rating": math.nan}).rating == 0.0
