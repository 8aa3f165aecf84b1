"""
Unit tests for coaching: booking flow, goals and sessions.
"""
from datetime import date

import pytest

from careerhub.coaching import (
    BookingFlow,
    BookingState,
    CoachingApi,
    CoachingSessions,
    GoalBoard,
    bookable_dates,
)
from careerhub.errors import InvalidSelection, InvalidTransition
from careerhub.models import CareerGoal, Coach, CoachingStatus, CoachingType, GoalCategory


pytestmark = [pytest.mark.unit]

COACH = {
    "id": "c1",
    "name": "Jordan Lee",
    "title": "Career Coach",
    "rating": 4.8,
    "sessionTypes": ["video", "chat"],
    "isVerified": True,
}
AVAILABILITY = "/api/coaching/coaches/c1/availability"
SLOTS = {"slots": [
    {"date": "2026-11-02", "time": "09:00", "available": True},
    {"date": "2026-11-02", "time": "10:00", "available": False},
    {"date": "2026-11-02", "time": "11:00", "available": True},
]}


@pytest.fixture
def coaching(api):
    return CoachingApi(api)


@pytest.fixture
def flow(coaching, session):
    session.add("GET", AVAILABILITY, payload=SLOTS)
    f = BookingFlow(coaching, Coach.from_dict(COACH))
    f.select_date("2026-11-02")
    return f


class TestBookingFlow:

    def test_available_times(self, flow, session):
        assert flow.available_times == ["09:00", "11:00"]
        assert session.calls[0]["params"] == {"date": "2026-11-02"}

    def test_unavailable_slot_rejected(self, flow):
        with pytest.raises(InvalidSelection):
            flow.select_time("10:00")
        assert not flow.can_book

    def test_unsupported_type_rejected(self, flow):
        with pytest.raises(InvalidSelection):
            flow.select_type(CoachingType.AUDIO)

    def test_bad_duration_rejected(self, flow):
        with pytest.raises(InvalidSelection):
            flow.select_duration(45)

    def test_bad_date_rejected(self, coaching):
        f = BookingFlow(coaching, Coach.from_dict(COACH))
        with pytest.raises(InvalidSelection):
            f.select_date("02/11/2026")

    def test_book_without_slot_raises(self, flow):
        with pytest.raises(InvalidSelection):
            flow.book()

    def test_book_sends_exactly_one_post(self, flow, session):
        """A confirmed booking sends one POST with every chosen field."""
        session.add("POST", "/api/coaching/sessions", payload={
            "id": "cs-1", "coachId": "c1", "duration": 30, "type": "chat", "status": "upcoming",
        })
        flow.select_time("11:00")
        flow.select_duration(30)
        flow.select_type("chat")
        flow.set_topic("  Salary negotiation ")
        booked = flow.book()
        posts = session.calls_to("POST", "/api/coaching/sessions")
        assert len(posts) == 1
        assert posts[0]["json"] == {
            "coachId": "c1",
            "date": "2026-11-02",
            "time": "11:00",
            "duration": 30,
            "type": "chat",
            "topic": "Salary negotiation",
        }
        assert booked.id == "cs-1"
        assert flow.state is BookingState.CONFIRMED
        assert flow.confirmed is booked

    def test_confirmed_booking_is_final(self, flow, session):
        session.add("POST", "/api/coaching/sessions", payload={"id": "cs-1", "coachId": "c1"})
        flow.select_time("09:00")
        flow.book()
        with pytest.raises(InvalidTransition):
            flow.select_time("11:00")
        with pytest.raises(InvalidSelection):
            flow.book()

    def test_book_failure_returns_to_selecting(self, flow, session):
        session.add("POST", "/api/coaching/sessions", status=409, payload={})
        flow.select_time("09:00")
        assert flow.book() is None
        assert flow.state is BookingState.SELECTING
        assert flow.error == "Failed to book session"
        assert flow.time == "09:00"

    def test_availability_failure_clears_slots(self, coaching, session):
        session.add("GET", AVAILABILITY, status=500, payload={})
        f = BookingFlow(coaching, Coach.from_dict(COACH))
        assert f.select_date(date(2026, 11, 2)) == []
        assert f.error == "Failed to fetch availability"

    def test_bookable_dates_window(self):
        days = bookable_dates(date(2026, 12, 30), days=3)
        assert days == ["2026-12-30", "2026-12-31", "2027-01-01"]


class TestGoalBoard:

    @pytest.fixture
    def board(self, coaching, session):
        session.add("GET", "/api/coaching/goals", payload={"goals": [{
            "id": "g1",
            "title": "Get promoted",
            "category": "job",
            "progress": 0,
            "milestones": [
                {"id": "m1", "title": "Talk to manager", "completed": False},
                {"id": "m2", "title": "Lead a project", "completed": False},
            ],
        }]})
        b = GoalBoard(coaching)
        assert b.load()
        return b

    def test_toggle_milestone_updates_progress(self, board, session):
        session.add("POST", "/api/coaching/goals/g1/milestones/m1/toggle", payload={})
        assert board.toggle_milestone("g1", "m1")
        goal = board.goals[0]
        assert goal.milestones[0].completed
        assert goal.progress == 50

    def test_toggle_failure_rolls_back(self, board, session):
        session.add("POST", "/api/coaching/goals/g1/milestones/m1/toggle", status=500, payload={})
        assert not board.toggle_milestone("g1", "m1")
        assert not board.goals[0].milestones[0].completed
        assert board.goals[0].progress == 0
        assert board.error == "Failed to toggle milestone"

    def test_create_swaps_temp_for_server_goal(self, board, session):
        session.add("POST", "/api/coaching/goals", payload={"id": "g2", "title": "Learn Rust", "category": "skill"})
        assert board.create(CareerGoal(id="", title="Learn Rust", category=GoalCategory.SKILL))
        assert [g.id for g in board.goals] == ["g2", "g1"]

    def test_create_failure_removes_draft(self, board, session):
        session.add("POST", "/api/coaching/goals", status=400, payload={})
        assert not board.create(CareerGoal(id="", title="Learn Rust"))
        assert [g.id for g in board.goals] == ["g1"]

    def test_update_sends_only_changes(self, board, session):
        session.add("PATCH", "/api/coaching/goals/g1", payload={"id": "g1", "title": "Get promoted to lead"})
        assert board.update("g1", title="Get promoted to lead")
        assert session.calls[-1]["json"] == {"title": "Get promoted to lead"}
        assert board.goals[0].title == "Get promoted to lead"


class TestCoachingSessions:

    @pytest.fixture
    def sessions(self, coaching, session):
        session.add("GET", "/api/coaching/sessions", payload={"sessions": [
            {"id": "s1", "coachId": "c1", "status": "upcoming"},
            {"id": "s2", "coachId": "c1", "status": "completed"},
        ]})
        s = CoachingSessions(coaching)
        s.load()
        return s

    def test_upcoming_and_past(self, sessions):
        assert [s.id for s in sessions.upcoming] == ["s1"]
        assert [s.id for s in sessions.past] == ["s2"]

    def test_cancel(self, sessions, session):
        session.add("DELETE", "/api/coaching/sessions/s1", status=204)
        assert sessions.cancel("s1")
        assert sessions.sessions[0].status is CoachingStatus.CANCELLED

    def test_cancel_failure_restores_status(self, sessions, session):
        session.add("DELETE", "/api/coaching/sessions/s1", status=500, payload={})
        assert not sessions.cancel("s1")
        assert sessions.sessions[0].status is CoachingStatus.UPCOMING

    def test_cannot_cancel_past_session(self, sessions, session):
        assert not sessions.cancel("s2")
        assert not session.calls_to("DELETE", "/api/coaching/sessions/s2")

    def test_feedback_rating_range(self, sessions):
        with pytest.raises(ValueError):
            sessions.submit_feedback("s2", 6)

    def test_feedback_posts(self, sessions, session):
        session.add("POST", "/api/coaching/sessions/s2/feedback", payload={})
        assert sessions.submit_feedback("s2", 5, "Great")
        assert session.calls[-1]["json"] == {"rating": 5, "comment": "Great"}
