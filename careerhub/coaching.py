"""Career coaching: coach lookup, availability-driven booking, goals, sessions."""
from __future__ import annotations

from dataclasses import replace
from datetime import date, timedelta
from enum import Enum

from careerhub.api import ApiClient, payload_dict, payload_list
from careerhub.errors import ApiError, InvalidSelection, InvalidTransition
from careerhub.log import get_logger
from careerhub.models import (
    CareerGoal,
    Coach,
    CoachingSession,
    CoachingStatus,
    CoachingType,
    Milestone,
    TimeSlot,
)
from careerhub.optimistic import Insert, OptimisticList, Replace

log = get_logger(__name__)

SESSION_DURATIONS: tuple[int, ...] = (30, 60, 90)
BOOKING_WINDOW_DAYS = 14


def bookable_dates(today: date | None = None, days: int = BOOKING_WINDOW_DAYS) -> list[str]:
    today = today or date.today()
    return [(today + timedelta(days=i)).isoformat() for i in range(days)]


def _iso_date(value: date | str) -> str:
    if isinstance(value, date):
        return value.isoformat()
    try:
        return date.fromisoformat(value).isoformat()
    except ValueError as exc:
        raise InvalidSelection(f"date must be YYYY-MM-DD, got {value!r}") from exc


class CoachingApi:
    def __init__(self, api: ApiClient) -> None:
        self.api = api

    def get_coaches(
        self,
        specialty: str | None = None,
        industry: str | None = None,
        free_for_indigenous: bool = False,
    ) -> list[Coach]:
        params = {
            "specialty": specialty,
            "industry": industry,
            "freeForIndigenous": "true" if free_for_indigenous else None,
        }
        data = self.api.get("/api/coaching/coaches", action="fetch coaches", params=params)
        return [Coach.from_dict(c) for c in payload_list(data, "coaches")]

    def get_coach(self, coach_id: str) -> Coach:
        data = self.api.get(f"/api/coaching/coaches/{coach_id}", action="fetch coach")
        return Coach.from_dict(payload_dict(data, "fetch coach"))

    def get_availability(self, coach_id: str, day: date | str) -> list[TimeSlot]:
        data = self.api.get(
            f"/api/coaching/coaches/{coach_id}/availability",
            action="fetch availability",
            params={"date": _iso_date(day)},
        )
        return [TimeSlot.from_dict(s) for s in payload_list(data, "slots")]

    def book_session(
        self,
        coach_id: str,
        day: str,
        time: str,
        duration: int,
        session_type: CoachingType,
        topic: str | None = None,
    ) -> CoachingSession:
        body: dict = {
            "coachId": coach_id,
            "date": day,
            "time": time,
            "duration": duration,
            "type": session_type.value,
        }
        if topic:
            body["topic"] = topic
        data = self.api.post("/api/coaching/sessions", action="book session", body=body)
        return CoachingSession.from_dict(payload_dict(data, "book session"))

    def get_my_sessions(self) -> list[CoachingSession]:
        data = self.api.get("/api/coaching/sessions", action="fetch sessions")
        return [CoachingSession.from_dict(s) for s in payload_list(data, "sessions")]

    def cancel_session(self, session_id: str) -> None:
        self.api.delete(f"/api/coaching/sessions/{session_id}", action="cancel session")

    def submit_feedback(self, session_id: str, rating: int, comment: str) -> None:
        self.api.post(
            f"/api/coaching/sessions/{session_id}/feedback",
            action="submit feedback",
            body={"rating": rating, "comment": comment},
        )

    def get_goals(self) -> list[CareerGoal]:
        data = self.api.get("/api/coaching/goals", action="fetch goals")
        return [CareerGoal.from_dict(g) for g in payload_list(data, "goals")]

    def create_goal(self, goal: CareerGoal) -> CareerGoal:
        data = self.api.post("/api/coaching/goals", action="create goal", body=goal.to_payload())
        return CareerGoal.from_dict(payload_dict(data, "create goal"))

    def update_goal(self, goal_id: str, changes: dict) -> CareerGoal:
        data = self.api.patch(f"/api/coaching/goals/{goal_id}", action="update goal", body=changes)
        return CareerGoal.from_dict(payload_dict(data, "update goal"))

    def toggle_milestone(self, goal_id: str, milestone_id: str) -> None:
        self.api.post(
            f"/api/coaching/goals/{goal_id}/milestones/{milestone_id}/toggle",
            action="toggle milestone",
        )


# ── Booking ──────────────────────────────────────────────────────────────


class BookingState(str, Enum):
    SELECTING = "selecting"
    BOOKING = "booking"
    CONFIRMED = "confirmed"


class BookingFlow:
    """Availability lookup -> slot selection -> one booking request."""

    def __init__(self, coaching: CoachingApi, coach: Coach) -> None:
        self.coaching = coaching
        self.coach = coach
        self.state = BookingState.SELECTING
        self.date: str | None = None
        self.time: str | None = None
        self.duration = 60
        self.session_type = coach.session_types[0] if coach.session_types else CoachingType.VIDEO
        self.topic: str | None = None
        self.slots: list[TimeSlot] = []
        self.error: str | None = None
        self.confirmed: CoachingSession | None = None

    def _require_selecting(self) -> None:
        if self.state is not BookingState.SELECTING:
            raise InvalidTransition(f"booking is {self.state.value}")

    def select_date(self, day: date | str) -> list[TimeSlot]:
        self._require_selecting()
        self.date = _iso_date(day)
        self.time = None
        try:
            self.slots = self.coaching.get_availability(self.coach.id, self.date)
            self.error = None
        except ApiError as exc:
            log.error("Availability for coach %s on %s: %s", self.coach.id, self.date, exc)
            self.slots = []
            self.error = str(exc)
        return self.slots

    @property
    def available_times(self) -> list[str]:
        return [s.time for s in self.slots if s.available]

    def select_time(self, time: str) -> None:
        self._require_selecting()
        if time not in self.available_times:
            raise InvalidSelection(f"{time} is not an available slot on {self.date}")
        self.time = time

    def select_duration(self, minutes: int) -> None:
        self._require_selecting()
        if minutes not in SESSION_DURATIONS:
            raise InvalidSelection(f"duration must be one of {SESSION_DURATIONS}")
        self.duration = minutes

    def select_type(self, session_type: CoachingType | str) -> None:
        self._require_selecting()
        try:
            session_type = CoachingType(session_type)
        except ValueError as exc:
            raise InvalidSelection(f"unknown session type {session_type!r}") from exc
        if session_type not in self.coach.session_types:
            raise InvalidSelection(f"{self.coach.name} does not offer {session_type.value} sessions")
        self.session_type = session_type

    def set_topic(self, topic: str | None) -> None:
        self._require_selecting()
        self.topic = (topic or "").strip() or None

    @property
    def can_book(self) -> bool:
        return (
            self.state is BookingState.SELECTING
            and self.date is not None
            and self.time is not None
            and self.session_type in self.coach.session_types
        )

    def book(self) -> CoachingSession | None:
        if not self.can_book:
            raise InvalidSelection("pick a date, an available time and a supported session type first")
        day, slot = self.date or "", self.time or ""
        self.state = BookingState.BOOKING
        try:
            session = self.coaching.book_session(
                self.coach.id, day, slot, self.duration, self.session_type, self.topic
            )
        except ApiError as exc:
            log.error("Booking with coach %s failed: %s", self.coach.id, exc)
            self.error = str(exc)
            self.state = BookingState.SELECTING
            return None
        self.error = None
        self.confirmed = session
        self.state = BookingState.CONFIRMED
        log.info("Booked %s-minute %s session %s with %s", self.duration, self.session_type.value, session.id, self.coach.name)
        return session


# ── Goals and sessions ───────────────────────────────────────────────────


def _recompute_progress(goal: CareerGoal) -> CareerGoal:
    if not goal.milestones:
        return goal
    done = sum(1 for m in goal.milestones if m.completed)
    return replace(goal, progress=round(100 * done / len(goal.milestones)))


class GoalBoard:
    def __init__(self, coaching: CoachingApi) -> None:
        self.coaching = coaching
        self._list: OptimisticList[CareerGoal] = OptimisticList(name="goals")

    @property
    def goals(self) -> list[CareerGoal]:
        return self._list.items

    @property
    def error(self) -> str | None:
        return self._list.error

    def load(self) -> bool:
        return self._list.load(self.coaching.get_goals)

    def create(self, goal: CareerGoal) -> bool:
        draft = replace(goal, id=goal.id or f"tmp-{self._list.next_mutation_id()}")
        return self._list.mutate(Insert(draft), lambda: self.coaching.create_goal(goal))

    def update(self, goal_id: str, **changes) -> bool:
        goal = self._list.get(goal_id)
        if goal is None:
            log.warning("Unknown goal %s", goal_id)
            return False
        local = replace(goal, **changes)
        payload = {k: v for k, v in local.to_payload().items() if v != goal.to_payload().get(k)}
        return self._list.mutate(Replace(local), lambda: self.coaching.update_goal(goal_id, payload))

    def toggle_milestone(self, goal_id: str, milestone_id: str) -> bool:
        goal = self._list.get(goal_id)
        if goal is None or not any(m.id == milestone_id for m in goal.milestones):
            log.warning("Unknown milestone %s on goal %s", milestone_id, goal_id)
            return False
        milestones = [
            Milestone(m.id, m.title, not m.completed, None) if m.id == milestone_id else m
            for m in goal.milestones
        ]
        local = _recompute_progress(replace(goal, milestones=milestones))
        return self._list.mutate(
            Replace(local),
            lambda: self.coaching.toggle_milestone(goal_id, milestone_id),
        )

    def close(self) -> None:
        self._list.close()


class CoachingSessions:
    def __init__(self, coaching: CoachingApi) -> None:
        self.coaching = coaching
        self._list: OptimisticList[CoachingSession] = OptimisticList(name="coaching-sessions")

    @property
    def sessions(self) -> list[CoachingSession]:
        return self._list.items

    @property
    def upcoming(self) -> list[CoachingSession]:
        return [s for s in self.sessions if s.status is CoachingStatus.UPCOMING]

    @property
    def past(self) -> list[CoachingSession]:
        return [s for s in self.sessions if s.status is not CoachingStatus.UPCOMING]

    @property
    def error(self) -> str | None:
        return self._list.error

    def load(self) -> bool:
        return self._list.load(self.coaching.get_my_sessions)

    def cancel(self, session_id: str) -> bool:
        session = self._list.get(session_id)
        if session is None or session.status is not CoachingStatus.UPCOMING:
            log.warning("Session %s is not upcoming; nothing to cancel", session_id)
            return False
        return self._list.mutate(
            Replace(replace(session, status=CoachingStatus.CANCELLED)),
            lambda: self.coaching.cancel_session(session_id),
        )

    def submit_feedback(self, session_id: str, rating: int, comment: str = "") -> bool:
        if not 1 <= rating <= 5:
            raise ValueError("rating must be between 1 and 5")
        try:
            self.coaching.submit_feedback(session_id, rating, comment)
        except ApiError as exc:
            log.error("Feedback for session %s failed: %s", session_id, exc)
            self._list.fail(str(exc))
            return False
        return True

    def close(self) -> None:
        self._list.close()
