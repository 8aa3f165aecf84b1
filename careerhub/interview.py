"""Interview-prep API: question bank, practice sessions, company guides."""
from __future__ import annotations

from dataclasses import replace

from careerhub.api import ApiClient, payload_dict, payload_list
from careerhub.errors import ApiError, ErrorKind
from careerhub.log import get_logger
from careerhub.models import (
    CompanyInterview,
    Difficulty,
    PracticeSession,
    Question,
    QuestionCategory,
    SessionFeedback,
    SessionType,
    UserAnswer,
)
from careerhub.optimistic import OptimisticList, Replace

log = get_logger(__name__)

# Question counts requested when the caller does not pick one.
SESSION_SIZES: dict[SessionType, int | None] = {
    SessionType.QUICK: 5,
    SessionType.FULL: 10,
    SessionType.COMPANY_SPECIFIC: None,
}


class InterviewApi:
    def __init__(self, api: ApiClient, default_time_limit: int = 120) -> None:
        self.api = api
        self.default_time_limit = default_time_limit

    def get_questions(
        self,
        category: QuestionCategory | None = None,
        difficulty: Difficulty | None = None,
        tag: str | None = None,
        bookmarked: bool = False,
    ) -> list[Question]:
        params = {
            "category": category.value if category else None,
            "difficulty": difficulty.value if difficulty else None,
            "tag": tag,
            "bookmarked": "true" if bookmarked else None,
        }
        data = self.api.get("/api/interview/questions", action="fetch questions", params=params)
        return [Question.from_dict(q, self.default_time_limit) for q in payload_list(data, "questions")]

    def get_companies(self) -> list[CompanyInterview]:
        data = self.api.get("/api/interview/companies", action="fetch companies")
        return [CompanyInterview.from_dict(c) for c in payload_list(data, "companies")]

    def get_company(self, company_id: str) -> CompanyInterview:
        data = self.api.get(f"/api/interview/companies/{company_id}", action="fetch company")
        return CompanyInterview.from_dict(payload_dict(data, "fetch company"))

    def start_session(
        self,
        session_type: SessionType,
        categories: list[QuestionCategory] | None = None,
        question_count: int | None = None,
        company_id: str | None = None,
    ) -> PracticeSession:
        body: dict = {"type": session_type.value}
        if categories:
            body["categories"] = [c.value for c in categories]
        count = question_count if question_count is not None else SESSION_SIZES[session_type]
        if count is not None:
            body["questionCount"] = count
        if company_id:
            body["companyId"] = company_id
        data = self.api.post("/api/interview/sessions", action="start session", body=body)
        try:
            return PracticeSession.from_dict(payload_dict(data, "start session"), self.default_time_limit)
        except (TypeError, ValueError, OverflowError) as exc:
            raise ApiError("Failed to start session", ErrorKind.MALFORMED) from exc

    def submit_answer(
        self,
        session_id: str,
        question_id: str,
        text: str,
        audio_url: str | None = None,
        video_url: str | None = None,
    ) -> None:
        body: dict = {"questionId": question_id, "text": text}
        if audio_url:
            body["audioUrl"] = audio_url
        if video_url:
            body["videoUrl"] = video_url
        self.api.post(f"/api/interview/sessions/{session_id}/answers", action="submit answer", body=body)

    def complete_session(self, session_id: str) -> SessionFeedback:
        data = self.api.post(f"/api/interview/sessions/{session_id}/complete", action="complete session")
        try:
            return SessionFeedback.from_dict(payload_dict(data, "complete session"))
        except (TypeError, ValueError, OverflowError) as exc:
            log.warning("Unreadable feedback for session %s: %s", session_id, exc)
            raise ApiError("Failed to complete session", ErrorKind.MALFORMED) from exc

    def bookmark_question(self, question_id: str) -> None:
        self.api.post(f"/api/interview/questions/{question_id}/bookmark", action="bookmark")

    def get_session_history(self) -> list[PracticeSession]:
        data = self.api.get("/api/interview/sessions/history", action="fetch history")
        return [PracticeSession.from_dict(s, self.default_time_limit) for s in payload_list(data, "sessions")]

    def get_saved_answers(self) -> list[UserAnswer]:
        data = self.api.get("/api/interview/answers", action="fetch answers")
        return [UserAnswer.from_dict(a) for a in payload_list(data, "answers")]


class QuestionBank:
    """Filtered question list with optimistic bookmark toggling."""

    def __init__(self, interview: InterviewApi) -> None:
        self.interview = interview
        self._list: OptimisticList[Question] = OptimisticList(name="questions")

    @property
    def questions(self) -> list[Question]:
        return self._list.items

    @property
    def error(self) -> str | None:
        return self._list.error

    def load(
        self,
        category: QuestionCategory | None = None,
        difficulty: Difficulty | None = None,
        tag: str | None = None,
        bookmarked: bool = False,
    ) -> bool:
        return self._list.load(
            lambda: self.interview.get_questions(category, difficulty, tag, bookmarked)
        )

    def toggle_bookmark(self, question_id: str) -> bool:
        question = self._list.get(question_id)
        if question is None:
            log.warning("Unknown question %s", question_id)
            return False
        flipped = replace(question, bookmarked=not question.bookmarked)
        return self._list.mutate(
            Replace(flipped),
            lambda: self.interview.bookmark_question(question_id),
        )

    def close(self) -> None:
        self._list.close()
