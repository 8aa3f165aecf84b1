"""Data models for matches, interview practice, coaching, references and flags.

Every ``from_dict`` accepts the camelCase JSON the API returns and defaults
missing or malformed fields instead of failing.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Type, TypeVar

E = TypeVar("E", bound=Enum)


def _str(value: Any, default: str = "") -> str:
    return value if isinstance(value, str) else default


def _opt_str(value: Any) -> str | None:
    return value if isinstance(value, str) and value else None


def _int(value: Any, default: int = 0) -> int:
    if isinstance(value, bool):
        return default
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return default


def _opt_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return None


def _float(value: Any, default: float = 0.0) -> float:
    if isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    # NaN and Infinity are valid JSON to requests
    return number if math.isfinite(number) else default


def _list(value: Any) -> list:
    return list(value) if isinstance(value, (list, tuple)) else []


def _str_list(value: Any) -> list[str]:
    return [v for v in _list(value) if isinstance(v, str)]


def _dicts(value: Any) -> list[dict]:
    return [v for v in _list(value) if isinstance(v, dict)]


def _enum(cls: Type[E], value: Any, default: E) -> E:
    try:
        return cls(value)
    except ValueError:
        return default


# ── Enums ────────────────────────────────────────────────────────────────


class MatchTier(str, Enum):
    STRONG = "strong"
    GOOD = "good"
    FAIR = "fair"
    WEAK = "weak"


class QuestionCategory(str, Enum):
    BEHAVIORAL = "behavioral"
    TECHNICAL = "technical"
    SITUATIONAL = "situational"
    CULTURAL = "cultural"
    ROLE_SPECIFIC = "role-specific"


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class SessionType(str, Enum):
    QUICK = "quick"
    FULL = "full"
    COMPANY_SPECIFIC = "company-specific"


class CoachingType(str, Enum):
    VIDEO = "video"
    AUDIO = "audio"
    CHAT = "chat"


class CoachingStatus(str, Enum):
    UPCOMING = "upcoming"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class GoalCategory(str, Enum):
    SKILL = "skill"
    JOB = "job"
    EDUCATION = "education"
    LEADERSHIP = "leadership"
    PERSONAL = "personal"


class Relationship(str, Enum):
    MANAGER = "manager"
    COLLEAGUE = "colleague"
    CLIENT = "client"
    MENTOR = "mentor"
    PROFESSOR = "professor"
    OTHER = "other"


class ReferenceStatus(str, Enum):
    ACTIVE = "active"
    PENDING = "pending"
    DECLINED = "declined"
    INACTIVE = "inactive"


class ContactMethod(str, Enum):
    EMAIL = "email"
    PHONE = "phone"
    LINKEDIN = "linkedin"


class FlagEnvironment(str, Enum):
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class FlagType(str, Enum):
    BOOLEAN = "boolean"
    STRING = "string"
    NUMBER = "number"
    JSON = "json"


# ── Pre-apply matches ────────────────────────────────────────────────────


@dataclass
class MatchedJob:
    id: str
    title: str
    company: str
    location: str = ""
    employment_type: str | None = None
    salary_low: int | None = None
    salary_high: int | None = None
    posted_at: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> MatchedJob:
        company = data.get("company")
        if isinstance(company, dict):
            company = company.get("name")
        return cls(
            id=str(data.get("id", "")),
            title=_str(data.get("title")),
            company=_str(company),
            location=_str(data.get("location")),
            employment_type=_opt_str(data.get("employmentType")),
            salary_low=_opt_int(data.get("salaryLow")),
            salary_high=_opt_int(data.get("salaryHigh")),
            posted_at=_opt_str(data.get("postedAt")),
        )


@dataclass
class Match:
    id: str
    match_score: int
    job: MatchedJob
    notified_at: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> Match:
        job = data.get("job") if isinstance(data.get("job"), dict) else {}
        score = max(0, min(100, _int(data.get("matchScore"))))
        return cls(
            id=str(data.get("id", "")),
            match_score=score,
            job=MatchedJob.from_dict(job),
            notified_at=_opt_str(data.get("notifiedAt")),
        )


# ── Interview practice ───────────────────────────────────────────────────


@dataclass
class StarPrompt:
    situation: str
    task: str
    action: str
    result: str

    @classmethod
    def from_dict(cls, data: dict) -> StarPrompt:
        return cls(
            situation=_str(data.get("situation")),
            task=_str(data.get("task")),
            action=_str(data.get("action")),
            result=_str(data.get("result")),
        )


@dataclass
class Question:
    id: str
    text: str
    category: QuestionCategory = QuestionCategory.BEHAVIORAL
    difficulty: Difficulty = Difficulty.MEDIUM
    tips: list[str] = field(default_factory=list)
    star_prompt: StarPrompt | None = None
    tags: list[str] = field(default_factory=list)
    time_limit: int = 120
    bookmarked: bool = False
    sample_answer: str | None = None

    @classmethod
    def from_dict(cls, data: dict, default_time_limit: int = 120) -> Question:
        star = data.get("starPrompt")
        time_limit = _int(data.get("timeLimit"), default_time_limit)
        return cls(
            id=str(data.get("id", "")),
            text=_str(data.get("question") or data.get("text")),
            category=_enum(QuestionCategory, data.get("category"), QuestionCategory.BEHAVIORAL),
            difficulty=_enum(Difficulty, data.get("difficulty"), Difficulty.MEDIUM),
            tips=_str_list(data.get("tips")),
            star_prompt=StarPrompt.from_dict(star) if isinstance(star, dict) else None,
            tags=_str_list(data.get("tags")),
            time_limit=time_limit if time_limit > 0 else default_time_limit,
            bookmarked=bool(data.get("isBookmarked", False)),
            sample_answer=_opt_str(data.get("sampleAnswer")),
        )


@dataclass(frozen=True)
class QuestionFeedback:
    question_id: str
    score: int
    feedback: str


@dataclass(frozen=True)
class SessionFeedback:
    overall_score: int
    strengths: tuple[str, ...] = ()
    improvements: tuple[str, ...] = ()
    question_feedback: tuple[QuestionFeedback, ...] = ()

    @property
    def percent(self) -> str:
        return f"{self.overall_score}%"

    @classmethod
    def from_dict(cls, data: dict) -> SessionFeedback:
        return cls(
            overall_score=max(0, min(100, round(_float(data.get("overallScore"))))),
            strengths=tuple(_str_list(data.get("strengths"))),
            improvements=tuple(_str_list(data.get("improvements"))),
            question_feedback=tuple(
                QuestionFeedback(
                    question_id=str(q.get("questionId", "")),
                    score=_int(q.get("score")),
                    feedback=_str(q.get("feedback")),
                )
                for q in _dicts(data.get("questionFeedback"))
            ),
        )


@dataclass
class PracticeSession:
    id: str
    type: SessionType
    questions: list[Question] = field(default_factory=list)
    duration: int = 0
    completed_at: str | None = None
    score: int | None = None
    feedback: SessionFeedback | None = None

    @classmethod
    def from_dict(cls, data: dict, default_time_limit: int = 120) -> PracticeSession:
        feedback = data.get("feedback")
        return cls(
            id=str(data.get("id", "")),
            type=_enum(SessionType, data.get("type"), SessionType.QUICK),
            questions=[Question.from_dict(q, default_time_limit) for q in _dicts(data.get("questions"))],
            duration=_int(data.get("duration")),
            completed_at=_opt_str(data.get("completedAt")),
            score=_opt_int(data.get("score")),
            feedback=SessionFeedback.from_dict(feedback) if isinstance(feedback, dict) else None,
        )


@dataclass
class UserAnswer:
    question_id: str
    text: str
    audio_url: str | None = None
    video_url: str | None = None
    recorded_at: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> UserAnswer:
        return cls(
            question_id=str(data.get("questionId", "")),
            text=_str(data.get("text")),
            audio_url=_opt_str(data.get("audioUrl")),
            video_url=_opt_str(data.get("videoUrl")),
            recorded_at=_opt_str(data.get("recordedAt")),
        )


@dataclass
class InterviewStage:
    name: str
    description: str = ""
    duration: str = ""
    tips: list[str] = field(default_factory=list)


@dataclass
class CompanyInterview:
    id: str
    company: str
    role: str = ""
    stages: list[InterviewStage] = field(default_factory=list)
    common_questions: list[Question] = field(default_factory=list)
    culture: list[str] = field(default_factory=list)
    prep_tips: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> CompanyInterview:
        return cls(
            id=str(data.get("id", "")),
            company=_str(data.get("company")),
            role=_str(data.get("role")),
            stages=[
                InterviewStage(
                    name=_str(s.get("name")),
                    description=_str(s.get("description")),
                    duration=_str(s.get("duration")),
                    tips=_str_list(s.get("tips")),
                )
                for s in _dicts(data.get("interviewStages"))
            ],
            common_questions=[Question.from_dict(q) for q in _dicts(data.get("commonQuestions"))],
            culture=_str_list(data.get("culture")),
            prep_tips=_str_list(data.get("prepTips")),
        )


# ── Coaching ─────────────────────────────────────────────────────────────


@dataclass
class Coach:
    id: str
    name: str
    title: str = ""
    specialties: list[str] = field(default_factory=list)
    industries: list[str] = field(default_factory=list)
    experience: int = 0
    rating: float = 0.0
    review_count: int = 0
    hourly_rate: int | None = None
    session_types: list[CoachingType] = field(default_factory=list)
    verified: bool = False

    @classmethod
    def from_dict(cls, data: dict) -> Coach:
        types: list[CoachingType] = []
        for raw in _list(data.get("sessionTypes")):
            try:
                types.append(CoachingType(raw))
            except ValueError:
                continue
        return cls(
            id=str(data.get("id", "")),
            name=_str(data.get("name")),
            title=_str(data.get("title")),
            specialties=_str_list(data.get("specialties")),
            industries=_str_list(data.get("industries")),
            experience=_int(data.get("experience")),
            rating=_float(data.get("rating")),
            review_count=_int(data.get("reviewCount")),
            hourly_rate=_opt_int(data.get("hourlyRate")),
            session_types=types,
            verified=bool(data.get("isVerified", False)),
        )


@dataclass(frozen=True)
class TimeSlot:
    date: str
    time: str
    available: bool

    @classmethod
    def from_dict(cls, data: dict) -> TimeSlot:
        return cls(
            date=_str(data.get("date")),
            time=_str(data.get("time")),
            available=data.get("available") is True,
        )


@dataclass
class CoachingSession:
    id: str
    coach_id: str
    coach_name: str = ""
    scheduled_at: str | None = None
    duration: int = 60
    type: CoachingType = CoachingType.VIDEO
    status: CoachingStatus = CoachingStatus.UPCOMING
    topic: str | None = None
    notes: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> CoachingSession:
        return cls(
            id=str(data.get("id", "")),
            coach_id=str(data.get("coachId", "")),
            coach_name=_str(data.get("coachName")),
            scheduled_at=_opt_str(data.get("scheduledAt")),
            duration=_int(data.get("duration"), 60),
            type=_enum(CoachingType, data.get("type"), CoachingType.VIDEO),
            status=_enum(CoachingStatus, data.get("status"), CoachingStatus.UPCOMING),
            topic=_opt_str(data.get("topic")),
            notes=_opt_str(data.get("notes")),
        )


@dataclass
class Milestone:
    id: str
    title: str
    completed: bool = False
    completed_at: str | None = None


@dataclass
class CareerGoal:
    id: str
    title: str
    description: str = ""
    category: GoalCategory = GoalCategory.SKILL
    target_date: str | None = None
    progress: int = 0
    milestones: list[Milestone] = field(default_factory=list)
    coach_id: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> CareerGoal:
        return cls(
            id=str(data.get("id", "")),
            title=_str(data.get("title")),
            description=_str(data.get("description")),
            category=_enum(GoalCategory, data.get("category"), GoalCategory.SKILL),
            target_date=_opt_str(data.get("targetDate")),
            progress=max(0, min(100, _int(data.get("progress")))),
            milestones=[
                Milestone(
                    id=str(m.get("id", "")),
                    title=_str(m.get("title")),
                    completed=bool(m.get("completed", False)),
                    completed_at=_opt_str(m.get("completedAt")),
                )
                for m in _dicts(data.get("milestones"))
            ],
            coach_id=_opt_str(data.get("coachId")),
        )

    def to_payload(self) -> dict:
        return {
            "title": self.title,
            "description": self.description,
            "category": self.category.value,
            "targetDate": self.target_date,
            "progress": self.progress,
            "coachId": self.coach_id,
        }


# ── References ───────────────────────────────────────────────────────────


@dataclass
class Reference:
    id: str
    name: str
    title: str = ""
    company: str = ""
    email: str = ""
    phone: str | None = None
    linkedin: str | None = None
    relationship: Relationship = Relationship.OTHER
    years_known: int = 0
    status: ReferenceStatus = ReferenceStatus.ACTIVE
    last_contacted: str | None = None
    notes: str | None = None
    can_contact_directly: bool = True
    preferred_contact: ContactMethod = ContactMethod.EMAIL

    @classmethod
    def from_dict(cls, data: dict) -> Reference:
        return cls(
            id=str(data.get("id", "")),
            name=_str(data.get("name")),
            title=_str(data.get("title")),
            company=_str(data.get("company")),
            email=_str(data.get("email")),
            phone=_opt_str(data.get("phone")),
            linkedin=_opt_str(data.get("linkedin")),
            relationship=_enum(Relationship, data.get("relationship"), Relationship.OTHER),
            years_known=_int(data.get("yearsKnown")),
            status=_enum(ReferenceStatus, data.get("status"), ReferenceStatus.ACTIVE),
            last_contacted=_opt_str(data.get("lastContacted")),
            notes=_opt_str(data.get("notes")),
            can_contact_directly=bool(data.get("canContactDirectly", True)),
            preferred_contact=_enum(ContactMethod, data.get("preferredContactMethod"), ContactMethod.EMAIL),
        )

    def to_payload(self) -> dict:
        return {
            "name": self.name,
            "title": self.title,
            "company": self.company,
            "email": self.email,
            "phone": self.phone,
            "linkedin": self.linkedin,
            "relationship": self.relationship.value,
            "yearsKnown": self.years_known,
            "notes": self.notes,
            "canContactDirectly": self.can_contact_directly,
            "preferredContactMethod": self.preferred_contact.value,
        }


@dataclass
class ReferenceList:
    id: str
    name: str
    references: list[str] = field(default_factory=list)
    is_default: bool = False
    share_link: str | None = None
    share_expiry: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> ReferenceList:
        return cls(
            id=str(data.get("id", "")),
            name=_str(data.get("name")),
            references=[str(r) for r in _list(data.get("references"))],
            is_default=bool(data.get("isDefault", False)),
            share_link=_opt_str(data.get("shareLink")),
            share_expiry=_opt_str(data.get("shareExpiry")),
        )


# ── Feature flags ────────────────────────────────────────────────────────


@dataclass
class TargetingRule:
    id: str
    attribute: str
    operator: str
    value: Any
    enabled: bool = True

    @classmethod
    def from_dict(cls, data: dict) -> TargetingRule:
        return cls(
            id=str(data.get("id", "")),
            attribute=_str(data.get("attribute")),
            operator=_str(data.get("operator"), "equals"),
            value=data.get("value"),
            enabled=bool(data.get("enabled", True)),
        )


@dataclass
class FeatureFlag:
    id: str
    key: str
    name: str = ""
    description: str = ""
    enabled: bool = False
    type: FlagType = FlagType.BOOLEAN
    value: Any = None
    default_value: Any = None
    rollout_percentage: int = 100
    targeting_rules: list[TargetingRule] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    environment: FlagEnvironment = FlagEnvironment.DEVELOPMENT

    @classmethod
    def from_dict(cls, data: dict) -> FeatureFlag:
        return cls(
            id=str(data.get("id", "")),
            key=_str(data.get("key")),
            name=_str(data.get("name")),
            description=_str(data.get("description")),
            enabled=bool(data.get("enabled", False)),
            type=_enum(FlagType, data.get("type"), FlagType.BOOLEAN),
            value=data.get("value"),
            default_value=data.get("defaultValue"),
            rollout_percentage=max(0, min(100, _int(data.get("rolloutPercentage"), 100))),
            targeting_rules=[TargetingRule.from_dict(r) for r in _dicts(data.get("targetingRules"))],
            tags=_str_list(data.get("tags")),
            environment=_enum(FlagEnvironment, data.get("environment"), FlagEnvironment.DEVELOPMENT),
        )

    def to_payload(self) -> dict:
        return {
            "key": self.key,
            "name": self.name,
            "description": self.description,
            "enabled": self.enabled,
            "type": self.type.value,
            "value": self.value,
            "defaultValue": self.default_value,
            "rolloutPercentage": self.rollout_percentage,
            "tags": list(self.tags),
            "environment": self.environment.value,
        }
