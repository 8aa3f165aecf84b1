"""
careerhub CLI - job matches, interview practice and coaching from the terminal.

Usage:
    python -m careerhub [command] [options]

Commands:
    matches       List your pre-apply job matches
    dismiss       Dismiss a match by job id
    applied       Mark a match as applied by job id
    practice      Run a timed interview practice session
    coaches       List career coaches
    availability  Show a coach's free slots for a date
    book          Book a coaching session
    goals         List your career goals
    dashboard     Load matches, goals and sessions together
    alerts        Send the match digest (for cron)

Examples:
    python -m careerhub matches --limit 10
    python -m careerhub practice --type quick
    python -m careerhub book coach_42 2026-11-02 10:00 --duration 30 --type chat
"""
from __future__ import annotations

import argparse
import sys

from careerhub.alerts import run_alerts
from careerhub.api import ApiClient
from careerhub.coaching import SESSION_DURATIONS, BookingFlow, CoachingApi, GoalBoard
from careerhub.config import TOKEN_ENV, get_token, load_settings
from careerhub.context import SessionContext
from careerhub.dashboard import load_dashboard
from careerhub.errors import ApiError, InvalidSelection
from careerhub.interview import InterviewApi
from careerhub.log import get_logger
from careerhub.matches import FeedStatus, MatchFeed, tier_label
from careerhub.models import QuestionCategory, SessionType
from careerhub.practice import PracticeRunner, PracticeState, format_time

log = get_logger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="careerhub",
        description="careerhub - job matches, interview practice and coaching",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    sub = parser.add_subparsers(dest="command", help="Available commands")

    p = sub.add_parser("matches", help="List pre-apply matches")
    p.add_argument("--limit", "-n", type=int, default=None, help="Max matches")

    for name, help_text in (("dismiss", "Dismiss a match"), ("applied", "Mark a match as applied")):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("job_id")

    p = sub.add_parser("practice", help="Timed interview practice")
    p.add_argument("--type", "-t", choices=[t.value for t in SessionType], default="quick")
    p.add_argument("--count", type=int, default=None, help="Number of questions")
    p.add_argument("--category", "-c", action="append", choices=[c.value for c in QuestionCategory])
    p.add_argument("--company", help="Company id (company-specific sessions)")

    p = sub.add_parser("coaches", help="List coaches")
    p.add_argument("--specialty")
    p.add_argument("--industry")

    p = sub.add_parser("availability", help="Coach availability for a date")
    p.add_argument("coach_id")
    p.add_argument("date", help="YYYY-MM-DD")

    p = sub.add_parser("book", help="Book a coaching session")
    p.add_argument("coach_id")
    p.add_argument("date", help="YYYY-MM-DD")
    p.add_argument("time", help="Slot time as listed by 'availability'")
    p.add_argument("--duration", type=int, choices=SESSION_DURATIONS, default=60)
    p.add_argument("--type", dest="session_type", default=None, help="video, audio or chat")
    p.add_argument("--topic")

    sub.add_parser("goals", help="List career goals")
    sub.add_parser("dashboard", help="Load the member dashboard")

    p = sub.add_parser("alerts", help="Send the match digest")
    p.add_argument("--no-email", action="store_true")
    p.add_argument("--no-report", action="store_true")

    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        return 1

    settings = load_settings()
    token = get_token()
    if not token:
        print(f"Set {TOKEN_ENV} in your environment or .env first.", file=sys.stderr)
        return 1

    handlers = {
        "matches": cmd_matches,
        "dismiss": cmd_transition,
        "applied": cmd_transition,
        "practice": cmd_practice,
        "coaches": cmd_coaches,
        "availability": cmd_availability,
        "book": cmd_book,
        "goals": cmd_goals,
        "dashboard": cmd_dashboard,
        "alerts": cmd_alerts,
    }
    with SessionContext(settings) as ctx:
        ctx.login(token)
        return handlers[args.command](args, ctx.api, settings)


# ── Commands ─────────────────────────────────────────────────────────────


def _print_matches(feed: MatchFeed) -> None:
    if feed.status is FeedStatus.EMPTY:
        print("No matches yet.")
        return
    for m in feed.matches:
        print(f"  [{m.match_score:3d}%] {m.job.title} @ {m.job.company}  ({tier_label(m.match_score)})  job={m.job.id}")


def cmd_matches(args, api: ApiClient, settings: dict) -> int:
    feed = MatchFeed(api, default_limit=settings["matches"]["limit"])
    feed.load_matches(args.limit)
    if feed.status is FeedStatus.ERROR:
        print(f"{feed.error}. Try again with: careerhub matches", file=sys.stderr)
        return 1
    _print_matches(feed)
    return 0


def cmd_transition(args, api: ApiClient, settings: dict) -> int:
    feed = MatchFeed(api, default_limit=settings["matches"]["limit"])
    feed.load_matches()
    if feed.status is FeedStatus.ERROR:
        print(feed.error, file=sys.stderr)
        return 1
    ok = feed.dismiss(args.job_id) if args.command == "dismiss" else feed.mark_applied(args.job_id)
    if not ok:
        print(feed.error or f"No match for job {args.job_id}", file=sys.stderr)
        return 1
    print("Done.")
    return 0


def _read_answer() -> str | None:
    """Multi-line answer ending with an empty line. Returns None on EOF."""
    lines: list[str] = []
    while True:
        try:
            line = input()
        except EOFError:
            return None if not lines else "\n".join(lines)
        if not line:
            return "\n".join(lines)
        lines.append(line)


def cmd_practice(args, api: ApiClient, settings: dict) -> int:
    interview = InterviewApi(api, default_time_limit=settings["practice"]["default_time_limit"])
    runner = PracticeRunner(interview, auto_tick=True)
    categories = [QuestionCategory(c) for c in args.category] if args.category else None
    if not runner.start(SessionType(args.type), categories, args.count, args.company):
        print(runner.error, file=sys.stderr)
        return 1

    try:
        while runner.state is PracticeState.IN_PROGRESS:
            q = runner.current_question
            total = len(runner.questions)
            print(f"\n── Question {runner.question_index + 1} of {total}  [{format_time(runner.time_remaining)}] ──")
            print(f"({q.category.value}, {q.difficulty.value}) {q.text}")
            for tip in q.tips[:3]:
                print(f"  tip: {tip}")
            if runner.draft:
                print(f"  (saved answer) {runner.draft}")
            print(
                "Type your answer, then an empty line. An empty answer keeps the saved one;"
                " ':clear' erases it, ':prev' goes back, ':quit' exits."
            )
            answer = _read_answer()
            if answer is None or answer.strip() == ":quit":
                runner.exit()
                print("Session discarded.")
                return 0
            if answer.strip() == ":clear":
                runner.set_answer("")
                continue
            if answer.strip() == ":prev":
                if runner.question_index > 0:
                    runner.previous()
                continue
            runner.next(answer or runner.draft)
            if runner.state is PracticeState.IN_PROGRESS and runner.error:
                print(f"{runner.error}. Press enter on the last question to retry.")
    except KeyboardInterrupt:
        runner.exit()
        print("\nSession discarded.")
        return 130

    fb = runner.feedback
    if fb is None:
        return 1
    print(f"\nOverall score: {fb.percent}")
    for s in fb.strengths:
        print(f"  + {s}")
    for s in fb.improvements:
        print(f"  - {s}")
    return 0


def cmd_coaches(args, api: ApiClient, settings: dict) -> int:
    try:
        coaches = CoachingApi(api).get_coaches(args.specialty, args.industry)
    except ApiError as exc:
        print(exc, file=sys.stderr)
        return 1
    for c in coaches:
        types = ", ".join(t.value for t in c.session_types)
        print(f"  {c.id}: {c.name} — {c.title} ({c.rating:.1f}★, {types})")
    return 0


def cmd_availability(args, api: ApiClient, settings: dict) -> int:
    try:
        slots = CoachingApi(api).get_availability(args.coach_id, args.date)
    except (ApiError, InvalidSelection) as exc:
        print(exc, file=sys.stderr)
        return 1
    for s in slots:
        print(f"  {s.time}  {'available' if s.available else 'booked'}")
    return 0


def cmd_book(args, api: ApiClient, settings: dict) -> int:
    coaching = CoachingApi(api)
    try:
        coach = coaching.get_coach(args.coach_id)
        flow = BookingFlow(coaching, coach)
        flow.select_date(args.date)
        if flow.error:
            print(flow.error, file=sys.stderr)
            return 1
        flow.select_time(args.time)
        flow.select_duration(args.duration)
        if args.session_type:
            flow.select_type(args.session_type)
        flow.set_topic(args.topic)
    except (ApiError, InvalidSelection) as exc:
        print(exc, file=sys.stderr)
        return 1
    session = flow.book()
    if session is None:
        print(flow.error, file=sys.stderr)
        return 1
    print(f"Booked {session.id}: {flow.duration} min {flow.session_type.value} with {coach.name} on {flow.date} {flow.time}")
    return 0


def cmd_goals(args, api: ApiClient, settings: dict) -> int:
    board = GoalBoard(CoachingApi(api))
    if not board.load():
        print(board.error, file=sys.stderr)
        return 1
    for g in board.goals:
        done = sum(1 for m in g.milestones if m.completed)
        print(f"  {g.title} [{g.category.value}] {g.progress}% ({done}/{len(g.milestones)} milestones)")
    return 0


def cmd_dashboard(args, api: ApiClient, settings: dict) -> int:
    board = load_dashboard(api, match_limit=settings["matches"]["limit"])
    try:
        print("Matches:")
        _print_matches(board.matches)
        print(f"Goals: {len(board.goals.goals)}  Upcoming sessions: {len(board.sessions.upcoming)}")
        for name, error in board.errors.items():
            print(f"  ! {name}: {error}", file=sys.stderr)
    finally:
        board.close()
    return 0 if not board.errors else 1


def cmd_alerts(args, api: ApiClient, settings: dict) -> int:
    result = run_alerts(api, settings, send_email=not args.no_email, write_report=not args.no_report)
    if result["error"]:
        return 1
    print(f"Matches: {result['matches_found']}  Alerted: {result['alerted']}")
    if result["report_path"]:
        print(f"Report: {result['report_path']}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
