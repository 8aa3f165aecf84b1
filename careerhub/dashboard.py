"""Member dashboard: fetch matches, goals and coaching sessions in parallel."""
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Callable

from careerhub.api import ApiClient
from careerhub.coaching import CoachingApi, CoachingSessions, GoalBoard
from careerhub.log import get_logger
from careerhub.matches import MatchFeed

log = get_logger(__name__)


@dataclass
class Dashboard:
    matches: MatchFeed
    goals: GoalBoard
    sessions: CoachingSessions
    errors: dict[str, str] = field(default_factory=dict)

    def close(self) -> None:
        for part in (self.matches, self.goals, self.sessions):
            part.close()


def load_dashboard(api: ApiClient, match_limit: int = 20) -> Dashboard:
    """Each section loads independently; one failing leaves the others intact."""
    coaching = CoachingApi(api)
    board = Dashboard(
        matches=MatchFeed(api, default_limit=match_limit),
        goals=GoalBoard(coaching),
        sessions=CoachingSessions(coaching),
    )
    loaders: dict[str, Callable[[], object]] = {
        "matches": board.matches.load_matches,
        "goals": board.goals.load,
        "sessions": board.sessions.load,
    }

    log.info("Loading dashboard (%d sections in parallel)...", len(loaders))
    with ThreadPoolExecutor(max_workers=len(loaders)) as pool:
        futures = {pool.submit(fn): name for name, fn in loaders.items()}
        for future in as_completed(futures):
            name = futures[future]
            future.result()
            error = getattr(board, name).error
            if error:
                board.errors[name] = error
                log.warning("[%s] %s", name, error)

    return board
