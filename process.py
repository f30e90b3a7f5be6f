from collections import Counter, defaultdict
from datetime import datetime, timedelta
from typing import Callable, Dict, Iterable, List, Optional, Set, Union

from structs import (
    ActivityPoint, AggregatedStats, DifficultyBucket, Problem, RatedSolve,
    RatingChange, SolvedCounts, Submission, VerdictCount,
)
from utils import get_timezone, local_date, round_half_up

ACCEPTED = "OK"
GYM_CONTEST_THRESHOLD = 10000
RECENT_WINDOW_DAYS = 45
ACTIVITY_DAYS = 45
DIFFICULTY_RANGE = (800, 3500)

Clock = Union[datetime, Callable[[], datetime], None]

# Codeforces rank colours, highest threshold first
RATING_COLORS = [
    (3000, "#AA0000"),  # Legendary Grandmaster
    (2300, "#FF0000"),  # Grandmaster
    (2100, "#FF8C00"),  # Master
    (1900, "#800080"),  # Candidate Master
    (1600, "#0000FF"),  # Expert
    (1400, "#03A89E"),  # Specialist
    (1200, "#008000"),  # Pupil
]
NEWBIE_COLOR = "#808080"
UNRATED_COLOR = "#000000"


def problem_key(problem: Problem) -> str:
    """Return the identity used to collapse repeated solves of one problem.

    Falls back through progressively weaker fields when the contest id or
    index is missing. Two different problems that only differ in fields the
    chosen rule ignores get the same key; that approximation is accepted.
    """
    contest_id = problem.contestId
    index = problem.index
    name = problem.name
    rating = problem.rating or 0

    if contest_id and index:
        return f"{contest_id}-{index}"
    if contest_id and contest_id > GYM_CONTEST_THRESHOLD:
        return f"{contest_id}-{index or name or 'unknown'}"
    if contest_id:
        return f"{contest_id}-{name or index or 'unknown'}"
    if index:
        return f"{index}-{name or 'unknown'}"
    if name:
        return f"{name}-{rating}"
    return f"{contest_id or 'unknown'}-{index or 'unknown'}-{name or 'unknown'}-{rating}"


def accepted(submissions: Iterable[Submission]) -> List[Submission]:
    return [s for s in submissions if s.verdict == ACCEPTED]


def unique_solved(submissions: Iterable[Submission]) -> Dict[str, Problem]:
    """First accepted submission per problem key, in first-seen order."""
    solved: Dict[str, Problem] = {}
    for submission in accepted(submissions):
        key = problem_key(submission.problem)
        if key not in solved:
            solved[key] = submission.problem
    return solved


def count_solved(submissions: Iterable[Submission]) -> SolvedCounts:
    by_rating = Counter()
    by_tag = Counter()
    solved = unique_solved(submissions)
    for problem in solved.values():
        if problem.rating:
            by_rating[problem.rating] += 1
        # a tag repeated in the source still counts once per problem
        for tag in dict.fromkeys(problem.tags):
            by_tag[tag] += 1
    return SolvedCounts(total=len(solved), by_rating=dict(by_rating), by_tag=dict(by_tag))


def _resolve_now(now: Clock, tz=None) -> datetime:
    if now is None:
        now = datetime.now(tz=get_timezone(tz))
    elif callable(now):
        now = now()
    if now.tzinfo is None:
        tz = get_timezone(tz)
        now = tz.localize(now) if hasattr(tz, "localize") else now.replace(tzinfo=tz)
    return now


def max_rating(by_rating: Dict[int, int]) -> Optional[int]:
    return max(by_rating) if by_rating else None


def average_rating(by_rating: Dict[int, int]) -> Optional[int]:
    solved = sum(by_rating.values())
    if solved == 0:
        return None
    total = sum(rating * count for rating, count in by_rating.items())
    return int(round_half_up(total / solved))


def acceptance_rate(unique_count: int, submission_count: int) -> Optional[int]:
    if submission_count == 0:
        return None
    return int(round_half_up(100 * unique_count / submission_count))


def recent_average(submissions: Iterable[Submission], now: Clock = None,
                   days: int = RECENT_WINDOW_DAYS) -> float:
    now_ts = _resolve_now(now).timestamp()
    window = days * 24 * 60 * 60
    recent: Set[str] = set()
    for submission in accepted(submissions):
        if now_ts - submission.creationTimeSeconds <= window:
            recent.add(problem_key(submission.problem))
    return round_half_up(len(recent) / days, 2)


def summarize(counts: SolvedCounts, submissions: List[Submission],
              rating_history: List[RatingChange], now: Clock = None) -> AggregatedStats:
    return AggregatedStats(
        total_problems=counts.total,
        total_submissions=len(submissions),
        max_rating=max_rating(counts.by_rating),
        average_rating=average_rating(counts.by_rating),
        acceptance_rate=acceptance_rate(counts.total, len(submissions)),
        total_contests=len(rating_history),
        recent_average=recent_average(submissions, now),
        problems_by_rating=counts.by_rating,
        problems_by_tags=counts.by_tag,
    )


def compute_stats(submissions: List[Submission], rating_history: List[RatingChange],
                  now: Clock = None) -> AggregatedStats:
    return summarize(count_solved(submissions), submissions, rating_history, now)


def activity_series(submissions: Iterable[Submission], now: Clock = None, tz=None,
                    days: int = ACTIVITY_DAYS) -> List[ActivityPoint]:
    """Dense daily series of the last ``days`` local calendar days, oldest first."""
    tz = get_timezone(tz)
    today = _resolve_now(now, tz).astimezone(tz).date()
    first_day = today - timedelta(days=days - 1)

    submitted = Counter()
    solved = defaultdict(set)
    for submission in submissions:
        day = local_date(submission.creationTimeSeconds, tz)
        if not (first_day <= day <= today):
            continue
        submitted[day] += 1
        if submission.verdict == ACCEPTED:
            solved[day].add(problem_key(submission.problem))

    series = []
    for offset in range(days):
        day = first_day + timedelta(days=offset)
        series.append(ActivityPoint(
            day=day,
            label=day.isoformat(),
            submissions=submitted[day],
            problems_solved=len(solved[day]),
        ))
    return series


def verdict_distribution(submissions: Iterable[Submission]) -> List[VerdictCount]:
    # no verdict yet means the submission is still in the judging queue
    counts = Counter(s.verdict or "TESTING" for s in submissions)
    return [VerdictCount(verdict=v, count=c) for v, c in counts.most_common()]


def difficulty_distribution(submissions: Iterable[Submission]) -> List[DifficultyBucket]:
    low, high = DIFFICULTY_RANGE
    buckets = Counter()
    for problem in unique_solved(submissions).values():
        if not problem.rating:
            continue
        bucket = problem.rating // 100 * 100
        if low <= bucket <= high:
            buckets[bucket] += 1
    return [DifficultyBucket(difficulty=d, count=buckets[d]) for d in range(low, high + 1, 100)]


def top_tags(by_tag: Dict[str, int], limit: Optional[int] = 20) -> List[tuple]:
    ranked = sorted(by_tag.items(), key=lambda item: (-item[1], item[0]))
    return ranked[:limit] if limit else ranked


def primary_tag_counts(submissions: Iterable[Submission], limit: int = 5) -> List[tuple]:
    counts = Counter()
    for submission in accepted(submissions):
        tags = submission.problem.tags
        counts[tags[0] if tags else "Unknown"] += 1
    return counts.most_common(limit)


def solved_rating_timeline(submissions: Iterable[Submission], max_rating: Optional[int] = None,
                           tz=None) -> List[RatedSolve]:
    rated = sorted(
        (s for s in accepted(submissions) if s.problem.rating),
        key=lambda s: s.creationTimeSeconds,
    )
    return [
        RatedSolve(day=local_date(s.creationTimeSeconds, tz), rating=s.problem.rating, max_rating=max_rating)
        for s in rated
    ]


def rating_color(rating: Optional[int]) -> str:
    if not rating:
        return UNRATED_COLOR
    for threshold, color in RATING_COLORS:
        if rating >= threshold:
            return color
    return NEWBIE_COLOR
