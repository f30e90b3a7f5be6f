from typing import Dict, List, Optional

from structs import ComparisonPoint, HistogramRow, RatingChange, User
from utils import local_date

EXTREME_GAP = 1200


def rating_timeline(handle_a: str, history_a: List[RatingChange],
                    handle_b: str, history_b: List[RatingChange], tz=None) -> List[ComparisonPoint]:
    """Align two rating histories on the union of their update timestamps.

    A user without a contest at a given timestamp gets ``None`` there, which
    the chart draws as a gap.
    """
    by_time_a = {r.ratingUpdateTimeSeconds: r for r in history_a}
    by_time_b = {r.ratingUpdateTimeSeconds: r for r in history_b}

    points = []
    for ts in sorted(set(by_time_a) | set(by_time_b)):
        change_a = by_time_a.get(ts)
        change_b = by_time_b.get(ts)
        contest_name = (change_a or change_b).contestName
        points.append(ComparisonPoint(
            timestamp=ts,
            label=local_date(ts, tz).isoformat(),
            contest_name=contest_name,
            ratings={
                handle_a: change_a.newRating if change_a else None,
                handle_b: change_b.newRating if change_b else None,
            },
        ))
    return points


def merge_histograms(handle_a: str, counts_a: Dict, handle_b: str, counts_b: Dict,
                     numeric: bool = False) -> List[HistogramRow]:
    keys = list(dict.fromkeys(list(counts_a) + list(counts_b)))
    if numeric:
        keys.sort(key=int)
    return [
        HistogramRow(key=key, counts={handle_a: counts_a.get(key, 0), handle_b: counts_b.get(key, 0)})
        for key in keys
    ]


def rating_gap(user_a: User, user_b: User) -> Optional[int]:
    if user_a.rating is None or user_b.rating is None:
        return None
    return abs(user_a.rating - user_b.rating)


def is_extreme_mismatch(user_a: User, user_b: User, threshold: int = EXTREME_GAP) -> bool:
    # the comparison is still shown; the page only adds a notice
    gap = rating_gap(user_a, user_b)
    return gap is not None and gap > threshold
