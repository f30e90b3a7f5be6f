import logging
from typing import Optional

from collect import CodeforcesClient, InvalidInputError, VisitLogger
from compare import is_extreme_mismatch, merge_histograms, rating_gap, rating_timeline
from process import Clock, compute_stats
from state import HandleStore
from structs import Comparison, Profile, User

logger = logging.getLogger(__name__)


def search_handle(client: CodeforcesClient, store: HandleStore, handle: str,
                  visits: Optional[VisitLogger] = None) -> User:
    handle = (handle or "").strip()
    if not handle:
        raise InvalidInputError("Please enter a Codeforces handle")
    user = client.get_user(handle)
    if visits is not None:
        visits.log_visit("SEARCH", [handle], "/dashboard")
    store.set(handle)
    return user


def _build_profile(client: CodeforcesClient, user: User, now: Clock) -> Profile:
    submissions = client.get_submissions(user.handle)
    rating_history = client.get_rating_history(user.handle)
    logger.info("Fetched all data for %s", user.handle)
    return Profile(
        user=user,
        submissions=submissions,
        rating_history=rating_history,
        stats=compute_stats(submissions, rating_history, now),
    )


def load_profile(client: CodeforcesClient, handle: str, now: Clock = None) -> Profile:
    user = client.get_user(handle)
    return _build_profile(client, user, now)


def compare_profiles(client: CodeforcesClient, handle_a: str, handle_b: str,
                     visits: Optional[VisitLogger] = None, now: Clock = None, tz=None) -> Comparison:
    handle_a = (handle_a or "").strip()
    handle_b = (handle_b or "").strip()
    if not handle_a or not handle_b:
        raise InvalidInputError("Please enter both handles")
    if handle_a.lower() == handle_b.lower():
        raise InvalidInputError("Please enter different handles to compare")

    # both accounts must exist before the heavier per-user fetches start
    logger.info("Verifying users %s and %s exist", handle_a, handle_b)
    user_a = client.get_user(handle_a)
    user_b = client.get_user(handle_b)
    if visits is not None:
        visits.log_visit("COMPARE", [handle_a, handle_b], "/compare")

    first = _build_profile(client, user_a, now)
    second = _build_profile(client, user_b, now)
    a, b = user_a.handle, user_b.handle
    return Comparison(
        first=first,
        second=second,
        rating_timeline=rating_timeline(a, first.rating_history, b, second.rating_history, tz),
        rating_table=merge_histograms(a, first.stats.problems_by_rating, b, second.stats.problems_by_rating,
                                      numeric=True),
        tag_table=merge_histograms(a, first.stats.problems_by_tags, b, second.stats.problems_by_tags),
        rating_gap=rating_gap(user_a, user_b),
        extreme_mismatch=is_extreme_mismatch(user_a, user_b),
    )


def log_comparison(visits: VisitLogger, comparison: Comparison) -> None:
    # kept apart from compare_profiles so cached comparisons still get logged
    handles = [comparison.first.user.handle, comparison.second.user.handle]
    visits.log_visit("COMPARE", handles, "/compare")
