import pytest

from collect import CodeforcesClient, HandleNotFoundError, InvalidInputError, RateLimiter, VisitLogger
from config import Settings
from factories import NOW, FakeClock, FakeSession, failed, ok
from profiles import compare_profiles, load_profile, log_comparison, search_handle
from state import HandleStore

USERS = {
    "alice": {"handle": "alice", "rating": 1500, "maxRating": 1600},
    "bob": {"handle": "bob", "rating": 2800, "maxRating": 2900},
}

SUBMISSIONS = {
    "alice": [
        {"id": 1, "creationTimeSeconds": int(NOW.timestamp()) - 3600, "verdict": "OK",
         "problem": {"contestId": 1, "index": "A", "rating": 800, "tags": ["dp"]}},
        {"id": 2, "creationTimeSeconds": int(NOW.timestamp()) - 7200, "verdict": "WRONG_ANSWER",
         "problem": {"contestId": 1, "index": "A", "rating": 800, "tags": ["dp"]}},
    ],
    "bob": [
        {"id": 3, "creationTimeSeconds": int(NOW.timestamp()) - 3600, "verdict": "OK",
         "problem": {"contestId": 2, "index": "B", "rating": 1900, "tags": ["graphs", "dp"]}},
    ],
}

RATINGS = {
    "alice": [{"contestId": 1, "contestName": "Round 1", "rank": 10, "ratingUpdateTimeSeconds": 100,
               "oldRating": 1400, "newRating": 1500}],
    "bob": [{"contestId": 2, "contestName": "Round 2", "rank": 1, "ratingUpdateTimeSeconds": 200,
             "oldRating": 2700, "newRating": 2800}],
}


def user_info(params):
    handle = params["handles"]
    return ok([USERS[handle]]) if handle in USERS else failed(f"handles: User with handle {handle} not found")


def make_client(clock=None):
    clock = clock or FakeClock()
    session = FakeSession({
        "user.info": user_info,
        "user.status": lambda params: ok(SUBMISSIONS[params["handle"]]),
        "user.rating": lambda params: ok(RATINGS[params["handle"]]),
    })
    return CodeforcesClient(Settings(), session=session, limiter=RateLimiter(2.0, clock=clock, sleep=clock.sleep))


def test_load_profile():
    client = make_client()
    profile = load_profile(client, "alice", now=NOW)
    assert profile.user.rating == 1500
    assert profile.stats.total_problems == 1
    assert profile.stats.acceptance_rate == 50
    assert profile.stats.total_contests == 1
    assert [method for method, _ in client.session.calls] == ["user.info", "user.status", "user.rating"]


def test_compare_profiles():
    clock = FakeClock()
    client = make_client(clock)
    visits = FakeSession()
    comparison = compare_profiles(client, "alice", "bob", visits=VisitLogger(Settings(), session=visits), now=NOW)

    assert comparison.first.user.handle == "alice"
    assert comparison.second.stats.problems_by_tags == {"graphs": 1, "dp": 1}
    assert [p.timestamp for p in comparison.rating_timeline] == [100, 200]
    assert comparison.rating_timeline[0].ratings == {"alice": 1500, "bob": None}
    assert [(row.key, row.counts) for row in comparison.rating_table] == [
        (800, {"alice": 1, "bob": 0}),
        (1900, {"alice": 0, "bob": 1}),
    ]
    assert comparison.tag_table[0].counts == {"alice": 1, "bob": 1}
    assert comparison.rating_gap == 1300
    assert comparison.extreme_mismatch

    # users are verified first, then every fetch runs one after another
    assert [(m, p.get("handle") or p.get("handles")) for m, p in client.session.calls] == [
        ("user.info", "alice"), ("user.info", "bob"),
        ("user.status", "alice"), ("user.rating", "alice"),
        ("user.status", "bob"), ("user.rating", "bob"),
    ]
    assert clock.sleeps == [2.0] * 5
    assert visits.posts[0][1]["action"] == "COMPARE"
    assert visits.posts[0][1]["handles"] == ["alice", "bob"]


@pytest.mark.parametrize("a,b", [("", "bob"), ("alice", "  "), ("alice", "ALICE")])
def test_compare_profiles_rejects_bad_input(a, b):
    client = make_client()
    with pytest.raises(InvalidInputError):
        compare_profiles(client, a, b)
    assert client.session.calls == []


def test_compare_profiles_missing_user_stops_early():
    client = make_client()
    with pytest.raises(HandleNotFoundError) as exc:
        compare_profiles(client, "alice", "carol")
    assert exc.value.handle == "carol"
    assert exc.value.message == "User 'carol' not found on Codeforces"
    assert all(method == "user.info" for method, _ in client.session.calls)


def test_search_handle_persists_and_logs(tmp_path):
    store = HandleStore(tmp_path / "handle.json")
    visits = FakeSession()
    user = search_handle(make_client(), store, " alice ", visits=VisitLogger(Settings(), session=visits))
    assert user.handle == "alice"
    assert store.get() == "alice"
    assert visits.posts[0][1]["action"] == "SEARCH"
    assert visits.posts[0][1]["path"] == "/dashboard"


def test_search_handle_unknown_user_keeps_previous_handle(tmp_path):
    store = HandleStore(tmp_path / "handle.json")
    store.set("alice")
    with pytest.raises(HandleNotFoundError):
        search_handle(make_client(), store, "carol")
    assert store.get() == "alice"


def test_every_comparison_view_is_logged_even_when_reused():
    comparison = compare_profiles(make_client(), "alice", "bob", now=NOW)
    visits = FakeSession()
    logger = VisitLogger(Settings(), session=visits)
    log_comparison(logger, comparison)
    log_comparison(logger, comparison)
    assert [payload["handles"] for _, payload in visits.posts] == [["alice", "bob"], ["alice", "bob"]]
    assert all(payload["path"] == "/compare" for _, payload in visits.posts)
