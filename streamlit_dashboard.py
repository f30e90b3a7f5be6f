import streamlit as st
import pandas as pd
import plotly.express as px
import plotly.graph_objects as go
from datetime import datetime

from config import Settings
from collect import CodeforcesClient, CodeforcesError, InvalidInputError, VisitLogger
from process import (
    activity_series, difficulty_distribution, primary_tag_counts, rating_color,
    solved_rating_timeline, top_tags, verdict_distribution,
)
from profiles import compare_profiles, load_profile, log_comparison, search_handle
from state import HandleStore
from utils import get_timezone, local_date, setup_logging

# Set page config
st.set_page_config(
    page_title="Codeforces Face-Off",
    page_icon="📊",
    layout="wide"
)

# Custom CSS to increase heading font sizes
st.markdown("""
<style>
h1 {
    font-size: 2.8rem !important;
    font-weight: 600 !important;
    margin-bottom: 1rem !important;
}
h3 {
    font-size: 1.8rem !important;
    font-weight: 500 !important;
    margin-bottom: 0.6rem !important;
}
</style>
""", unsafe_allow_html=True)

VERDICT_COLORS = {
    "OK": "#4CAF50",
    "WRONG_ANSWER": "#FF5252",
    "TIME_LIMIT_EXCEEDED": "#FFC107",
    "MEMORY_LIMIT_EXCEEDED": "#FF9800",
    "RUNTIME_ERROR": "#9C27B0",
    "COMPILATION_ERROR": "#795548",
    "PRESENTATION_ERROR": "#607D8B",
    "IDLENESS_LIMIT_EXCEEDED": "#E91E63",
    "CRASHED": "#D32F2F",
    "PARTIAL": "#FF5722",
    "CHALLENGED": "#F44336",
    "SKIPPED": "#9E9E9E",
    "TESTING": "#2196F3",
    "REJECTED": "#FF1744",
}
OTHER_VERDICT_COLOR = "#757575"

LAYOUT = dict(
    title_font=dict(size=18),
    legend_title_font=dict(size=14),
    legend_font=dict(size=12)
)

@st.cache_resource
def get_settings() -> Settings:
    settings = Settings.from_env()
    setup_logging(settings.log_level)
    return settings

@st.cache_resource
def get_client() -> CodeforcesClient:
    # one client for the whole app, so every request shares one rate limiter
    return CodeforcesClient(get_settings())

@st.cache_resource
def get_visit_logger() -> VisitLogger:
    return VisitLogger(get_settings())

@st.cache_data(ttl=300, show_spinner="Fetching profile...")
def fetch_profile(handle):
    return load_profile(get_client(), handle)

@st.cache_data(ttl=300, show_spinner="Fetching both profiles...")
def fetch_comparison(handle_a, handle_b):
    return compare_profiles(get_client(), handle_a, handle_b, tz=get_settings().timezone)

def fmt(value, suffix=""):
    return "N/A" if value is None else f"{value}{suffix}"

def render_user_header(user, stats):
    col1, col2 = st.columns([1, 4])
    with col1:
        if user.titlePhoto:
            st.image(user.titlePhoto, width=120)
    with col2:
        color = rating_color(user.rating)
        st.markdown(f"<h2 style='color: {color};'>{user.handle}</h2>", unsafe_allow_html=True)
        st.markdown(f"**{(user.rank or 'unrated').title()}** (max: {user.maxRank or 'unrated'})")
    cols = st.columns(6)
    cols[0].metric("Rating", fmt(user.rating))
    cols[1].metric("Max Rating", fmt(user.maxRating))
    cols[2].metric("Problems Solved", stats.total_problems)
    cols[3].metric("Acceptance", fmt(stats.acceptance_rate, "%"))
    cols[4].metric("Contribution", user.contribution)
    cols[5].metric("Friends", user.friendOfCount)

def render_dashboard(handle):
    settings = get_settings()
    tz = get_timezone(settings.timezone)
    try:
        profile = fetch_profile(handle)
    except CodeforcesError as e:
        st.error(e.message)
        return
    user, stats, submissions = profile.user, profile.stats, profile.submissions

    render_user_header(user, stats)

    col1, col2, col3 = st.columns(3)
    col1.metric("Hardest Problem Solved", fmt(stats.max_rating))
    col2.metric("Average Problem Rating", fmt(stats.average_rating))
    col3.metric("Contests", stats.total_contests)

    # Rating history (col1) and verdicts (col2)
    col1, col2 = st.columns(2)
    with col1:
        st.markdown("<h3>Rating History</h3>", unsafe_allow_html=True)
        if not profile.rating_history:
            st.info("No contest data available")
        else:
            rating_df = pd.DataFrame([{
                "date": datetime.fromtimestamp(r.ratingUpdateTimeSeconds, tz=tz),
                "rating": r.newRating,
                "contest": r.contestName,
                "rank": r.rank,
            } for r in profile.rating_history])
            rating_fig = px.line(rating_df, x="date", y="rating", markers=True,
                                 hover_data=["contest", "rank"], title="Contest Rating")
            rating_fig.update_layout(xaxis_title="Date", yaxis_title="Rating", **LAYOUT)
            st.plotly_chart(rating_fig, use_container_width=True)

    with col2:
        st.markdown("<h3>Verdicts</h3>", unsafe_allow_html=True)
        verdicts = verdict_distribution(submissions)
        if not verdicts:
            st.info("No submissions yet")
        else:
            verdict_df = pd.DataFrame([v.model_dump() for v in verdicts])
            verdict_fig = px.pie(verdict_df, names="verdict", values="count", color="verdict",
                                 color_discrete_map={v: VERDICT_COLORS.get(v, OTHER_VERDICT_COLOR)
                                                     for v in verdict_df["verdict"]},
                                 title="Submission Verdicts")
            verdict_fig.update_traces(marker=dict(line=dict(width=1)))
            verdict_fig.update_layout(**LAYOUT)
            st.plotly_chart(verdict_fig, use_container_width=True)

    # Last 45 days (full width)
    st.markdown("<h3>Last 45 Days</h3>", unsafe_allow_html=True)
    series = activity_series(submissions, tz=tz)
    activity_df = pd.DataFrame([p.model_dump() for p in series])
    cols = st.columns(3)
    cols[0].metric("Solved (45 days)", int(activity_df["problems_solved"].sum()))
    cols[1].metric("Submissions (45 days)", int(activity_df["submissions"].sum()))
    cols[2].metric("Solved per Day", stats.recent_average)
    activity_fig = go.Figure()
    activity_fig.add_bar(x=activity_df["label"], y=activity_df["submissions"], name="Submissions")
    activity_fig.add_scatter(x=activity_df["label"], y=activity_df["problems_solved"],
                             name="Problems Solved", mode="lines+markers")
    activity_fig.update_layout(title="Daily Activity", xaxis_title="Date", yaxis_title="Count", **LAYOUT)
    st.plotly_chart(activity_fig, use_container_width=True)

    # Difficulty (col1) and tags (col2)
    col1, col2 = st.columns(2)
    with col1:
        st.markdown("<h3>Problem Difficulty</h3>", unsafe_allow_html=True)
        difficulty_df = pd.DataFrame([b.model_dump() for b in difficulty_distribution(submissions)])
        if difficulty_df["count"].sum() == 0:
            st.info("No rated problems solved yet")
        else:
            difficulty_df["color"] = [rating_color(d) for d in difficulty_df["difficulty"]]
            difficulty_fig = px.bar(difficulty_df, x="difficulty", y="count", title="Solved by Difficulty")
            difficulty_fig.update_traces(marker_color=difficulty_df["color"])
            difficulty_fig.update_layout(xaxis_title="Difficulty", yaxis_title="Problems", **LAYOUT)
            st.plotly_chart(difficulty_fig, use_container_width=True)

    with col2:
        st.markdown("<h3>Problem Tags</h3>", unsafe_allow_html=True)
        tags = top_tags(stats.problems_by_tags)
        if not tags:
            st.info("No tag data available")
        else:
            tag_df = pd.DataFrame(tags, columns=["tag", "count"])
            tag_fig = px.bar(tag_df, x="count", y="tag", orientation="h", title="Top Tags")
            tag_fig.update_layout(yaxis=dict(autorange="reversed"), **LAYOUT)
            st.plotly_chart(tag_fig, use_container_width=True)

    col1, col2 = st.columns(2)
    with col1:
        st.markdown("<h3>Main Problem Types</h3>", unsafe_allow_html=True)
        primary = primary_tag_counts(submissions)
        if not primary:
            st.info("No accepted submissions yet")
        else:
            st.dataframe(pd.DataFrame(primary, columns=["type", "accepted"]), use_container_width=True)

    with col2:
        st.markdown("<h3>Solved Problem Ratings</h3>", unsafe_allow_html=True)
        timeline = solved_rating_timeline(submissions, user.maxRating, tz)
        if not timeline:
            st.info("No rated problems solved yet")
        else:
            timeline_df = pd.DataFrame([p.model_dump() for p in timeline])
            timeline_fig = px.scatter(timeline_df, x="day", y="rating", title="Problem Rating over Time")
            if user.maxRating:
                timeline_fig.add_hline(y=user.maxRating, line_dash="dash", annotation_text="max rating")
            timeline_fig.update_layout(xaxis_title="Date", yaxis_title="Problem Rating", **LAYOUT)
            st.plotly_chart(timeline_fig, use_container_width=True)

def render_comparison(handle_a, handle_b):
    try:
        comparison = fetch_comparison(handle_a, handle_b)
    except (CodeforcesError, InvalidInputError) as e:
        st.error(getattr(e, "message", str(e)))
        return
    log_comparison(get_visit_logger(), comparison)
    first, second = comparison.first, comparison.second
    a, b = first.user.handle, second.user.handle

    cols = st.columns(2)
    for col, profile in zip(cols, (first, second)):
        with col:
            user, stats = profile.user, profile.stats
            st.markdown(f"<h3 style='color: {rating_color(user.rating)};'>{user.handle}</h3>",
                        unsafe_allow_html=True)
            st.write(f"Rating: {fmt(user.rating)} (max {fmt(user.maxRating)})")
            st.write(f"Contests: {stats.total_contests}")
            st.write(f"Problems solved: {stats.total_problems}")
            st.write(f"Acceptance rate: {fmt(stats.acceptance_rate, '%')}")
            st.write(f"Solved per day (last 45 days): {stats.recent_average}")
            st.write(f"Average problem rating: {fmt(stats.average_rating)}")
            last = profile.rating_history[-1].ratingUpdateTimeSeconds if profile.rating_history else None
            st.write(f"Last contest: {local_date(last, get_settings().timezone) if last else 'N/A'}")

    if comparison.extreme_mismatch:
        st.warning(
            f"You are comparing a mortal with a coding deity! The rating gap of "
            f"{comparison.rating_gap} points makes this a very one-sided face-off."
        )

    st.markdown("<h3>Rating History</h3>", unsafe_allow_html=True)
    if not comparison.rating_timeline:
        st.info("Neither user has taken part in a rated contest")
    else:
        timeline_df = pd.DataFrame([{
            "date": p.label, "contest": p.contest_name, a: p.ratings[a], b: p.ratings[b]
        } for p in comparison.rating_timeline])
        rating_fig = go.Figure()
        for handle in (a, b):
            rating_fig.add_scatter(x=timeline_df["date"], y=timeline_df[handle], name=handle,
                                   mode="lines+markers", connectgaps=True,
                                   customdata=timeline_df["contest"],
                                   hovertemplate="%{customdata}<br>%{y}")
        rating_fig.update_layout(title="Contest Rating", xaxis_title="Date", yaxis_title="Rating", **LAYOUT)
        st.plotly_chart(rating_fig, use_container_width=True)

    col1, col2 = st.columns(2)
    for col, title, table, label in (
        (col1, "Problems by Rating", comparison.rating_table, "rating"),
        (col2, "Problems by Tag", comparison.tag_table, "tag"),
    ):
        with col:
            st.markdown(f"<h3>{title}</h3>", unsafe_allow_html=True)
            if not table:
                st.info("No solved problems to compare")
                continue
            df = pd.DataFrame([{label: str(row.key), **row.counts} for row in table])
            long_df = df.melt(id_vars=label, var_name="handle", value_name="count")
            fig = px.bar(long_df, x=label, y="count", color="handle", barmode="group", title=title)
            fig.update_layout(**LAYOUT)
            st.plotly_chart(fig, use_container_width=True)

def main():
    settings = get_settings()
    store = HandleStore(settings.handle_file)
    if "handle" not in st.session_state:
        st.session_state["handle"] = store.get()

    st.title("Codeforces Face-Off")

    with st.sidebar:
        st.header("Navigation")
        page = st.radio("Page", ["Dashboard", "Compare Profiles"])
        if st.session_state["handle"]:
            st.write(f"Current handle: **{st.session_state['handle']}**")
            if st.button("Change handle"):
                store.clear()
                st.session_state["handle"] = ""
                st.rerun()

    if page == "Dashboard":
        if not st.session_state["handle"]:
            with st.form("handle_form"):
                handle = st.text_input("Enter your Codeforces handle to view your statistics")
                submitted = st.form_submit_button("View Dashboard")
            if submitted:
                try:
                    user = search_handle(get_client(), store, handle, visits=get_visit_logger())
                except (CodeforcesError, InvalidInputError) as e:
                    st.error(getattr(e, "message", str(e)))
                    return
                st.session_state["handle"] = user.handle
                st.rerun()
            return
        render_dashboard(st.session_state["handle"])
    else:
        col1, col2 = st.columns(2)
        handle_a = col1.text_input("First handle", value=st.session_state["handle"])
        handle_b = col2.text_input("Second handle")
        if st.button("Compare"):
            render_comparison(handle_a.strip(), handle_b.strip())

if __name__ == "__main__":
    main()
