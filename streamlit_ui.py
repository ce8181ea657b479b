#!/usr/bin/env python3
"""
Streamlit UI for Mock Interview Practice.

Provides the practice front end with:
- Landing page
- Dashboard with past sessions and rating statistics
- Interview simulator (setup, live transcript, feedback)

Usage:
    uv run python interview_service.py  # Terminal 1
    uv run streamlit run streamlit_ui.py  # Terminal 2
"""

from __future__ import annotations

import logging
import os
from datetime import datetime
from enum import Enum
from typing import Any, Final

import httpx
import streamlit as st

from mock_interview import catalog

# =============================================================================
# Logging Configuration
# =============================================================================

logger: logging.Logger = logging.getLogger(__name__)

# =============================================================================
# Configuration
# =============================================================================

SERVICE_URL: Final[str] = os.environ.get("SERVICE_URL", "http://127.0.0.1:8765")

HTTP_TIMEOUT_SECONDS: Final[float] = 10.0
HEALTH_CHECK_TIMEOUT_SECONDS: Final[float] = 2.0
# Ending an interview waits on one evaluation per answer plus the summary
FEEDBACK_TIMEOUT_SECONDS: Final[float] = 120.0


# =============================================================================
# Page Configuration
# =============================================================================

st.set_page_config(
    page_title="Mock Interview Practice",
    page_icon="🩺",
    layout="wide",
    initial_sidebar_state="collapsed",
)


# =============================================================================
# Custom CSS
# =============================================================================

st.markdown("""
<style>
#MainMenu {visibility: hidden;}
footer {visibility: hidden;}
.stDeployButton {display: none;}

.main .block-container {
    padding: 1rem 2rem;
    max-width: 1100px;
}

.interviewer-bubble {
    background: linear-gradient(135deg, #E0F2FE 0%, #BAE6FD 100%);
    color: #0C4A6E;
    padding: 0.75rem 1rem;
    border-radius: 12px;
    border-bottom-left-radius: 4px;
    margin-bottom: 0.5rem;
    max-width: 85%;
}

.candidate-bubble {
    background: linear-gradient(135deg, #D1FAE5 0%, #A7F3D0 100%);
    color: #064E3B;
    padding: 0.75rem 1rem;
    border-radius: 12px;
    border-bottom-right-radius: 4px;
    margin-bottom: 0.5rem;
    margin-left: auto;
    max-width: 85%;
}

.bubble-meta {
    font-size: 0.7rem;
    color: #64748B;
    margin-bottom: 0.5rem;
}

.expected-answer {
    background: #F8FAFC;
    border-left: 3px solid #10B981;
    padding: 0.5rem 0.75rem;
    border-radius: 6px;
    font-size: 0.85rem;
}

.stars {
    color: #F59E0B;
    font-size: 1.1rem;
}
</style>
""", unsafe_allow_html=True)


# =============================================================================
# State Management
# =============================================================================

class Page(str, Enum):
    """Top-level pages."""

    LANDING = "landing"
    DASHBOARD = "dashboard"
    INTERVIEW = "interview"


def init_state() -> None:
    """
    Initialize Streamlit session state.

    Only initializes state on first run; subsequent calls are no-ops.
    """
    if "init" not in st.session_state:
        st.session_state.init = True
        st.session_state.page = Page.LANDING
        st.session_state.user_id = "anonymous"
        st.session_state.session_id: str | None = None
        st.session_state.interview: dict[str, Any] | None = None
        st.session_state.report: dict[str, Any] | None = None
        st.session_state.llm_status: str | None = None


def go_to(page: Page) -> None:
    st.session_state.page = page


# =============================================================================
# Service Client
# =============================================================================

def check_service() -> bool:
    """
    Check if the interview service is healthy.

    Returns:
        True if service is reachable and healthy, False otherwise.
    """
    try:
        with httpx.Client(timeout=HEALTH_CHECK_TIMEOUT_SECONDS) as client:
            response = client.get(f"{SERVICE_URL}/health")
            return response.status_code == 200
    except httpx.ConnectError:
        logger.debug("Service connection failed")
        return False
    except httpx.TimeoutException:
        logger.debug("Service health check timed out")
        return False


def call_service(
    method: str,
    path: str,
    timeout: float = HTTP_TIMEOUT_SECONDS,
    **kwargs: Any,
) -> dict[str, Any] | None:
    """
    Call the interview service and return the JSON body.

    Errors are shown in the page and logged; None is returned instead of raising.
    """
    try:
        with httpx.Client(timeout=timeout) as client:
            response = client.request(method, f"{SERVICE_URL}{path}", **kwargs)
    except httpx.ConnectError as e:
        st.error(f"Connection error: Cannot reach service at {SERVICE_URL}")
        logger.error("%s %s connection error: %s", method, path, e)
        return None
    except httpx.TimeoutException as e:
        st.error("Request timed out. Is the service running?")
        logger.error("%s %s timeout: %s", method, path, e)
        return None

    try:
        body = response.json()
    except ValueError:
        body = {"error": response.text}

    if response.status_code != 200:
        st.error(body.get("error") or f"Request failed ({response.status_code})")
        return None
    return body


def fetch_catalog() -> dict[str, Any]:
    """Roles/levels from the service, or the local tables if it's down."""
    body = call_service("GET", "/catalog", timeout=HEALTH_CHECK_TIMEOUT_SECONDS)
    if body:
        return body
    return {
        "roles": [{"value": k, "label": v} for k, v in catalog.ROLE_LABELS.items()],
        "levels": [{"value": k, "label": v} for k, v in catalog.LEVEL_DISPLAY_LABELS.items()],
        "demo_mode": True,
    }


def refresh_interview() -> None:
    session_id = st.session_state.session_id
    if not session_id:
        st.session_state.interview = None
        return
    st.session_state.interview = call_service("GET", f"/interviews/{session_id}")


def fmt_time(timestamp: str | None) -> str:
    """
    Format an ISO timestamp for display.

    Args:
        timestamp: ISO 8601 timestamp string.

    Returns:
        "Mon DD, YYYY HH:MM" or the raw input on parse failure.
    """
    if not timestamp:
        return ""
    try:
        dt = datetime.fromisoformat(timestamp.replace("Z", "+00:00"))
        return dt.strftime("%b %d, %Y %H:%M")
    except (ValueError, AttributeError):
        return timestamp


def stars(rating: int) -> str:
    rating = max(0, min(5, int(rating)))
    return "★" * rating + "☆" * (5 - rating)


# =============================================================================
# Interview Actions
# =============================================================================

def start_interview(role: str, level: str) -> None:
    body = call_service(
        "POST",
        "/interviews",
        json={"role": role, "level": level, "user_id": st.session_state.user_id},
    )
    if not body:
        return
    st.session_state.session_id = body["session_id"]
    st.session_state.report = None
    refresh_interview()


def send_answer(content: str) -> None:
    session_id = st.session_state.session_id
    body = call_service(
        "POST",
        f"/interviews/{session_id}/messages",
        json={"content": content},
        timeout=FEEDBACK_TIMEOUT_SECONDS,
    )
    if body and body.get("used_fallback") and not st.session_state.interview.get("demo_mode"):
        st.toast("The AI interviewer is unavailable; using a predefined question.")
    refresh_interview()


def end_interview() -> None:
    session_id = st.session_state.session_id
    with st.spinner("Generating your feedback..."):
        body = call_service(
            "POST",
            f"/interviews/{session_id}/end",
            timeout=FEEDBACK_TIMEOUT_SECONDS,
        )
    if not body:
        return
    st.session_state.report = body["report"]
    if not body.get("persisted"):
        st.warning("Feedback is ready but the session could not be saved to your history.")
    refresh_interview()


def review_interview() -> None:
    call_service("POST", f"/interviews/{st.session_state.session_id}/review")
    refresh_interview()


def reset_interview() -> None:
    session_id = st.session_state.session_id
    if session_id:
        call_service("DELETE", f"/interviews/{session_id}")
    st.session_state.session_id = None
    st.session_state.interview = None
    st.session_state.report = None


def test_llm_connection() -> None:
    body = call_service("GET", "/llm/status", timeout=FEEDBACK_TIMEOUT_SECONDS)
    if body:
        st.session_state.llm_status = body.get("result")


# =============================================================================
# Pages
# =============================================================================

def render_landing() -> None:
    st.markdown("## 🩺 Mock Interview Practice")
    st.markdown(
        "Practice healthcare job interviews with an AI interviewer. Pick a role "
        "and experience level, answer one question at a time, and get a rating "
        "and model answer for every response when you finish."
    )
    c1, c2, c3 = st.columns(3)
    c1.markdown("**🎯 Role-specific**\n\nNurse, doctor, pharmacist, therapist and technician tracks.")
    c2.markdown("**💬 Conversational**\n\nFollow-up questions adapt to your answers.")
    c3.markdown("**📊 Actionable feedback**\n\n1-5 ratings, expected answers and an overall summary.")
    st.divider()
    if st.button("Start practicing", type="primary"):
        go_to(Page.DASHBOARD)
        st.rerun()


def render_dashboard() -> None:
    col_title, col_action = st.columns([3, 1])
    with col_title:
        st.markdown("## 📋 Dashboard")
    with col_action:
        if st.button("➕ New Interview", type="primary"):
            reset_interview()
            go_to(Page.INTERVIEW)
            st.rerun()

    user_id = st.text_input("User ID", value=st.session_state.user_id).strip()
    if user_id:
        st.session_state.user_id = user_id

    stats = call_service("GET", f"/users/{st.session_state.user_id}/stats")
    if stats:
        c1, c2, c3, c4 = st.columns(4)
        c1.metric("Interviews", stats.get("total_sessions", 0))
        average = stats.get("average_rating")
        c2.metric("Average Rating", f"{average}/5" if average is not None else "-")
        c3.metric("Questions Answered", stats.get("total_questions", 0))
        c4.metric("Strong Answers", stats.get("strong_answers", 0))

    st.markdown("### Past Sessions")
    body = call_service("GET", f"/users/{st.session_state.user_id}/sessions")
    sessions = body.get("sessions", []) if body else []
    if not sessions:
        st.info("No interviews yet. Start one to see your history here.")
        return

    for summary in sessions:
        average = summary.get("average_rating")
        title = (
            f"{summary['role_label']} · {summary['level_label']} · "
            f"{fmt_time(summary.get('started_at'))}"
        )
        with st.expander(title):
            c1, c2, c3 = st.columns(3)
            c1.metric("Average Rating", f"{average}/5" if average is not None else "-")
            c2.metric("Strong Answers", summary.get("strong_answers", 0))
            c3.metric("Needs Improvement", summary.get("needs_improvement", 0))
            st.markdown(summary.get("overall_feedback", ""))
            if summary.get("used_fallback"):
                st.caption("Feedback generated without the AI evaluator.")


def render_setup() -> None:
    options = fetch_catalog()
    st.markdown("## 🎤 Set up your interview")
    if options.get("demo_mode"):
        st.info("Demo mode: predefined questions and sample feedback are used.")

    roles = {item["value"]: item["label"] for item in options["roles"]}
    levels = {item["value"]: item["label"] for item in options["levels"]}

    role = st.selectbox("Role", list(roles), format_func=roles.get)
    level = st.selectbox("Experience Level", list(levels), format_func=levels.get)

    c1, c2 = st.columns([1, 1])
    with c1:
        if st.button("Start Interview", type="primary"):
            if check_service():
                start_interview(role, level)
                st.rerun()
            else:
                st.error("Interview service unavailable")
    with c2:
        if st.button("Test API Connection"):
            test_llm_connection()
    if st.session_state.llm_status:
        st.caption(f"LLM status: {st.session_state.llm_status}")


def render_transcript(interview: dict[str, Any]) -> None:
    for turn in interview.get("turns", []):
        if turn["role"] == "assistant":
            st.markdown(
                f'<div class="interviewer-bubble"><strong>Interviewer:</strong> {turn["content"]}</div>',
                unsafe_allow_html=True,
            )
        else:
            st.markdown(
                f'<div class="candidate-bubble"><strong>You:</strong> {turn["content"]}</div>',
                unsafe_allow_html=True,
            )


def render_in_progress(interview: dict[str, Any]) -> None:
    st.markdown(f"## {interview['role_label']} Interview · {interview['level_label']}")

    with st.container(border=True, height=450):
        render_transcript(interview)

    with st.form("answer", clear_on_submit=True):
        answer = st.text_area("Your answer", height=120)
        submitted = st.form_submit_button("Send", type="primary")
    if submitted and answer.strip():
        send_answer(answer)
        st.rerun()

    if st.button("End Interview"):
        end_interview()
        st.rerun()


def render_feedback(report: dict[str, Any]) -> None:
    st.markdown("## 📊 Interview Feedback")

    stats = report.get("stats", {})
    average = stats.get("average_rating")
    c1, c2, c3 = st.columns(3)
    c1.metric("Average Rating", f"{average}/5" if average is not None else "-")
    c2.metric("Strong Answers", stats.get("strong_answers", 0))
    c3.metric("Needs Improvement", stats.get("needs_improvement", 0))

    with st.container(border=True):
        st.markdown("**Overall Feedback**")
        st.markdown(report.get("overall_feedback", ""))

    for index, item in enumerate(report.get("question_feedback", []), start=1):
        with st.container(border=True):
            st.markdown(
                f"**Question {index}** · {item['category']} "
                f"<span class='stars'>{stars(item['rating'])}</span>",
                unsafe_allow_html=True,
            )
            st.markdown(f"_{item['question']}_")
            st.markdown(f"**Your answer:** {item['user_answer']}")
            st.markdown(
                f"<div class='expected-answer'><strong>Expected answer:</strong> {item['expected_answer']}</div>",
                unsafe_allow_html=True,
            )
            st.caption(item["feedback"])

    c1, c2, c3 = st.columns(3)
    with c1:
        if st.button("Start New Interview", type="primary"):
            reset_interview()
            st.rerun()
    with c2:
        if st.button("Review Interview"):
            review_interview()
            st.rerun()
    with c3:
        if st.button("Back to Dashboard"):
            go_to(Page.DASHBOARD)
            st.rerun()


def render_review(interview: dict[str, Any]) -> None:
    st.markdown("## 🔍 Interview Review")
    with st.container(border=True, height=500):
        render_transcript(interview)
    c1, c2 = st.columns(2)
    with c1:
        if st.button("Start New Interview", type="primary"):
            reset_interview()
            st.rerun()
    with c2:
        if st.button("Back to Dashboard"):
            go_to(Page.DASHBOARD)
            st.rerun()


def render_interview() -> None:
    interview = st.session_state.interview
    if not interview:
        render_setup()
        return

    phase = interview.get("phase")
    if phase == "in_progress":
        render_in_progress(interview)
    elif phase == "feedback" and st.session_state.report:
        render_feedback(st.session_state.report)
    elif phase == "review":
        render_review(interview)
    else:
        render_setup()


# =============================================================================
# Main Application
# =============================================================================

def main() -> None:
    """
    Main Streamlit application entry point.

    Renders the page held in session state:
    - Landing: pitch and entry button
    - Dashboard: stats and session history for the entered user id
    - Interview: setup, transcript and feedback screens
    """
    init_state()

    col_h1, col_h2, col_h3 = st.columns([3, 1, 2])
    with col_h1:
        if st.button("🏠 Home"):
            go_to(Page.LANDING)
            st.rerun()
    with col_h2:
        if st.button("📋 Dashboard"):
            go_to(Page.DASHBOARD)
            st.rerun()
    with col_h3:
        status = "🟢 Connected" if check_service() else "🔴 Disconnected"
        st.markdown(
            f"<div style='text-align:right;padding-top:0.5rem;'>{status}</div>",
            unsafe_allow_html=True,
        )

    st.divider()

    page = st.session_state.page
    if page == Page.DASHBOARD:
        render_dashboard()
    elif page == Page.INTERVIEW:
        render_interview()
    else:
        render_landing()


if __name__ == "__main__":
    main()
