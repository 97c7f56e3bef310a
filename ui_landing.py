import streamlit as st

from components.ui import render_footer, render_page_header, render_section_header
from config import APP_NAME, ROUTE_AUTH
from routing import navigate

HERO_TEXT = (
    "Connect students and teachers in a collaborative learning environment. "
    "Ask questions, get answers, and excel together in real-time."
)

STATS = [
    ("10K+", "Active Students"),
    ("500+", "Expert Teachers"),
    ("50K+", "Questions Answered"),
    ("98%", "Satisfaction Rate"),
]

FEATURES = [
    ("💬", "Real-time Q&A", "Ask questions and get instant answers from qualified teachers in real-time."),
    ("👥", "Collaborative Learning", "Connect with peers and teachers in an interactive learning environment."),
    ("🎓", "Expert Teachers", "Learn from experienced educators who are passionate about helping students succeed."),
    ("🏆", "Quality Content", "Access high-quality educational content and resources curated by experts."),
    ("⏰", "24/7 Availability", "Get help whenever you need it with our round-the-clock support system."),
    ("📚", "Rich Resources", "Comprehensive library of educational materials and study guides."),
]

BENEFITS = [
    ("🎯", "Personalized Learning Paths", "Tailored educational journeys that adapt to your learning style and pace."),
    ("🧠", "Interactive Assessments", "Engaging quizzes and tests that help reinforce your understanding."),
    ("🌍", "Global Community", "Connect with learners and educators from around the world."),
]


def _get_started_cb() -> None:
    navigate(ROUTE_AUTH)


def _cta_button(label: str, key: str) -> None:
    _, mid, _ = st.columns([1, 1, 1])
    with mid:
        st.button(label, key=key, type="primary", use_container_width=True, on_click=_get_started_cb)


def render_landing_page() -> None:
    render_page_header(f"Welcome to {APP_NAME}", HERO_TEXT, gradient=True)
    _cta_button("🚀 Get Started Free", "landing_get_started")

    cols = st.columns(len(STATS))
    for col, (value, label) in zip(cols, STATS):
        with col:
            st.metric(label, value)

    st.divider()
    render_section_header(
        f"Why Choose {APP_NAME}?",
        "Discover the features that make learning engaging and effective",
        eyebrow="Features",
    )
    for start in range(0, len(FEATURES), 3):
        row = st.columns(3)
        for col, (icon, title, body) in zip(row, FEATURES[start:start + 3]):
            with col, st.container(border=True):
                st.markdown(f"### {icon}")
                st.markdown(f"**{title}**")
                st.caption(body)

    st.divider()
    left, right = st.columns([3, 2])
    with left:
        render_section_header("Transform Your Learning Experience")
        for icon, title, body in BENEFITS:
            st.markdown(f"{icon} **{title}**")
            st.caption(body)
    with right:
        with st.container(border=True):
            st.markdown("⭐⭐⭐⭐⭐")
            st.markdown(f"*\"{APP_NAME} helped me get unstuck on homework the same evening I asked.\"*")
            st.caption("A student")

    st.divider()
    render_page_header(
        "Ready to Start Your Learning Journey?",
        "Join thousands of students and teachers who are already learning together.",
    )
    _cta_button(f"Join {APP_NAME} Today", "landing_join")

    render_footer("Empowering education through technology and community. © 2024 EduConnect. All rights reserved.")
