# Home.py
import streamlit as st

# ── Page config FIRST ─────────────────────────────────────────
st.set_page_config(
    page_title="🎒 University Trips",
    page_icon="🎒",
    layout="centered",
)

# ── Env + styling ─────────────────────────────────────────────
from config import APP_TITLE, INSTITUTION_NAME, configure_logging, validate_config
from utils.styling import inject_global_styles, inject_sidebar_styles
from utils.role_sidebar import render_role_in_sidebar

configure_logging()
validate_config()
inject_global_styles()
inject_sidebar_styles()

render_role_in_sidebar()

# ── Hero ──────────────────────────────────────────────────────
st.markdown(
    f"""
    <h2 class="big-title"><span class='emoji'>🎒</span> {APP_TITLE}</h2>
    <div class='subtitle'>{INSTITUTION_NAME}</div>
    """,
    unsafe_allow_html=True,
)

# ── Role cards ────────────────────────────────────────────────
st.markdown("""
<div class="feature-grid">

  <div class="feature-card">
    <div class="fc-head"><div class="fc-icon">🛠️</div><div class="fc-title">Administrator</div></div>
    <p class="fc-desc">
      Manage students and trips, send invitations, confirm registrations,
      mark attendance, process no-show charges and export reports.
    </p>
  </div>

  <div class="feature-card">
    <div class="fc-head"><div class="fc-icon">🎓</div><div class="fc-title">Student</div></div>
    <p class="fc-desc">
      Browse available trips, register or cancel (free up to 48 hours before),
      follow your balance and read department messages.
    </p>
  </div>

</div>
""", unsafe_allow_html=True)

st.write("")
left, right = st.columns(2)
with left:
    if st.button("🛠️ Enter as administrator", use_container_width=True):
        st.session_state.role = "admin"
        st.switch_page("pages/1_Dashboard.py")
with right:
    if st.button("🎓 Enter as student", use_container_width=True):
        st.session_state.role = "student"
        st.switch_page("pages/6_Student_Portal.py")

st.caption("Demo system – data lives only in this browser session.")
