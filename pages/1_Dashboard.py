# pages/1_Dashboard.py
import altair as alt
import pandas as pd
import streamlit as st

# ── Page config FIRST ─────────────────────────────────────────
st.set_page_config(page_title="Dashboard", page_icon="📊", layout="wide")

from config import APP_TITLE, INSTITUTION_NAME, configure_logging
from domain.models import AttentionLevel, EventStatus
from services.ledger_service import (
    ATTENTION_WINDOW_DAYS,
    MIN_REGISTRATIONS,
    attention_level,
    days_until,
    needs_attention,
)
from utils.format import format_currency, format_date, now_local
from utils.role_sidebar import render_role_in_sidebar, require_role
from utils.session_cache import get_store
from utils.styling import banner, inject_global_styles, inject_sidebar_styles

configure_logging()
inject_global_styles()
inject_sidebar_styles()
render_role_in_sidebar()
require_role("admin")

store = get_store()
now = now_local()

st.title(f"📊 {APP_TITLE}")
st.caption(INSTITUTION_NAME)

# ── KPIs ─────────────────────────────────────────────────────
stats = store.dashboard(now)
k1, k2, k3, k4, k5 = st.columns(5)
k1.metric("Students", f"{stats.total_students:,}")
k2.metric("Upcoming trips", f"{stats.upcoming_events:,}")
k3.metric("Total debt", format_currency(stats.total_debt))
k4.metric("Total credit", format_currency(stats.total_credit))
k5.metric("Need attention", f"{stats.events_needing_attention:,}")

if stats.events_needing_attention:
    banner(
        f"{stats.events_needing_attention} trip(s) start within {ATTENTION_WINDOW_DAYS} days "
        f"with fewer than {MIN_REGISTRATIONS} registrations. See the Events page for details.",
        "attention",
    )

st.markdown("---")

left, right = st.columns([1.3, 1])

with left:
    st.subheader("Upcoming trips")
    upcoming = [e for e in store.events if e.status == EventStatus.UPCOMING]
    if not upcoming:
        st.info("No upcoming trips.")
    for event in sorted(upcoming, key=lambda e: e.start):
        level = attention_level(event, now)
        days = days_until(event.start, now)
        icon = {
            AttentionLevel.CONFIRMED: "✅",
            AttentionLevel.URGENT: "🔴",
            AttentionLevel.NEEDS_ATTENTION: "🟡",
        }.get(level, "⚪")
        cap = f" / {event.max_participants}" if event.max_participants else ""
        with st.container(border=True):
            st.markdown(f"**{icon} {event.title}**  \n{format_date(event.start)} · {event.location}")
            st.caption(f"{len(event.registrations)}{cap} registered · {days} day(s) left")
            if needs_attention(event, now):
                st.caption(f"Below the minimum of {MIN_REGISTRATIONS} registrations.")

with right:
    st.subheader("Registrations vs. minimum")
    if store.events:
        df = pd.DataFrame({
            "trip": [e.title for e in store.events],
            "registered": [len(e.registrations) for e in store.events],
        })
        bars = alt.Chart(df).mark_bar().encode(
            x=alt.X("registered:Q", title="Registered"),
            y=alt.Y("trip:N", sort="-x", title=None),
            tooltip=["trip:N", "registered:Q"],
        )
        rule = alt.Chart(pd.DataFrame({"minimum": [MIN_REGISTRATIONS]})).mark_rule(
            color="#b91c1c", strokeDash=[4, 4]
        ).encode(x="minimum:Q")
        st.altair_chart(bars + rule, use_container_width=True)

    st.subheader("Balances")
    debtors = sorted((s for s in store.students if s.balance < 0), key=lambda s: s.balance)
    if debtors:
        st.dataframe(
            pd.DataFrame([{"Student": s.name, "Email": s.email, "Balance": s.balance} for s in debtors]),
            column_config={"Balance": st.column_config.NumberColumn("Balance (₪)", format="%.2f")},
            hide_index=True,
            use_container_width=True,
        )
    else:
        st.success("No open debts.")
