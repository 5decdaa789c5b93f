# pages/3_Events.py
import datetime as dt

import streamlit as st

# ── Page config FIRST ─────────────────────────────────────────
st.set_page_config(page_title="Events", page_icon="🗓️", layout="wide")

from config import configure_logging
from domain.models import AttentionLevel, EventStatus
from services.ledger_service import MIN_REGISTRATIONS, attention_level, days_until
from utils.format import TZ, format_date, format_price, now_local
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

STATUS_LABELS = {
    EventStatus.UPCOMING: "Upcoming",
    EventStatus.ONGOING: "Ongoing",
    EventStatus.COMPLETED: "Completed",
}

st.title("🗓️ Trips and events")

if msg := st.session_state.pop("_flash", None):
    st.success(msg)

# --- Add / edit form ---------------------------------------------------------
editing_id = st.session_state.get("editing_event_id")
editing = store.get_event(editing_id) if editing_id else None
default_start = editing.start if editing else (now + dt.timedelta(days=14)).replace(hour=9, minute=0)

with st.form("event_form", clear_on_submit=not editing):
    st.subheader("Edit event" if editing else "Add a new event")
    title = st.text_input("Title *", value=editing.title if editing else "")
    description = st.text_area("Description", value=editing.description if editing else "", height=90)
    c1, c2, c3 = st.columns(3)
    day = c1.date_input("Date *", value=default_start.date())
    time_of_day = c2.time_input("Time *", value=default_start.time().replace(tzinfo=None))
    location = c3.text_input("Location *", value=editing.location if editing else "")
    c4, c5, c6 = st.columns(3)
    price = c4.number_input("Price (₪)", min_value=0.0, step=10.0,
                            value=float(editing.price) if editing else 0.0)
    max_participants = c5.number_input("Max participants (0 = unlimited)", min_value=0, step=1,
                                       value=int(editing.max_participants or 0) if editing else 0)
    status = None
    if editing:
        statuses = list(EventStatus)
        status = c6.selectbox("Status", statuses, index=statuses.index(editing.status),
                              format_func=STATUS_LABELS.get)
    submitted = st.form_submit_button("Update" if editing else "Add")

if submitted:
    start = dt.datetime.combine(day, time_of_day, tzinfo=TZ) if day and time_of_day else None
    cap = int(max_participants) or None
    if editing:
        ok, msg = store.update_event(editing.id, title, description, start, location, price, cap, status)
    else:
        ok, msg = store.add_event(title, description, start, location, price, cap)
    if ok:
        st.session_state.pop("editing_event_id", None)
        st.session_state["_flash"] = msg
        st.rerun()
    st.error(msg)

if editing and st.button("Cancel edit"):
    st.session_state.pop("editing_event_id", None)
    st.rerun()

# --- List --------------------------------------------------------------------
st.subheader(f"All events ({len(store.events)})")
if not store.events:
    st.info("No events yet. Add the first one.")

for event in sorted(store.events, key=lambda e: e.start):
    level = attention_level(event, now)
    with st.container(border=True):
        c1, c2, c3, c4 = st.columns([4, 2, 1, 1])
        c1.markdown(f"**{event.title}** · _{STATUS_LABELS[event.status]}_")
        c1.caption(f"{format_date(event.start)} · 📍 {event.location}")
        if event.description:
            c1.write(event.description)

        cap = f" / {event.max_participants}" if event.max_participants else ""
        c2.metric("Registered", f"{len(event.registrations)}{cap}")
        c2.caption(f"Price: {format_price(event.price)}")

        if level == AttentionLevel.URGENT:
            banner(f"Urgent: {days_until(event.start, now)} day(s) left and only "
                   f"{len(event.registrations)} of {MIN_REGISTRATIONS} registrations.", "urgent")
        elif level == AttentionLevel.NEEDS_ATTENTION:
            banner(f"Needs attention: {len(event.registrations)} of {MIN_REGISTRATIONS} "
                   "minimum registrations.", "attention")

        if c3.button("✏️ Edit", key=f"edit_{event.id}"):
            st.session_state.editing_event_id = event.id
            st.rerun()
        if c4.button("🗑️ Delete", key=f"del_{event.id}"):
            ok, msg = store.delete_event(event.id)
            st.session_state["_flash"] = msg
            st.rerun()
