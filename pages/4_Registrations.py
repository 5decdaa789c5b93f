# pages/4_Registrations.py
import pandas as pd
import streamlit as st

# ── Page config FIRST ─────────────────────────────────────────
st.set_page_config(page_title="Registrations", page_icon="📝", layout="wide")

from config import configure_logging
from domain.models import AttentionLevel, EventStatus, RegistrationState
from services.ledger_service import (
    MIN_REGISTRATIONS,
    attention_level,
    days_until,
    evaluate_cancellation,
)
from services.notification_service import default_invitation_message
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

st.title("📝 Registrations")

if not store.events:
    st.info("No events yet. Create one on the Events page.")
    st.stop()

events = sorted(store.events, key=lambda e: e.start)
event_id = st.selectbox(
    "Event",
    [e.id for e in events],
    format_func=lambda eid: f"{store.get_event(eid).title} – {format_date(store.get_event(eid).start, with_time=False)}",
)
event = store.get_event(event_id)

if msg := st.session_state.pop("_flash", None):
    st.success(msg)

# ── Counters + alerts ─────────────────────────────────────────
statuses = store.statuses_for_event(event.id)
by_state = {state: 0 for state in RegistrationState}
for s in statuses:
    by_state[s.status] += 1

k1, k2, k3, k4 = st.columns(4)
k1.metric("Registered", f"{len(event.registrations)} / {MIN_REGISTRATIONS} min")
k2.metric("Confirmed", by_state[RegistrationState.CONFIRMED])
k3.metric("Pending", by_state[RegistrationState.PENDING])
k4.metric("Cancelled", by_state[RegistrationState.CANCELLED])

level = attention_level(event, now)
if level == AttentionLevel.URGENT:
    banner(f"Only {days_until(event.start, now)} day(s) left and the minimum of "
           f"{MIN_REGISTRATIONS} registrations has not been reached.", "urgent")
elif level == AttentionLevel.NEEDS_ATTENTION:
    banner(f"{MIN_REGISTRATIONS - len(event.registrations)} more registration(s) needed.", "attention")

decision = evaluate_cancellation(event, now)
if event.status == EventStatus.UPCOMING and not decision.allowed:
    st.warning(
        "Less than two days remain before this trip. Cancelling now charges the full price "
        f"({format_currency(decision.fee_if_forced)})."
    )

# ── Invitations ───────────────────────────────────────────────
with st.expander("✉️ Send invitations", expanded=False):
    if event.status != EventStatus.UPCOMING:
        st.info("Invitations can only be sent for upcoming events.")
    else:
        not_invited = [s for s in store.students if store.registration_for(event.id, s.id) is None]
        options = {s.id: f"{s.name} <{s.email}>" for s in store.students}
        picked = st.multiselect(
            "Students",
            list(options),
            default=[s.id for s in not_invited],
            format_func=options.get,
            key=f"invite_pick_{event.id}",
        )
        message = st.text_area(
            "Message",
            value=default_invitation_message(event),
            height=260,
            key=f"invite_msg_{event.id}",
        )
        if st.button(f"Send to {len(picked)} student(s)", type="primary", disabled=not picked):
            ok, msg = store.send_invitations(event.id, picked, message, now)
            if ok:
                st.session_state["_flash"] = msg
                st.rerun()
            st.error(msg)

# ── Registration list ─────────────────────────────────────────
st.subheader("Registration list")
if not statuses:
    st.info("No registrations for this event yet.")

STATE_ICONS = {
    RegistrationState.PENDING: "⏳ Pending",
    RegistrationState.CONFIRMED: "✅ Confirmed",
    RegistrationState.CANCELLED: "❌ Cancelled",
}

for reg in statuses:
    student = store.get_student(reg.student_id)
    if student is None:
        continue
    with st.container(border=True):
        c1, c2, c3, c4 = st.columns([3, 2, 1, 1])
        c1.markdown(f"**{student.name}**  \n{student.email}")
        c2.markdown(STATE_ICONS[reg.status])
        if reg.response_date:
            c2.caption(f"Updated {format_date(reg.response_date)}")

        if reg.status == RegistrationState.PENDING:
            if c3.button("Confirm", key=f"confirm_{reg.student_id}"):
                ok, msg = store.update_registration(event.id, reg.student_id, RegistrationState.CONFIRMED, now)
                st.session_state["_flash"] = msg
                st.rerun()

        if reg.status != RegistrationState.CANCELLED:
            if decision.allowed:
                if c4.button("Cancel", key=f"cancel_{reg.student_id}"):
                    ok, msg = store.update_registration(event.id, reg.student_id, RegistrationState.CANCELLED, now)
                    st.session_state["_flash"] = msg
                    st.rerun()
            elif c4.button("Cancel + charge", key=f"force_{reg.student_id}"):
                ok, msg = store.force_cancel(event.id, reg.student_id, now)
                st.session_state["_flash"] = msg
                st.rerun()

if statuses:
    st.markdown("---")
    st.dataframe(
        pd.DataFrame([
            {
                "Student": getattr(store.get_student(r.student_id), "name", r.student_id),
                "Status": r.status.value,
                "Registered": r.registration_date,
                "Responded": r.response_date,
            }
            for r in statuses
        ]),
        hide_index=True,
        use_container_width=True,
    )
