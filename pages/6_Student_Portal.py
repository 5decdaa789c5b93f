# pages/6_Student_Portal.py
import streamlit as st

# ── Page config FIRST ─────────────────────────────────────────
st.set_page_config(page_title="Student Portal", page_icon="🎓", layout="wide")

from config import DEPARTMENT_NAME, configure_logging
from domain.models import EventStatus, NotificationKind, RegistrationState
from services.ledger_service import evaluate_cancellation, is_full
from utils.format import format_balance, format_currency, format_date, format_price, now_local
from utils.role_sidebar import render_role_in_sidebar, require_role
from utils.session_cache import current_student_id, get_store
from utils.styling import inject_global_styles, inject_sidebar_styles

configure_logging()
inject_global_styles()
inject_sidebar_styles()
render_role_in_sidebar()
require_role("student")

store = get_store()
now = now_local()

student_id = current_student_id()
student = store.get_student(student_id) if student_id else None
if student is None:
    st.title("🎓 Student portal")
    st.info("Select your name in the sidebar to enter.")
    st.stop()

st.title(f"🎓 Hello, {student.name}")
st.caption(DEPARTMENT_NAME)

if msg := st.session_state.pop("_flash", None):
    st.success(msg)
if err := st.session_state.pop("_flash_error", None):
    st.error(err)

# ── Alerts ────────────────────────────────────────────────────
unread = store.unread_count(student.id)
if student.balance < 0:
    st.error(f"Your account has an open debt of {format_currency(-student.balance)}. "
             "Please settle it with the department office.")
if unread:
    st.info(f"You have {unread} unread message(s).")

my_trips = store.student_trips(student.id)
k1, k2, k3 = st.columns(3)
k1.metric("Balance", format_balance(student.balance))
k2.metric("My trips", len(my_trips))
k3.metric("Unread messages", unread)

def _flash(ok: bool, msg: str) -> None:
    st.session_state["_flash" if ok else "_flash_error"] = msg
    st.rerun()

tab_available, tab_mine, tab_messages = st.tabs(
    ["🧭 Available trips", "🎒 My trips", f"🔔 Messages ({unread})"]
)

with tab_available:
    upcoming = sorted((e for e in store.events if e.status == EventStatus.UPCOMING), key=lambda e: e.start)
    if not upcoming:
        st.info("No trips are open for registration right now.")
    for event in upcoming:
        reg = store.registration_for(event.id, student.id)
        registered = student.id in event.registrations
        with st.container(border=True):
            c1, c2 = st.columns([4, 1])
            c1.markdown(f"**{event.title}**")
            c1.caption(f"{format_date(event.start)} · 📍 {event.location} · {format_price(event.price)}")
            if event.description:
                c1.write(event.description)
            if event.max_participants:
                c1.caption(f"{len(event.registrations)} / {event.max_participants} seats taken")

            if registered:
                c2.success("Registered")
            elif reg and reg.status == RegistrationState.CANCELLED:
                c2.caption("Cancelled")
            elif is_full(event):
                c2.button("Full", key=f"full_{event.id}", disabled=True)
            elif c2.button("Register", key=f"reg_{event.id}", type="primary"):
                _flash(*store.register_student(event.id, student.id, now))

with tab_mine:
    if not my_trips:
        st.info("You are not registered for any trip.")
    for event, reg in sorted(my_trips, key=lambda pair: pair[0].start):
        decision = evaluate_cancellation(event, now)
        with st.container(border=True):
            c1, c2 = st.columns([4, 1])
            state = "✅ Confirmed" if reg.status == RegistrationState.CONFIRMED else "⏳ Awaiting approval"
            c1.markdown(f"**{event.title}** · {state}")
            c1.caption(f"{format_date(event.start)} · 📍 {event.location} · {format_price(event.price)}")
            if event.status != EventStatus.UPCOMING:
                continue
            if decision.allowed:
                c1.caption("Free cancellation until two days before the trip.")
                if c2.button("Cancel", key=f"cancel_{event.id}"):
                    _flash(*store.cancel_registration(event.id, student.id, now))
            else:
                c1.warning("Less than two days remain. Cancelling now is no longer possible; "
                           f"a no-show is charged {format_currency(decision.fee_if_forced)}.")

KIND_ICONS = {
    NotificationKind.INFO: "ℹ️",
    NotificationKind.WARNING: "⚠️",
    NotificationKind.SUCCESS: "✅",
    NotificationKind.ERROR: "❗",
}

with tab_messages:
    notes = sorted(store.notifications_for(student.id), key=lambda n: n.date, reverse=True)
    if not notes:
        st.info("No messages.")
    for n in notes:
        with st.container(border=True):
            c1, c2 = st.columns([5, 1])
            weight = "" if n.read else "🆕 "
            c1.markdown(f"{weight}{KIND_ICONS.get(n.kind, '')} **{n.title}**")
            c1.write(n.message)
            c1.caption(format_date(n.date))
            if not n.read and c2.button("Mark read", key=f"read_{n.id}"):
                store.mark_notification_read(n.id)
                st.rerun()

    if student.notes:
        st.subheader("Account history")
        for line in student.notes:
            st.write("• " + line)
