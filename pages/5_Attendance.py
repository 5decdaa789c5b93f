# pages/5_Attendance.py
import altair as alt
import pandas as pd
import streamlit as st

# ── Page config FIRST ─────────────────────────────────────────
st.set_page_config(page_title="Attendance", page_icon="✅", layout="wide")

from config import configure_logging
from domain.models import EventStatus
from services.export_service import export_attendance_to_excel, report_filename
from services.ledger_service import summarize_attendance
from services.notification_service import default_absentee_message
from utils.format import format_currency, format_date, now_local
from utils.role_sidebar import render_role_in_sidebar, require_role
from utils.session_cache import get_store
from utils.styling import inject_global_styles, inject_sidebar_styles

configure_logging()
inject_global_styles()
inject_sidebar_styles()
render_role_in_sidebar()
require_role("admin")

store = get_store()
now = now_local()

st.title("✅ Attendance and charges")

# Trips that already started are the ones attendance is taken for.
candidates = sorted(
    (e for e in store.events if e.status != EventStatus.UPCOMING or e.start <= now),
    key=lambda e: e.start,
    reverse=True,
)
show_all = st.toggle("Show upcoming trips too", value=not candidates)
if show_all:
    candidates = sorted(store.events, key=lambda e: e.start, reverse=True)
if not candidates:
    st.info("No events to take attendance for.")
    st.stop()

event_id = st.selectbox(
    "Event",
    [e.id for e in candidates],
    format_func=lambda eid: f"{store.get_event(eid).title} – {format_date(store.get_event(eid).start, with_time=False)}",
)
event = store.get_event(event_id)

if msg := st.session_state.pop("_flash", None):
    st.success(msg)

students = store.registered_students(event)
if not students:
    st.info("Nobody is registered for this event.")
    st.stop()

# ── Attendance editor ─────────────────────────────────────────
st.subheader("Mark attendance")
st.caption("Students are absent until marked present.")
df = pd.DataFrame([
    {"id": s.id, "Name": s.name, "Email": s.email, "Attended": bool(event.attendance.get(s.id, False))}
    for s in students
])
edited = st.data_editor(
    df,
    column_config={
        "id": None,
        "Name": st.column_config.TextColumn(disabled=True),
        "Email": st.column_config.TextColumn(disabled=True),
        "Attended": st.column_config.CheckboxColumn("Attended"),
    },
    hide_index=True,
    use_container_width=True,
    key=f"attendance_editor_{event.id}",
)
if st.button("💾 Save attendance", type="primary"):
    ok, msg = store.update_attendance(event.id, dict(zip(edited["id"], edited["Attended"])))
    st.session_state["_flash"] = msg
    st.rerun()

# ── Summary ───────────────────────────────────────────────────
records = store.attendance_records(event.id)
summary = summarize_attendance(records)

left, right = st.columns([1, 1])
with left:
    k1, k2, k3 = st.columns(3)
    k1.metric("Attended", summary.attended_count)
    k2.metric("Absent", summary.absent_count)
    k3.metric("Total charges", format_currency(summary.total_charges))
with right:
    data = pd.DataFrame({
        "label": ["Attended", "Absent"],
        "value": [summary.attended_count, summary.absent_count],
    })
    donut = alt.Chart(data).mark_arc(innerRadius=60).encode(
        theta=alt.Theta("value:Q"),
        color=alt.Color(
            "label:N",
            legend=alt.Legend(title=None),
            scale=alt.Scale(domain=["Attended", "Absent"], range=["#16a34a", "#f59e0b"]),
        ),
        tooltip=["label:N", "value:Q"],
    ).properties(height=220)
    st.altair_chart(donut, use_container_width=True)

for sid in store.charge_conflicts(event.id):
    name = getattr(store.get_student(sid), "name", sid)
    st.warning(f"{name} cancelled this trip but is still marked for a no-show charge.")

processed = event.id in store.charges_processed
if processed:
    st.info("Charges for this event were already processed.")
elif st.button(f"💳 Charge absent students ({format_currency(summary.total_charges)})",
               disabled=summary.total_charges <= 0):
    ok, msg = store.process_charges(event.id)
    st.session_state["_flash"] = msg
    st.rerun()

st.markdown("---")

# ── Report ────────────────────────────────────────────────────
st.subheader("Attendance report")
st.download_button(
    "⬇️ Download Excel report",
    data=export_attendance_to_excel(event, store.students, records),
    file_name=report_filename(event),
    mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
)

with st.form("send_report"):
    email = st.text_input("Send the report to")
    if st.form_submit_button("📧 Send report"):
        ok, msg = store.send_report(event.id, email)
        (st.success if ok else st.error)(msg)

# ── Absentee message ──────────────────────────────────────────
if summary.absent_count:
    with st.expander(f"✉️ Message the {summary.absent_count} absent student(s)"):
        message = st.text_area("Message", value=default_absentee_message(event), height=260,
                               key=f"absentee_msg_{event.id}")
        if st.button("Send to absent students"):
            ok, msg = store.send_absentee_message(event.id, message)
            (st.success if ok else st.error)(msg)
