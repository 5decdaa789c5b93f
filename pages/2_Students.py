# pages/2_Students.py
import pandas as pd
import streamlit as st

# ── Page config FIRST ─────────────────────────────────────────
st.set_page_config(page_title="Students", page_icon="👥", layout="wide")

from config import configure_logging
from services.upload_service import dedup_new_rows, read_student_sheet
from utils.format import format_balance
from utils.role_sidebar import render_role_in_sidebar, require_role
from utils.session_cache import get_store
from utils.styling import inject_global_styles, inject_sidebar_styles

configure_logging()
inject_global_styles()
inject_sidebar_styles()
render_role_in_sidebar()
require_role("admin")

store = get_store()

st.title("👥 Students")

# --- Upload Excel (collapsible, preview, confirm, versioned key reset) ---
if "uploader_nonce" not in st.session_state:
    st.session_state.uploader_nonce = 0

with st.expander("📄 Import students from Excel", expanded=False):
    st.caption("Columns in order: **name, email, phone, balance**. The first row is treated as a header.")

    sample_df = pd.DataFrame([{"name": "First Last", "email": "user@example.com", "phone": "050-0000000", "balance": 0}])
    st.download_button(
        "Download sample template",
        data=sample_df.to_csv(index=False).encode("utf-8"),
        file_name="students_template.csv",
        mime="text/csv",
    )

    uploader_key = f"students_uploader_{st.session_state.uploader_nonce}"
    uploaded_file = st.file_uploader("Choose .xlsx or .csv file", type=["xlsx", "csv"], key=uploader_key)

    if uploaded_file is not None:
        summary = read_student_sheet(uploaded_file, uploaded_file.name)
        if summary["errors"]:
            for e in summary["errors"]:
                st.error(e)
        else:
            rows = summary["rows"]
            fresh = dedup_new_rows(rows, store.existing_emails())
            st.success(f"Found {len(rows)} student(s) in the file; {len(fresh)} are new.")
            for note in summary["notes"]:
                st.write("• " + note)
            if rows:
                preview = pd.DataFrame(rows)
                preview["status"] = ["New" if r in fresh else "Already exists" for r in rows]
                st.dataframe(preview, hide_index=True, use_container_width=True)

            c1, c2 = st.columns(2)
            if c1.button("✅ Confirm and add students", disabled=not fresh):
                added, skipped = store.import_students(fresh)
                st.session_state.uploader_nonce += 1
                st.session_state["_flash"] = f"{added} student(s) added."
                st.rerun()
            if c2.button("Cancel"):
                st.session_state.uploader_nonce += 1
                st.rerun()

if msg := st.session_state.pop("_flash", None):
    st.success(msg)

# --- Add / edit form ---------------------------------------------------------
editing_id = st.session_state.get("editing_student_id")
editing = store.get_student(editing_id) if editing_id else None

with st.form("student_form", clear_on_submit=True):
    st.subheader("Edit student" if editing else "Add a new student")
    c1, c2 = st.columns(2)
    name = c1.text_input("Full name *", value=editing.name if editing else "")
    email = c2.text_input("Email *", value=editing.email if editing else "")
    phone = c1.text_input("Phone", value=editing.phone if editing else "")
    balance = c2.number_input("Balance (₪)", value=float(editing.balance) if editing else 0.0, step=10.0)
    submitted = st.form_submit_button("Update" if editing else "Add")

if submitted:
    if editing:
        ok, msg = store.update_student(editing.id, name, email, phone, balance)
    else:
        ok, msg = store.add_student(name, email, phone, balance)
    if ok:
        st.session_state.pop("editing_student_id", None)
        st.session_state["_flash"] = msg
        st.rerun()
    st.error(msg)

if editing and st.button("Cancel edit"):
    st.session_state.pop("editing_student_id", None)
    st.rerun()

# --- List --------------------------------------------------------------------
st.subheader(f"All students ({len(store.students)})")
if not store.students:
    st.info("No students in the system. Add the first one.")

for student in store.students:
    with st.container(border=True):
        c1, c2, c3, c4 = st.columns([3, 2, 1, 1])
        c1.markdown(f"**{student.name}**  \n✉️ {student.email}" + (f"  \n📞 {student.phone}" if student.phone else ""))
        color = "green" if student.balance >= 0 else "red"
        c2.markdown(f":{color}[{format_balance(student.balance)}]")
        if student.notes:
            c2.caption(" · ".join(student.notes[-2:]))
        if c3.button("✏️ Edit", key=f"edit_{student.id}"):
            st.session_state.editing_student_id = student.id
            st.rerun()
        if c4.button("🗑️ Delete", key=f"del_{student.id}"):
            ok, msg = store.delete_student(student.id)
            st.session_state["_flash"] = msg
            st.rerun()
