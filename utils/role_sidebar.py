# utils/role_sidebar.py
import streamlit as st

from utils.session_cache import (
    clear_current_student_id,
    current_student_id,
    get_store,
    save_current_student_id,
    sync_local_storage,
)

__all__ = ["render_role_in_sidebar", "require_role"]

ROLES = {"admin": "🛠️ Administrator", "student": "🎓 Student"}

# --------------------------------------------------------------------
# No authentication: the role is a view selector, the student identity is
# picked from the list and remembered in the browser's localStorage.
# --------------------------------------------------------------------

def _ensure_role_state() -> None:
    st.session_state.setdefault("role", "")

def render_role_in_sidebar() -> None:
    _ensure_role_state()
    store = get_store()

    with st.sidebar:
        sync_local_storage()
        st.subheader("Mode")
        role = st.session_state.get("role")
        if role:
            st.success(f"Viewing as {ROLES[role]}")
            if st.button("🔁 Switch mode", use_container_width=True):
                st.session_state.role = ""
                st.rerun()
        else:
            for key, label in ROLES.items():
                if st.button(label, use_container_width=True, key=f"__role_{key}__"):
                    st.session_state.role = key
                    st.rerun()

        if st.session_state.get("role") != "student":
            return

        st.divider()
        current_id = current_student_id()
        current = store.get_student(current_id) if current_id else None
        if current is not None:
            st.info(f"👤 {current.name}")
            if st.button("🚪 Switch user", use_container_width=True):
                clear_current_student_id()
                st.rerun()
            return

        options = {s.id: s.name for s in store.students}
        if not options:
            st.warning("No students in the system yet.")
            return
        picked = st.selectbox("Select your name", list(options), format_func=options.get, key="__student_pick__")
        if st.button("Enter", use_container_width=True):
            save_current_student_id(picked)
            st.toast(f"Hello {options[picked]}!")
            st.rerun()

def require_role(role: str) -> None:
    """Call near the top of a role-specific page."""
    if st.session_state.get("role") != role:
        st.error(f"Switch to {ROLES[role]} mode from the sidebar to use this page.")
        st.stop()
