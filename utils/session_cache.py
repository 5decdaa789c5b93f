import json

import streamlit as st
from streamlit_js_eval import streamlit_js_eval

from config import CURRENT_STUDENT_KEY
from services.trip_store import TripStore
from utils.format import now_local

_LS_KEY = json.dumps(CURRENT_STUDENT_KEY)

def je(expr: str, key: str):
    """Safe wrapper for streamlit_js_eval using the required js_expressions= keyword."""
    return streamlit_js_eval(js_expressions=expr, key=key)

def get_store() -> TripStore:
    if "trip_store" not in st.session_state:
        st.session_state["trip_store"] = TripStore.seeded(now_local())
    return st.session_state["trip_store"]

# --------------------------------------------------------------------
# Remembered student (browser localStorage)
# --------------------------------------------------------------------
def sync_local_storage() -> None:
    """
    Flush a pending localStorage write and read the remembered student once
    per session. The JS component answers on a later rerun, so a None result
    means "not yet" and is retried.
    """
    pending = st.session_state.pop("_ls_pending", None)
    if pending is not None:
        n = st.session_state.get("_ls_writes", 0) + 1
        st.session_state["_ls_writes"] = n
        if pending:
            je(f"localStorage.setItem({_LS_KEY}, {json.dumps(pending)})", key=f"ls_write_{n}")
        else:
            je(f"localStorage.removeItem({_LS_KEY})", key=f"ls_write_{n}")

    if st.session_state.get("_current_student_loaded"):
        return
    value = je(f"localStorage.getItem({_LS_KEY}) || ''", key="ls_read_current_student")
    if value is None:
        return
    st.session_state["current_student_id"] = value or None
    st.session_state["_current_student_loaded"] = True

def current_student_id() -> str | None:
    return st.session_state.get("current_student_id")

def save_current_student_id(student_id: str):
    st.session_state["current_student_id"] = student_id
    st.session_state["_current_student_loaded"] = True
    st.session_state["_ls_pending"] = student_id

def clear_current_student_id():
    st.session_state["current_student_id"] = None
    st.session_state["_current_student_loaded"] = True
    st.session_state["_ls_pending"] = ""
