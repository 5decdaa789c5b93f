import html
import streamlit as st

def inject_global_styles():
    st.markdown("""
    <style>
    @import url('https://fonts.googleapis.com/css2?family=Inter:wght@400;600;700;800&display=swap');

    html, body, .stApp, [data-testid="stAppViewContainer"] {
      font-family: "Inter", -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, Arial, sans-serif !important;
      font-size: 16px; line-height: 1.55;
    }
    .block-container { max-width: 1280px; padding-top: 2rem; }

    h1, h2, h3, h4 { color:#0f2a4a; font-weight: 800; letter-spacing:-0.015em; }
    .big-title { font-size: 2.4rem; font-weight: 900; display:flex; align-items:center; gap:.5rem; }
    .subtitle { font-size:1.05rem; color:#64748b; margin-bottom:1.2rem; }

    .stButton > button { font-weight: 700 !important; border-radius: 10px !important; }
    .stApp { background-color: #f7fafc; }

    /* Role cards on Home */
    .feature-grid { display:grid; gap:1rem; grid-template-columns:repeat(2,minmax(0,1fr)); }
    @media (max-width:700px){ .feature-grid { grid-template-columns:1fr; } }
    .feature-card {
      background:#ffffff; border:1px solid #dbe4ee; border-radius:16px; padding:1rem 1.1rem;
      box-shadow:0 6px 18px rgba(15,42,74,0.06); position:relative; overflow:hidden;
    }
    .feature-card::before { content:""; position:absolute; inset:0 0 auto 0; height:4px;
      background:linear-gradient(90deg,#0f2a4a,#2563eb,#38bdf8); }
    .fc-head { display:flex; align-items:center; gap:.6rem; margin:.25rem 0 .6rem; }
    .fc-title { color:#0f2a4a; font-weight:700; }
    .fc-desc { font-size:.95rem; line-height:1.45; color:#334155; margin:.4rem 0 0; }

    /* Alert banners */
    .banner { padding:.75rem 1rem; border-radius:10px; margin:.5rem 0; font-weight:600; }
    .banner.urgent { background:#fee2e2; border:1px solid #fecaca; color:#7f1d1d; }
    .banner.attention { background:#fef9c3; border:1px solid #fde68a; color:#713f12; }
    </style>
    """, unsafe_allow_html=True)

def inject_sidebar_styles():
    st.markdown("""
    <style>
    section[data-testid="stSidebar"] {
      background-color: #eef4fb !important;
      border-right: 2px solid #bfdbfe;
    }
    section[data-testid="stSidebar"] nav a[aria-current="page"] {
      background: #0f2a4a !important;
      color: #ffffff !important;
      font-weight: 700 !important;
      border-radius: 12px !important;
    }
    section[data-testid="stSidebar"] .stButton > button {
      width: 100% !important;
      min-height: 44px !important;
      background: #1e3a8a !important;
      color: #ffffff !important;
      border: 0 !important;
      border-radius: 14px !important;
    }
    section[data-testid="stSidebar"] .stButton > button * { color: #ffffff !important; }
    </style>
    """, unsafe_allow_html=True)

def banner(text: str, kind: str = "attention"):
    st.markdown(f"<div class='banner {kind}'>{html.escape(text)}</div>", unsafe_allow_html=True)
