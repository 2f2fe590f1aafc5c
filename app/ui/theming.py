import streamlit as st

from core.explanation import get_category_hex

PRIMARY = "var(--primary-color, #0ea5e9)"  # cyan-500 fallback
MUTED = "#64748b"  # slate-500

def page_header(title: str, subtitle: str | None = None):
    st.markdown(f"<h2 style='margin-bottom:0.2rem'>{title}</h2>", unsafe_allow_html=True)
    if subtitle:
        st.markdown(f"<p style='color:{MUTED};margin-top:0'>{subtitle}</p>", unsafe_allow_html=True)

def pill(text: str, color: str = "#0ea5e9"):
    st.markdown(
        f"""
        <span style="
          padding:4px 10px;border-radius:9999px;
          background:{color}1f;color:{color};
          font-size:0.85rem;">{text}</span>
        """,
        unsafe_allow_html=True
    )

def category_pill(category: str):
    """Pill berwarna sesuai kategori kesegaran (Sangat Baik/Baik/Sedang/Busuk)."""
    pill(category, color=get_category_hex(category))

def score_bar(label: str, value: float, maximum: float = 9.0):
    """Bar horizontal sederhana untuk rata-rata satu parameter."""
    percent = 0 if maximum <= 0 else max(0.0, min(value / maximum, 1.0)) * 100
    st.markdown(
        f"""
        <div style="margin:2px 0;font-size:0.85rem;color:{MUTED}">{label}: {value:.2f}/{maximum:g}</div>
        <div style="background:rgba(100,116,139,0.2);border-radius:4px;height:8px">
          <div style="width:{percent:.0f}%;background:#0ea5e9;height:8px;border-radius:4px"></div>
        </div>
        """,
        unsafe_allow_html=True
    )
