"""Page 1: Risk, the country ranking for one week and model."""

from __future__ import annotations

import sys
from pathlib import Path

import altair as alt
import streamlit as st

# Ensure project root is on sys.path for imports
_ROOT = Path(__file__).resolve().parents[1]
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

from importrisk.config import DEFAULT_DISEASE, MODEL_NAMES, OUTPUT_DIR
from importrisk.report import available_weeks, coverage, load_week_frame, rank_countries

st.title("📈 Weekly Risk Ranking")

disease = st.sidebar.text_input("Disease", value=DEFAULT_DISEASE)
weeks = available_weeks(OUTPUT_DIR, disease)

if not weeks:
    st.error(
        f"No risk files found under `{OUTPUT_DIR / disease}`. "
        "Run `python -m importrisk.run` first."
    )
    st.stop()


@st.cache_data(show_spinner="Loading risk scores…")
def _load(date: str, disease: str):
    return load_week_frame(OUTPUT_DIR, disease, date)


# ── Selectors ────────────────────────────────────────────────────────────────
col1, col2, col3 = st.columns(3)
date = col1.selectbox("Week", weeks, index=len(weeks) - 1)
model = col2.selectbox("Model", MODEL_NAMES, index=1)
variant = col3.radio("Cases", ["new", "cummulative"], horizontal=True)
top = st.slider("Countries shown", 5, 50, 15)

frame = _load(date, disease)
column = f"{model}_{variant}"

# ── Coverage ─────────────────────────────────────────────────────────────────
cov = coverage(frame)
st.metric("Countries scored", f"{int(frame[column].notna().sum())} / {len(frame)}")
st.caption(" · ".join(f"{name}: {share:.0%}" for name, share in cov.items()))

# ── Ranking ──────────────────────────────────────────────────────────────────
ranked = rank_countries(frame, column, top=top)
if ranked.empty:
    st.info("Every country is NA for this model and week.")
    st.stop()

chart = (
    alt.Chart(ranked)
    .mark_bar(color="steelblue")
    .encode(
        x=alt.X(f"{column}:Q", title="Score"),
        y=alt.Y("country:N", sort="-x", title="Country"),
        tooltip=["country:N", f"{column}:Q"],
    )
)
st.altair_chart(chart, use_container_width=True)

st.dataframe(
    frame.fillna("NA"),
    use_container_width=True,
    hide_index=True,
)
