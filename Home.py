"""Weekly Importation Risk: Streamlit Home."""

import streamlit as st

st.set_page_config(
    page_title="Importation Risk",
    page_icon="🦟",
    layout="wide",
)

st.title("🦟 Weekly Importation Risk of Vector-Borne Disease")

st.markdown(
    """
    Risk scores combine four sources per country and week:
    reported **cases**, **population**, **mosquito prevalence**, and
    international **travel** flows.

    ### Models
    0. **Importation pressure**: travelers from each origin weighted by its cases per head.
    1. **Vector-weighted**: model 0 times mosquito prevalence at the destination.
    2. **Population-normalised**: model 1 per head of the destination.
    3. **Density-weighted**: model 1 times the destination's population density.
    4. **With local burden**: model 1 plus prevalence times local cases.

    A score shown as **NA** could not be computed from the available data.

    ---

    Use the sidebar to open **Risk**, which ranks countries for a chosen week.
    """
)

st.caption("Run `python -m importrisk.run --disease zika` first to produce weekly risk files.")
