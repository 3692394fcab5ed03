"""Streamlit UI for the rent roll portfolio."""

from __future__ import annotations

import sys
from pathlib import Path

import streamlit as st

from dotenv import load_dotenv

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

load_dotenv(dotenv_path=ROOT_DIR / ".env", override=False)

from app.backend_client import BackendClient
from app.components.cards import render_property_panel

st.set_page_config(page_title="Property Portfolio", layout="wide", page_icon="🏢")

FALLBACK_NOTICE = {
    "size_limit_exceeded": "The portfolio file is larger than the configured download limit.",
    "not_found": "The portfolio file could not be found in storage.",
    "timeout": "Downloading the portfolio file timed out.",
    "parse_error": "The portfolio file could not be read.",
    "transient_io": "Storage could not be reached.",
}


@st.cache_resource(show_spinner=False)
def get_backend_client() -> BackendClient:
    return BackendClient()


def render_portfolio_page() -> None:
    st.title("Property Portfolio")
    backend = get_backend_client()

    if st.button("Refresh data"):
        backend.refresh()

    with st.spinner("Loading properties..."):
        payload = backend.list_properties()

    if payload.get("source") == "fallback":
        reason = payload.get("fallback_reason") or ""
        st.warning(
            f"{FALLBACK_NOTICE.get(reason, 'Live data is unavailable.')} Showing sample data instead."
        )

    properties = payload.get("properties", [])
    if not properties:
        st.info("No properties available.")
        return

    st.caption(f"{payload.get('total', len(properties))} properties")
    for index, prop in enumerate(properties):
        render_property_panel(prop, index)


render_portfolio_page()
