"""Tabular components for rent roll and transit data."""

from __future__ import annotations

from typing import List, Optional

import pandas as pd
import streamlit as st


def fmt_currency(value: Optional[float]) -> str:
    if value is None:
        return "—"
    return f"${value:,.0f}"


def rent_roll_frame(rent_roll: List[dict]) -> pd.DataFrame:
    """Rent roll rows in source order; the last row is flagged as latest."""

    df = pd.DataFrame(rent_roll, columns=["Month", "year", "Rent"])
    df = df.rename(columns={"year": "Year"})
    df["Rent"] = df["Rent"].apply(fmt_currency)
    df["Latest"] = ""
    if not df.empty:
        df.loc[df.index[-1], "Latest"] = "LATEST"
    return df


def render_rent_roll_table(rent_roll: List[dict]) -> None:
    if not rent_roll:
        st.info("No rent roll history for this space.")
        return
    st.dataframe(rent_roll_frame(rent_roll), hide_index=True, width="stretch")


def render_transportation_table(transportation: List[dict]) -> None:
    if not transportation:
        return
    df = pd.DataFrame(transportation).reindex(columns=["Type", "Line", "Station", "Distance"])
    df = df.fillna("—")
    st.dataframe(df, hide_index=True, width="stretch")
