"""Streamlit components for collapsible property and space panels."""

from __future__ import annotations

from typing import Dict, Optional

import streamlit as st

from app.components.charts import render_rent_history_chart
from app.components.tables import fmt_currency, render_rent_roll_table, render_transportation_table


def latest_rent(space: Dict) -> Optional[float]:
    rent_roll = space.get("RentRoll") or []
    if not rent_roll:
        return None
    return rent_roll[-1].get("Rent")


def space_key(property_index: int, space_index: int, property_data: Dict, space: Dict) -> str:
    """Widget key for a space panel; ids alone can repeat across records."""

    return f"space-{property_index}-{space_index}-{property_data.get('PropertyId')}-{space.get('SpaceId')}"


def render_space_panel(space: Dict, key: str) -> None:
    rent_roll = space.get("RentRoll") or []
    with st.container(border=True):
        name_col, rent_col, points_col = st.columns([3, 1, 1])
        with name_col:
            st.markdown(f"**{space.get('SpaceName')}**  \n`{space.get('SpaceId')}`")
        rent_col.metric("Latest Rent", fmt_currency(latest_rent(space)))
        points_col.metric("Data Points", f"{len(rent_roll)} months")
        # expanders cannot nest, so spaces collapse with a toggle instead
        if st.toggle("Rent roll history", key=key):
            render_rent_roll_table(rent_roll)
            if rent_roll:
                st.plotly_chart(
                    render_rent_history_chart(rent_roll, f"{space.get('SpaceName')} rent"),
                    use_container_width=True,
                )


def render_property_panel(property_data: Dict, index: int = 0) -> None:
    spaces = property_data.get("Spaces") or []
    transportation = property_data.get("Transportation") or []
    label = f"{property_data.get('PropertyName')} · {property_data.get('PropertyId')}"
    with st.expander(label, expanded=False):
        if property_data.get("address"):
            st.caption(property_data["address"])
        spaces_col, transit_col = st.columns(2)
        spaces_col.metric("Spaces", len(spaces))
        transit_col.metric("Transit Options", len(transportation))

        features_col, highlights_col = st.columns(2)
        with features_col:
            if property_data.get("Features"):
                st.markdown("#### Features")
                st.markdown("\n".join(f"- {item}" for item in property_data["Features"]))
        with highlights_col:
            if property_data.get("Highlights"):
                st.markdown("#### Key Highlights")
                st.markdown("\n".join(f"- {item}" for item in property_data["Highlights"]))

        if transportation:
            st.markdown("#### Transportation Access")
            render_transportation_table(transportation)

        if spaces:
            st.markdown(f"#### Rental Spaces ({len(spaces)})")
            for space_index, space in enumerate(spaces):
                render_space_panel(space, key=space_key(index, space_index, property_data, space))
