"""Plotly chart helpers for Streamlit UI."""

from __future__ import annotations

from typing import List, Sequence

import plotly.graph_objects as go


def _extract_series(points: Sequence[dict]) -> tuple[list[str], list[float]]:
    labels = [f"{p.get('Month')} {p.get('year')}" for p in points]
    values = [p.get("Rent") for p in points]
    return labels, values


def render_rent_history_chart(rent_roll: List[dict], title: str) -> go.Figure:
    labels, values = _extract_series(rent_roll)
    fig = go.Figure()
    fig.add_trace(
        go.Scatter(
            x=labels,
            y=values,
            name="Rent",
            mode="lines+markers",
            line=dict(color="#1565C0", width=3),
        )
    )
    if labels:
        fig.add_trace(
            go.Scatter(
                x=[labels[-1]],
                y=[values[-1]],
                name="Latest",
                mode="markers",
                marker=dict(color="#22c55e", size=12),
            )
        )
    fig.update_layout(
        title=title,
        margin=dict(l=10, r=10, t=40, b=30),
        height=280,
        yaxis_title="Rent ($)",
        xaxis_title="Period",
        template="plotly_white",
    )
    return fig
