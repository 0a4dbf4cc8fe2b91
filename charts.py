# charts.py

import io

import numpy as np
import plotly.graph_objects as go
import plotly.io as pio

from config import CATEGORIES

CATEGORY_LABELS = [c["name"] for c in CATEGORIES]

# for chart sizes
BAR_H = 360
HEAT_H = 240

# green -> amber -> red across the 0-3 risk scale
RISK_COLORSCALE = [[0.0, "#16a34a"], [0.5, "#f59e0b"], [1.0, "#dc2626"]]

# (text, grid) colors per page theme
PALETTE = {
    "light": ("#0b1020", "#CBD5E1"),
    "dark": ("#f6f7fb", "#334155"),
}


def _text_color(theme):
    return PALETTE.get(theme, PALETTE["light"])[0]


def _apply_theme(fig, theme="light", height=BAR_H):
    """
    Style a figure for the light or dark page theme.

    Backgrounds are transparent so the page color shows through; text, axis
    lines and grid lines take the theme palette. Zoom is disabled.
    """
    text, grid = PALETTE.get(theme, PALETTE["light"])
    axis = dict(
        showgrid=True, gridcolor=grid, zeroline=False,
        linecolor=text, ticks="outside", fixedrange=True,
    )
    fig.update_layout(
        autosize=False,
        height=height,
        margin=dict(l=30, r=30, t=30, b=30),
        paper_bgcolor="rgba(0,0,0,0)",
        plot_bgcolor="rgba(0,0,0,0)",
        font=dict(color=text),
        xaxis=axis,
        yaxis=axis,
        uirevision="keep",
    )
    return fig


def _scores(area_scores):
    return [int((area_scores or {}).get(c["id"], {}).get("score", 0)) for c in CATEGORIES]


def bar_figure(area_scores, theme="light"):
    """
    Return a bar chart of the area scores on the 0-3 scale.

    Args:
        area_scores (dict): category -> {"score", "label"}
        theme (str, optional): light or dark. Defaults to "light".

    Returns:
        go.Figure: bar figure
    """
    vals = _scores(area_scores)
    fig = go.Figure(
        go.Bar(
            x=CATEGORY_LABELS,
            y=vals,
            marker=dict(color=vals, colorscale=RISK_COLORSCALE, cmin=0, cmax=3),
        )
    )
    fig.update_layout(
        autosize=False,
        height=BAR_H,
        xaxis=dict(categoryorder="array", categoryarray=CATEGORY_LABELS, fixedrange=True),
        yaxis=dict(range=[0, 3], fixedrange=True, tick0=0, dtick=1),
        uirevision="keep",
    )
    return _apply_theme(fig, theme, height=BAR_H)


def heatmap_figure(area_scores, theme="light"):
    """
    Return a one-row risk heatmap, one cell per category.

    Args:
        area_scores (dict): category -> {"score", "label"}
        theme (str, optional): light or dark. Defaults to "light".

    Returns:
        go.Figure: heatmap figure
    """
    z = np.array([_scores(area_scores)], dtype=float)
    labels = [(area_scores or {}).get(c["id"], {}).get("label", "") for c in CATEGORIES]
    font_color = _text_color(theme)

    annotations = [
        dict(
            x=name,
            y="Risk",
            text=f"{int(z[0, j])} {labels[j]}".strip(),
            showarrow=False,
            font=dict(size=12, color=font_color),
        )
        for j, name in enumerate(CATEGORY_LABELS)
    ]
    fig = go.Figure(
        data=go.Heatmap(
            z=z,
            x=CATEGORY_LABELS,
            y=["Risk"],
            zmin=0,
            zmax=3,
            colorscale=RISK_COLORSCALE,
            showscale=True,
            hovertemplate="Category: %{x}<br>Score: %{z:.0f}/3<extra></extra>",
            xgap=2,
            ygap=2,
        )
    )
    fig.update_layout(
        autosize=False,
        height=HEAT_H,
        xaxis=dict(title="", tickangle=0),
        yaxis=dict(title=""),
        annotations=annotations,
    )
    return _apply_theme(fig, theme, height=HEAT_H)


def chart_png(fig, width=520, height=280, scale=2):
    """Render a figure to PNG for the PDF report. Needs the kaleido engine."""
    return io.BytesIO(pio.to_image(fig, format="png", width=width, height=height, scale=scale))
