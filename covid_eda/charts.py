import math
from typing import Dict, Optional

import plotly.graph_objects as go
from plotly.subplots import make_subplots

from covid_eda.config import PRETTY
from covid_eda.dataframe import DataFrame
from covid_eda.regression import RegressionResult


def _label(col: str) -> str:
    return PRETTY.get(col, col)


def top_n_bar(tbl: DataFrame, value: str, title: str, label: str = "location") -> go.Figure:
    fig = go.Figure(go.Bar(
        x=tbl[label],
        y=tbl[value],
        marker=dict(color=tbl[value], colorscale="Reds"),
    ))
    fig.update_layout(
        title=title,
        xaxis_title=_label(label),
        yaxis_title=_label(value),
        height=450,
        showlegend=False,
    )
    return fig


def faceted_top_n_bar(tbl: DataFrame, value: str, title: str, cols: int = 2) -> go.Figure:
    """One horizontal bar subplot per continent, in the table's continent order."""
    groups: Dict[str, Dict[str, list]] = {}
    for cont, loc, val in zip(tbl["continent"], tbl["location"], tbl[value]):
        g = groups.setdefault(cont, {"location": [], "value": []})
        g["location"].append(loc)
        g["value"].append(val)

    names = list(groups)
    rows = max(1, math.ceil(len(names) / cols))
    fig = make_subplots(rows=rows, cols=cols, subplot_titles=names, horizontal_spacing=0.2)
    for k, cont in enumerate(names):
        # Reversed so the largest bar sits on top
        fig.add_trace(
            go.Bar(
                x=groups[cont]["value"][::-1],
                y=groups[cont]["location"][::-1],
                orientation="h",
                name=cont,
            ),
            row=k // cols + 1,
            col=k % cols + 1,
        )
    fig.update_layout(title=title, height=350 * rows, showlegend=False)
    return fig


def continent_pie(tbl: DataFrame, value: str, title: str) -> go.Figure:
    fig = go.Figure(go.Pie(labels=tbl["continent"], values=tbl[value], hole=0.3))
    fig.update_layout(title=title, height=400)
    return fig


def continent_dual_bar(tbl: DataFrame) -> go.Figure:
    fig = make_subplots(specs=[[{"secondary_y": True}]])
    fig.add_trace(go.Bar(x=tbl["continent"], y=tbl["final_cases"], name=_label("final_cases")),
                  secondary_y=False)
    fig.add_trace(go.Scatter(x=tbl["continent"], y=tbl["final_deaths"], name=_label("final_deaths"),
                             mode="lines+markers"),
                  secondary_y=True)
    fig.update_layout(title="Final Cases and Deaths by Continent", height=450, hovermode="x unified")
    fig.update_yaxes(title_text=_label("final_cases"), secondary_y=False)
    fig.update_yaxes(title_text=_label("final_deaths"), secondary_y=True)
    return fig


def regression_scatter(tbl: DataFrame, fit: RegressionResult, title: Optional[str] = None) -> go.Figure:
    """Country scatter with the fitted line and a slope / p-value annotation."""
    xs = tbl[fit.x]
    ys = tbl[fit.y]
    fig = go.Figure()
    fig.add_trace(go.Scatter(
        x=xs,
        y=ys,
        mode="markers",
        name="Countries",
        text=tbl["location"] if "location" in tbl.columns else None,
        marker=dict(size=7, opacity=0.7),
    ))
    if xs:
        line_x = [min(xs), max(xs)]
        fig.add_trace(go.Scatter(
            x=line_x,
            y=fit.predict(line_x),
            mode="lines",
            name="Fitted line",
            line=dict(width=2, dash="dash"),
        ))
    fig.add_annotation(
        xref="paper", yref="paper", x=0.02, y=0.98, showarrow=False, align="left",
        text=f"slope = {fit.slope:.4g}<br>intercept = {fit.intercept:.4g}<br>"
             f"R² = {fit.r_value ** 2:.3f}, p = {fit.p_value:.3g}",
    )
    fig.update_layout(
        title=title or f"{_label(fit.y)} vs {_label(fit.x)}",
        xaxis_title=_label(fit.x),
        yaxis_title=_label(fit.y),
        height=450,
    )
    return fig
