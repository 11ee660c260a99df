"""
charts.py — Chart rendering boundary for progress analyses.

The analysis asks a renderer for four images: weight and BMI evolution
lines, a body-composition doughnut and a waist/hip comparison bar chart.
Each call is wrapped in a ``RenderResult``; a failed call is logged and
replaced with a small SVG placeholder carrying the chart title, so one broken
chart never sinks the analysis.

``MatplotlibChartRenderer`` is the default renderer (PNG bytes, Agg backend,
nothing leaves the server).
"""

import io
import logging
import os
from dataclasses import dataclass
from typing import Callable, Dict, List, Mapping, Optional, Protocol, Sequence
from xml.sax.saxutils import escape

import matplotlib
matplotlib.use("Agg")  # Non-interactive backend for server use
import matplotlib.pyplot as plt

from core.analyzer import MetricTrend
from core.metrics import Metric
from core.timeseries import SeriesPoint

logger = logging.getLogger(__name__)

CHART_DPI = int(os.getenv("CHART_DPI", "120"))

WEIGHT_TITLE = "Evolução do Peso (kg)"
BMI_TITLE = "Evolução do IMC"
COMPOSITION_TITLE = "Composição Corporal Atual (%)"
CIRCUMFERENCE_TITLE = "Comparação de Circunferências"

COMPOSITION_LABELS = ["Gordura Corporal", "Massa Muscular", "Outros"]
CIRCUMFERENCE_LABELS = ["Cintura (cm)", "Quadril (cm)"]


class ChartRenderer(Protocol):
    def render_line_chart(self, series: Sequence[SeriesPoint], title: str, color: str) -> bytes: ...

    def render_doughnut(self, labels: Sequence[str], values: Sequence[float]) -> bytes: ...

    def render_bar_comparison(
        self,
        labels: Sequence[str],
        current_values: Sequence[float],
        previous_values: Sequence[float],
    ) -> bytes: ...


# ── Placeholder & result combinator ─────────────────────────────────

def placeholder_chart(title: str) -> bytes:
    """Fixed-size SVG stand-in for a chart that could not be rendered."""
    svg = (
        '<svg width="400" height="300" xmlns="http://www.w3.org/2000/svg">'
        '<rect width="400" height="300" fill="#f8fafc" stroke="#e2e8f0" stroke-width="2"/>'
        '<text x="200" y="140" text-anchor="middle" font-family="Arial" font-size="14" '
        f'fill="#64748b">{escape(title)}</text>'
        '<text x="200" y="170" text-anchor="middle" font-family="Arial" font-size="12" '
        'fill="#94a3b8">Gráfico temporariamente indisponível</text>'
        "</svg>"
    )
    return svg.encode("utf-8")


@dataclass(frozen=True)
class RenderResult:
    """Outcome of one renderer call: image bytes or the error raised."""

    image: Optional[bytes] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.image is not None

    @classmethod
    def attempt(cls, name: str, render: Callable[..., bytes], *args) -> "RenderResult":
        try:
            return cls(image=render(*args))
        except Exception as exc:
            logger.warning("Chart '%s' failed to render: %s", name, exc)
            return cls(error=exc)

    def or_placeholder(self, title: str) -> bytes:
        if self.ok:
            return self.image
        return placeholder_chart(title)


def is_png(image: bytes) -> bool:
    return image[:8] == b"\x89PNG\r\n\x1a\n"


# ── Matplotlib renderer ─────────────────────────────────────────────

def _fig_to_png(fig) -> bytes:
    buf = io.BytesIO()
    try:
        fig.savefig(buf, format="png", dpi=CHART_DPI, bbox_inches="tight", facecolor="white")
    finally:
        plt.close(fig)
    return buf.getvalue()


class MatplotlibChartRenderer:
    """Renders the progress charts to PNG with matplotlib."""

    def render_line_chart(self, series: Sequence[SeriesPoint], title: str, color: str) -> bytes:
        if not series:
            raise ValueError(f"No data points for '{title}'.")

        labels = [p.timestamp.strftime("%d/%m/%Y") for p in series]
        values = [p.value for p in series]

        x = list(range(len(values)))

        fig, ax = plt.subplots(figsize=(6, 3))
        ax.plot(x, values, marker="o", color=color, linewidth=2, markersize=6)
        ax.fill_between(x, values, min(values), alpha=0.12, color=color)
        for i, v in enumerate(values):
            ax.annotate(f"{v:.1f}", (i, v), textcoords="offset points",
                        xytext=(0, 8), ha="center", fontsize=8)
        ax.set_xticks(x)
        ax.set_xticklabels(labels)
        ax.set_title(title, fontsize=12, fontweight="bold", pad=10)
        ax.spines["top"].set_visible(False)
        ax.spines["right"].set_visible(False)
        ax.tick_params(axis="x", rotation=30, labelsize=8)
        fig.tight_layout()
        return _fig_to_png(fig)

    def render_doughnut(self, labels: Sequence[str], values: Sequence[float]) -> bytes:
        if sum(values) <= 0:
            raise ValueError("Body composition values are all zero.")

        fig, ax = plt.subplots(figsize=(4.5, 4.0))
        wedges, _ = ax.pie(values, colors=["#EF4444", "#10B981", "#6B7280"],
                           startangle=90, wedgeprops={"width": 0.42})
        ax.legend(wedges, [f"{l} ({v:.1f}%)" for l, v in zip(labels, values)],
                  loc="lower center", bbox_to_anchor=(0.5, -0.12), ncol=1, fontsize=8)
        ax.set_title(COMPOSITION_TITLE, fontsize=12, fontweight="bold")
        fig.tight_layout()
        return _fig_to_png(fig)

    def render_bar_comparison(
        self,
        labels: Sequence[str],
        current_values: Sequence[float],
        previous_values: Sequence[float],
    ) -> bytes:
        width = 0.38
        x = list(range(len(labels)))

        fig, ax = plt.subplots(figsize=(5.5, 3.3))
        ax.bar([i - width / 2 for i in x], current_values, width, label="Atual", color="#3B82F6")
        ax.bar([i + width / 2 for i in x], previous_values, width, label="Anterior", color="#94A3B8")
        ax.set_xticks(x)
        ax.set_xticklabels(labels, fontsize=9)
        ax.set_title(CIRCUMFERENCE_TITLE, fontsize=12, fontweight="bold")
        ax.legend(fontsize=8)
        ax.spines["top"].set_visible(False)
        ax.spines["right"].set_visible(False)
        fig.tight_layout()
        return _fig_to_png(fig)


# ── Analysis charts ─────────────────────────────────────────────────

def _composition_values(metrics: Mapping[Metric, MetricTrend]) -> List[float]:
    body_fat = metrics[Metric.BODY_FAT].current_value or 0.0
    muscle = metrics[Metric.MUSCLE_MASS].current_value or 0.0
    return [body_fat, muscle, max(0.0, 100.0 - body_fat - muscle)]


def render_charts(
    metrics: Mapping[Metric, MetricTrend],
    renderer: ChartRenderer,
) -> Dict[str, bytes]:
    """Request the four analysis charts, each falling back independently."""
    waist = metrics[Metric.WAIST_CIRC]
    hip = metrics[Metric.HIP_CIRC]

    weight = RenderResult.attempt(
        "weight_evolution", renderer.render_line_chart,
        metrics[Metric.WEIGHT].values, WEIGHT_TITLE, "#3B82F6",
    )
    bmi = RenderResult.attempt(
        "bmi_evolution", renderer.render_line_chart,
        metrics[Metric.BMI].values, BMI_TITLE, "#10B981",
    )
    composition = RenderResult.attempt(
        "body_composition", renderer.render_doughnut,
        COMPOSITION_LABELS, _composition_values(metrics),
    )
    circumferences = RenderResult.attempt(
        "circumferences", renderer.render_bar_comparison,
        CIRCUMFERENCE_LABELS,
        [waist.current_value or 0.0, hip.current_value or 0.0],
        [waist.previous_value or 0.0, hip.previous_value or 0.0],
    )

    return {
        "weight_evolution": weight.or_placeholder(WEIGHT_TITLE),
        "bmi_evolution": bmi.or_placeholder(BMI_TITLE),
        "body_composition": composition.or_placeholder("Composição Corporal"),
        "circumferences": circumferences.or_placeholder("Circunferências"),
    }
