"""
report_builder.py — Progress report generation.

Generates:
- Progress Report PDF (student header, metrics table, charts, insights)
- Excel Export        (metric summary sheet + long-format series sheet)

Both consume an ``AnalysisResult``; nothing here recomputes analytics.
PDFs are A4, print-ready with studio name / date footer.
"""

import io
from datetime import datetime
from typing import Any, Dict, List, Optional

import pandas as pd
from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils.dataframe import dataframe_to_rows
from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import cm, mm
from reportlab.platypus import (
    Image,
    Paragraph,
    SimpleDocTemplate,
    Spacer,
    Table,
    TableStyle,
)

from core.analysis import AnalysisResult
from core.charts import is_png
from core.metrics import METRIC_POLICIES, Trend
from core.narrative import narrate_progress_summary


# ── Colour palette ──────────────────────────────────────────────────

BRAND_DARK  = colors.HexColor("#1a1a2e")
BRAND_ACCENT = colors.HexColor("#0f3460")
GREEN       = colors.HexColor("#2ecc71")
AMBER       = colors.HexColor("#f39c12")
RED         = colors.HexColor("#e74c3c")
LIGHT_GREY  = colors.HexColor("#f5f5f5")
WHITE       = colors.white

TREND_LABELS = {
    Trend.IMPROVING: "Melhorando",
    Trend.WORSENING: "Piorando",
    Trend.STABLE: "Estável",
    Trend.UNKNOWN: "Indefinido",
}

TREND_COLORS = {
    Trend.IMPROVING: GREEN,
    Trend.WORSENING: RED,
    Trend.STABLE: AMBER,
}

CHART_SECTIONS = [
    ("weight_evolution", "Evolução do peso"),
    ("bmi_evolution", "Evolução do IMC"),
    ("body_composition", "Composição corporal"),
    ("circumferences", "Circunferências"),
]


# ── Helpers ─────────────────────────────────────────────────────────

def _fmt(val: Optional[float], digits: int = 1) -> str:
    if val is None:
        return "—"
    return f"{val:.{digits}f}"


def _footer(canvas, doc, studio_name: str):
    """Draw studio name and date in the page footer."""
    canvas.saveState()
    canvas.setFont("Helvetica", 8)
    canvas.setFillColor(colors.grey)
    footer_text = f"{studio_name} — Gerado em {datetime.now().strftime('%d/%m/%Y %H:%M')}"
    canvas.drawString(2 * cm, 1.2 * cm, footer_text)
    canvas.drawRightString(A4[0] - 2 * cm, 1.2 * cm, f"Página {doc.page}")
    canvas.restoreState()


def _chart_image(image: bytes, width=14 * cm, height=7 * cm) -> Optional[Image]:
    """ReportLab image for a PNG chart; placeholders (SVG) are skipped."""
    if not image or not is_png(image):
        return None
    return Image(io.BytesIO(image), width=width, height=height)


def _styles():
    """Return custom paragraph styles."""
    ss = getSampleStyleSheet()
    return {
        "title": ParagraphStyle(
            "CustomTitle", parent=ss["Title"],
            fontSize=22, leading=28, textColor=BRAND_DARK,
            spaceAfter=4 * mm,
        ),
        "subtitle": ParagraphStyle(
            "CustomSubtitle", parent=ss["Normal"],
            fontSize=12, leading=16, textColor=BRAND_ACCENT,
            spaceAfter=3 * mm,
        ),
        "heading": ParagraphStyle(
            "CustomHeading", parent=ss["Heading2"],
            fontSize=13, leading=17, textColor=BRAND_DARK,
            spaceBefore=6 * mm, spaceAfter=3 * mm,
        ),
        "body": ParagraphStyle(
            "CustomBody", parent=ss["Normal"],
            fontSize=10, leading=14, textColor=colors.black,
            spaceAfter=2 * mm,
        ),
        "small": ParagraphStyle(
            "CustomSmall", parent=ss["Normal"],
            fontSize=8, leading=10, textColor=colors.grey,
        ),
        "center": ParagraphStyle(
            "CenterBody", parent=ss["Normal"],
            fontSize=10, leading=14, alignment=TA_CENTER,
        ),
    }


def _make_table(data: List[List], col_widths=None, header_color=BRAND_DARK):
    """Create a styled table."""
    style_cmds = [
        ("BACKGROUND", (0, 0), (-1, 0), header_color),
        ("TEXTCOLOR", (0, 0), (-1, 0), WHITE),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, 0), 8),
        ("FONTSIZE", (0, 1), (-1, -1), 8),
        ("ALIGN", (0, 0), (-1, -1), "CENTER"),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ("GRID", (0, 0), (-1, -1), 0.5, colors.HexColor("#cccccc")),
        ("ROWBACKGROUNDS", (0, 1), (-1, -1), [WHITE, LIGHT_GREY]),
        ("TOPPADDING", (0, 0), (-1, -1), 4),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 4),
    ]
    t = Table(data, colWidths=col_widths, repeatRows=1)
    t.setStyle(TableStyle(style_cmds))
    return t


def _metric_rows(result: AnalysisResult) -> List[Dict[str, Any]]:
    rows = []
    for metric, trend in result.metrics.items():
        policy = METRIC_POLICIES[metric]
        rows.append({
            "metric": metric.value,
            "label": policy.label,
            "unit": policy.unit,
            "previous_value": trend.previous_value,
            "current_value": trend.current_value,
            "delta": trend.delta,
            "delta_percentage": trend.delta_percentage,
            "trend": trend.trend,
            "projection_4_weeks": trend.projection.weeks_4,
            "projection_8_weeks": trend.projection.weeks_8,
            "projection_12_weeks": trend.projection.weeks_12,
        })
    return rows


# ═══════════════════════════════════════════════════════════════════
# 1. PROGRESS REPORT PDF
# ═══════════════════════════════════════════════════════════════════

def generate_progress_report_pdf(
    output_path: str,
    studio_name: str,
    result: AnalysisResult,
):
    """Generate the student's physical assessment progress report."""
    st = _styles()
    story = []

    story.append(Paragraph("Relatório de Evolução Física", st["title"]))
    story.append(Paragraph(f"{result.student_name or 'Aluno'} — {studio_name}", st["subtitle"]))
    story.append(Paragraph(
        narrate_progress_summary(
            result.student_name,
            result.goal,
            result.assessment_date,
            result.days_since_previous,
            result.count(Trend.IMPROVING),
            result.count(Trend.WORSENING),
        ),
        st["body"],
    ))

    # ── Metrics table ───────────────────────────────────────────────
    story.append(Paragraph("Indicadores", st["heading"]))
    header = ["Métrica", "Anterior", "Atual", "Variação", "Tendência",
              "4 sem.", "8 sem.", "12 sem."]
    table_data = [header]
    trend_cells = []
    for i, row in enumerate(_metric_rows(result), start=1):
        table_data.append([
            f"{row['label']} ({row['unit']})",
            _fmt(row["previous_value"]),
            _fmt(row["current_value"]),
            f"{row['delta']:+.1f} ({row['delta_percentage']:+.1f}%)",
            TREND_LABELS[row["trend"]],
            _fmt(row["projection_4_weeks"]),
            _fmt(row["projection_8_weeks"]),
            _fmt(row["projection_12_weeks"]),
        ])
        color = TREND_COLORS.get(row["trend"])
        if color is not None:
            trend_cells.append(("TEXTCOLOR", (4, i), (4, i), color))

    table = _make_table(
        table_data,
        col_widths=[4.2 * cm, 1.7 * cm, 1.7 * cm, 2.6 * cm, 2.1 * cm, 1.5 * cm, 1.5 * cm, 1.5 * cm],
    )
    if trend_cells:
        table.setStyle(TableStyle(trend_cells))
    story.append(table)
    story.append(Paragraph(
        "Projeções por regressão linear simples; servem como referência, não como previsão.",
        st["small"],
    ))

    # ── Charts ──────────────────────────────────────────────────────
    story.append(Paragraph("Gráficos", st["heading"]))
    for key, title in CHART_SECTIONS:
        img = _chart_image(result.charts.get(key, b""))
        if img is None:
            story.append(Paragraph(f"{title}: gráfico indisponível.", st["small"]))
            continue
        story.append(img)
        story.append(Spacer(1, 3 * mm))

    # ── Insights ────────────────────────────────────────────────────
    sections = [
        ("Pontos positivos", result.insights.positives),
        ("Pontos de atenção", result.insights.negatives),
        ("Recomendações", result.insights.recommendations),
    ]
    for title, items in sections:
        story.append(Paragraph(title, st["heading"]))
        for item in items:
            story.append(Paragraph(f"• {item}", st["body"]))

    doc = SimpleDocTemplate(
        output_path, pagesize=A4,
        leftMargin=1.8 * cm, rightMargin=1.8 * cm,
        topMargin=1.8 * cm, bottomMargin=2 * cm,
        title="Relatório de Evolução Física",
    )
    doc.build(
        story,
        onFirstPage=lambda c, d: _footer(c, d, studio_name),
        onLaterPages=lambda c, d: _footer(c, d, studio_name),
    )


# ═══════════════════════════════════════════════════════════════════
# 2. EXCEL EXPORT
# ═══════════════════════════════════════════════════════════════════

def metrics_frame(result: AnalysisResult) -> pd.DataFrame:
    """One row per metric: values, delta, trend and projections."""
    df = pd.DataFrame(_metric_rows(result))
    if not df.empty:
        df["trend"] = df["trend"].map(lambda t: t.value)
    # Missing previous values must reach openpyxl as empty cells, not NaN.
    return df.astype(object).where(pd.notna(df), None)


def series_frame(result: AnalysisResult) -> pd.DataFrame:
    """Long-format series: one row per (metric, date) point."""
    rows = [
        {"metric": metric.value, "date": point.timestamp, "value": point.value}
        for metric, trend in result.metrics.items()
        for point in trend.values
    ]
    return pd.DataFrame(rows, columns=["metric", "date", "value"])


def generate_progress_excel(
    output_path: str,
    result: AnalysisResult,
    studio_name: str,
):
    """Export the analysis as a workbook: summary sheet plus series sheet."""
    header_font = Font(bold=True, color="FFFFFF", size=11)
    header_fill = PatternFill(start_color="1a1a2e", end_color="1a1a2e", fill_type="solid")
    red_fill = PatternFill(start_color="fadbd8", end_color="fadbd8", fill_type="solid")
    green_fill = PatternFill(start_color="d5f5e3", end_color="d5f5e3", fill_type="solid")
    thin_border = Border(
        left=Side(style="thin"), right=Side(style="thin"),
        top=Side(style="thin"), bottom=Side(style="thin"),
    )

    def _style_sheet(ws, dataframe):
        """Apply formatting to a worksheet."""
        for cell in ws[1]:
            cell.font = header_font
            cell.fill = header_fill
            cell.alignment = Alignment(horizontal="center")
            cell.border = thin_border

        trend_col_idx = None
        for idx, col_name in enumerate(dataframe.columns, 1):
            if col_name == "trend":
                trend_col_idx = idx
                break

        for row in ws.iter_rows(min_row=2, max_row=ws.max_row):
            for cell in row:
                cell.border = thin_border
                cell.alignment = Alignment(horizontal="center")
            if trend_col_idx:
                value = row[trend_col_idx - 1].value
                if value == Trend.IMPROVING.value:
                    row[trend_col_idx - 1].fill = green_fill
                elif value == Trend.WORSENING.value:
                    row[trend_col_idx - 1].fill = red_fill

        ws.freeze_panes = "A2"
        for col_cells in ws.columns:
            max_len = max(len(str(cell.value or "")) for cell in col_cells)
            ws.column_dimensions[col_cells[0].column_letter].width = min(max_len + 4, 30)

    wb = Workbook()

    # ── Sheet 1: Summary ────────────────────────────────────────────
    summary_df = metrics_frame(result)
    ws_summary = wb.active
    ws_summary.title = "Resumo"
    ws_summary.sheet_properties.tabColor = "1a1a2e"
    for row in dataframe_to_rows(summary_df, index=False, header=True):
        ws_summary.append(row)
    _style_sheet(ws_summary, summary_df)

    # ── Sheet 2: Series ─────────────────────────────────────────────
    series_df = series_frame(result)
    ws_series = wb.create_sheet(title="Series")
    ws_series.sheet_properties.tabColor = "0f3460"
    for row in dataframe_to_rows(series_df, index=False, header=True):
        ws_series.append(row)
    _style_sheet(ws_series, series_df)

    # ── Sheet 3: Insights ───────────────────────────────────────────
    ws_insights = wb.create_sheet(title="Insights")
    ws_insights.append(["section", "text"])
    for section, items in result.insights.to_dict().items():
        for item in items:
            ws_insights.append([section, item])
    ws_insights.append([])
    ws_insights.append(["studio", studio_name])
    ws_insights.append(["student", result.student_name])
    ws_insights.append(["goal", result.goal])
    ws_insights.append(["assessment_date", result.assessment_date])
    for cell in ws_insights[1]:
        cell.font = header_font
        cell.fill = header_fill

    wb.save(output_path)
