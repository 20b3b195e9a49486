"""
boondh_core.report
------------------
Create a simple PDF report using ReportLab.

What this file provides
-----------------------
- generate_pdf_report(estimate, out_path, fig=None) -> str

Inputs
------
- estimate : boondh_core.scenarios.Estimate
    Location, rainfall, yield, financials and forecast of one run.
- out_path : str | Path
    Where to write the PDF.
- fig : matplotlib.figure.Figure | None
    Optional chart to embed (the app passes the monthly collection bars).

Output
------
- Returns the path to the written PDF (as str). Creates parent folders if missing.

Notes
-----
- We rasterize the Matplotlib figure into PNG bytes and place it into the PDF.
- Layout stays simple: title, summary, three tables, optional figure.
"""

from __future__ import annotations

from io import BytesIO
from pathlib import Path

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import cm
from reportlab.platypus import (
    SimpleDocTemplate,
    Paragraph,
    Spacer,
    Table,
    TableStyle,
    Image,
)

from .version import __version__

_TABLE_STYLE = TableStyle(
    [
        ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#dbeafe")),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.black),
        ("FONTNAME", (0, 0), (-1, -1), "Helvetica"),
        ("FONTSIZE", (0, 0), (-1, -1), 9),
        ("ALIGN", (0, 0), (-1, -1), "LEFT"),
        ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
        ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, colors.HexColor("#f7f7f7")]),
    ]
)


def _figure_to_png_bytes(fig) -> BytesIO:
    """Convert a Matplotlib Figure to an in-memory PNG."""
    bio = BytesIO()
    fig.savefig(bio, format="png", dpi=200, bbox_inches="tight")
    bio.seek(0)
    return bio


def _plain_language_summary(est) -> str:
    """
    Short, plain-language paragraph for homeowners.

    Mentions when we fell back to typical seasonal rainfall or the default
    location, so nobody mistakes an estimate for a measurement.
    """
    y = est.yield_result
    f = est.financials
    text = (
        f"With about {est.rainfall.monthly_inches:,.1f} inches of rain a month, a "
        f"{y.effective_area_sqft:,.0f} sq ft {est.rooftop.material.value} roof in "
        f"{est.location.name} could collect roughly {y.monthly_collection_l:,.0f} litres "
        f"per month ({y.annual_collection_l:,.0f} litres per year), worth about "
        f"{y.annual_savings:,.0f} a year. After incentives the system costs about "
        f"{f.net_setup_cost:,.0f} and pays back in {f.payback_period_years:,.1f} years."
    )
    if est.rainfall.source == "fallback":
        text += " Live weather was not available, so typical seasonal rainfall was used."
    if est.location_source == "default":
        text += f" The city was not recognised; figures use {est.location.name}."
    return text


def _two_column_table(rows):
    tbl = Table([["Item", "Value"]] + rows, hAlign="LEFT")
    tbl.setStyle(_TABLE_STYLE)
    return tbl


def generate_pdf_report(estimate, out_path, fig=None) -> str:
    """
    Create a concise PDF report containing:
    - Title + metadata
    - Plain-language summary
    - Collection, financial and forecast tables
    - The figure you pass in (optional)

    Returns
    -------
    str
        The absolute path to the created PDF.
    """
    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)

    doc = SimpleDocTemplate(
        str(out_path),
        pagesize=A4,
        title="Boondh Rainwater Harvesting Report",
        author="Boondh",
    )
    styles = getSampleStyleSheet()
    story = []
    est = estimate

    story.append(Paragraph(f"Rainwater Harvesting Report – {est.location.name}", styles["Title"]))
    story.append(Spacer(1, 0.3 * cm))

    meta = (
        f"Lat/Lon: {est.location.latitude:.4f}, {est.location.longitude:.4f} | "
        f"Climate zone: {est.climate_zone.value} | "
        f"Rainfall source: {est.rainfall.source} | "
        f"Boondh {__version__}"
    )
    story.append(Paragraph(meta, styles["Normal"]))
    story.append(Spacer(1, 0.4 * cm))

    story.append(Paragraph("Summary", styles["Heading2"]))
    story.append(Paragraph(_plain_language_summary(est), styles["BodyText"]))
    story.append(Spacer(1, 0.5 * cm))

    y = est.yield_result
    story.append(Paragraph("Water collection", styles["Heading2"]))
    story.append(
        _two_column_table(
            [
                ["Rooftop area (sq ft)", f"{y.effective_area_sqft:,.0f}"],
                ["Runoff coefficient", f"{y.runoff_coefficient:.2f}"],
                ["Monthly rainfall (in)", f"{est.rainfall.monthly_inches:.2f}"],
                ["Monthly collection (L)", f"{y.monthly_collection_l:,.0f}"],
                ["Annual collection (L)", f"{y.annual_collection_l:,.0f}"],
                ["Monthly savings", f"{y.monthly_savings:,.2f}"],
                ["Annual savings", f"{y.annual_savings:,.2f}"],
            ]
        )
    )
    story.append(Spacer(1, 0.5 * cm))

    f = est.financials
    story.append(Paragraph("Costs and returns", styles["Heading2"]))
    story.append(
        _two_column_table(
            [
                ["Setup cost", f"{f.setup_cost:,.0f}"],
                ["Government incentives", f"{f.government_incentives:,.0f}"],
                ["Subsidy", f"{f.subsidy_amount:,.0f}"],
                ["Tax benefits", f"{f.tax_benefits:,.0f}"],
                ["Net setup cost", f"{f.net_setup_cost:,.0f}"],
                ["Annual maintenance", f"{f.annual_maintenance_cost:,.0f}"],
                ["Filter replacement / yr", f"{f.filter_replacement_cost:,.0f}"],
                ["System inspection", f"{f.system_inspection_cost:,.0f}"],
                ["Net annual savings", f"{f.net_annual_savings:,.0f}"],
                ["Payback period (years)", f"{f.payback_period_years:,.1f}"],
                ["ROI (%)", f"{f.roi_percent:,.1f}"],
            ]
        )
    )
    story.append(Spacer(1, 0.5 * cm))

    if est.forecast:
        story.append(Paragraph("7-day forecast", styles["Heading2"]))
        data = [["Date", "Max/Min (°C)", "Rain (mm)", "Type", "Collectable"]]
        for d in est.forecast:
            temps = "-"
            if d.max_temp is not None and d.min_temp is not None:
                temps = f"{d.max_temp:.0f}/{d.min_temp:.0f}"
            data.append(
                [d.date.strftime("%a %d %b"), temps, f"{d.precipitation_mm:.1f}", d.rain_type, "yes" if d.collectable else "no"]
            )
        tbl = Table(data, hAlign="LEFT")
        tbl.setStyle(_TABLE_STYLE)
        story.append(tbl)
        story.append(Spacer(1, 0.5 * cm))

    if fig is not None:
        story.append(Paragraph("Monthly collection", styles["Heading2"]))
        story.append(Image(_figure_to_png_bytes(fig), width=16 * cm, height=9 * cm))

    doc.build(story)

    return str(out_path.resolve())
