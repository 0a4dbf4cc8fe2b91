# exports.py

import datetime as dt
import re
from xml.sax.saxutils import escape

import pandas as pd
from pptx import Presentation
from pptx.util import Inches
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.platypus import Image as RLImage
from reportlab.platypus import (Paragraph, SimpleDocTemplate, Spacer, Table,
                                TableStyle)

from charts import bar_figure, chart_png, heatmap_figure
from config import (CATEGORY_NAMES, NO_PLAN_TEXT, PLACEHOLDERS, QUESTIONS,
                    REPORT_FILE_PREFIX)
from report import build_replacements, format_overall, ordered_areas, top_risks


def report_file_name(client_name, date=None):
    """Client_ReadinessCheck_<client>_<YYYY-MM-DD>.pdf"""
    date = date or dt.date.today()
    safe = re.sub(r"[^A-Za-z0-9_-]+", "_", (client_name or "Client").strip()).strip("_")
    return f"{REPORT_FILE_PREFIX}{safe or 'Client'}_{date:%Y-%m-%d}.pdf"


def responses_frame(data):
    """
    One row per question with the answer and its category's area score.

    Args:
        data (dict): assessment_data payload

    Returns:
        pd.DataFrame: columns id, category, text, value, area_score, area_label
    """
    answers = data.get("answers", {})
    areas = data.get("area_scores", {})
    rows = [
        {
            "id": q["id"],
            "category": CATEGORY_NAMES[q["category"]],
            "text": q["text"],
            "value": answers.get(q["id"]),
            "area_score": areas.get(q["category"], {}).get("score"),
            "area_label": areas.get(q["category"], {}).get("label"),
        }
        for q in QUESTIONS
    ]
    return pd.DataFrame(rows)


def write_csv(buf, data):
    responses_frame(data).to_csv(buf, index=False)


def _heatmap_rows(data):
    return [["Category", "Weight", "Score", "Risk Level"]] + [
        [cat["name"], cat["display_weight"], str(area["score"]), area["label"]]
        for cat, area in ordered_areas(data.get("area_scores"))
    ]


def write_ppt_bytes(buf, data, client_name, report_date):
    """
    Write a PowerPoint presentation with the following slides to a bytes buffer.

    1. Title slide with client and date.
    2. Summary slide with overall score and top risks.
    3. Risk heatmap table.
    4. 30-day plan.

    Args:
        buf (BytesIO): A BytesIO object to write the presentation to.
        data (dict): The assessment_data payload.
        client_name (str): Client shown on the title slide.
        report_date (str): Formatted report date.

    Returns:
        None
    """
    prs = Presentation()
    slide = prs.slides.add_slide(prs.slide_layouts[0])
    slide.shapes.title.text = "AI Compliance Readiness Check"
    slide.placeholders[1].text = f"Client: {client_name}\nDate: {report_date}"

    slide = prs.slides.add_slide(prs.slide_layouts[1])
    slide.shapes.title.text = "Summary"
    body = slide.shapes.placeholders[1].text_frame
    body.clear()
    body.paragraphs[0].text = (
        f"Overall Score: {format_overall(data['weighted_score'], data['overall_label'])}"
    )
    body.add_paragraph().text = "Method: 12 questions scored 0-3, six weighted areas."
    body.add_paragraph().text = f"Top risks: {top_risks(data['area_scores'])}"

    slide = prs.slides.add_slide(prs.slide_layouts[5])
    slide.shapes.title.text = "Risk Heatmap"
    tbl_rows = _heatmap_rows(data)
    rows, cols = len(tbl_rows), len(tbl_rows[0])
    table = slide.shapes.add_table(
        rows, cols, Inches(0.8), Inches(1.5), Inches(8.0), Inches(0.8 + 0.35 * rows)
    ).table
    for i, row in enumerate(tbl_rows):
        for j, val in enumerate(row):
            table.cell(i, j).text = val

    slide = prs.slides.add_slide(prs.slide_layouts[1])
    slide.shapes.title.text = "30-Day Action Plan"
    tf = slide.placeholders[1].text_frame
    tf.clear()
    plan = data.get("plan") or []
    if not plan:
        tf.paragraphs[0].text = NO_PLAN_TEXT
    for i, item in enumerate(plan, start=1):
        p = tf.paragraphs[0] if i == 1 else tf.add_paragraph()
        p.text = f"{i}. {item}"
    prs.save(buf)


_BOLD = re.compile(r"\*\*(.+?)\*\*")
_TITLE = re.compile(r"^\*\*([^*]+?):?\*\*$")
_NUMBERED = re.compile(r"^(\d+)\. (.*)$")


def markdown_flowables(text, styles):
    """
    Render the report's markdown sections as reportlab paragraphs.

    Handles the subset report.py emits: bold-only title lines, `- ` bullets,
    `1. ` numbered items and **bold** runs. Table rows are skipped.
    """
    item_style = ParagraphStyle("ReportItem", parent=styles["Normal"], leftIndent=18, bulletIndent=6)
    story = []
    for raw in text.splitlines():
        line = raw.strip()
        if not line or line.startswith("|"):
            continue
        title = _TITLE.match(line)
        if title:
            story.append(Paragraph(f"<b>{escape(title.group(1))}</b>", styles["Heading3"]))
            continue
        bullet = None
        if line.startswith("- "):
            bullet, line = "•", line[2:]
        else:
            numbered = _NUMBERED.match(line)
            if numbered:
                bullet, line = f"{numbered.group(1)}.", numbered.group(2)
        markup = _BOLD.sub(r"<b>\1</b>", escape(line))
        style = item_style if bullet else styles["Normal"]
        story.append(Paragraph(markup, style, bulletText=bullet))
    return story


def pdf_story(data, client_name, report_date, theme="light", include_charts=True):
    """
    Flowables for the readiness report PDF.

    Text sections come from report.build_replacements so the PDF says the
    same thing as the template placeholders.

    Raises:
        ReportDataError: if the assessment data is incomplete.
    """
    content = build_replacements(data, client_name, report_date)
    styles = getSampleStyleSheet()
    areas = data["area_scores"]
    plan_text = content[PLACEHOLDERS["THIRTY_DAY_PLAN"]]
    if not data.get("plan"):
        plan_text = f"**30-Day Action Plan:**\n\n{plan_text}"

    story = [
        Paragraph("<b>AI Compliance Readiness Check</b>", styles["Title"]),
        Spacer(1, 8),
        Paragraph(
            f"Client: {escape(client_name)}&nbsp;&nbsp;&nbsp; Date: {escape(report_date)}",
            styles["Normal"],
        ),
        Spacer(1, 10),
        Paragraph(
            "<b>Overall Score:</b> " + content[PLACEHOLDERS["OVERALL_SCORE"]],
            styles["Heading3"],
        ),
        Paragraph(
            f"<b>Top risks:</b> {escape(content[PLACEHOLDERS['TOP_RISKS']])}", styles["Normal"]
        ),
        Spacer(1, 8),
    ]

    avail = A4[0] - 72
    col0 = 200
    dcol = (avail - col0) / 3
    tbl = Table(_heatmap_rows(data), colWidths=[col0, dcol, dcol, dcol], hAlign="LEFT")
    tbl.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#e9ebf3")),
                ("TEXTCOLOR", (0, 0), (-1, 0), colors.HexColor("#0b1020")),
                ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("ALIGN", (1, 1), (-1, -1), "CENTER"),
                ("BOTTOMPADDING", (0, 0), (-1, 0), 8),
                ("TOPPADDING", (0, 0), (-1, 0), 6),
            ]
        )
    )
    story += [
        Paragraph("<b>Risk Heatmap</b>", styles["Heading3"]),
        Spacer(1, 6),
        tbl,
        Spacer(1, 12),
    ]

    if include_charts:
        for title, fig in [
            ("Area Scores", bar_figure(areas, theme)),
            ("Heatmap", heatmap_figure(areas, theme)),
        ]:
            story += [Paragraph(f"<b>{title}</b>", styles["Heading3"]), Spacer(1, 6)]
            story += [RLImage(chart_png(fig), width=520, height=280), Spacer(1, 12)]

    story.append(Paragraph("<b>Findings by Area</b>", styles["Heading3"]))
    story += markdown_flowables(content[PLACEHOLDERS["FINDINGS_BY_AREA"]], styles)
    story.append(Spacer(1, 12))
    story += markdown_flowables(plan_text, styles)
    story.append(Spacer(1, 12))
    story += markdown_flowables(content[PLACEHOLDERS["APPENDIX"]], styles)
    return story


def write_pdf_bytes(buf, data, client_name, report_date, theme="light", include_charts=True):
    """
    Write the readiness report as a PDF.

    Charts are rendered through kaleido; pass include_charts=False where no
    image export engine is available.
    """
    doc = SimpleDocTemplate(
        buf, pagesize=A4, leftMargin=16, rightMargin=16, topMargin=16, bottomMargin=16
    )
    doc.build(pdf_story(data, client_name, report_date, theme, include_charts))
