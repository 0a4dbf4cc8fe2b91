# report.py

import datetime as dt
import logging
import re

from config import (APPENDIX_TEXT, AREA_WHY, CATEGORIES, LOW_RISK_BULLETS,
                    NO_PLAN_TEXT, NO_TOP_RISKS_TEXT, PLACEHOLDERS, RISK_BULLETS)
from errors import ReportDataError

logger = logging.getLogger(__name__)


def format_report_date(date=None):
    """Render a date the way the report template expects, e.g. "October 19, 2026"."""
    date = date or dt.date.today()
    return f"{date:%B} {date.day}, {date.year}"


def ordered_areas(area_scores):
    """
    Return the area scores in display order as (category, data) pairs.

    Raises ReportDataError if any category is missing instead of silently
    dropping its row.
    """
    if not isinstance(area_scores, dict):
        raise ReportDataError("Area scores must be a mapping of category to score")
    missing = [c["id"] for c in CATEGORIES if c["id"] not in area_scores]
    if missing:
        raise ReportDataError(f"Area scores missing for: {', '.join(missing)}")
    return [(c, area_scores[c["id"]]) for c in CATEGORIES]


def heatmap_table(area_scores):
    """Markdown table of every category: name, weight, score, risk level."""
    table = (
        "| Category | Weight | Score | Risk Level |\n"
        "|----------|--------|-------|------------|\n"
    )
    for cat, data in ordered_areas(area_scores):
        table += (
            f"| {cat['name']} | {cat['display_weight']} | {data['score']} | {data['label']} |\n"
        )
    return table


def area_scores_section(area_scores):
    return "".join(
        f"**{cat['name']}**: {data['score']}/3 ({data['label']})\n\n"
        for cat, data in ordered_areas(area_scores)
    )


def findings_by_area(area_scores):
    """
    Narrative block per area.

    Scores of 2 and 3 get a Medium/High risk block with remediation bullets,
    0 and 1 a Low risk block.
    """
    findings = ""
    for cat, data in ordered_areas(area_scores):
        score = data["score"]
        if score >= 2:
            level = "High" if score >= 3 else "Medium"
            bullets = RISK_BULLETS
        else:
            level = "Low"
            bullets = LOW_RISK_BULLETS
        findings += f"**{cat['name']}** - {level} Risk ({score}/3)\n"
        findings += f"{AREA_WHY[cat['id']]}\n"
        findings += "".join(f"- {b}\n" for b in bullets)
        findings += "\n"
    return findings


def top_risks(area_scores, limit=3):
    """Names of the riskiest areas (score 2+), highest first, ties in display order."""
    ranked = [
        (-data["score"], i, cat["name"])
        for i, (cat, data) in enumerate(ordered_areas(area_scores))
        if data["score"] >= 2
    ]
    if not ranked:
        return NO_TOP_RISKS_TEXT
    return ", ".join(name for _, _, name in sorted(ranked)[:limit])


def thirty_day_plan(plan):
    if not plan:
        return NO_PLAN_TEXT
    content = "**30-Day Action Plan:**\n\n"
    for i, item in enumerate(plan, start=1):
        content += f"{i}. {item}\n"
    return content


def appendix():
    return APPENDIX_TEXT


def format_overall(weighted, label):
    return f"{float(weighted):.1f} ({label})"


def build_replacements(assessment_data, client_name, report_date):
    """
    Build the placeholder -> text map for the report template.

    Args:
        assessment_data (dict): payload from scoring.process_assessment
        client_name (str): name shown on the cover
        report_date (str): pre-formatted date, see format_report_date()

    Returns:
        dict: placeholder -> replacement text

    Raises:
        ReportDataError: if inputs are missing or an area has no score.
    """
    if not client_name or not isinstance(client_name, str):
        raise ReportDataError("Client name must be a non-empty string")
    if not report_date or not isinstance(report_date, str):
        raise ReportDataError("Report date must be a non-empty string")
    if not assessment_data or not isinstance(assessment_data, dict):
        raise ReportDataError("Assessment data is missing")
    absent = [k for k in ("area_scores", "weighted_score", "overall_label") if k not in assessment_data]
    if absent:
        raise ReportDataError(f"Assessment data missing fields: {', '.join(absent)}")

    areas = assessment_data.get("area_scores")
    replacements = {
        PLACEHOLDERS["CLIENT_NAME"]: client_name,
        PLACEHOLDERS["DATE"]: report_date,
        PLACEHOLDERS["OVERALL_SCORE"]: format_overall(
            assessment_data["weighted_score"], assessment_data["overall_label"]
        ),
        PLACEHOLDERS["HEATMAP_TABLE"]: heatmap_table(areas),
        PLACEHOLDERS["AREA_SCORES"]: area_scores_section(areas),
        PLACEHOLDERS["FINDINGS_BY_AREA"]: findings_by_area(areas),
        PLACEHOLDERS["TOP_RISKS"]: top_risks(areas),
        PLACEHOLDERS["THIRTY_DAY_PLAN"]: thirty_day_plan(assessment_data.get("plan") or []),
        PLACEHOLDERS["APPENDIX"]: appendix(),
    }
    logger.debug("prepared %d report placeholders for %s", len(replacements), client_name)
    return replacements


def fill_template(text, replacements):
    """Replace every occurrence of each placeholder, ignoring case."""
    for placeholder, value in replacements.items():
        text = re.sub(re.escape(placeholder), lambda _m: value, text, flags=re.IGNORECASE)
    return text
