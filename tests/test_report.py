"""Tests for report content formatting."""

import datetime as dt

import pytest

from config import APPENDIX_TEXT, NO_PLAN_TEXT, NO_TOP_RISKS_TEXT, PLACEHOLDERS
from conftest import make_answers
from errors import ReportDataError
from report import (build_replacements, fill_template, findings_by_area,
                    format_report_date, heatmap_table, thirty_day_plan,
                    top_risks)
from scoring import process_assessment


def test_format_report_date():
    assert format_report_date(dt.date(2026, 10, 5)) == "October 5, 2026"


def test_heatmap_rows_follow_display_order(high_data):
    # insertion order of the mapping must not matter
    reversed_areas = dict(reversed(list(high_data["area_scores"].items())))
    lines = heatmap_table(reversed_areas).strip().split("\n")
    assert lines[0] == "| Category | Weight | Score | Risk Level |"
    assert lines[2:] == [
        "| Governance | 25% | 3 | High |",
        "| Data | 20% | 3 | High |",
        "| Security | 20% | 3 | High |",
        "| Vendors | 15% | 3 | High |",
        "| Human Oversight | 10% | 3 | High |",
        "| Transparency | 10% | 3 | High |",
    ]


def test_heatmap_fails_on_missing_area(low_data):
    areas = dict(low_data["area_scores"])
    del areas["vendors"]
    with pytest.raises(ReportDataError, match="vendors"):
        heatmap_table(areas)


def test_findings_levels():
    data = process_assessment(make_answers(roles_ownership=3, policies=3, human_in_loop=2, rollback_incidents=2))
    findings = findings_by_area(data["area_scores"])
    assert "**Governance** - High Risk (3/3)" in findings
    assert "**Human Oversight** - Medium Risk (2/3)" in findings
    assert "**Security** - Low Risk (0/3)" in findings
    assert "- Well implemented" in findings
    assert "- Requires immediate attention" in findings


def test_top_risks():
    data = process_assessment(make_answers(
        human_in_loop=2, rollback_incidents=2, roles_ownership=3, policies=3,
        user_disclosure=3, record_keeping=3, providers=2, contracts=2,
    ))
    assert top_risks(data["area_scores"]) == "Governance, Transparency, Vendors"


def test_top_risks_none(low_data):
    assert top_risks(low_data["area_scores"]) == NO_TOP_RISKS_TEXT


def test_plan_numbering():
    assert thirty_day_plan(["First", "Second"]) == (
        "**30-Day Action Plan:**\n\n1. First\n2. Second\n"
    )


def test_empty_plan_uses_no_items_text(low_data):
    assert low_data["plan"] == []
    replacements = build_replacements(low_data, "Acme", "October 19, 2026")
    assert replacements[PLACEHOLDERS["THIRTY_DAY_PLAN"]] == NO_PLAN_TEXT


def test_build_replacements(high_data):
    replacements = build_replacements(high_data, "Acme Clinic", "October 19, 2026")
    assert set(replacements) == set(PLACEHOLDERS.values())
    assert replacements["{{CLIENT_NAME}}"] == "Acme Clinic"
    assert replacements["{{DATE}}"] == "October 19, 2026"
    assert replacements["{{OVERALL_SCORE}}"] == "3.0 (High)"
    assert replacements["{{APPENDIX}}"] == APPENDIX_TEXT
    assert "6. Publish 1-page AI policy; assign RACI for approvals" in replacements["{{30_DAY_PLAN}}"]
    assert "**Human Oversight**: 3/3 (High)" in replacements["{{AREA_SCORES}}"]


def test_build_replacements_is_pure(high_data):
    first = build_replacements(high_data, "Acme", "October 19, 2026")
    assert build_replacements(high_data, "Acme", "October 19, 2026") == first


@pytest.mark.parametrize(
    "data, name, date",
    [
        (None, "Acme", "October 19, 2026"),
        ({}, "Acme", "October 19, 2026"),
        ({"area_scores": {}}, "Acme", "October 19, 2026"),
    ],
)
def test_build_replacements_rejects_missing_data(data, name, date):
    with pytest.raises(ReportDataError):
        build_replacements(data, name, date)


def test_build_replacements_rejects_blank_client(low_data):
    with pytest.raises(ReportDataError, match="Client name"):
        build_replacements(low_data, "", "October 19, 2026")
    with pytest.raises(ReportDataError, match="Report date"):
        build_replacements(low_data, "Acme", None)


def test_build_replacements_rejects_incomplete_areas(low_data):
    del low_data["area_scores"]["transparency"]
    with pytest.raises(ReportDataError, match="transparency"):
        build_replacements(low_data, "Acme", "October 19, 2026")


def test_fill_template_ignores_case():
    template = "Report for {{client_name}} ({{CLIENT_NAME}}) on {{Date}}. {{UNKNOWN}}"
    text = fill_template(template, {"{{CLIENT_NAME}}": "Acme", "{{DATE}}": "May 1, 2026"})
    assert text == "Report for Acme (Acme) on May 1, 2026. {{UNKNOWN}}"


def test_fill_template_keeps_backslashes():
    assert fill_template("{{X}}", {"{{X}}": r"C:\new"}) == r"C:\new"
