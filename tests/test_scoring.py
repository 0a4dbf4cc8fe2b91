"""Tests for the readiness scoring engine."""

import itertools
import json

import pytest

import scoring
from config import CATEGORY_IDS, QUESTION_CATEGORY_MAP, QUESTIONS
from conftest import LOW_RISK, make_answers
from errors import IncompleteAnswersError
from scoring import (area_score, area_scores, generate_plan, overall_label,
                     process_assessment, risk_label, round_half_up,
                     validate_answers, weighted_score)

MFA = "Enable MFA and RBAC for all admin users"
DPA = "Execute DPA with AI provider; review SOC2/ISO docs"
REVIEW = "Add real-time human review for escalations; define fallback"
PHI = "Limit PHI in prompts; add redaction"
DISCLOSURE = "Add AI disclosure text in UI and Help Center"
POLICY = "Publish 1-page AI policy; assign RACI for approvals"


def _areas(**scores):
    base = {cat: {"score": 0, "label": "Low"} for cat in CATEGORY_IDS}
    for cat, score in scores.items():
        base[cat] = {"score": score, "label": risk_label(score)}
    return base


# --- validation ---


def test_validate_answers_complete(low_answers):
    assert validate_answers(low_answers) is True


def test_validate_answers_missing_question(low_answers):
    del low_answers["record_keeping"]
    assert validate_answers(low_answers) is False
    assert scoring.missing_questions(low_answers) == ["record_keeping"]


@pytest.mark.parametrize("bad", [None, "2", True, float("nan")])
def test_validate_answers_rejects_non_numeric(low_answers, bad):
    low_answers["policies"] = bad
    assert validate_answers(low_answers) is False


def test_validate_answers_empty():
    assert validate_answers({}) is False
    assert validate_answers(None) is False


def test_process_assessment_rejects_incomplete(low_answers):
    del low_answers["contracts"]
    del low_answers["providers"]
    with pytest.raises(IncompleteAnswersError, match="All questions must be answered") as exc:
        process_assessment(low_answers)
    assert exc.value.missing == ["providers", "contracts"]


def test_out_of_range_answers():
    answers = make_answers(policies=2, contracts=1, access_controls=3, providers=7)
    assert scoring.out_of_range_answers(answers) == ["policies", "providers", "contracts"]


def test_out_of_range_ignores_unanswered(low_answers):
    del low_answers["policies"]
    assert scoring.out_of_range_answers(low_answers) == []


# --- area scorer ---


def test_area_score_rounds_half_up():
    # 2.5 must round to 3, not to even
    answers = make_answers(roles_ownership=2, policies=3)
    assert area_score(answers, "governance") == {"score": 3, "label": "High"}

    answers = make_answers(roles_ownership=1, policies=0)
    assert area_score(answers, "governance") == {"score": 1, "label": "Low"}

    answers = make_answers(roles_ownership=2, policies=1)
    assert area_score(answers, "governance") == {"score": 2, "label": "Medium"}


def test_area_score_labels():
    assert [risk_label(s) for s in range(4)] == ["Low", "Low", "Medium", "High"]


def test_area_score_no_answers_defaults_low():
    # unreachable once answers are validated; kept as a guard
    assert area_score({}, "security") == {"score": 0, "label": "Low"}


def test_area_score_uses_present_answer_only():
    assert area_score({"access_controls": 3}, "security") == {"score": 3, "label": "High"}


def test_area_scores_in_display_order(low_answers):
    assert list(area_scores(low_answers)) == CATEGORY_IDS


def test_every_valid_answer_set_has_labelled_integer_scores():
    by_category = {}
    for q in QUESTIONS:
        by_category.setdefault(q["category"], []).append([o["value"] for o in q["options"]])
    for cat, (first, second) in by_category.items():
        q1, q2 = [qid for qid, c in QUESTION_CATEGORY_MAP.items() if c == cat]
        for a, b in itertools.product(first, second):
            result = area_score({q1: a, q2: b}, cat)
            assert result["score"] in {0, 1, 2, 3}
            assert result["label"] == risk_label(result["score"])


# --- aggregator ---


def test_weighted_score_all_zero():
    assert weighted_score(_areas()) == 0.0


def test_weighted_score_all_three():
    assert weighted_score(_areas(**{cat: 3 for cat in CATEGORY_IDS})) == 3.0


def test_weighted_score_uses_weights():
    # governance 2 * 0.25 + security 2 * 0.20 = 0.9
    assert weighted_score(_areas(governance=2, security=2)) == 0.9
    # governance 1 * 0.25 + data 1 * 0.20 = 0.45 -> 0.5 (half up)
    assert weighted_score(_areas(governance=1, data=1)) == 0.5


def test_weighted_score_skips_missing_category():
    scores = {"governance": {"score": 2, "label": "Medium"}}
    assert weighted_score(scores) == 2.0
    assert weighted_score({}) == 0.0


def test_overall_label_uses_inclusive_ranges():
    # differs from risk_label on purpose: 1.5 is Medium, 2.1 is High
    assert overall_label(0.0) == "Low"
    assert overall_label(1.0) == "Low"
    assert overall_label(1.1) == "Medium"
    assert overall_label(1.5) == "Medium"
    assert overall_label(2.0) == "Medium"
    assert overall_label(2.1) == "High"
    assert overall_label(3.0) == "High"


def test_overall_score_in_range_for_any_area_set():
    for combo in itertools.product(range(4), repeat=3):
        scores = _areas(governance=combo[0], vendors=combo[1], transparency=combo[2])
        result = weighted_score(scores)
        assert 0 <= result <= 3
        assert result == round_half_up(result, 1)


def test_round_half_up():
    assert round_half_up(0.5) == 1
    assert round_half_up(1.5) == 2
    assert round_half_up(2.5) == 3
    assert round_half_up(0.25, 1) == 0.3
    assert round_half_up(0.75, 1) == 0.8


# --- plan ---


def test_plan_empty_when_everything_low(low_answers):
    scores = area_scores(low_answers)
    assert generate_plan(scores, low_answers) == []


def test_plan_all_rules_in_table_order(high_answers):
    scores = area_scores(high_answers)
    assert generate_plan(scores, high_answers) == [MFA, DPA, REVIEW, PHI, DISCLOSURE, POLICY]


def test_plan_keeps_order_for_subset():
    answers = make_answers(
        roles_ownership=2, policies=3,
        sensitive_data=3, data_geography=1,
        contracts=3,
    )
    assert generate_plan(area_scores(answers), answers) == [DPA, PHI, POLICY]


def test_plan_toggling_access_controls_adds_only_mfa():
    before = make_answers(access_controls=1, protection_logs=3, human_in_loop=3, rollback_incidents=2)
    after = dict(before, access_controls=2)
    assert area_scores(before)["security"]["score"] >= 2

    plan_before = generate_plan(area_scores(before), before)
    plan_after = generate_plan(area_scores(after), after)
    assert MFA not in plan_before
    assert plan_after == [MFA] + plan_before


def test_plan_vendor_rule_fires_on_contracts_alone():
    answers = make_answers(providers=0, contracts=2)
    scores = area_scores(answers)
    assert scores["vendors"]["score"] == 1
    assert generate_plan(scores, answers) == [DPA]


def test_plan_phi_needs_sensitive_data_three():
    answers = make_answers(sensitive_data=2, data_geography=3)
    scores = area_scores(answers)
    assert scores["data"]["score"] >= 2
    assert PHI not in generate_plan(scores, answers)


def test_plan_mfa_before_phi():
    answers = make_answers(access_controls=3, protection_logs=1, sensitive_data=3, data_geography=1)
    plan = generate_plan(area_scores(answers), answers)
    assert plan.index(MFA) < plan.index(PHI)


def test_plan_requires_every_area(low_answers):
    scores = area_scores(low_answers)
    del scores["security"]
    with pytest.raises(KeyError):
        generate_plan(scores, low_answers)


# --- pipeline ---


def test_process_assessment_low_risk_example(low_answers):
    data = process_assessment(low_answers)
    # providers=1, contracts=0 averages 0.5, which rounds half up to 1 (still Low)
    assert data["area_scores"]["vendors"] == {"score": 1, "label": "Low"}
    assert all(a["label"] == "Low" for a in data["area_scores"].values())
    assert data["weighted_score"] == 0.2
    assert data["overall_label"] == "Low"
    assert data["plan"] == []
    assert data["heatmap"] == {cat: (1 if cat == "vendors" else 0) for cat in CATEGORY_IDS}


def test_process_assessment_all_zero(low_answers):
    data = process_assessment(dict(low_answers, providers=0))
    assert all(a == {"score": 0, "label": "Low"} for a in data["area_scores"].values())
    assert data["weighted_score"] == 0.0
    assert data["overall_label"] == "Low"
    assert data["plan"] == []
    assert data["answers"] == dict(LOW_RISK, providers=0)


def test_process_assessment_high_risk(high_answers):
    data = process_assessment(high_answers)
    assert data["weighted_score"] == 3.0
    assert data["overall_label"] == "High"
    assert len(data["plan"]) == 6


def test_process_assessment_is_idempotent():
    answers = make_answers(roles_ownership=2, policies=1, contracts=3, access_controls=2)
    assert process_assessment(answers) == process_assessment(answers)


def test_process_assessment_does_not_mutate_answers(low_answers):
    snapshot = dict(low_answers)
    process_assessment(low_answers)
    assert low_answers == snapshot


def test_payload_round_trips_through_json(high_answers):
    data = process_assessment(high_answers)
    assert json.loads(json.dumps(data)) == data
