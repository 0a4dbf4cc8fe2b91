# scoring.py

import logging
import math

from config import CATEGORIES, CATEGORY_IDS, CATEGORY_WEIGHTS, QUESTION_CATEGORY_MAP, QUESTIONS
from errors import ConfigurationError, IncompleteAnswersError

logger = logging.getLogger(__name__)


def _validate_config() -> None:
    """
    Check the sanity of the configuration in `config.py`.

    Raises ConfigurationError if weights do not sum to 1.0, a question maps to
    an unknown category, a category does not have exactly two questions, or an
    option value is outside 0-3. The tables are static, so a failure here is
    fatal.
    """
    problems = []

    bad_weights = [c["id"] for c in CATEGORIES if not 0 < c["weight"] <= 1]
    if bad_weights:
        problems.append(f"weights outside (0, 1]: {bad_weights}")
    total = sum(c["weight"] for c in CATEGORIES)
    if not math.isclose(total, 1.0):
        problems.append(f"weights sum to {total}, expected 1.0")

    ids = [q["id"] for q in QUESTIONS]
    dupes = sorted({qid for qid in ids if ids.count(qid) > 1})
    if dupes:
        problems.append(f"questions listed more than once: {dupes}")

    bad_categories = [q["id"] for q in QUESTIONS if q["category"] not in CATEGORY_IDS]
    if bad_categories:
        problems.append(f"questions with unknown category: {bad_categories}")

    for cat in CATEGORY_IDS:
        n = sum(1 for q in QUESTIONS if q["category"] == cat)
        if n != 2:
            problems.append(f"category {cat} has {n} questions, expected 2")

    bad_options = [
        q["id"]
        for q in QUESTIONS
        if not q["options"] or any(not 0 <= o["value"] <= 3 for o in q["options"])
    ]
    if bad_options:
        problems.append(f"questions with options outside 0-3: {bad_options}")

    if problems:
        raise ConfigurationError("Invalid readiness configuration: " + "; ".join(problems))


_validate_config()

ALLOWED_VALUES = {q["id"]: {o["value"] for o in q["options"]} for q in QUESTIONS}


# ----------- Helpers -------------
def round_half_up(x, ndigits=0):
    """
    Round like a calculator: halves go up (0.5 -> 1, 2.5 -> 3).

    Python's round() rounds halves to even, which would turn a 2.5 area
    average into 2.
    """
    factor = 10**ndigits
    return math.floor(x * factor + 0.5) / factor


def _is_number(v):
    if isinstance(v, bool) or not isinstance(v, (int, float)):
        return False
    return not math.isnan(v)


def category_questions(category):
    """Question ids mapped to `category`, in catalog order."""
    return [qid for qid, cat in QUESTION_CATEGORY_MAP.items() if cat == category]


def risk_label(score):
    """
    Label for an integer area score.

    0-1 -> Low, 2 -> Medium, 3 -> High.
    """
    if score <= 1:
        return "Low"
    if score == 2:
        return "Medium"
    return "High"


def overall_label(weighted):
    """
    Label for the one-decimal overall score.

    Uses inclusive ranges (<=1 Low, <=2 Medium, else High), unlike
    risk_label's equality check: 1.5 is Medium here and 2.4 is High.
    """
    if weighted <= 1:
        return "Low"
    if weighted <= 2:
        return "Medium"
    return "High"


# -------------- Intake validation ---------------
def missing_questions(answers):
    """Required question ids without a usable numeric answer."""
    answers = answers or {}
    return [qid for qid in QUESTION_CATEGORY_MAP if not _is_number(answers.get(qid))]


def validate_answers(answers) -> bool:
    """True iff every question in the catalog has a numeric answer."""
    return not missing_questions(answers)


def require_complete(answers) -> None:
    missing = missing_questions(answers)
    if missing:
        raise IncompleteAnswersError(missing)


def out_of_range_answers(answers):
    """
    Question ids whose answer is not one of that question's option values.

    Unanswered questions are left to missing_questions().
    """
    answers = answers or {}
    return [
        qid
        for qid, allowed in ALLOWED_VALUES.items()
        if _is_number(answers.get(qid)) and answers[qid] not in allowed
    ]


# -------------- Scoring & Aggregation ---------------
def area_score(answers, category):
    """
    Score one category from the raw answers.

    Args:
        answers (dict): question id -> numeric answer (0-3)
        category (str): category id

    Returns:
        dict: {"score": int, "label": str}. The score is the mean of the
            category's answers rounded half up. A category with no answers
            scores 0/Low; complete answer sets never reach that branch.
    """
    values = [
        answers[qid]
        for qid in category_questions(category)
        if _is_number(answers.get(qid))
    ]
    if not values:
        return {"score": 0, "label": "Low"}
    score = int(round_half_up(sum(values) / len(values)))
    return {"score": score, "label": risk_label(score)}


def area_scores(answers):
    """Area score for every category, in display order."""
    return {cat: area_score(answers, cat) for cat in CATEGORY_IDS}


def weighted_score(scores):
    """
    Weighted overall score, rounded half up to one decimal.

    Categories absent from `scores` are skipped and the remaining weights
    renormalised. An empty mapping scores 0.0.
    """
    weighted_sum = 0.0
    total_weight = 0.0
    for cat, data in scores.items():
        weight = CATEGORY_WEIGHTS.get(cat)
        if weight:
            weighted_sum += data["score"] * weight
            total_weight += weight
    if not total_weight:
        return 0.0
    return round_half_up(weighted_sum / total_weight, 1)


# -------------- Remediation plan ---------------
# Evaluated top to bottom; each rule is independent and several may fire.
PLAN_RULES = [
    (
        "security",
        "Enable MFA and RBAC for all admin users",
        lambda s, a: s["security"]["score"] >= 2 and a["access_controls"] >= 2,
    ),
    (
        "vendors",
        "Execute DPA with AI provider; review SOC2/ISO docs",
        lambda s, a: s["vendors"]["score"] >= 2 or a["contracts"] >= 2,
    ),
    (
        "human_oversight",
        "Add real-time human review for escalations; define fallback",
        lambda s, a: s["human_oversight"]["score"] >= 2,
    ),
    (
        "data",
        "Limit PHI in prompts; add redaction",
        lambda s, a: s["data"]["score"] >= 2 and a["sensitive_data"] == 3,
    ),
    (
        "transparency",
        "Add AI disclosure text in UI and Help Center",
        lambda s, a: s["transparency"]["score"] >= 2,
    ),
    (
        "governance",
        "Publish 1-page AI policy; assign RACI for approvals",
        lambda s, a: s["governance"]["score"] >= 2,
    ),
]


def generate_plan(scores, answers):
    """
    Return the 30-day plan: actions of every rule that fires, in rule order.

    An empty list means no action is needed.
    """
    plan = []
    for _, action, applies in PLAN_RULES:
        if applies(scores, answers) and action not in plan:
            plan.append(action)
    return plan


def process_assessment(answers):
    """
    Score a complete answer set.

    Args:
        answers (dict): question id -> numeric answer

    Returns:
        dict: the assessment_data payload with keys "answers", "area_scores",
            "weighted_score", "overall_label", "plan" and "heatmap".

    Raises:
        IncompleteAnswersError: if any question is unanswered.
    """
    require_complete(answers)
    answers = dict(answers)
    scores = area_scores(answers)
    weighted = weighted_score(scores)
    plan = generate_plan(scores, answers)
    logger.debug("scored assessment weighted=%s plan_items=%d", weighted, len(plan))
    return {
        "answers": answers,
        "area_scores": scores,
        "weighted_score": weighted,
        "overall_label": overall_label(weighted),
        "plan": plan,
        "heatmap": {cat: data["score"] for cat, data in scores.items()},
    }
