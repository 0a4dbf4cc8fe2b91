# app.py

import logging

import dash
import dash_daq as daq
from dash import ALL, Input, Output, State, dcc, html
from flask import jsonify, request

import service
from charts import BAR_H, HEAT_H, bar_figure, heatmap_figure
from config import CATEGORIES, NO_PLAN_TEXT, QUESTIONS
from errors import (AssessmentError, MalformedEventError, QueueFullError,
                    RecordNotFoundError, StatusTransitionError)
from exports import report_file_name, write_csv, write_pdf_bytes, write_ppt_bytes
from report import format_overall, format_report_date
from store import AssessmentStore
from tasks import TaskQueue
from webhooks import WebhookLog

logger = logging.getLogger(__name__)

app = dash.Dash(__name__, suppress_callback_exceptions=True)
app.title = "AI Compliance Readiness Check"
server = app.server

# Process-lifetime services, handed to the service functions explicitly.
STORE = AssessmentStore()
WEBHOOK_LOG = WebhookLog()
TASKS = TaskQueue()

GRAPH_CONFIG = {"responsive": False, "displaylogo": False, "scrollZoom": False}


def _slug(s: str):
    return "".join(ch.lower() if ch.isalnum() else "-" for ch in s).strip("-")


# ---------- Layout -------------------
def build_question_cards():
    """
    Build a list of HTML cards, one per category, each containing its two
    questions with their answer options. Nothing is preselected.

    :return: a list of HTML Div elements, each representing a category card
    """
    groups = {}
    for q in QUESTIONS:
        groups.setdefault(q["category"], []).append(q)
    cards = []
    for cat in CATEGORIES:
        children = [html.H3(cat["name"], className="domain-title")]
        for q in groups.get(cat["id"], []):
            children.append(
                html.Div(
                    [
                        html.Div(q["text"], className="qtext"),
                        dcc.RadioItems(
                            id={"type": "q-input", "qid": q["id"]},
                            options=q["options"],
                            value=None,
                            className="likert",
                        ),
                    ],
                    className="qrow",
                )
            )
        cards.append(html.Div(children, className=f"domain-card d-{_slug(cat['name'])}"))
    return cards


def _field(label, component):
    return html.Div([html.Label(label), component], className="field")


app.layout = html.Div(
    id="page-root",
    className="page theme-light",
    children=[
        dcc.Store(id="result-store"),
        dcc.Store(id="theme-store", data="light"),
        html.Div(
            [
                html.H1("AI Compliance Readiness Check"),
                html.Div(
                    [
                        _field(
                            "Client name",
                            dcc.Input(id="client-name", placeholder="e.g., Acme Clinic", className="textin"),
                        ),
                        _field(
                            "Email",
                            dcc.Input(id="client-email", type="email", placeholder="you@company.com", className="textin"),
                        ),
                        _field(
                            "Dark mode",
                            daq.BooleanSwitch(id="theme-switch", on=False, color="#4f46e5", className="theme-switch"),
                        ),
                    ],
                    className="meta",
                ),
            ],
            className="header",
        ),
        dcc.Tabs(
            id="view-tabs",
            value="tab-questions",
            children=[
                dcc.Tab(
                    label="Questions",
                    value="tab-questions",
                    children=[
                        html.Div(build_question_cards(), className="grid"),
                        html.Div(id="submit-error", className="error"),
                        html.Button("Compute Scores", id="submit-assessment", n_clicks=0, className="primary"),
                    ],
                ),
                dcc.Tab(
                    label="Results & Plan",
                    value="tab-report",
                    children=[
                        html.Div(id="score-tiles", className="score-tiles"),
                        html.Div(
                            [
                                html.Button("Download CSV", id="export-csv", n_clicks=0, className="secondary"),
                                dcc.Download(id="csv-download"),
                                html.Button("Download PPTX", id="export-pptx", n_clicks=0, className="secondary"),
                                dcc.Download(id="pptx-download"),
                                html.Button("Download PDF", id="export-pdf", n_clicks=0, className="secondary"),
                                dcc.Download(id="pdf-download"),
                            ],
                            className="exports",
                        ),
                        html.Div(
                            [
                                dcc.Graph(id="bar", style={"height": f"{BAR_H}px"}, config=GRAPH_CONFIG),
                                dcc.Graph(id="heatmap", style={"height": f"{HEAT_H}px"}, config=GRAPH_CONFIG),
                            ],
                            className="charts",
                        ),
                        html.Div(
                            [
                                html.H3("30-Day Action Plan"),
                                html.Ol(id="actions-list", className="actions"),
                            ],
                            className="col recs-col",
                        ),
                    ],
                ),
            ],
        ),
    ],
)


# ---------- Callbacks -------------------
@app.callback(
    Output("result-store", "data"),
    Output("submit-error", "children"),
    Output("view-tabs", "value"),
    Input("submit-assessment", "n_clicks"),
    State("client-name", "value"),
    State("client-email", "value"),
    State({"type": "q-input", "qid": ALL}, "id"),
    State({"type": "q-input", "qid": ALL}, "value"),
    prevent_initial_call=True,
)
def on_submit(_, client_name, client_email, ids, values):
    """
    Score the submitted answers and switch to the results tab.

    Incomplete or invalid submissions stay on the assessment tab with the
    error shown above the button.
    """
    answers = {
        rid["qid"]: v for rid, v in zip(ids or [], values or []) if v is not None
    }
    try:
        service.validate_submission(answers)
        record = STORE.create(client_name or "Client", client_email or "")
        # paid checks arrive through the webhook; the self-serve form scores directly
        data = service.submit_answers(STORE, record["id"], answers, require_paid=False)
    except AssessmentError as exc:
        logger.info("rejected submission: %s", exc)
        return dash.no_update, str(exc), dash.no_update
    try:
        service.enqueue_report(TASKS, STORE, record["id"], include_charts=False)
    except QueueFullError as exc:
        logger.warning("report not queued for id=%s: %s", record["id"], exc)
    else:
        TASKS.run_in_background()
    result = {
        "record_id": record["id"],
        "client_name": client_name or "Client",
        "assessment_data": data,
    }
    return result, "", "tab-report"


@app.callback(
    Output("score-tiles", "children"),
    Output("bar", "figure"),
    Output("heatmap", "figure"),
    Output("actions-list", "children"),
    Input("result-store", "data"),
    Input("theme-store", "data"),
    prevent_initial_call=True,
)
def update_results(result, theme):
    """
    Updates the KPIs, bar chart, heatmap and plan from the scored assessment.

    Args:
        result (dict): The scored assessment, as stored in the "result-store".
        theme (str): The theme name ("light" or "dark"), as stored in the "theme-store".
    """
    if not result:
        raise dash.exceptions.PreventUpdate

    data = result["assessment_data"]
    areas = data["area_scores"]
    tiles = [
        html.Div(
            [
                html.Div("Overall Risk", className="tile-title"),
                html.Div(format_overall(data["weighted_score"], data["overall_label"]), className="tile-value"),
            ],
            className="score-tile",
        ),
    ]
    for cat in CATEGORIES:
        area = areas[cat["id"]]
        tiles.append(
            html.Div(
                [
                    html.Div(cat["name"], className="tile-title"),
                    html.Div(f"{area['score']}/3 {area['label']}", className="tile-value"),
                ],
                className="score-tile",
            )
        )

    plan = data["plan"] or [NO_PLAN_TEXT]
    return (
        tiles,
        bar_figure(areas, theme),
        heatmap_figure(areas, theme),
        [html.Li(item) for item in plan],
    )


# Exports
@app.callback(
    Output("csv-download", "data"),
    Input("export-csv", "n_clicks"),
    State("result-store", "data"),
    prevent_initial_call=True,
)
def download_csv(_, result):
    if not result:
        raise dash.exceptions.PreventUpdate
    return dcc.send_string(
        lambda b: write_csv(b, result["assessment_data"]), "readiness_check_responses.csv"
    )


@app.callback(
    Output("pptx-download", "data"),
    Input("export-pptx", "n_clicks"),
    State("result-store", "data"),
    prevent_initial_call=True,
)
def download_ppt(_, result):
    if not result:
        raise dash.exceptions.PreventUpdate
    return dcc.send_bytes(
        lambda b: write_ppt_bytes(
            b, result["assessment_data"], result["client_name"], format_report_date()
        ),
        "AI_Readiness_Check.pptx",
    )


@app.callback(
    Output("pdf-download", "data"),
    Input("export-pdf", "n_clicks"),
    State("result-store", "data"),
    State("theme-store", "data"),
    prevent_initial_call=True,
)
def download_pdf(_, result, theme):
    """
    Download the readiness report as a PDF file.

    Args:
        _ (int): Click count of the "Download PDF" button.
        result (dict): The scored assessment, as stored in the "result-store".
        theme (str, optional): The chart theme (light or dark). Defaults to "light".

    Returns:
        dict: dcc.send_bytes payload with the PDF data.
    """
    if not result:
        raise dash.exceptions.PreventUpdate
    return dcc.send_bytes(
        lambda b: write_pdf_bytes(
            b, result["assessment_data"], result["client_name"],
            format_report_date(), theme or "light",
        ),
        report_file_name(result["client_name"]),
    )


# Theme toggle -> update page class and store
@app.callback(
    Output("page-root", "className"),
    Output("theme-store", "data"),
    Input("theme-switch", "on"),
)
def apply_theme(is_on):
    """
    Toggle the page theme class and store the current theme value.

    Args:
        is_on (bool): The on/off state of the theme switch.

    Returns:
        tuple: A pair of (page class name, theme name).
    """
    theme = "dark" if is_on else "light"
    return f"page theme-{theme}", theme


# ---------- Payment webhook -------------------
@server.route("/api/webhooks/payment", methods=["POST"])
def payment_webhook():
    event = request.get_json(silent=True)
    try:
        record = service.handle_payment_event(STORE, WEBHOOK_LOG, event)
    except MalformedEventError as exc:
        return jsonify(error=str(exc)), 400
    except RecordNotFoundError as exc:
        return jsonify(error=str(exc)), 404
    except StatusTransitionError as exc:
        return jsonify(error=str(exc)), 409
    return jsonify(received=True, status=record["status"] if record else None)


@server.route("/api/webhooks/monitor", methods=["GET"])
def webhook_monitor():
    try:
        limit = int(request.args.get("limit", 50))
    except ValueError:
        return jsonify(error="limit must be an integer"), 400
    return jsonify(
        stats=WEBHOOK_LOG.performance_stats(),
        recent=WEBHOOK_LOG.recent(limit),
    )


# ---------- Main -------------------
if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="timestamp=%(asctime)s level=%(levelname)s module=%(module)s message=%(message)s",
    )
    app.run(debug=False)
