# --- Configuration --------------------------------------------------------------------------------

# Six compliance categories in display order. Weights must sum to 1.0.
CATEGORIES = [
    {"id": "governance", "name": "Governance", "weight": 0.25, "display_weight": "25%"},
    {"id": "data", "name": "Data", "weight": 0.20, "display_weight": "20%"},
    {"id": "security", "name": "Security", "weight": 0.20, "display_weight": "20%"},
    {"id": "vendors", "name": "Vendors", "weight": 0.15, "display_weight": "15%"},
    {
        "id": "human_oversight",
        "name": "Human Oversight",
        "weight": 0.10,
        "display_weight": "10%",
    },
    {
        "id": "transparency",
        "name": "Transparency",
        "weight": 0.10,
        "display_weight": "10%",
    },
]

CATEGORY_IDS = [c["id"] for c in CATEGORIES]
CATEGORY_NAMES = {c["id"]: c["name"] for c in CATEGORIES}
CATEGORY_WEIGHTS = {c["id"]: c["weight"] for c in CATEGORIES}

# Answer options are risk points: 0 is best practice, 3 is the highest risk.
FOUR_STEP = [
    {"label": "0 • In place and reviewed", "value": 0},
    {"label": "1 • Mostly in place", "value": 1},
    {"label": "2 • Partial", "value": 2},
    {"label": "3 • Not in place", "value": 3},
]

# 12 questions, two per category.
QUESTIONS = [
    # Governance
    {
        "id": "roles_ownership",
        "category": "governance",
        "text": "Is there a named owner accountable for how AI is used, with approvals tracked?",
        "options": FOUR_STEP,
    },
    {
        "id": "policies",
        "category": "governance",
        "text": "Do you have a written AI use policy that staff have acknowledged?",
        "options": [
            {"label": "0 • Approved and published", "value": 0},
            {"label": "1 • Draft in progress", "value": 1},
            {"label": "3 • No policy", "value": 3},
        ],
    },
    # Data
    {
        "id": "sensitive_data",
        "category": "data",
        "text": "Do prompts, uploads or training data include PHI or other sensitive personal data?",
        "options": [
            {"label": "0 • No", "value": 0},
            {"label": "2 • De-identified data only", "value": 2},
            {"label": "3 • Yes, PHI or identifiable data", "value": 3},
        ],
    },
    {
        "id": "data_geography",
        "category": "data",
        "text": "Do you know where AI-processed data is stored and processed?",
        "options": [
            {"label": "0 • In-region, documented", "value": 0},
            {"label": "1 • Mostly in-region", "value": 1},
            {"label": "2 • Cross-border, safeguards unclear", "value": 2},
            {"label": "3 • Unknown", "value": 3},
        ],
    },
    # Security
    {
        "id": "access_controls",
        "category": "security",
        "text": "Are MFA and role-based access enforced for AI tools and admin consoles?",
        "options": [
            {"label": "0 • MFA and RBAC for all users", "value": 0},
            {"label": "1 • MFA for admins only", "value": 1},
            {"label": "2 • Shared or partial accounts", "value": 2},
            {"label": "3 • No MFA or RBAC", "value": 3},
        ],
    },
    {
        "id": "protection_logs",
        "category": "security",
        "text": "Are AI interactions logged and protected (encryption, retention, monitoring)?",
        "options": FOUR_STEP,
    },
    # Vendors
    {
        "id": "providers",
        "category": "vendors",
        "text": "Have your AI providers been reviewed for security and compliance?",
        "options": [
            {"label": "0 • All reviewed (SOC2/ISO on file)", "value": 0},
            {"label": "1 • Main provider reviewed", "value": 1},
            {"label": "2 • Some providers reviewed", "value": 2},
            {"label": "3 • Not reviewed", "value": 3},
        ],
    },
    {
        "id": "contracts",
        "category": "vendors",
        "text": "Is a data processing agreement (DPA/BAA) signed with each AI provider?",
        "options": [
            {"label": "0 • Yes, with every provider", "value": 0},
            {"label": "2 • With some providers", "value": 2},
            {"label": "3 • No DPA", "value": 3},
        ],
    },
    # Human Oversight
    {
        "id": "human_in_loop",
        "category": "human_oversight",
        "text": "Does a person review AI outputs before they reach customers or patients?",
        "options": FOUR_STEP,
    },
    {
        "id": "rollback_incidents",
        "category": "human_oversight",
        "text": "Can you switch off or roll back an AI feature and handle incidents quickly?",
        "options": FOUR_STEP,
    },
    # Transparency
    {
        "id": "user_disclosure",
        "category": "transparency",
        "text": "Are users told when they are interacting with AI or AI-generated content?",
        "options": [
            {"label": "0 • Always disclosed", "value": 0},
            {"label": "1 • Disclosed in some places", "value": 1},
            {"label": "3 • Not disclosed", "value": 3},
        ],
    },
    {
        "id": "record_keeping",
        "category": "transparency",
        "text": "Do you keep records of AI systems in use, their purpose and their changes?",
        "options": FOUR_STEP,
    },
]

QUESTION_CATEGORY_MAP = {q["id"]: q["category"] for q in QUESTIONS}

# --- Report ------------------------------------------------------------------------------------

PLACEHOLDERS = {
    "CLIENT_NAME": "{{CLIENT_NAME}}",
    "DATE": "{{DATE}}",
    "OVERALL_SCORE": "{{OVERALL_SCORE}}",
    "HEATMAP_TABLE": "{{HEATMAP_TABLE}}",
    "AREA_SCORES": "{{AREA_SCORES}}",
    "FINDINGS_BY_AREA": "{{FINDINGS_BY_AREA}}",
    "TOP_RISKS": "{{TOP_RISKS}}",
    "THIRTY_DAY_PLAN": "{{30_DAY_PLAN}}",
    "APPENDIX": "{{APPENDIX}}",
}

NO_PLAN_TEXT = "No specific action items identified based on current assessment."
NO_TOP_RISKS_TEXT = "No high or medium risk areas identified."

AREA_WHY = {
    "governance": "Effective governance ensures AI systems are developed and deployed responsibly, with clear accountability and oversight.",
    "data": "Data quality and management are critical for AI system performance and compliance with privacy regulations.",
    "security": "Robust security measures protect AI systems from threats and ensure data integrity and confidentiality.",
    "vendors": "Third-party AI vendors must meet security and compliance standards to maintain system integrity.",
    "human_oversight": "Human oversight ensures AI decisions are monitored, validated, and can be overridden when necessary.",
    "transparency": "Transparency in AI systems builds trust and enables accountability for AI-driven decisions.",
}

RISK_BULLETS = [
    "Requires immediate attention",
    "Consider implementing best practices",
]
LOW_RISK_BULLETS = [
    "Well implemented",
    "Continue current practices",
]

APPENDIX_TEXT = """**Appendix A: Assessment Methodology**

This assessment evaluates AI compliance readiness across six key areas:

1. **Governance** (25% weight) - Policies, roles, and oversight structures
2. **Data** (20% weight) - Data handling, privacy, and geography
3. **Security** (20% weight) - Access controls and protection measures
4. **Vendors** (15% weight) - Third-party AI provider management
5. **Human Oversight** (10% weight) - Human-in-the-loop processes
6. **Transparency** (10% weight) - Disclosure and record-keeping

**Scoring Scale:**
- 0-1: Low Risk (Well implemented)
- 2: Medium Risk (Needs improvement)
- 3: High Risk (Requires immediate attention)

**Next Steps:**
1. Review findings with your team
2. Prioritize high-risk areas
3. Implement 30-day action plan
4. Schedule follow-up assessment in 90 days"""

REPORT_FILE_PREFIX = "Client_ReadinessCheck_"

# --- Services ----------------------------------------------------------------------------------

WEBHOOK_LOG_SIZE = 1000
TASK_QUEUE_SIZE = 100
TASK_MAX_RETRIES = 3
TASK_BACKOFF_SECONDS = 1.0
TASK_HISTORY_SIZE = 500
