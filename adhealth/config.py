import os

# App
APP_TITLE = "Campaign Health & Pacing API"
APP_VERSION = "0.3.0"
ALGO_VERSION = "0.3.0-straight-line"

LOG_LEVEL = os.getenv("ADHEALTH_LOG_LEVEL", "INFO").upper()

ALLOW_ORIGINS = [
    "http://localhost",
    "http://localhost:5173",
    "http://localhost:8000",
    "http://127.0.0.1:8000",
]

# Delivery export columns
DATE_COL = "DATE"
CAMPAIGN_COL = "CAMPAIGN ORDER NAME"
IMPRESSIONS_COL = "IMPRESSIONS"
CLICKS_COL = "CLICKS"
TRANSACTIONS_COL = "TRANSACTIONS"
REVENUE_COL = "REVENUE"
SPEND_COL = "SPEND"
METRIC_COLS = [IMPRESSIONS_COL, CLICKS_COL, TRANSACTIONS_COL, REVENUE_COL, SPEND_COL]

# Exports append a summary row with this DATE value
TOTALS_SENTINEL = "Totals"

# Contract terms columns
START_DATE_COL = "Start Date"
END_DATE_COL = "End Date"
BUDGET_COL = "Budget"
CPM_COL = "CPM"
IMPRESSIONS_GOAL_COL = "Impressions Goal"

# Pacing report columns
PACING_CAMPAIGN_COL = "Campaign"
PACING_DAYS_LEFT_COL = "Days Left"
PACING_BUDGET_COL = "Budget"

# Tried in order; first non-empty value wins
CAMPAIGN_NAME_FIELDS = [
    "NAME", "CAMPAIGN", "Campaign", "name", "campaign",
    "Campaign Name", "CAMPAIGN NAME", "Name",
]

BUDGET_FIELDS = [
    "Budget", "BUDGET", "budget",
    "Total Budget", "TOTAL BUDGET", "total budget",
    "Campaign Budget", "CAMPAIGN BUDGET", "campaign budget",
    "Media Budget", "MEDIA BUDGET", "media budget",
    "Flight Budget", "FLIGHT BUDGET", "flight budget",
    "Budget Amount", "BUDGET AMOUNT", "budget amount",
]
BUDGET_KEYWORDS = ("budget", "total", "amount")

DATE_FORMATS = [
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%m/%d/%Y",
    "%m/%d/%y",
    "%m-%d-%Y",
    "%b %d, %Y",
    "%B %d, %Y",
    "%d-%b-%Y",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%d %H:%M:%S",
]
