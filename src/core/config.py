"""
Configuration constants and environment setup.
"""

import os
from datetime import date
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


def _int_set(value: str) -> frozenset[int]:
    """Parse a comma separated list of integers ("1, 2,3") into a set."""
    return frozenset(int(part) for part in value.split(",") if part.strip())


def _str_set(value: str) -> frozenset[str]:
    return frozenset(part.strip() for part in value.split(",") if part.strip())


# =============================================================================
# PATHS
# =============================================================================

PROJECT_ROOT = Path(__file__).parent.parent.parent
DB_PATH = Path(os.environ.get("PORTAL_DB_PATH", PROJECT_ROOT / "data" / "db" / "portal-integrations.db"))

# =============================================================================
# RUNTIME
# =============================================================================

STAGE = os.environ.get("STAGE", "dev")
TIMEZONE = os.environ.get("PORTAL_TIMEZONE", "America/New_York")
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

# =============================================================================
# VENDOR ENDPOINTS
# =============================================================================

TSHEETS_BASE_URL = os.environ.get("TSHEETS_BASE_URL", "https://rest.tsheets.com/api/v1")

ADP_BASE_URL = os.environ.get("ADP_BASE_URL", "https://api.adp.com")
ADP_TOKEN_URL = os.environ.get("ADP_TOKEN_URL", "https://accounts.adp.com/auth/oauth/v2/token")
ADP_CERT_PATH = os.environ.get("ADP_CERT_PATH", "")
ADP_KEY_PATH = os.environ.get("ADP_KEY_PATH", "")

UNANET_URL_SUFFIX = "" if STAGE == "prod" else "-sand"
UNANET_BASE_URL = os.environ.get(
    "UNANET_BASE_URL", f"https://consultwithcase{UNANET_URL_SUFFIX}.unanet.biz/platform"
)

VENDOR_TIMEOUT_SECONDS = float(os.environ.get("VENDOR_TIMEOUT_SECONDS", "30"))

# =============================================================================
# TIMESHEET AGGREGATION
# =============================================================================

# TSheets jobcode IDs whose whole subtree is non-billable (overhead, internal programs)
NON_BILLABLE_JOBCODE_IDS = _int_set(os.environ.get("NON_BILLABLE_JOBCODE_IDS", ""))

# Unanet project types that count as billable client work
BILLABLE_PROJECT_TYPES = _str_set(os.environ.get("BILLABLE_PROJECT_TYPES", "BILL_SVCS"))

# Unanet leave codes the Portal lets employees plan against
PLANABLE_KEYS = {"PTO": "PTO", "Holiday": "HOLIDAY"}

BATCH_MONTHS = 2
ADP_PADDING_DAYS = 15
ADP_REGULAR_PAY_CODE = "Regular"
ADP_PAY_CODE_ALIASES = {"Paid Time Off": "PTO"}

# Unanet leave rows spanning the whole year end on either Dec 31 or this sentinel
UNANET_END_OF_TIME = date(2099, 12, 31)

# =============================================================================
# REMINDERS
# =============================================================================

WORK_DAY_HOURS = 8
SUBMITTED_STATUSES = {"APPROVED", "SUBMITTED"}

CYK_PERIOD_START = date.fromisoformat(os.environ.get("CYK_PERIOD_START", "2024-04-15"))
CYK_PERIOD_END = date.fromisoformat(os.environ.get("CYK_PERIOD_END", "2024-04-28"))
CYK_PERIOD_DAYS = 14

REMINDER_MESSAGE = (
    "CASE Alerts: This is a reminder that you have not yet met the timesheet hour "
    "requirements for this pay period. Please be sure to submit your hours as soon "
    "as possible to keep payroll running smoothly."
)

# Outside prod, only these employees may receive texts
TEST_EMPLOYEE_NUMBERS = _int_set(os.environ.get("TEST_EMPLOYEE_NUMBERS", "10066"))

# =============================================================================
# ERRORS
# =============================================================================

REDACT_VISIBLE_CHARS = 8

# =============================================================================
# EMAIL CONFIGURATION
# =============================================================================

FROM_EMAIL = os.environ.get("PORTAL_FROM_EMAIL", "")
OPERATOR_EMAIL = os.environ.get("PORTAL_OPERATOR_EMAIL", "")

# =============================================================================
# API CONFIGURATION
# =============================================================================

PORTAL_API_KEY = os.environ.get("PORTAL_API_KEY", "")
API_HOST = os.environ.get("API_HOST", "0.0.0.0")
API_PORT = int(os.environ.get("API_PORT", "8000"))
API_DEBUG = os.environ.get("API_DEBUG", "false").lower() == "true"
API_VERSION = "1.0.0"
