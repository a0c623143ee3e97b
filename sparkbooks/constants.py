import re
from datetime import date, datetime
from zoneinfo import ZoneInfo

from sparkbooks.settings import settings

APP_TZ = ZoneInfo(settings.timezone)

ESTIMATE_PREFIX = "EST"
INVOICE_PREFIX = "INV"

SEQUENCE_WIDTH = 4

# Printed on every document: EST-20240315-0001
DOCUMENT_NUMBER_RE = re.compile(r"^(EST|INV)-\d{8}-\d{4,}$")

JOB_STATUS_LABELS = {
    "pending": "Pending",
    "in_progress": "In progress",
    "completed": "Completed",
    "cancelled": "Cancelled",
}

ESTIMATE_STATUS_LABELS = {
    "draft": "Draft",
    "sent": "Sent",
    "accepted": "Accepted",
    "rejected": "Rejected",
    "expired": "Expired",
}

INVOICE_STATUS_LABELS = {
    "draft": "Draft",
    "sent": "Sent",
    "paid": "Paid",
    "overdue": "Overdue",
    "cancelled": "Cancelled",
}


def now() -> datetime:
    return datetime.now(APP_TZ)


def today() -> date:
    return now().date()
