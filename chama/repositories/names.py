# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Collection names shared by every backend."""

MEMBERS = "members"
LOANS = "loans"
CHAIR_QUEUE = "chairqueue"
NEWS = "news"
APPROVED_REPORTS = "approvedreports"
POLLS = "polls"
NOTIFICATIONS = "notifications"
SIGNATURES = "signatures"
TRANSACTIONS = "transactions"
WELFARE = "welfare"
LOGS = "logs"
