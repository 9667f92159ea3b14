"""Prometheus metrics for OrderDrop.

Counters for each step of the upload lifecycle, exposed on GET /metrics.
"""

from prometheus_client import Counter

upload_requests_created_total = Counter(
    "orderdrop_upload_requests_created_total",
    "Upload requests created",
    ["source"]  # source: api|shopify
)

webhook_events_total = Counter(
    "orderdrop_webhook_events_total",
    "Commerce webhook deliveries by outcome",
    ["outcome"]  # outcome: accepted|duplicate|rejected
)

files_uploaded_total = Counter(
    "orderdrop_files_uploaded_total",
    "Buyer files delivered to the remote file store",
    ["status"]  # status: success|error
)

reset_actions_total = Counter(
    "orderdrop_reset_actions_total",
    "Reset workflow actions",
    ["action"]  # action: requested|confirmed
)

reversion_sweep_requests_total = Counter(
    "orderdrop_reversion_sweep_requests_total",
    "Requests handled by the reversion sweep",
    ["result"]  # result: reverted|skipped|error
)


def record_request_created(source: str) -> None:
    upload_requests_created_total.labels(source=source).inc()


def record_webhook_outcome(outcome: str) -> None:
    webhook_events_total.labels(outcome=outcome).inc()


def record_files_uploaded(status: str, count: int) -> None:
    if count > 0:
        files_uploaded_total.labels(status=status).inc(count)


def record_reset_action(action: str) -> None:
    reset_actions_total.labels(action=action).inc()


def record_sweep_results(reverted: int, skipped: int, errors: int) -> None:
    for result, count in (("reverted", reverted), ("skipped", skipped), ("error", errors)):
        if count > 0:
            reversion_sweep_requests_total.labels(result=result).inc(count)
