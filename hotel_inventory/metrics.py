"""
Prometheus metrics for booking serialization, PMS reconciliation and webhooks.

Metrics are exposed via the /metrics endpoint for scraping by Prometheus.

Example:
    >>> from hotel_inventory.metrics import pms_calls, pms_latency
    >>> with pms_latency.labels(operation="push_booking").time():
    ...     response = adapter.push_booking(data)
    >>> pms_calls.labels(operation="push_booking", outcome="success").inc()
"""

from __future__ import annotations

from prometheus_client import Counter, Histogram

# =============================================================================
# Booking Serializer Metrics
# =============================================================================

booking_attempts = Counter(
    "hotel_booking_attempts_total",
    "Booking creation attempts by outcome",
    ["outcome"],
)
"""
Counter for booking creation attempts.

Labels:
    outcome: created, unavailable, blocked, lock_timeout, error
"""

lock_wait_duration = Histogram(
    "hotel_room_lock_wait_seconds",
    "Time spent waiting for the per-room advisory lock",
    buckets=(0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0, float("inf")),
)

lock_timeouts = Counter(
    "hotel_room_lock_timeouts_total",
    "Per-room advisory lock acquisitions that hit lock_timeout",
)

# =============================================================================
# PMS Metrics
# =============================================================================

pms_calls = Counter(
    "hotel_pms_calls_total",
    "PMS adapter calls by operation and outcome",
    ["operation", "outcome"],
)
"""
Counter for PMS adapter calls.

Labels:
    operation: sync_inventory, push_booking, cancel_booking, get_room_status
    outcome: success, rejected, error
"""

pms_latency = Histogram(
    "hotel_pms_latency_seconds",
    "PMS adapter call latency in seconds",
    ["operation"],
    buckets=(0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, float("inf")),
)

pms_http_requests = Counter(
    "hotel_pms_http_requests_total",
    "HTTP requests sent to the PMS by operation and response status",
    ["operation", "status_code"],
)
"""
Counter for raw HTTP requests made by HttpPMSAdapter (including retries).

Labels:
    status_code: HTTP status, or "error" when no response was received
"""

pms_push_retries = Counter(
    "hotel_pms_push_retries_total",
    "Outbound booking push retries scheduled after a failed attempt",
)

rooms_reconciled = Counter(
    "hotel_rooms_reconciled_total",
    "Local room statuses corrected from the PMS inventory snapshot",
)

# =============================================================================
# Webhook Metrics
# =============================================================================

webhook_events = Counter(
    "hotel_pms_webhook_events_total",
    "Inbound PMS webhook events by event type and outcome",
    ["event_type", "outcome"],
)
"""
Counter for inbound webhook events.

Labels:
    event_type: booking.created, booking.cancelled, room.status_changed, ...
    outcome: accepted, rejected, unauthorized, error
"""
