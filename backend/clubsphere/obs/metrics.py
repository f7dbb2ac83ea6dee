"""Central registry for Prometheus metrics used across the backend."""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

REQUEST_COUNTER = Counter(
	"clubsphere_http_requests_total",
	"Total HTTP requests processed",
	["route", "method", "status"],
)

REQUEST_LATENCY = Histogram(
	"clubsphere_http_request_duration_seconds",
	"HTTP request latency in seconds",
	["route", "method"],
	buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0),
)

LIFECYCLE_OUTCOMES = Counter(
	"clubsphere_lifecycle_outcomes_total",
	"Join/register attempts by outcome",
	["kind", "outcome"],
)

LIFECYCLE_CANCELLATIONS = Counter(
	"clubsphere_lifecycle_cancellations_total",
	"Memberships and registrations cancelled by their user",
	["kind"],
)

PAYMENT_TRANSITIONS = Counter(
	"clubsphere_payment_transitions_total",
	"Payment ledger status transitions",
	["status"],
)

PAYMENT_CONFIRM_REPLAYS = Counter(
	"clubsphere_payment_confirm_replays_total",
	"Confirmations that found the payment already terminal",
)

WEBHOOK_DELIVERIES = Counter(
	"clubsphere_payment_webhook_deliveries_total",
	"Payment processor webhook deliveries",
	["outcome"],
)

EXPIRY_SWEEP_ROWS = Counter(
	"clubsphere_expiry_sweep_rows_total",
	"Rows transitioned by the pending-state expiry sweep",
	["table"],
)

POSTGRES_UP = Gauge("clubsphere_postgres_up", "Postgres readiness (1 = reachable)")
REDIS_UP = Gauge("clubsphere_redis_up", "Redis readiness (1 = reachable)")


def observe_request(route: str, method: str, status: int, elapsed_seconds: float) -> None:
	REQUEST_COUNTER.labels(route=route, method=method, status=str(status)).inc()
	REQUEST_LATENCY.labels(route=route, method=method).observe(elapsed_seconds)


def inc_lifecycle_outcome(kind: str, outcome: str) -> None:
	LIFECYCLE_OUTCOMES.labels(kind=kind, outcome=outcome).inc()


def inc_lifecycle_cancelled(kind: str) -> None:
	LIFECYCLE_CANCELLATIONS.labels(kind=kind).inc()


def inc_payment_transition(status: str) -> None:
	PAYMENT_TRANSITIONS.labels(status=status).inc()


def inc_payment_confirm_replay() -> None:
	PAYMENT_CONFIRM_REPLAYS.inc()


def inc_webhook_delivery(outcome: str) -> None:
	WEBHOOK_DELIVERIES.labels(outcome=outcome).inc()


def inc_expired(table: str, count: int) -> None:
	if count > 0:
		EXPIRY_SWEEP_ROWS.labels(table=table).inc(count)


def mark_postgres(ok: bool) -> None:
	POSTGRES_UP.set(1 if ok else 0)


def mark_redis(ok: bool) -> None:
	REDIS_UP.set(1 if ok else 0)
