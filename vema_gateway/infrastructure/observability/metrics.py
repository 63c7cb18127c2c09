"""Prometheus metrics for loans, savings, funeral cover and store activity"""

from decimal import Decimal

from prometheus_client import Counter, Histogram

# Loan metrics
loan_application_counter = Counter(
    "vema_loan_applications_total",
    "Loan applications received",
    ["outcome"],  # submitted | invalid
)

loan_payment_counter = Counter(
    "vema_loan_payments_total",
    "Loan repayments recorded",
)

loan_paid_off_counter = Counter(
    "vema_loans_paid_off_total",
    "Loans fully repaid",
)

# Stokvel metrics
contribution_counter = Counter(
    "vema_stokvel_contributions_total",
    "Stokvel contributions recorded",
    ["stokvel_type"],
)

contribution_amount_counter = Counter(
    "vema_stokvel_contribution_rands_total",
    "Rands contributed to stokvels",
    ["stokvel_type"],
)

withdrawal_request_counter = Counter(
    "vema_stokvel_withdrawal_requests_total",
    "Early withdrawal requests",
    ["outcome"],  # pending | refused
)

# Funeral cover metrics
funeral_activation_counter = Counter(
    "vema_funeral_activations_total",
    "Funeral covers activated",
    ["plan"],
)

claim_counter = Counter(
    "vema_funeral_claims_total",
    "Funeral claims by outcome",
    ["outcome"],  # submitted | waiting_period
)

# Store metrics
order_counter = Counter(
    "vema_orders_total",
    "Store orders placed",
)

order_value_histogram = Histogram(
    "vema_order_value_rands",
    "Order totals after discount",
    buckets=[50, 100, 250, 500, 1000, 2500, 5000],
)

# Storage
store_failures_counter = Counter(
    "vema_store_failures_total",
    "Failed document store operations",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_contribution(stokvel_type: str, amount: Decimal) -> None:
    contribution_counter.labels(stokvel_type=stokvel_type).inc()
    contribution_amount_counter.labels(stokvel_type=stokvel_type).inc(float(amount))


def record_order(total: Decimal) -> None:
    order_counter.inc()
    order_value_histogram.observe(float(total))
