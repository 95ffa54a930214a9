from prometheus_client import Counter, Histogram

# Business Metrics
ecomm_checkout_total = Counter(
    "ecomm_checkout_total",
    "Total checkouts processed",
    ["status"] # Labels: 'success', 'out_of_stock', 'payment_failed', ...
)

ecomm_checkout_duration_seconds = Histogram(
    "ecomm_checkout_duration_seconds",
    "Checkout duration in seconds"
)

ecomm_saga_compensation_total = Counter(
    "ecomm_saga_compensation_total",
    "Total saga compensations triggered",
    ["step_name"] # Labels: 'charge_payment', ...
)

ecomm_payment_gateway_requests_total = Counter(
    "ecomm_payment_gateway_requests_total",
    "Payment gateway calls by outcome",
    ["outcome"] # Labels: 'succeeded', 'rejected', 'timeout', 'error'
)
