"""
Prometheus metrics for contract payment monitoring.

Tracks:
- Job payments by outcome
- Job payment amounts and duration
- Deposits by outcome
- Report generation duration
- HTTP responses by status
"""
from prometheus_client import Counter, Histogram

# Job payment metrics
job_payments_total = Counter(
    "job_payments_total",
    "Total job payment attempts",
    ["outcome"],  # paid, forbidden, invalid_operation, error
)

job_payment_amount = Histogram(
    "job_payment_amount",
    "Amount transferred per paid job",
    buckets=(0, 10, 50, 100, 250, 500, 1000, 2500, 5000, 10000),
)

job_payment_duration_seconds = Histogram(
    "job_payment_duration_seconds",
    "Job payment transaction duration in seconds",
    buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
)

# Deposit metrics
deposits_total = Counter(
    "deposits_total",
    "Total deposit attempts",
    ["outcome"],  # deposited, bad_request, forbidden, invalid_operation, error
)

deposit_amount = Histogram(
    "deposit_amount",
    "Deposited amounts",
    buckets=(1, 10, 50, 100, 250, 500, 1000, 5000),
)

# Reporting metrics
report_duration_seconds = Histogram(
    "report_duration_seconds",
    "Admin report generation duration in seconds",
    ["report"],  # best_profession, best_clients
    buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
)

# HTTP metrics
http_responses_total = Counter(
    "http_responses_total",
    "Total HTTP responses",
    ["method", "status_code"],
)


class MetricsCollector:
    """Helper class for collecting metrics."""

    @staticmethod
    def record_job_payment(outcome: str, amount: float | None = None) -> None:
        """Record a job payment attempt."""
        job_payments_total.labels(outcome=outcome).inc()
        if amount is not None:
            job_payment_amount.observe(amount)

    @staticmethod
    def record_job_payment_duration(duration_seconds: float) -> None:
        """Record job payment transaction duration."""
        job_payment_duration_seconds.observe(duration_seconds)

    @staticmethod
    def record_deposit(outcome: str, amount: float | None = None) -> None:
        """Record a deposit attempt."""
        deposits_total.labels(outcome=outcome).inc()
        if amount is not None:
            deposit_amount.observe(amount)

    @staticmethod
    def record_report(report: str, duration_seconds: float) -> None:
        """Record report generation."""
        report_duration_seconds.labels(report=report).observe(duration_seconds)

    @staticmethod
    def record_http_response(method: str, status_code: int) -> None:
        """Record an HTTP response."""
        http_responses_total.labels(method=method, status_code=str(status_code)).inc()


# Export singleton instance
metrics = MetricsCollector()
