from prometheus_client import Counter, Gauge, Histogram


class RegistrationMetrics:
    """
    Registration Service Core Metrics Collector

    Tracks registration outcomes, capacity ledger traffic and store health
    """

    def __init__(self) -> None:
        # ========== Registration Workflow Metrics ==========
        self.registration_requests = Counter(
            'registration_requests_total',
            'Total register calls by outcome',
            ['result'],  # confirmed/waitlist/duplicate/capacity_exceeded/not_open/replayed/error
        )

        self.registration_cancellations = Counter(
            'registration_cancellations_total',
            'Total cancel calls by outcome',
            ['result'],  # cancelled/already_cancelled
        )

        self.waitlist_promotions = Counter(
            'registration_waitlist_promotions_total',
            'Waitlisted registrations promoted to confirmed',
        )

        self.waitlist_promotion_failures = Counter(
            'registration_waitlist_promotion_failures_total',
            'Promotion runs abandoned after a cancellation had already committed',
        )

        self.registration_duration = Histogram(
            'registration_duration_seconds',
            'Register workflow duration',
            ['result'],
            buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5],
        )

        # ========== Capacity Ledger Metrics ==========
        self.capacity_operations = Counter(
            'capacity_ledger_operations_total',
            'Capacity ledger operations',
            ['operation', 'result'],  # operation: reserve/release
        )

        self.compensating_releases = Counter(
            'capacity_compensating_releases_total',
            'Reservations released because a later workflow step failed',
        )

        self.ledger_inconsistencies = Counter(
            'capacity_ledger_inconsistencies_total',
            'Releases that found no matching sold unit',
        )

        # ========== Store Health Metrics ==========
        self.store_retries = Counter(
            'store_retries_total',
            'Retried store operations after transient failures',
            ['operation'],
        )

        self.in_flight_registrations = Gauge(
            'registration_in_flight', 'Register calls currently being processed'
        )

    # ========== Helper Methods ==========

    def record_registration(self, *, result: str, duration: float) -> None:
        self.registration_requests.labels(result=result).inc()
        self.registration_duration.labels(result=result).observe(duration)

    def record_cancellation(self, *, result: str) -> None:
        self.registration_cancellations.labels(result=result).inc()

    def record_capacity_operation(self, *, operation: str, result: str) -> None:
        self.capacity_operations.labels(operation=operation, result=result).inc()


# Global metrics instance
metrics = RegistrationMetrics()
