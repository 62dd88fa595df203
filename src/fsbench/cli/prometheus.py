"""No-op Prometheus stub for CLI usage (when serve is not used)"""


class NoOpMetric:
    """No-op metric that accepts any method call and does nothing."""

    def __call__(self, *args, **kwargs):
        return self

    def __getattr__(self, name):
        return self

    def inc(self, *args, **kwargs):
        pass

    def dec(self, *args, **kwargs):
        pass

    def observe(self, *args, **kwargs):
        pass

    def labels(self, *args, **kwargs):
        return self

    def set(self, *args, **kwargs):
        pass


# Create no-op instances for all metrics
runs_total = NoOpMetric()
run_duration_seconds = NoOpMetric()
files_per_run = NoOpMetric()

files_processed_total = NoOpMetric()

chunks_per_run = NoOpMetric()
active_workers = NoOpMetric()
worker_faults_total = NoOpMetric()

uploaded_files_total = NoOpMetric()
reports_written_total = NoOpMetric()
websocket_clients = NoOpMetric()

errors_total = NoOpMetric()
http_responses_total = NoOpMetric()


# No-op helper functions
def record_run(*args, **kwargs):
    pass


def record_error(*args, **kwargs):
    pass


def record_http_response(*args, **kwargs):
    pass
