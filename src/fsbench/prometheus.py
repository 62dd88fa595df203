"""Prometheus metrics for fsbench"""

from prometheus_client import Counter, Gauge, Histogram

# ============================================================================
# Run Metrics
# ============================================================================

# Total number of benchmark runs
runs_total = Counter(
    'fsbench_runs_total',
    'Total number of benchmark runs',
    ['mode', 'status'],  # mode: sequential, parallel; status: success, worker_fault
)

# Run duration in seconds
run_duration_seconds = Histogram(
    'fsbench_run_duration_seconds',
    'Wall-clock duration of benchmark runs',
    ['mode'],
    buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0],
    # 1ms to 1 minute - a handful of small files up to large batches
)

# Files per run
files_per_run = Histogram(
    'fsbench_files_per_run',
    'Number of file names submitted per run',
    buckets=[0, 1, 5, 10, 50, 100, 500, 1000, 5000, 10000],
)


# ============================================================================
# File Processing Metrics
# ============================================================================

files_processed_total = Counter(
    'fsbench_files_processed_total',
    'Total number of files processed',
    ['status'],  # success, not_found, read_error
)


# ============================================================================
# Parallel Processing Metrics
# ============================================================================

# Number of chunks dispatched per parallel run
chunks_per_run = Histogram(
    'fsbench_chunks_per_run',
    'Number of chunks dispatched per parallel run',
    buckets=[1, 2, 4, 8, 12, 16, 24, 32, 64, 128],
)

# Active workers (gauge - current value)
active_workers = Gauge('fsbench_active_workers', 'Current number of active chunk workers')

worker_faults_total = Counter('fsbench_worker_faults_total', 'Total number of chunk worker faults')


# ============================================================================
# Collaborator Metrics
# ============================================================================

uploaded_files_total = Counter('fsbench_uploaded_files_total', 'Total number of files received by /upload')

reports_written_total = Counter('fsbench_reports_written_total', 'Total number of experiment reports written')

websocket_clients = Gauge('fsbench_websocket_clients', 'Currently connected websocket clients', ['channel'])


# ============================================================================
# Error Metrics
# ============================================================================

# Errors by type
errors_total = Counter(
    'fsbench_errors_total',
    'Total errors by type',
    ['error_type'],  # invalid_input, worker_fault, upload_failed, internal_error
)

# HTTP status codes
http_responses_total = Counter(
    'fsbench_http_responses_total', 'HTTP responses by status code', ['method', 'endpoint', 'status_code']
)


# ============================================================================
# Helper Functions
# ============================================================================


def record_run(mode: str, status: str, duration: float, num_files: int, outcomes: list, num_chunks: int = 0):
    """
    Record metrics for a benchmark run.

    Args:
        mode: Runner mode (sequential, parallel)
        status: Run status (success, worker_fault)
        duration: Run duration in seconds
        num_files: Number of file names submitted
        outcomes: FileOutcome list produced by the run
        num_chunks: Number of chunks dispatched (parallel only)
    """
    runs_total.labels(mode=mode, status=status).inc()
    run_duration_seconds.labels(mode=mode).observe(duration)
    files_per_run.observe(num_files)

    for outcome in outcomes:
        files_processed_total.labels(status=outcome.status.value).inc()

    if num_chunks > 0:
        chunks_per_run.observe(num_chunks)


def record_error(error_type: str):
    """
    Record an error occurrence.

    Args:
        error_type: Type of error (invalid_input, worker_fault, internal_error, etc.)
    """
    errors_total.labels(error_type=error_type).inc()


def record_http_response(method: str, endpoint: str, status_code: int):
    """
    Record HTTP response.

    Args:
        method: HTTP method (GET, POST, etc.)
        endpoint: Endpoint path
        status_code: HTTP status code
    """
    http_responses_total.labels(method=method, endpoint=endpoint, status_code=str(status_code)).inc()
