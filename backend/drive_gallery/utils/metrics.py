"""
Prometheus metrics definitions for the API and Drive calls.
All metrics are registered here and can be imported by other modules.
"""
from prometheus_client import Counter, Histogram

# HTTP request metrics
http_requests_total = Counter(
    'http_requests_total',
    'Total HTTP requests',
    ['method', 'path', 'status']
)

http_request_duration_seconds = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'path'],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0]
)

# Error metrics
errors_total = Counter(
    'errors_total',
    'Total errors',
    ['error_type']
)

# Google Drive metrics
drive_requests_total = Counter(
    'drive_requests_total',
    'Total Google Drive API requests',
    ['operation']
)

drive_failures_total = Counter(
    'drive_failures_total',
    'Total Google Drive API failures',
    ['operation']
)

drive_latency_seconds = Histogram(
    'drive_latency_seconds',
    'Google Drive API request latency in seconds',
    ['operation'],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0]
)

uploaded_bytes_total = Counter(
    'uploaded_bytes_total',
    'Total bytes forwarded to Google Drive by the upload endpoint'
)
