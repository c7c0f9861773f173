from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

# Метрики для HTTP запросов
http_requests_total = Counter(
    'http_requests_total',
    'Total HTTP requests',
    ['method', 'endpoint', 'status']
)

http_request_duration_seconds = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint']
)

# Метрики для БД и предметной области
db_errors_total = Counter('db_errors_total', 'Database failures reported as internal errors', ['operation'])
groups_created_total = Counter('groups_created_total', 'Tutoring groups created')
group_joins_total = Counter('group_joins_total', 'Students that joined a group')
login_failures_total = Counter('login_failures_total', 'Rejected login attempts')

def metrics_endpoint():
    """Endpoint для Prometheus метрик"""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
