"""Prometheus metrics for monitoring"""
from prometheus_client import Counter, Histogram, Gauge, CollectorRegistry

registry = CollectorRegistry()

request_count = Counter(
    'http_requests_total',
    'Total HTTP requests',
    ['method', 'endpoint', 'status'],
    registry=registry
)

request_duration = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint'],
    registry=registry
)

quotes_calculated = Counter(
    'quotes_calculated_total',
    'Total price calculations',
    ['transport_type'],
    registry=registry
)

degraded_signals = Counter(
    'degraded_signals_total',
    'Pricing signals replaced by their neutral default',
    ['factor'],
    registry=registry
)

stale_signal_updates = Counter(
    'stale_signal_updates_total',
    'Signal updates discarded because the calculation was restarted',
    registry=registry
)

toll_estimates = Counter(
    'toll_estimates_total',
    'Total toll estimates',
    ['outcome'],
    registry=registry
)

pricing_config_loads = Counter(
    'pricing_config_loads_total',
    'Pricing config resolutions by source',
    ['source'],
    registry=registry
)

cache_hits = Counter(
    'cache_hits_total',
    'Total cache hits',
    ['cache_key'],
    registry=registry
)

cache_misses = Counter(
    'cache_misses_total',
    'Total cache misses',
    ['cache_key'],
    registry=registry
)

rate_limit_exceeded = Counter(
    'rate_limit_exceeded_total',
    'Total rate limit exceeded events',
    ['bucket'],
    registry=registry
)

lead_submissions = Counter(
    'lead_submissions_total',
    'Lead submissions by outcome',
    ['outcome'],
    registry=registry
)

crm_duration = Histogram(
    'crm_delivery_duration_seconds',
    'CRM lead delivery duration in seconds',
    ['status'],
    registry=registry
)

email_deliveries = Counter(
    'email_deliveries_total',
    'Quote email deliveries',
    ['status'],
    registry=registry
)

redis_connected = Gauge(
    'redis_connected',
    'Redis connection status (1=connected, 0=disconnected)',
    registry=registry
)


def get_metrics_text() -> str:
    """Generate Prometheus metrics in text format"""
    from prometheus_client import generate_latest
    return generate_latest(registry).decode('utf-8')
