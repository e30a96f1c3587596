from prometheus_client import Counter, Histogram

# --- HTTP ---
REQUEST_COUNT = Counter(
    "http_requests_total", "Total HTTP requests", ["method", "path", "status"]
)
REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds", "HTTP request latency", ["method", "path"]
)

# --- Métier ---
ORDERS_PLACED = Counter(
    "orders_placed_total",
    "Order placement attempts",
    ["outcome"],  # 'success' ou le error_code de l'échec
)
