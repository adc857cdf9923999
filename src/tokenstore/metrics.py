import prometheus_client
from prometheus_client import Counter

# Guard against duplicated metric registration when the module is imported
# multiple times (for example, when tests reload the package).
TOKEN_OPERATIONS = getattr(prometheus_client, "tokenstore_TOKEN_OPERATIONS", None)
AUTH_ATTEMPTS = getattr(prometheus_client, "tokenstore_AUTH_ATTEMPTS", None)
STORE_ERRORS = getattr(prometheus_client, "tokenstore_STORE_ERRORS", None)

if TOKEN_OPERATIONS is None:
    TOKEN_OPERATIONS = Counter(
        "token_operations_total",
        "Total token store operations",
        ["operation"],  # operation: store/invalidate/clear/purge
    )
    AUTH_ATTEMPTS = Counter(
        "auth_attempts_total",
        "Total token authentication attempts",
        ["result"],  # result: success/failure
    )
    STORE_ERRORS = Counter(
        "token_store_errors_total",
        "Total token store errors",
        ["operation", "error_type"],
    )

    prometheus_client.tokenstore_TOKEN_OPERATIONS = TOKEN_OPERATIONS  # type: ignore[attr-defined]
    prometheus_client.tokenstore_AUTH_ATTEMPTS = AUTH_ATTEMPTS  # type: ignore[attr-defined]
    prometheus_client.tokenstore_STORE_ERRORS = STORE_ERRORS  # type: ignore[attr-defined]


def record_operation(operation: str) -> None:
    TOKEN_OPERATIONS.labels(operation=operation).inc()  # type: ignore[union-attr]


def record_auth_attempt(success: bool) -> None:
    AUTH_ATTEMPTS.labels(result="success" if success else "failure").inc()  # type: ignore[union-attr]


def record_error(operation: str, exc: BaseException) -> None:
    STORE_ERRORS.labels(operation=operation, error_type=type(exc).__name__).inc()  # type: ignore[union-attr]
