class QuoteValidationError(ValueError):
    """Input that cannot be priced (bad distance, same pickup and delivery, ...)."""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.message = message
        self.field = field


class StaleCalculationError(Exception):
    """A signal arrived for a calculation that has since been restarted."""

    def __init__(self, expected: int, received: int):
        super().__init__(f"Stale calculation token {received}, current is {expected}")
        self.expected = expected
        self.received = received


class SessionNotFoundError(KeyError):
    pass
