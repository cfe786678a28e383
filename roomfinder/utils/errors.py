"""Custom exception types for consistent error handling."""


class FirestoreUnavailableError(Exception):
    """Raised when Firestore queries fail or are unavailable."""


class UnknownPreferenceValueError(ValueError):
    """Raised when a preference category or value is not in the catalog."""

    def __init__(self, category: str, value: object):
        super().__init__(f"Unknown value {value!r} for preference {category!r}")
        self.category = category
        self.value = value


class GraphExecutionError(Exception):
    """Raised when a graph fails to compile or execute."""
