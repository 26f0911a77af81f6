"""Error types raised by the audit pipeline."""


class SchemaError(ValueError):
    """Input table is missing required columns or a column has the wrong type."""

    def __init__(self, message: str, columns: list[str] | None = None) -> None:
        super().__init__(message)
        self.columns = columns or []


class ValidationError(ValueError):
    """A record holds values that cannot be analyzed (e.g. negative counts)."""

    def __init__(self, message: str, ad_id: int | None = None) -> None:
        super().__init__(message)
        self.ad_id = ad_id


class InsufficientDataError(ValueError):
    """A statistical comparison group has no eligible records."""
