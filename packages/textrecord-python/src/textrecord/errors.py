"""Errors raised by the textrecord codec."""


class SchemaError(ValueError):
    """Raised when record definitions are missing or inconsistent.

    This is the only error decode and encode raise; it is raised before any
    input is processed.
    """
