"""Errors raised by the reconciliation service."""


class ReconciliationError(Exception):
    """Base class for reconciliation failures surfaced to callers."""


class MissingDescriptionColumnError(ReconciliationError):
    """No "description" header within the scan window of a table."""

    def __init__(self, label: str):
        self.label = label
        super().__init__(f"Description column not found in {label} file.")


class TableDecodeError(ReconciliationError):
    """Uploaded file could not be decoded into rows."""


class UnsupportedFileTypeError(TableDecodeError):
    """Uploaded file has an extension we cannot decode."""

    def __init__(self, filename: str):
        self.filename = filename
        super().__init__(f"Unsupported file type: {filename}")
