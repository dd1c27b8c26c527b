class MuleDetectorError(Exception):
    """Base class for errors raised by the detection engine and its parser."""


class CSVSchemaError(MuleDetectorError, ValueError):
    """Uploaded ledger is unreadable or lacks required columns."""


class InputTooLargeError(MuleDetectorError):
    """Transaction set exceeds the configured size guard."""

    def __init__(self, count: int, limit: int):
        self.count = count
        self.limit = limit
        super().__init__(
            f"{count} transactions exceeds the configured limit of {limit}"
        )
