"""Error taxonomy for the insights engine."""


class InsightsError(Exception):
    """Base class for engine errors."""


class NoDataError(InsightsError):
    """No user session, or no records to analyze.

    Callers render an empty state; this is never fatal.
    """


class MalformedRecordError(InsightsError):
    """A record value falls outside its defined domain.

    Raised by strict normalizers and caught where records are collected,
    so one bad row never aborts an aggregate.
    """

    def __init__(self, field: str, value: object) -> None:
        super().__init__(f"Unrecognized {field}: {value!r}")
        self.field = field
        self.value = value
