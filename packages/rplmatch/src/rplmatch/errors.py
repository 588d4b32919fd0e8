"""Exception hierarchy for rplmatch."""


class RplMatchError(Exception):
    """Base class for all rplmatch errors."""


class CallerContractViolation(RplMatchError, ValueError):
    """The caller supplied a missing or invalid field selector or candidate set."""


class ConfigError(RplMatchError, ValueError):
    """Configuration values are out of range or inconsistent."""


class DatasetError(RplMatchError):
    """An input table could not be read."""


class MatchCancelled(RplMatchError):
    """A run was cancelled at a record boundary. No partial results are returned."""

    def __init__(self, processed: int, total: int) -> None:
        super().__init__(f"match cancelled after {processed} of {total} records")
        self.processed = processed
        self.total = total
