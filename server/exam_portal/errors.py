"""
Exceptions raised by the proctoring core and the exam repository.
"""


class ProctoringError(Exception):
    """Base class for proctoring pipeline errors."""


class StoreUnavailable(ProctoringError):
    """The alert store could not read from or write to its database."""


class AggregationFailed(ProctoringError):
    """A dashboard snapshot could not be assembled from its sources."""


class RepositoryError(Exception):
    """Exam or submission storage failed."""
