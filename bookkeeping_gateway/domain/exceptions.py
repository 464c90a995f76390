"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class RemoteUpdateError(DomainException):
    """Hosted database rejected a request or is unavailable"""

    pass


class InvalidTransactionDataError(DomainException):
    """Transaction data is malformed or invalid"""

    pass


class InvalidTransitionError(DomainException):
    """Requested status change is not a pending -> terminal move"""

    pass


class TransitionInProgressError(DomainException):
    """A bulk transition is already running for this view"""

    pass


class DeletionInProgressError(DomainException):
    """A bulk delete is already running for this view"""

    pass
