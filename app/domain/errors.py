class DomainError(Exception):
    """Base class for all domain-level errors."""

    pass


class InvalidArgument(DomainError, ValueError):
    """The caller broke an operation's contract; not worth retrying."""

    pass


class PhoneNumberRequired(InvalidArgument):
    """A phone-type code operation was called without a phone number."""

    def __init__(self) -> None:
        super().__init__("Phone number is required")


class StoreUnavailable(DomainError):
    """The key-value store failed or did not acknowledge a call (transient)."""

    pass
