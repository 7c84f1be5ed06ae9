"""Ledger domain specific exceptions."""


class LedgerError(Exception):
    """Base class for ledger domain errors."""


class InvalidAmount(LedgerError):
    """Raised when a user supplied amount cannot be used for the command."""


class UnknownUser(LedgerError):
    """Raised when a command comes from someone who never ran /start."""

    def __init__(self, external_user_id: str) -> None:
        super().__init__(f"No user registered for external id {external_user_id}")
        self.external_user_id = external_user_id


class StorageError(LedgerError):
    """Raised when the persistence layer fails for any reason."""
