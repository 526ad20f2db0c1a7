"""Exceptions raised by the petty cash core."""


class PersistenceError(IOError):
    """Raised when the record store cannot read or write its durable state."""
