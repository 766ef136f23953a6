class SchoolMSError(Exception):
    """Base class for errors raised by the school management service."""


class DatabaseConnectionError(SchoolMSError):
    """The database could not be reached; no operation can proceed."""


class TransactionTimeout(DatabaseConnectionError):
    """Timed out waiting for the write gate of the session factory."""


class HashingUnavailable(SchoolMSError):
    """The password hashing backend is missing from the runtime."""
