"""Error taxonomy shared by the repositories, services and the HTTP layer."""


class ValidationError(Exception):
    """Raised when caller input is malformed or incomplete.

    The message is safe to show to the client.
    """


class StorageError(Exception):
    """Raised when a stored document cannot be read or written.

    Covers everything except "document does not exist yet", which the
    document store answers with a default value instead.
    """


class StartupError(Exception):
    """Raised when required storage is unreachable at boot."""
