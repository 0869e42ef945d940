"""Error taxonomy shared by the registry, the store and the HTTP layer."""


class RegistryError(Exception):
    """Base class for every failure an operation reports to its caller."""

    status_code = 400


class AlreadyRegistered(RegistryError):
    """The caller already owns a record of the requested kind."""

    status_code = 409


class NotRegistered(RegistryError):
    """The caller operated on an own-record that does not exist."""

    status_code = 404


class NotFound(RegistryError):
    """A referenced identity or appointment does not exist."""

    status_code = 404


class Unauthorized(RegistryError):
    """Ownership violation. No permission grant can cure it."""

    status_code = 403


class AccessDenied(RegistryError):
    """Missing or revoked permission grant from the patient."""

    status_code = 403


class StorageError(Exception):
    """The durable store could not be read or written."""
