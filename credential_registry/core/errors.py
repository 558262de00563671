"""Registry error taxonomy.

Every registry failure is raised before any state is touched, so a caught
RegistryError always means "nothing happened".  ``code`` is the stable,
machine-readable name recorded on failed receipts.
"""

from __future__ import annotations


class RegistryError(Exception):
    code = "registry_error"
    status_code = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class Unauthorized(RegistryError):
    """Caller lacks the role the operation requires."""

    code = "unauthorized"
    status_code = 403


class DuplicateCredential(RegistryError):
    code = "duplicate_credential"
    status_code = 409


class NotFound(RegistryError):
    code = "not_found"
    status_code = 404


class AlreadyRevoked(RegistryError):
    code = "already_revoked"
    status_code = 409


class IndexOutOfRange(RegistryError):
    code = "index_out_of_range"
    status_code = 404
