from __future__ import annotations

from dataclasses import dataclass, replace


@dataclass(frozen=True, slots=True)
class Credential:
    """One issued academic credential, addressed by its content hash.

    Everything except ``is_revoked`` is fixed at issuance.  ``graduation_date``
    and ``issued_at`` are Unix seconds; ``issued_by`` is the issuing
    authority's address.
    """

    credential_hash: str
    student_name: str
    university_name: str
    degree_type: str
    field_of_study: str
    graduation_date: int
    issued_at: int
    issued_by: str
    is_revoked: bool = False

    @staticmethod
    def new(
        *,
        credential_hash: str,
        student_name: str,
        university_name: str,
        degree_type: str,
        field_of_study: str,
        graduation_date: int,
        issued_at: int,
        issued_by: str,
    ) -> Credential:
        return Credential(
            credential_hash=credential_hash,
            student_name=student_name,
            university_name=university_name,
            degree_type=degree_type,
            field_of_study=field_of_study,
            graduation_date=graduation_date,
            issued_at=issued_at,
            issued_by=issued_by,
        )

    def revoked(self) -> Credential:
        return replace(self, is_revoked=True)

    @property
    def status(self) -> str:
        return "revoked" if self.is_revoked else "active"


@dataclass(frozen=True, slots=True)
class VerificationResult:
    """Outcome of a lookup by hash.

    Existence and revocation are reported separately: ``exists=False`` means
    the hash was never issued, ``credential.is_revoked`` means it was issued
    and later withdrawn.
    """

    exists: bool
    credential: Credential | None = None

    @property
    def is_valid(self) -> bool:
        return self.credential is not None and not self.credential.is_revoked

    @property
    def outcome(self) -> str:
        if self.credential is None:
            return "unknown"
        return "revoked" if self.credential.is_revoked else "valid"


@dataclass(frozen=True, slots=True)
class RegistrySummary:
    owner: str
    total: int
    revoked: int

    @property
    def active(self) -> int:
        return self.total - self.revoked
