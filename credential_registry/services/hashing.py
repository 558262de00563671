"""Content-addressed credential hashes.

The registry treats hashes as opaque, but issuers need a fingerprint that
anyone holding the credential details can recompute.  The hash is SHA-256
over a canonical JSON encoding of the descriptive fields:

  - keys sorted, no insignificant whitespace, UTF-8, no ASCII escaping
  - text fields stripped of surrounding whitespace
  - ``salt`` lets an issuer distinguish two otherwise identical records
    (e.g. a re-awarded degree); it must be kept alongside the credential
    for the hash to be recomputable.
"""

from __future__ import annotations

import hashlib
import json

HASH_ALGORITHM = "sha256"
HASH_PREFIX = "0x"


def canonical_payload(
    *,
    student_name: str,
    university_name: str,
    degree_type: str,
    field_of_study: str,
    graduation_date: int,
    salt: str = "",
) -> bytes:
    fields = {
        "student_name": student_name.strip(),
        "university_name": university_name.strip(),
        "degree_type": degree_type.strip(),
        "field_of_study": field_of_study.strip(),
        "graduation_date": int(graduation_date),
        "salt": salt,
    }
    return json.dumps(
        fields, sort_keys=True, separators=(",", ":"), ensure_ascii=False
    ).encode("utf-8")


def compute_credential_hash(
    *,
    student_name: str,
    university_name: str,
    degree_type: str,
    field_of_study: str,
    graduation_date: int,
    salt: str = "",
) -> str:
    """Return ``0x`` + 64 lowercase hex digits."""
    payload = canonical_payload(
        student_name=student_name,
        university_name=university_name,
        degree_type=degree_type,
        field_of_study=field_of_study,
        graduation_date=graduation_date,
        salt=salt,
    )
    return HASH_PREFIX + hashlib.sha256(payload).hexdigest()
