from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Principal:
    """Authenticated caller extracted from a validated JWT.

    ``identity`` is the normalized (lowercase) address from the ``sub``
    claim.  Whether that identity is the owner or an authority is registry
    state, checked by the registry when the transaction is applied.
    """

    identity: str
