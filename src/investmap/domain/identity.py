"""Storage identity for investment records.

Identity is derived from whichever reference fields are present, strongest first:
registry code, then a hash of the source URL, then a hash of
``name|beneficiary|total_amount``. The last kind is weak: two different projects
with the same title, beneficiary and amount collapse into one identity.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import TYPE_CHECKING

from investmap.domain.model import IdentityKind

if TYPE_CHECKING:
    from investmap.domain.model import Amount, Investment


@dataclass(frozen=True, slots=True)
class Identity:
    kind: IdentityKind
    value: str

    @property
    def is_weak(self) -> bool:
        return self.kind is IdentityKind.HASH

    def __str__(self) -> str:
        return f"{self.kind}:{self.value}"


def stable_hash(text: str) -> str:
    """Hex SHA-256 of the UTF-8 encoded text."""

    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def format_amount(amount: Amount) -> str:
    """Render an amount the same way whether it was parsed as int or float."""

    if isinstance(amount, float) and amount.is_integer():
        return str(int(amount))
    return repr(amount) if isinstance(amount, float) else str(amount)


def content_fingerprint(record: Investment) -> str:
    return stable_hash(f"{record.name}|{record.beneficiary}|{format_amount(record.total_amount)}")


def identify(record: Investment) -> Identity:
    code = _clean(record.reference.registry_code)
    if code is not None:
        return Identity(IdentityKind.CODE, code)
    url = _clean(record.reference.source_url)
    if url is not None:
        return Identity(IdentityKind.URL, stable_hash(url))
    return Identity(IdentityKind.HASH, content_fingerprint(record))


def identity_keys(record: Investment) -> tuple[Identity, ...]:
    """Every identity a record can be matched on.

    A record carrying both a registry code and a source URL must stay unique
    under each of them, so both are returned.
    """

    keys: list[Identity] = []
    code = _clean(record.reference.registry_code)
    if code is not None:
        keys.append(Identity(IdentityKind.CODE, code))
    url = _clean(record.reference.source_url)
    if url is not None:
        keys.append(Identity(IdentityKind.URL, stable_hash(url)))
    if not keys:
        keys.append(Identity(IdentityKind.HASH, content_fingerprint(record)))
    return tuple(keys)


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


__all__ = [
    "Identity",
    "content_fingerprint",
    "format_amount",
    "identify",
    "identity_keys",
    "stable_hash",
]
