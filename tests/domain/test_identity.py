from __future__ import annotations

from investmap.domain.identity import (
    content_fingerprint,
    format_amount,
    identify,
    identity_keys,
    stable_hash,
)
from investmap.domain.model import IdentityKind
from tests.helpers.records import make_investment


def test_registry_code_wins_over_url() -> None:
    record = make_investment(code="ΨΧΦ46ΜΤΛΡ-ΑΒΓ", url="https://example.gr/erga/1")

    identity = identify(record)

    assert identity.kind is IdentityKind.CODE
    assert identity.value == "ΨΧΦ46ΜΤΛΡ-ΑΒΓ"
    assert not identity.is_weak


def test_url_identity_is_hash_of_url() -> None:
    record = make_investment(url="https://example.gr/erga/1")

    identity = identify(record)

    assert identity.kind is IdentityKind.URL
    assert identity.value == stable_hash("https://example.gr/erga/1")


def test_content_hash_is_weak_and_deterministic() -> None:
    first = make_investment(name="Marina", beneficiary="Beta SA", total_amount=5_000_000)
    second = make_investment(name="Marina", beneficiary="Beta SA", total_amount=5_000_000.0)

    assert identify(first).is_weak
    assert identify(first) == identify(second)
    assert identify(first).value == stable_hash("Marina|Beta SA|5000000")


def test_blank_references_fall_through() -> None:
    record = make_investment(code="  ", url="")

    assert identify(record).kind is IdentityKind.HASH


def test_identity_keys_include_code_and_url() -> None:
    record = make_investment(code="ADA1", url="https://example.gr/erga/1")

    keys = identity_keys(record)

    assert [key.kind for key in keys] == [IdentityKind.CODE, IdentityKind.URL]


def test_format_amount_keeps_fractions() -> None:
    assert format_amount(12) == "12"
    assert format_amount(12.0) == "12"
    assert format_amount(12.5) == "12.5"


def test_fingerprint_changes_with_amount() -> None:
    base = make_investment(total_amount=1)
    other = make_investment(total_amount=2)

    assert content_fingerprint(base) != content_fingerprint(other)
    assert str(identify(base)).startswith("hash:")
