"""Verification Reference — deterministic, base-URL-normalized verify links."""

from uuid import UUID

from gate_sync.core.verify_reference import verification_reference

CREDENTIAL_ID = UUID("12345678-1234-5678-1234-567812345678")


def test_reference_is_deterministic():
    first = verification_reference("https://gate.test", CREDENTIAL_ID)
    second = verification_reference("https://gate.test", CREDENTIAL_ID)
    assert first == second


def test_reference_format():
    assert (
        verification_reference("https://gate.test", CREDENTIAL_ID)
        == "https://gate.test/verify?id=12345678-1234-5678-1234-567812345678"
    )


def test_trailing_slash_ignored():
    assert verification_reference(
        "https://gate.test/", CREDENTIAL_ID,
    ) == verification_reference("https://gate.test", CREDENTIAL_ID)


def test_accepts_string_ids():
    assert verification_reference("https://gate.test", "abc").endswith("?id=abc")
