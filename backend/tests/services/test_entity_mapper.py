"""Entity Mapper — lazy organiser identity creation keyed by email.

Tests cover:
    - First call creates, later calls return the same id
    - Defaults for display name and department
    - Secret generated and never returned
    - Losing an insert race re-reads the winner's id
    - Disabled integration and invalid email
"""

import pytest

import gate_sync.services.entity_mapper as mapper_module
from gate_sync.core.errors import IntegrationDisabled, ValidationError
from gate_sync.models import OrganiserIdentity
from gate_sync.services.entity_mapper import EntityMapper


async def test_creates_identity_on_first_use(access_client, count_rows):
    mapper = EntityMapper(access_client)
    identity_id = await mapper.ensure_organiser("org@uni.edu", "Org Name", "Physics")
    assert identity_id is not None
    assert await count_rows(OrganiserIdentity) == 1


async def test_returns_existing_id_unchanged(access_client, count_rows, fetch_one):
    mapper = EntityMapper(access_client)
    first = await mapper.ensure_organiser("org@uni.edu", "Org Name", "Physics")
    second = await mapper.ensure_organiser("org@uni.edu", "Other Name", "Chemistry")
    assert first == second
    assert await count_rows(OrganiserIdentity) == 1
    row = await fetch_one(OrganiserIdentity, OrganiserIdentity.id == first)
    assert row.display_name == "Org Name"
    assert row.department == "Physics"


async def test_email_is_case_and_whitespace_insensitive(access_client, count_rows):
    mapper = EntityMapper(access_client)
    first = await mapper.ensure_organiser("Org@Uni.edu")
    second = await mapper.ensure_organiser("  org@uni.edu ")
    assert first == second
    assert await count_rows(OrganiserIdentity) == 1


async def test_defaults_display_name_and_department(access_client, fetch_one):
    identity_id = await EntityMapper(access_client).ensure_organiser("jane.doe@uni.edu")
    row = await fetch_one(OrganiserIdentity, OrganiserIdentity.id == identity_id)
    assert row.display_name == "jane.doe"
    assert row.department == "Events Platform"
    assert row.role == "organiser"


async def test_default_display_name_keeps_caller_casing(access_client, fetch_one):
    identity_id = await EntityMapper(access_client).ensure_organiser("  Asha.Rao@Uni.edu ")
    row = await fetch_one(OrganiserIdentity, OrganiserIdentity.id == identity_id)
    assert row.display_name == "Asha.Rao"
    assert row.email == "asha.rao@uni.edu"


async def test_secret_is_generated_and_not_returned(access_client, fetch_one):
    identity_id = await EntityMapper(access_client).ensure_organiser("org@uni.edu")
    row = await fetch_one(OrganiserIdentity, OrganiserIdentity.id == identity_id)
    assert len(row.secret) == 64
    assert row.secret != str(identity_id)


async def test_distinct_emails_get_distinct_secrets(access_client, fetch_one):
    mapper = EntityMapper(access_client)
    a = await mapper.ensure_organiser("a@uni.edu")
    b = await mapper.ensure_organiser("b@uni.edu")
    row_a = await fetch_one(OrganiserIdentity, OrganiserIdentity.id == a)
    row_b = await fetch_one(OrganiserIdentity, OrganiserIdentity.id == b)
    assert row_a.secret != row_b.secret


async def test_losing_insert_race_returns_winner(access_client, monkeypatch, count_rows):
    """Both callers observe 'not found'; the loser's insert conflicts and re-reads."""
    mapper = EntityMapper(access_client)
    winner = await mapper.ensure_organiser("org@uni.edu")

    real_select = mapper_module._select_identity_id
    calls = {"n": 0}

    async def stale_first_read(db, email):
        calls["n"] += 1
        if calls["n"] == 1:
            return None
        return await real_select(db, email)

    monkeypatch.setattr(mapper_module, "_select_identity_id", stale_first_read)

    loser = await mapper.ensure_organiser("org@uni.edu")
    assert loser == winner
    assert calls["n"] == 2
    assert await count_rows(OrganiserIdentity) == 1


async def test_disabled_integration_raises_mode_error(disabled_client):
    with pytest.raises(IntegrationDisabled):
        await EntityMapper(disabled_client).ensure_organiser("org@uni.edu")


@pytest.mark.parametrize("email", ["", "   ", "no-at-sign", "@uni.edu", "org@", None])
async def test_invalid_email_rejected(access_client, email, count_rows):
    with pytest.raises(ValidationError):
        await EntityMapper(access_client).ensure_organiser(email)
    assert await count_rows(OrganiserIdentity) == 0
