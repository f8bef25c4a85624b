"""Integration tests for the case desk API."""

from __future__ import annotations

import uuid

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio


async def _import_cases(client: AsyncClient, *records: dict[str, str]) -> None:
    resp = await client.post("/api/v1/import/confirm", json={"importData": records})
    assert resp.status_code == 200
    assert resp.json()["importedCount"] == len(records)


def _record(**overrides: str) -> dict[str, str]:
    record = {
        "owner_name": "Jane Doe",
        "owner_phone": "555-123-4567",
        "owner_email": "jane@example.com",
        "pet_name": "Rex",
        "pet_species": "Dog",
        "service_type": "medical",
        "initial_request": "Limping",
    }
    record.update(overrides)
    return record


async def test_case_lifecycle(client: AsyncClient) -> None:
    await _import_cases(client, _record())

    list_resp = await client.get("/api/v1/cases")
    assert list_resp.status_code == 200
    (case,) = list_resp.json()
    case_id = case["id"]
    assert case["status"] == "open"
    assert case["owner"]["name"] == "Jane Doe"
    assert case["pet"]["species"] == "Dog"

    detail_resp = await client.get(f"/api/v1/cases/{case_id}")
    assert detail_resp.status_code == 200
    assert detail_resp.json()["case_notes"] == []

    note_resp = await client.post(
        f"/api/v1/cases/{case_id}/notes",
        json={"text": "Called owner back", "author": "Front desk"},
    )
    assert note_resp.status_code == 201
    assert note_resp.json()["text"] == "Called owner back"

    notes_resp = await client.get(f"/api/v1/cases/{case_id}/notes")
    assert [note["author"] for note in notes_resp.json()] == ["Front desk"]

    progress_resp = await client.patch(
        f"/api/v1/cases/{case_id}", json={"status": "in_progress"}
    )
    assert progress_resp.status_code == 200
    assert progress_resp.json()["status"] == "in_progress"
    assert progress_resp.json()["closed_at"] is None

    complete_resp = await client.patch(
        f"/api/v1/cases/{case_id}",
        json={"status": "completed", "notes": "Recovered well"},
    )
    completed = complete_resp.json()
    assert completed["status"] == "completed"
    assert completed["closed_at"] is not None
    assert completed["notes"] == "Recovered well"
    assert len(completed["case_notes"]) == 1


async def test_filters(client: AsyncClient) -> None:
    await _import_cases(
        client,
        _record(),
        _record(pet_name="Milo", service_type="Grooming", status="on_hold"),
    )

    by_service = await client.get("/api/v1/cases", params={"service_type": "grooming"})
    assert [case["pet"]["name"] for case in by_service.json()] == ["Milo"]

    by_status = await client.get("/api/v1/cases", params={"status": "OPEN"})
    assert [case["pet"]["name"] for case in by_status.json()] == ["Rex"]


async def test_soft_delete_and_restore(client: AsyncClient) -> None:
    await _import_cases(client, _record())
    case_id = (await client.get("/api/v1/cases")).json()[0]["id"]

    not_deleted = await client.post(f"/api/v1/cases/{case_id}/restore")
    assert not_deleted.status_code == 400

    delete_resp = await client.delete(f"/api/v1/cases/{case_id}")
    assert delete_resp.status_code == 200
    assert delete_resp.json()["is_deleted"] is True
    assert delete_resp.json()["deleted_at"] is not None

    assert (await client.get("/api/v1/cases")).json() == []
    assert (await client.get(f"/api/v1/cases/{case_id}")).status_code == 404
    deleted = (await client.get("/api/v1/cases/deleted")).json()
    assert [case["id"] for case in deleted] == [case_id]

    restore_resp = await client.post(f"/api/v1/cases/{case_id}/restore")
    assert restore_resp.status_code == 200
    assert restore_resp.json()["is_deleted"] is False
    assert restore_resp.json()["deleted_at"] is None
    assert len((await client.get("/api/v1/cases")).json()) == 1


async def test_unknown_case_returns_404(client: AsyncClient) -> None:
    missing = uuid.uuid4()
    assert (await client.get(f"/api/v1/cases/{missing}")).status_code == 404
    assert (
        await client.patch(f"/api/v1/cases/{missing}", json={"status": "open"})
    ).status_code == 404
    assert (
        await client.post(f"/api/v1/cases/{missing}/notes", json={"text": "hi"})
    ).status_code == 404


async def test_invalid_status_update_is_rejected(client: AsyncClient) -> None:
    await _import_cases(client, _record())
    case_id = (await client.get("/api/v1/cases")).json()[0]["id"]

    resp = await client.patch(f"/api/v1/cases/{case_id}", json={"status": "closed"})
    assert resp.status_code == 422


async def test_create_case_reuses_owner_by_phone(client: AsyncClient) -> None:
    first = await client.post(
        "/api/v1/cases",
        json={
            "owner_name": "Jane Doe",
            "owner_phone": "555-123-4567",
            "owner_email": "Jane@Example.com",
            "pet_name": "Rex",
            "service_type": "medical",
            "initial_request": "Limping",
        },
    )
    assert first.status_code == 201
    created = first.json()
    assert created["status"] == "open"
    assert created["source_system"] == "manual"
    assert created["owner"]["email"] == "jane@example.com"
    assert created["pet"]["name"] == "Rex"
    assert created["pet"]["species"] == "Unknown"
    assert created["case_notes"] == []

    second = await client.post(
        "/api/v1/cases",
        json={
            "owner_name": "Jane D.",
            "owner_phone": "555-123-4567",
            "service_type": "lost_found",
        },
    )
    assert second.status_code == 201
    assert second.json()["owner_id"] == created["owner_id"]
    assert second.json()["pet"] is None
    assert second.json()["pet_id"] is None

    list_resp = await client.get("/api/v1/cases")
    assert len(list_resp.json()) == 2


async def test_create_case_rejects_bad_payload(client: AsyncClient) -> None:
    unknown_service = await client.post(
        "/api/v1/cases",
        json={"owner_name": "Jane Doe", "service_type": "surgery"},
    )
    assert unknown_service.status_code == 422

    short_name = await client.post(
        "/api/v1/cases",
        json={"owner_name": "J", "service_type": "medical"},
    )
    assert short_name.status_code == 422
