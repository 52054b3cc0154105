import uuid

import pytest

from tests._factories import identity_headers, make_application, make_category, make_member


@pytest.mark.anyio
async def test_admin_approve_return_reject_flow(client, session):
    member = await make_member(session)
    admin = await make_member(session, role="ADMIN")
    category = await make_category(session)
    headers = identity_headers(admin)

    to_approve = await make_application(session, member=member, status="SUBMITTED")
    r = await client.post(
        f"/api/v1/admin/applications/{to_approve.id}/approve",
        json={"internal_category_id": str(category.id), "final_amount": 8000},
        headers=headers,
    )
    assert r.status_code == 200, r.text
    assert r.json()["status"] == "APPROVED"
    assert r.json()["final_amount"] == 8000

    r = await client.post(
        f"/api/v1/admin/applications/{to_approve.id}/approve",
        json={"internal_category_id": str(category.id), "final_amount": 8000},
        headers=headers,
    )
    assert r.status_code == 400
    assert r.json()["code"] == "INVALID_STATUS_TRANSITION"

    to_return = await make_application(session, member=member, status="SUBMITTED")
    r = await client.post(f"/api/v1/admin/applications/{to_return.id}/return", json={}, headers=headers)
    assert r.status_code == 400
    assert r.json()["code"] == "VALIDATION_ERROR"

    r = await client.post(
        f"/api/v1/admin/applications/{to_return.id}/return", json={"comment": "Add receipt"}, headers=headers
    )
    assert r.status_code == 200
    assert r.json()["status"] == "RETURNED"

    to_reject = await make_application(session, member=member, status="SUBMITTED")
    r = await client.post(
        f"/api/v1/admin/applications/{to_reject.id}/reject", json={"comment": "Not business"}, headers=headers
    )
    assert r.status_code == 200
    assert r.json()["status"] == "REJECTED"

    r = await client.get(f"/api/v1/admin/applications/{to_reject.id}", headers=headers)
    assert [(c["comment_type"], c["author_id"]) for c in r.json()["comments"]] == [("REJECTION", str(admin.id))]


@pytest.mark.anyio
async def test_approve_with_unknown_category_is_validation_error(client, session):
    member = await make_member(session)
    admin = await make_member(session, role="ADMIN")
    app = await make_application(session, member=member, status="SUBMITTED")

    r = await client.post(
        f"/api/v1/admin/applications/{app.id}/approve",
        json={"internal_category_id": str(uuid.uuid4()), "final_amount": 10},
        headers=identity_headers(admin),
    )
    assert r.status_code == 400
    assert r.json()["code"] == "VALIDATION_ERROR"


@pytest.mark.anyio
async def test_admin_list_filters_by_status(client, session):
    member = await make_member(session)
    admin = await make_member(session, role="ADMIN")
    submitted = await make_application(session, member=member, status="SUBMITTED")
    await make_application(session, member=member)

    r = await client.get("/api/v1/admin/applications", params={"status": "SUBMITTED"}, headers=identity_headers(admin))
    assert r.status_code == 200
    assert [i["id"] for i in r.json()["items"]] == [str(submitted.id)]

    r = await client.get("/api/v1/admin/applications", params={"status": "BOGUS"}, headers=identity_headers(admin))
    assert r.status_code == 400


@pytest.mark.anyio
async def test_subsidy_preview(client, session):
    member = await make_member(session)
    admin = await make_member(session, role="ADMIN")
    app = await make_application(session, member=member, status="SUBMITTED", amount=3333)

    r = await client.get(f"/api/v1/admin/applications/{app.id}/subsidy", headers=identity_headers(admin))
    assert r.status_code == 200
    assert r.json() == {"original_amount": 3333, "proposed_amount": 1666}


@pytest.mark.anyio
async def test_generate_rejects_non_approved_and_repeat(client, session):
    member = await make_member(session)
    admin = await make_member(session, role="ADMIN")
    approved = await make_application(session, member=member, status="APPROVED")
    draft = await make_application(session, member=member)
    headers = identity_headers(admin)

    r = await client.post(
        "/api/v1/admin/payments/generate",
        json={"application_ids": [str(approved.id), str(draft.id)]},
        headers=headers,
    )
    assert r.status_code == 400
    assert r.json()["code"] == "CONFLICT"

    r = await client.post("/api/v1/admin/payments/generate", json={"application_ids": []}, headers=headers)
    assert r.status_code == 400
    assert r.json()["code"] == "VALIDATION_ERROR"

    r = await client.post(
        "/api/v1/admin/payments/generate", json={"application_ids": [str(approved.id)]}, headers=headers
    )
    assert r.status_code == 201
    assert set(r.json()) == {"batchId", "paymentCount", "totalAmount"}

    r = await client.post(
        "/api/v1/admin/payments/generate", json={"application_ids": [str(approved.id)]}, headers=headers
    )
    assert r.status_code == 400
    assert "already have payment records" in r.json()["detail"]

    r = await client.get("/api/v1/admin/payments", params={"status": "PENDING"}, headers=headers)
    assert r.status_code == 200
    assert r.json()["total"] == 1


@pytest.mark.anyio
async def test_download_unknown_batch_is_404(client, session):
    admin = await make_member(session, role="ADMIN")

    r = await client.get("/api/v1/admin/payments/BATCH-20260101-000000-AAAA/download", headers=identity_headers(admin))
    assert r.status_code == 404


@pytest.mark.anyio
async def test_download_refuses_name_wider_than_its_field(client, session):
    # 16 kanji encode to 32 Shift_JIS bytes; the recipient field holds 30.
    member = await make_member(session, name="山" * 16)
    admin = await make_member(session, role="ADMIN")
    approved = await make_application(session, member=member, status="APPROVED", final_amount=5000)
    headers = identity_headers(admin)

    r = await client.post(
        "/api/v1/admin/payments/generate", json={"application_ids": [str(approved.id)]}, headers=headers
    )
    assert r.status_code == 201
    batch_id = r.json()["batchId"]

    r = await client.get(f"/api/v1/admin/payments/{batch_id}/download", headers=headers)
    assert r.status_code == 422
    assert r.json()["code"] == "ENCODING_ERROR"
    assert "recipient" in r.json()["detail"]
