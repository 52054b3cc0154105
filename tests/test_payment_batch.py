from datetime import date, datetime, timezone
import re
import uuid

import pytest
from sqlalchemy import select

from src.errors import ConflictError, ValidationFailedError
from src.models.audit_log import AuditLog
from src.models.payment import Payment
from src.services.payment_batch import PaymentBatchGenerator, generate_batch_id, payable_amount
from src.services.zengin import LINE_SEPARATOR
from tests._factories import make_application, make_member

BATCH_ID = re.compile(r"^BATCH-\d{8}-\d{6}-[0-9A-Z]{4}$")


async def _payments(session):
    return list((await session.execute(select(Payment))).scalars().all())


def test_batch_id_embeds_generation_instant():
    now = datetime(2026, 4, 25, 9, 30, 5, tzinfo=timezone.utc)
    batch_id = generate_batch_id(now)

    assert BATCH_ID.match(batch_id)
    assert batch_id.startswith("BATCH-20260425-093005-")


def test_batch_ids_generated_in_the_same_second_differ():
    now = datetime(2026, 4, 25, 9, 30, 5, tzinfo=timezone.utc)
    assert len({generate_batch_id(now) for _ in range(50)}) > 1


@pytest.mark.anyio
async def test_list_ready_returns_unpaid_approved_oldest_first(session):
    member = await make_member(session)
    newer = await make_application(session, member=member, status="APPROVED", approved_minutes_ago=5)
    older = await make_application(session, member=member, status="APPROVED", approved_minutes_ago=60)
    await make_application(session, member=member, status="SUBMITTED")
    paid = await make_application(session, member=member, status="APPROVED", approved_minutes_ago=90)

    generator = PaymentBatchGenerator()
    await generator.generate_batch(session, application_ids=[paid.id])

    ready = await generator.list_ready(session)
    assert [r.id for r in ready] == [older.id, newer.id]
    assert ready[0].member_name == member.name


@pytest.mark.anyio
async def test_generate_batch_creates_one_pending_payment_per_application(session):
    member = await make_member(session)
    a = await make_application(session, member=member, status="APPROVED", amount=10000, final_amount=8000)
    b = await make_application(session, member=member, status="APPROVED", amount=2500)

    result = await PaymentBatchGenerator().generate_batch(session, application_ids=[a.id, b.id])

    assert BATCH_ID.match(result.batch_id)
    assert result.payment_count == 2
    assert result.total_amount == 10500

    payments = await _payments(session)
    assert {p.application_id for p in payments} == {a.id, b.id}
    assert {p.batch_id for p in payments} == {result.batch_id}
    assert {p.payment_status for p in payments} == {"PENDING"}

    audit = (await session.execute(select(AuditLog).where(AuditLog.entity_type == "payment_batch"))).scalar_one()
    assert audit.entity_id == result.batch_id


@pytest.mark.anyio
async def test_duplicate_ids_in_request_are_paid_once(session):
    member = await make_member(session)
    a = await make_application(session, member=member, status="APPROVED", amount=700)

    result = await PaymentBatchGenerator().generate_batch(session, application_ids=[a.id, a.id])

    assert result.payment_count == 1
    assert result.total_amount == 700


@pytest.mark.anyio
async def test_second_batch_for_same_application_is_refused(session):
    member = await make_member(session)
    a = await make_application(session, member=member, status="APPROVED")
    b = await make_application(session, member=member, status="APPROVED")
    # The refused call rolls back and expires the loaded rows.
    a_id, b_id = a.id, b.id
    generator = PaymentBatchGenerator()

    first = await generator.generate_batch(session, application_ids=[a_id])

    with pytest.raises(ConflictError, match="already have payment records"):
        await generator.generate_batch(session, application_ids=[a_id, b_id])

    payments = await _payments(session)
    assert [(p.application_id, p.batch_id) for p in payments] == [(a_id, first.batch_id)]


@pytest.mark.anyio
async def test_mixed_statuses_write_nothing(session):
    member = await make_member(session)
    approved = await make_application(session, member=member, status="APPROVED")
    submitted = await make_application(session, member=member, status="SUBMITTED")

    with pytest.raises(ConflictError, match="not in APPROVED status"):
        await PaymentBatchGenerator().generate_batch(session, application_ids=[approved.id, submitted.id])

    assert await _payments(session) == []


@pytest.mark.anyio
async def test_unknown_application_id_is_a_conflict(session):
    member = await make_member(session)
    approved = await make_application(session, member=member, status="APPROVED")

    with pytest.raises(ConflictError):
        await PaymentBatchGenerator().generate_batch(session, application_ids=[approved.id, uuid.uuid4()])


@pytest.mark.anyio
async def test_empty_request_is_a_validation_error(session):
    with pytest.raises(ValidationFailedError):
        await PaymentBatchGenerator().generate_batch(session, application_ids=[])


@pytest.mark.anyio
async def test_find_by_unknown_batch_is_empty(session):
    assert await PaymentBatchGenerator().find_by_batch_id(session, batch_id="BATCH-19700101-000000-0000") == []
    assert await PaymentBatchGenerator().build_transfer_file(session, batch_id="nope") is None


@pytest.mark.anyio
async def test_transfer_file_uses_member_account_or_defaults(session):
    with_account = await make_member(
        session,
        name="Taro Yamada",
        account_holder_kana="ﾔﾏﾀﾞ ﾀﾛｳ",
        bank_code="0005",
        branch_code="123",
        account_type="2",
        account_number="7654321",
    )
    without_account = await make_member(session, name="Hanako")
    a = await make_application(session, member=with_account, status="APPROVED", amount=10000, final_amount=8000)
    b = await make_application(session, member=without_account, status="APPROVED", amount=1200)

    generator = PaymentBatchGenerator()
    result = await generator.generate_batch(session, application_ids=[a.id, b.id])
    content = await generator.build_transfer_file(session, batch_id=result.batch_id, transfer_date=date(2026, 4, 25))

    lines = content.decode("shift_jis").split(LINE_SEPARATOR)
    data = {line[50:80].rstrip(): line for line in lines if line.startswith("2")}

    assert data["ﾔﾏﾀﾞ ﾀﾛｳ"][1:5] == "0005"
    assert data["ﾔﾏﾀﾞ ﾀﾛｳ"][42:50] == "27654321"
    assert int(data["ﾔﾏﾀﾞ ﾀﾛｳ"][80:90]) == 8000

    assert data["Hanako"][1:5] == "0001"
    assert data["Hanako"][42:50] == "10000000"
    assert int(data["Hanako"][80:90]) == 1200

    trailer = lines[-2]
    assert int(trailer[1:7]) == 2
    assert int(trailer[7:19]) == 9200


def test_payable_amount_prefers_final_amount():
    class _App:
        amount = 10000
        final_amount = 0

    assert payable_amount(_App()) == 0
    _App.final_amount = None
    assert payable_amount(_App()) == 10000
