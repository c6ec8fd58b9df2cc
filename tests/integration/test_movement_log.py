from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import delete, select, text, update

from qrwallet.core.exceptions import IntegrityViolationError, MovementNotFoundError, ValidationError
from qrwallet.db.models import ProvenanceArtifact, Wallet, WalletMovement
from qrwallet.modules.movements import (
    ActorRole,
    MovementCategory,
    MovementKind,
    MovementLogService,
    MovementQuery,
)
from qrwallet.modules.provenance import ProvenanceService


async def _seed(coordinator):
    token = (await coordinator.enroll("acct-a")).token
    other = (await coordinator.enroll("acct-b")).token
    await coordinator.transfer(
        token, "20.00", "credit", "officer-1", ActorRole.VERIFYING_OFFICER, "Phones", "verified_credit"
    )
    await coordinator.transfer(token, "5.00", "debit", "officer-2", ActorRole.SERVICE_OFFICER, "Fare", "service")
    await coordinator.transfer(token, "1.00", "debit", "officer-2", ActorRole.SERVICE_OFFICER, "Snack", "service")
    await coordinator.transfer(
        other, "4.00", "credit", "officer-1", ActorRole.VERIFYING_OFFICER, "Cables", "verified_credit"
    )


async def test_projections_filter_and_paginate(container, coordinator):
    await _seed(coordinator)
    async with container.session_factory() as session:
        log = MovementLogService.with_session(session)

        by_account = await log.list_movements(MovementQuery(account_id="acct-a"))
        assert [m.sequence for m in by_account] == [3, 2, 1]

        by_actor = await log.list_movements(MovementQuery(actor_id="officer-1"))
        assert {m.account_id for m in by_actor} == {"acct-a", "acct-b"}

        by_category = await log.list_movements(MovementQuery(category=MovementCategory.SERVICE))
        assert len(by_category) == 2
        assert all(m.kind is MovementKind.DEBIT for m in by_category)

        page = await log.list_movements(MovementQuery(account_id="acct-a", limit=2, offset=2))
        assert [m.sequence for m in page] == [1]

        future = datetime.now(timezone.utc) + timedelta(hours=1)
        assert await log.list_movements(MovementQuery(since=future)) == []
        assert len(await log.list_movements(MovementQuery(until=future))) == 4


@pytest.mark.parametrize(
    "query",
    [
        MovementQuery(limit=0),
        MovementQuery(limit=201),
        MovementQuery(offset=-1),
        MovementQuery(
            since=datetime(2026, 10, 2, tzinfo=timezone.utc),
            until=datetime(2026, 10, 1, tzinfo=timezone.utc),
        ),
    ],
)
async def test_invalid_queries_are_rejected(container, query):
    async with container.session_factory() as session:
        with pytest.raises(ValidationError):
            await MovementLogService.with_session(session).list_movements(query)


async def test_audit_is_consistent_after_transfers(container, coordinator):
    await _seed(coordinator)
    async with container.session_factory() as session:
        audit = await MovementLogService.with_session(session).assert_consistent("acct-a")
    assert audit.consistent
    assert audit.movement_count == 3
    assert (audit.credited_cents, audit.debited_cents, audit.balance_cents) == (2000, 600, 1400)


async def test_audit_detects_tampered_balance(container, coordinator):
    await _seed(coordinator)
    async with container.session_factory() as session:
        await session.execute(update(Wallet).where(Wallet.account_id == "acct-a").values(balance_cents=99999))
        await session.commit()

    async with container.session_factory() as session:
        log = MovementLogService.with_session(session)
        audit = await log.audit_account("acct-a")
        assert not audit.consistent
        with pytest.raises(IntegrityViolationError):
            await log.assert_consistent("acct-a")


async def test_stored_movement_cannot_be_modified(container, coordinator):
    await _seed(coordinator)
    async with container.session_factory() as session:
        log = MovementLogService.with_session(session)
        movement_id = (await log.list_movements(MovementQuery(account_id="acct-a", limit=1)))[0].id

        model = await session.get(WalletMovement, movement_id)
        model.description = "rewritten"
        with pytest.raises(IntegrityViolationError):
            await session.flush()
        await session.rollback()


async def test_stored_movement_cannot_be_deleted(container, coordinator):
    await _seed(coordinator)
    async with container.session_factory() as session:
        log = MovementLogService.with_session(session)
        movement_id = (await log.list_movements(MovementQuery(account_id="acct-a", limit=1)))[0].id

        model = await session.get(WalletMovement, movement_id)
        await session.delete(model)
        with pytest.raises(IntegrityViolationError):
            await session.flush()
        await session.rollback()


@pytest.mark.parametrize(
    "statement",
    [
        update(WalletMovement).values(description="rewritten"),
        delete(WalletMovement),
        update(ProvenanceArtifact).values(notes="rewritten"),
        delete(ProvenanceArtifact),
    ],
)
async def test_bulk_changes_to_immutable_tables_are_rejected(container, coordinator, statement):
    await _seed(coordinator)
    async with container.session_factory() as session:
        with pytest.raises(IntegrityViolationError):
            await session.execute(statement)
        await session.rollback()

    async with container.session_factory() as session:
        audit = await MovementLogService.with_session(session).audit_account("acct-a")
    assert audit.consistent


@pytest.mark.parametrize(
    "sql",
    [
        "UPDATE wallet_movements SET amount_cents = 1",
        "DELETE FROM wallet_movements",
        "UPDATE provenance_artifacts SET notes = 'rewritten'",
        "DELETE FROM provenance_artifacts",
    ],
)
async def test_raw_sql_cannot_change_immutable_tables(container, coordinator, sql):
    await _seed(coordinator)
    with pytest.raises(IntegrityViolationError):
        async with container.unit_of_work() as uow:
            await uow.session.execute(text(sql))
            await uow.commit()

    async with container.session_factory() as session:
        amounts = (await session.execute(select(WalletMovement.amount_cents))).scalars().all()
        artifacts = (await session.execute(select(ProvenanceArtifact.id))).scalars().all()
        audit = await MovementLogService.with_session(session).audit_account("acct-a")
    assert sorted(amounts) == [100, 400, 500, 2000]
    assert len(artifacts) == 2
    assert audit.consistent


async def test_metadata_is_stored_as_given(container, coordinator):
    token = (await coordinator.enroll("acct-a")).token
    for description, metadata in (("empty", {}), ("tagged", {"bin": "B-7"}), ("none", None)):
        await coordinator.transfer(
            token,
            "1.00",
            "credit",
            "officer-1",
            ActorRole.VERIFYING_OFFICER,
            description,
            "verified_credit",
            metadata=metadata,
        )

    async with container.session_factory() as session:
        movements = await MovementLogService.with_session(session).list_movements(MovementQuery(account_id="acct-a"))
    stored = {m.description: m.metadata for m in movements}
    assert stored == {"empty": {}, "tagged": {"bin": "B-7"}, "none": None}


async def test_get_movement_by_id(container, coordinator):
    await _seed(coordinator)
    async with container.session_factory() as session:
        log = MovementLogService.with_session(session)
        latest = (await log.list_movements(MovementQuery(account_id="acct-a", limit=1)))[0]

        assert (await log.get_movement(latest.id)).description == "Snack"
        with pytest.raises(MovementNotFoundError):
            await log.get_movement("missing")


async def test_provenance_lists_newest_credit_first(container, coordinator):
    token = (await coordinator.enroll("acct-a")).token
    for amount in ("1.00", "2.00", "3.00"):
        await coordinator.transfer(
            token, amount, "credit", "officer-1", ActorRole.VERIFYING_OFFICER, "Cables", "verified_credit"
        )
    await coordinator.transfer(token, "0.50", "debit", "officer-2", ActorRole.SERVICE_OFFICER, "Fare", "service")

    async with container.session_factory() as session:
        service = ProvenanceService.with_session(session)
        page = await service.list_for_account("acct-a", limit=2)
        rest = await service.list_for_account("acct-a", limit=2, offset=2)
        summary = await service.summarize_account("acct-a")
        empty = await service.summarize_account("acct-b")
        with pytest.raises(ValidationError):
            await service.list_for_account("acct-a", limit=0)

    assert [a.total_value_cents for a in page] == [300, 200]
    assert [a.total_value_cents for a in rest] == [100]
    assert (summary.artifact_count, summary.total_value_cents) == (3, 600)
    assert (empty.artifact_count, empty.total_value_cents) == (0, 0)
