from datetime import datetime, timedelta, timezone

import pytest

from qrwallet.core.crypto import TokenKeyring
from qrwallet.core.exceptions import AccountNotFoundError, InvalidTokenError, ValidationError
from qrwallet.modules.tokens import TokenAuthority
from qrwallet.modules.transfers import TransferCoordinator

NOW = datetime(2026, 10, 19, 8, 0, tzinfo=timezone.utc)


async def test_resolve_rejects_blank_and_oversized_tokens(container):
    async with container.unit_of_work() as uow:
        authority = TokenAuthority(uow.tokens, container.keyring)
        for value in ("", "   ", "x" * 129, None):
            with pytest.raises(InvalidTokenError):
                await authority.resolve(value)


async def test_default_ttl_sets_expiry(container):
    async with container.unit_of_work() as uow:
        await uow.wallets.create_wallet("acct-a")
        authority = TokenAuthority(uow.tokens, container.keyring, timedelta(days=7), clock=lambda: NOW)
        record = await authority.create_for_account("acct-a")
        await uow.commit()

    assert record.issued_at == NOW
    assert record.expires_at == NOW + timedelta(days=7)
    assert record.key_id == "k1"


async def test_explicit_none_means_no_expiry(container):
    async with container.unit_of_work() as uow:
        await uow.wallets.create_wallet("acct-a")
        authority = TokenAuthority(uow.tokens, container.keyring, timedelta(days=7))
        record = await authority.create_for_account("acct-a", None)
    assert record.expires_at is None


async def test_reissue_replaces_token_and_resets_scans(container, coordinator):
    old_token = (await coordinator.enroll("acct-a")).token
    await coordinator.present_token(old_token, "officer-1")

    async with container.unit_of_work() as uow:
        record = await TokenAuthority(uow.tokens, container.keyring).reissue("acct-a")
        await uow.commit()

    assert record.token != old_token
    assert record.scan_count == 0
    assert record.last_scanned_by is None
    with pytest.raises(InvalidTokenError):
        await coordinator.present_token(old_token, "officer-1")
    assert (await coordinator.present_token(record.token, "officer-1")).account_id == "acct-a"


async def test_tokens_survive_key_rotation(container, coordinator):
    old_token = (await coordinator.enroll("acct-a")).token
    rotated = TransferCoordinator(
        uow_factory=container.unit_of_work,
        locks=container.locks,
        keyring=TokenKeyring({"k2": "second-generation-secret"}, "k2"),
    )

    presented = await rotated.present_token(old_token, "officer-1")
    assert presented.account_id == "acct-a"

    enrollment = await rotated.enroll("acct-b")
    assert enrollment.key_id == "k2"
    async with container.unit_of_work() as uow:
        old_record = await uow.tokens.get_by_account("acct-a")
    assert old_record.key_id == "k1"


async def test_reactivate_validates_expiry(container, coordinator):
    await coordinator.enroll("acct-a")
    async with container.unit_of_work() as uow:
        authority = TokenAuthority(uow.tokens, container.keyring)
        await authority.deactivate("acct-a")
        with pytest.raises(ValidationError):
            await authority.reactivate("acct-a", datetime.now(timezone.utc) - timedelta(minutes=1))
        future = datetime.now(timezone.utc) + timedelta(days=2)
        record = await authority.reactivate("acct-a", future)
        await uow.commit()

    assert record.active is True
    assert record.expires_at == future


async def test_lifecycle_on_unknown_account(container):
    async with container.unit_of_work() as uow:
        authority = TokenAuthority(uow.tokens, container.keyring)
        with pytest.raises(AccountNotFoundError):
            await authority.deactivate("missing")
        with pytest.raises(AccountNotFoundError):
            await authority.reissue("missing")
        with pytest.raises(AccountNotFoundError):
            await authority.get_for_account("missing")


async def test_scan_requires_scanner(container, coordinator):
    token = (await coordinator.enroll("acct-a")).token
    async with container.unit_of_work() as uow:
        authority = TokenAuthority(uow.tokens, container.keyring)
        record = await authority.resolve(token)
        with pytest.raises(ValidationError):
            await authority.record_scan(record, "")
