"""Transfer coordinator: the single entry point for every balance change.

A transfer resolves and verifies the presented token, takes the account lock,
applies the change to the ledger, appends the movement (plus provenance for
verified credits), records the scan and commits, all inside one unit of
work. Any failure rolls the unit back, so either every write of the transfer
is visible or none is.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Callable, Mapping, Optional

from qrwallet.core.crypto import TokenKeyring
from qrwallet.core.exceptions import AccountAlreadyEnrolledError, AccountNotFoundError, LedgerError
from qrwallet.core.locks import KeyedLockManager
from qrwallet.core.money import MoneyInput
from qrwallet.modules.common import UnitOfWork
from qrwallet.modules.movements.models import ActorRole, MovementCategory, MovementKind, NewMovement
from qrwallet.modules.movements.service import MovementLogService
from qrwallet.modules.provenance.models import ProvenanceInput
from qrwallet.modules.tokens.models import UNSET
from qrwallet.modules.tokens.service import TokenAuthority, utc_now
from qrwallet.modules.wallets.models import AccountLedger, WalletSnapshot
from qrwallet.modules.wallets.service import normalize_account_id

from .models import EnrollmentResult, PresentedToken, TransferRequest, TransferResult, TransferState
from .policy import TransferPolicy

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class _Attempt:
    """Tracks one transfer through its states and logs how it ended."""

    kind: str
    actor_id: str
    state: TransferState = TransferState.RECEIVED
    account_id: Optional[str] = None

    def advance(self, state: TransferState) -> None:
        logger.debug("Transfer by %s for %s: %s -> %s", self.actor_id, self.account_id, self.state.value, state.value)
        self.state = state

    def __enter__(self) -> "_Attempt":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc is None:
            return
        failed_at = self.state
        self.state = TransferState.ABORTED
        code = exc.code if isinstance(exc, LedgerError) else exc.__class__.__name__
        logger.warning(
            "Transfer %s by %s for %s aborted at %s: %s",
            self.kind,
            self.actor_id,
            self.account_id,
            failed_at.value,
            code,
        )


@dataclass(slots=True)
class TransferCoordinator:
    uow_factory: Callable[[], UnitOfWork]
    locks: KeyedLockManager
    keyring: TokenKeyring
    policy: TransferPolicy = field(default_factory=TransferPolicy)
    default_token_ttl: Optional[timedelta] = None
    clock: Callable[[], datetime] = field(default=utc_now)

    async def enroll(self, account_id: str, expires_at: datetime | None | object = UNSET) -> EnrollmentResult:
        """Create the wallet and its token for a new participant."""
        account_id = normalize_account_id(account_id)
        async with self.uow_factory() as uow:
            async with self.locks.acquire(account_id):
                if await uow.wallets.get_snapshot(account_id) is not None:
                    raise AccountAlreadyEnrolledError(f"account {account_id} is already enrolled")
                wallet = await uow.wallets.create_wallet(account_id)
                token = await self._tokens(uow).create_for_account(account_id, expires_at)
                await uow.commit()
        logger.info("Enrolled account %s", account_id)
        return EnrollmentResult(
            account_id=account_id,
            token=token.token,
            key_id=token.key_id,
            expires_at=token.expires_at,
            wallet=wallet,
        )

    async def present_token(self, token: str, scanner_id: str) -> PresentedToken:
        """Identify the holder of ``token`` and count the scan.

        An invalid, inactive or expired token records nothing.
        """
        async with self.uow_factory() as uow:
            tokens = self._tokens(uow)
            account_id = (await tokens.resolve(token)).account_id
            async with self.locks.acquire(account_id):
                wallet = await uow.wallets.get_snapshot(account_id)
                if wallet is None:
                    raise AccountNotFoundError(f"wallet {account_id} not found")
                scanned = await tokens.present(token, scanner_id)
                await uow.commit()
        return PresentedToken(
            account_id=scanned.account_id,
            wallet=wallet,
            scan=scanned.scan_metadata(),
            expires_at=scanned.expires_at,
        )

    async def transfer(
        self,
        token: str,
        amount: MoneyInput | None,
        kind: MovementKind | str,
        actor_id: str,
        actor_role: ActorRole | str,
        description: str,
        category: MovementCategory | str,
        metadata: Optional[Mapping[str, Any]] = None,
        provenance: Optional[ProvenanceInput] = None,
        *,
        amount_cents: int | None = None,
    ) -> TransferResult:
        attempt = _Attempt(kind=getattr(kind, "value", str(kind)), actor_id=str(actor_id))
        with attempt:
            request = self.policy.validate_transfer(
                amount=amount,
                amount_cents=amount_cents,
                kind=kind,
                actor_id=actor_id,
                actor_role=actor_role,
                description=description,
                category=category,
                metadata=metadata,
                provenance=provenance,
            )
            async with self.uow_factory() as uow:
                tokens = self._tokens(uow)
                record = await tokens.resolve(token)
                attempt.account_id = record.account_id
                attempt.advance(TransferState.TOKEN_RESOLVED)

                tokens.verify(record)
                attempt.advance(TransferState.TOKEN_VERIFIED)

                async with self.locks.acquire(record.account_id):
                    attempt.advance(TransferState.LOCKED)
                    result = await self._apply(uow, record.account_id, request, attempt)
                    await tokens.record_scan(record, request.actor_id)
                    await uow.commit()
                    attempt.advance(TransferState.COMMITTED)

        logger.info(
            "Committed %s of %s cents for %s by %s (balance %s)",
            result.kind.value,
            result.amount_cents,
            result.account_id,
            request.actor_id,
            result.balance_after_cents,
        )
        return result

    async def adjust(
        self,
        account_id: str,
        amount: MoneyInput | None,
        kind: MovementKind | str,
        actor_id: str,
        description: str,
        actor_role: ActorRole | str = ActorRole.ADMIN,
        metadata: Optional[Mapping[str, Any]] = None,
        *,
        amount_cents: int | None = None,
    ) -> TransferResult:
        """Administrative credit or debit without a token."""
        request = self.policy.validate_adjustment(
            amount=amount,
            amount_cents=amount_cents,
            kind=kind,
            actor_id=actor_id,
            actor_role=actor_role,
            description=description,
            metadata=metadata,
        )
        account_id = normalize_account_id(account_id)
        attempt = _Attempt(kind=request.kind.value, actor_id=request.actor_id, account_id=account_id)
        with attempt:
            async with self.uow_factory() as uow:
                async with self.locks.acquire(account_id):
                    attempt.advance(TransferState.LOCKED)
                    result = await self._apply(uow, account_id, request, attempt)
                    await uow.commit()
                    attempt.advance(TransferState.COMMITTED)

        logger.info(
            "Committed adjustment %s of %s cents for %s by %s",
            result.kind.value,
            result.amount_cents,
            account_id,
            request.actor_id,
        )
        return result

    async def set_frozen(self, account_id: str, frozen: bool) -> WalletSnapshot:
        account_id = normalize_account_id(account_id)
        async with self.uow_factory() as uow:
            async with self.locks.acquire(account_id):
                ledger = await self._load(uow, account_id)
                ledger.set_frozen(frozen)
                snapshot = await uow.wallets.save_ledger(ledger)
                await uow.commit()
        logger.info("Wallet %s %s", account_id, "frozen" if frozen else "unfrozen")
        return snapshot

    async def _apply(
        self,
        uow: UnitOfWork,
        account_id: str,
        request: TransferRequest,
        attempt: _Attempt,
    ) -> TransferResult:
        now = self.clock()
        ledger = await self._load(uow, account_id)
        if request.kind is MovementKind.DEBIT:
            ledger.can_debit(request.amount_cents)
        change = ledger.adjust(request.amount_cents, request.kind, now)
        await uow.wallets.save_ledger(ledger)
        attempt.advance(TransferState.MUTATED)

        log = MovementLogService(uow.movements)
        await log.ensure_chain(account_id, change.sequence, change.balance_before_cents)
        movement = await log.append(
            NewMovement(
                account_id=account_id,
                sequence=change.sequence,
                kind=change.kind,
                amount_cents=change.amount_cents,
                balance_before_cents=change.balance_before_cents,
                balance_after_cents=change.balance_after_cents,
                actor_id=request.actor_id,
                actor_role=request.actor_role,
                description=request.description,
                category=request.category,
                created_at=now,
                metadata=request.metadata,
            )
        )
        artifact = None
        if request.provenance is not None and request.kind is MovementKind.CREDIT:
            artifact = await uow.provenance.add(
                movement_id=movement.id,
                account_id=account_id,
                verified_by=request.actor_id,
                item=request.provenance,
            )
        attempt.advance(TransferState.LOGGED)

        return TransferResult(
            movement_id=movement.id,
            account_id=account_id,
            kind=movement.kind,
            amount_cents=movement.amount_cents,
            balance_before_cents=movement.balance_before_cents,
            balance_after_cents=movement.balance_after_cents,
            sequence=movement.sequence,
            created_at=movement.created_at,
            provenance=artifact,
        )

    async def _load(self, uow: UnitOfWork, account_id: str) -> AccountLedger:
        ledger = await uow.wallets.load_ledger(account_id, for_update=True)
        if ledger is None:
            raise AccountNotFoundError(f"wallet {account_id} not found")
        return ledger

    def _tokens(self, uow: UnitOfWork) -> TokenAuthority:
        return TokenAuthority(uow.tokens, self.keyring, self.default_token_ttl, self.clock)
