"""Write guards keeping the movement log append-only.

Two layers refuse changes to stored movements and provenance artifacts:
ORM hooks catch flushes and bulk statements issued through a Session, and
database triggers catch everything else (raw SQL, Core statements, other
clients). Trigger failures carry ``IMMUTABLE_ROW_MESSAGE`` so the unit of
work can report them as integrity violations.
"""

from __future__ import annotations

import logging

from sqlalchemy import DDL, event
from sqlalchemy.orm import ORMExecuteState, Session

from qrwallet.core.exceptions import IntegrityViolationError
from qrwallet.db.models import ProvenanceArtifact, WalletMovement

logger = logging.getLogger(__name__)

IMMUTABLE_MODELS = (WalletMovement, ProvenanceArtifact)
IMMUTABLE_ROW_MESSAGE = "immutable ledger row"


def _reject_row_change(mapper, connection, target) -> None:
    table = mapper.local_table.name
    logger.critical("Attempted modification of immutable %s row %s", table, target.id)
    raise IntegrityViolationError(f"{table} row {target.id} is immutable")


for _model in IMMUTABLE_MODELS:
    event.listen(_model, "before_update", _reject_row_change)
    event.listen(_model, "before_delete", _reject_row_change)


@event.listens_for(Session, "do_orm_execute")
def _reject_bulk_change(state: ORMExecuteState) -> None:
    if not (state.is_update or state.is_delete):
        return
    for mapper in state.all_mappers:
        if mapper.class_ in IMMUTABLE_MODELS:
            table = mapper.local_table.name
            logger.critical("Attempted bulk modification of immutable table %s", table)
            raise IntegrityViolationError(f"{table} rows are immutable")


def sqlite_trigger_statements(table: str) -> list[str]:
    return [
        f"CREATE TRIGGER IF NOT EXISTS trg_{table}_no_{op.lower()} BEFORE {op} ON {table} "
        f"BEGIN SELECT RAISE(ABORT, '{IMMUTABLE_ROW_MESSAGE}'); END"
        for op in ("UPDATE", "DELETE")
    ]


POSTGRES_REJECT_FUNCTION = (
    "CREATE OR REPLACE FUNCTION qrwallet_reject_change() RETURNS trigger AS $$ "
    f"BEGIN RAISE EXCEPTION '{IMMUTABLE_ROW_MESSAGE}' USING ERRCODE = 'integrity_constraint_violation'; END; "
    "$$ LANGUAGE plpgsql"
)


def postgres_trigger_statements(table: str) -> list[str]:
    return [
        POSTGRES_REJECT_FUNCTION,
        f"DROP TRIGGER IF EXISTS trg_{table}_immutable ON {table}",
        f"CREATE TRIGGER trg_{table}_immutable BEFORE UPDATE OR DELETE ON {table} "
        "FOR EACH ROW EXECUTE FUNCTION qrwallet_reject_change()",
    ]


for _model in IMMUTABLE_MODELS:
    _table = _model.__table__
    for _statement in sqlite_trigger_statements(_table.name):
        event.listen(_table, "after_create", DDL(_statement).execute_if(dialect="sqlite"))
    for _statement in postgres_trigger_statements(_table.name):
        event.listen(_table, "after_create", DDL(_statement).execute_if(dialect="postgresql"))


def is_immutable_row_error(exc: BaseException) -> bool:
    return IMMUTABLE_ROW_MESSAGE in str(getattr(exc, "orig", exc))


__all__ = [
    "IMMUTABLE_MODELS",
    "IMMUTABLE_ROW_MESSAGE",
    "is_immutable_row_error",
    "postgres_trigger_statements",
    "sqlite_trigger_statements",
]
