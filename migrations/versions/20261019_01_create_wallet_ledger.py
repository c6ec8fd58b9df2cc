"""create wallet ledger tables

Revision ID: 3f9c1d2a7b10
Revises: 
Create Date: 2026-10-19 09:00:00.000000
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "3f9c1d2a7b10"
down_revision = None
branch_labels = None
depends_on = None

IMMUTABLE_TABLES = ("wallet_movements", "provenance_artifacts")
IMMUTABLE_ROW_MESSAGE = "immutable ledger row"


def _trigger_statements(table: str) -> list[str]:
    if op.get_bind().dialect.name == "postgresql":
        return [
            "CREATE OR REPLACE FUNCTION qrwallet_reject_change() RETURNS trigger AS $$ "
            f"BEGIN RAISE EXCEPTION '{IMMUTABLE_ROW_MESSAGE}' USING ERRCODE = 'integrity_constraint_violation'; END; "
            "$$ LANGUAGE plpgsql",
            f"CREATE TRIGGER trg_{table}_immutable BEFORE UPDATE OR DELETE ON {table} "
            "FOR EACH ROW EXECUTE FUNCTION qrwallet_reject_change()",
        ]
    return [
        f"CREATE TRIGGER trg_{table}_no_{action.lower()} BEFORE {action} ON {table} "
        f"BEGIN SELECT RAISE(ABORT, '{IMMUTABLE_ROW_MESSAGE}'); END"
        for action in ("UPDATE", "DELETE")
    ]


def _drop_trigger_statements(table: str) -> list[str]:
    if op.get_bind().dialect.name == "postgresql":
        return [f"DROP TRIGGER IF EXISTS trg_{table}_immutable ON {table}"]
    return [f"DROP TRIGGER IF EXISTS trg_{table}_no_{action.lower()}" for action in ("UPDATE", "DELETE")]


def upgrade() -> None:
    op.create_table(
        "wallets",
        sa.Column("account_id", sa.String(length=64), primary_key=True),
        sa.Column("balance_cents", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("frozen", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("total_credited_cents", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("total_debited_cents", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("movement_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("last_movement_at", sa.DateTime(timezone=True)),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True)),
        sa.CheckConstraint("balance_cents >= 0", name="ck_wallets_balance_non_negative"),
        sa.CheckConstraint("total_credited_cents >= 0", name="ck_wallets_total_credited_non_negative"),
        sa.CheckConstraint("total_debited_cents >= 0", name="ck_wallets_total_debited_non_negative"),
    )
    op.create_index("ix_wallets_frozen", "wallets", ["frozen"])

    op.create_table(
        "wallet_movements",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("account_id", sa.String(length=64), sa.ForeignKey("wallets.account_id"), nullable=False),
        sa.Column("sequence", sa.Integer(), nullable=False),
        sa.Column("kind", sa.String(length=10), nullable=False),
        sa.Column("amount_cents", sa.BigInteger(), nullable=False),
        sa.Column("balance_before_cents", sa.BigInteger(), nullable=False),
        sa.Column("balance_after_cents", sa.BigInteger(), nullable=False),
        sa.Column("actor_id", sa.String(length=64), nullable=False),
        sa.Column("actor_role", sa.String(length=30), nullable=False),
        sa.Column("description", sa.String(length=500), nullable=False),
        sa.Column("category", sa.String(length=30), nullable=False, server_default="other"),
        sa.Column("meta", sa.Text()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("account_id", "sequence", name="uq_wallet_movements_account_sequence"),
        sa.CheckConstraint("amount_cents > 0", name="ck_wallet_movements_amount_positive"),
        sa.CheckConstraint("balance_after_cents >= 0", name="ck_wallet_movements_balance_after_non_negative"),
    )
    op.create_index("ix_wallet_movements_account_id", "wallet_movements", ["account_id"])
    op.create_index("ix_wallet_movements_actor_id", "wallet_movements", ["actor_id"])
    op.create_index("ix_wallet_movements_category", "wallet_movements", ["category"])
    op.create_index("ix_wallet_movements_created_at", "wallet_movements", ["created_at"])

    op.create_table(
        "authorization_tokens",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("token", sa.String(length=128), nullable=False),
        sa.Column("account_id", sa.String(length=64), sa.ForeignKey("wallets.account_id"), nullable=False),
        sa.Column("key_id", sa.String(length=32), nullable=False),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("expires_at", sa.DateTime(timezone=True)),
        sa.Column("scan_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_scanned_at", sa.DateTime(timezone=True)),
        sa.Column("last_scanned_by", sa.String(length=64)),
        sa.Column("issued_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True)),
        sa.UniqueConstraint("account_id", name="uq_authorization_tokens_account_id"),
    )
    op.create_index("ix_authorization_tokens_token", "authorization_tokens", ["token"], unique=True)

    op.create_table(
        "provenance_artifacts",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column(
            "movement_id",
            sa.String(length=36),
            sa.ForeignKey("wallet_movements.id"),
            nullable=False,
            unique=True,
        ),
        sa.Column("account_id", sa.String(length=64), sa.ForeignKey("wallets.account_id"), nullable=False),
        sa.Column("item_category", sa.String(length=100), nullable=False),
        sa.Column("quantity", sa.Numeric(12, 2), nullable=False),
        sa.Column("unit", sa.String(length=20), nullable=False, server_default="piece"),
        sa.Column("value_per_unit_cents", sa.BigInteger(), nullable=False),
        sa.Column("total_value_cents", sa.BigInteger(), nullable=False),
        sa.Column("condition", sa.String(length=30), nullable=False, server_default="non-working"),
        sa.Column("verified_by", sa.String(length=64), nullable=False),
        sa.Column("notes", sa.String(length=500)),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("quantity > 0", name="ck_provenance_artifacts_quantity_positive"),
        sa.CheckConstraint("total_value_cents >= 0", name="ck_provenance_artifacts_total_non_negative"),
    )
    op.create_index("ix_provenance_artifacts_account_id", "provenance_artifacts", ["account_id"])
    op.create_index("ix_provenance_artifacts_item_category", "provenance_artifacts", ["item_category"])
    op.create_index("ix_provenance_artifacts_verified_by", "provenance_artifacts", ["verified_by"])

    for table in IMMUTABLE_TABLES:
        for statement in _trigger_statements(table):
            op.execute(statement)


def downgrade() -> None:
    for table in IMMUTABLE_TABLES:
        for statement in _drop_trigger_statements(table):
            op.execute(statement)
    if op.get_bind().dialect.name == "postgresql":
        op.execute("DROP FUNCTION IF EXISTS qrwallet_reject_change()")

    op.drop_index("ix_provenance_artifacts_verified_by", table_name="provenance_artifacts")
    op.drop_index("ix_provenance_artifacts_item_category", table_name="provenance_artifacts")
    op.drop_index("ix_provenance_artifacts_account_id", table_name="provenance_artifacts")
    op.drop_table("provenance_artifacts")

    op.drop_index("ix_authorization_tokens_token", table_name="authorization_tokens")
    op.drop_table("authorization_tokens")

    op.drop_index("ix_wallet_movements_created_at", table_name="wallet_movements")
    op.drop_index("ix_wallet_movements_category", table_name="wallet_movements")
    op.drop_index("ix_wallet_movements_actor_id", table_name="wallet_movements")
    op.drop_index("ix_wallet_movements_account_id", table_name="wallet_movements")
    op.drop_table("wallet_movements")

    op.drop_index("ix_wallets_frozen", table_name="wallets")
    op.drop_table("wallets")
