"""initial gate schema

Revision ID: 5c1f0e9a7b21
Revises:
Create Date: 2026-10-18 09:12:44.310552

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "5c1f0e9a7b21"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create nonce, gate and blacklist tables and seed the gate config row."""
    op.create_table(
        "auth_nonce",
        sa.Column("pubkey", sa.Text(), nullable=False),
        sa.Column("nonce", sa.Text(), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("pubkey"),
    )
    gate_config = op.create_table(
        "gate_config",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("enabled", sa.Boolean(), nullable=False),
        sa.Column("mint_address", sa.Text(), nullable=False),
        sa.Column("min_amount", sa.Float(), nullable=True),
        sa.Column("min_usd", sa.Float(), nullable=True),
        sa.Column("tolerance_percent", sa.Float(), nullable=False),
        sa.Column("price_mode", sa.Text(), nullable=False),
        sa.Column("price_coin_id", sa.Text(), nullable=True),
        sa.Column("price_platform", sa.Text(), nullable=True),
        sa.Column("price_token_address", sa.Text(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "gate_state",
        sa.Column("pubkey", sa.Text(), nullable=False),
        sa.Column("last_status", sa.Boolean(), nullable=False),
        sa.Column("last_value_usd", sa.Float(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("pubkey"),
    )
    op.create_table(
        "wallet_blacklist",
        sa.Column("pubkey", sa.Text(), nullable=False),
        sa.Column("reason", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("pubkey"),
    )

    op.execute(
        gate_config.insert().values(
            id=1,
            enabled=False,
            mint_address="",
            min_amount=None,
            min_usd=None,
            tolerance_percent=2.0,
            price_mode="coin_id",
            price_coin_id=None,
            price_platform=None,
            price_token_address=None,
            updated_at=sa.func.now(),
        )
    )


def downgrade() -> None:
    """Drop all gate tables."""
    op.drop_table("wallet_blacklist")
    op.drop_table("gate_state")
    op.drop_table("gate_config")
    op.drop_table("auth_nonce")
