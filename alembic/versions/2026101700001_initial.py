"""Initial schema for the institution registry

Revision ID: 2026101700001
Revises:
Create Date: 2026-10-17 00:00:01.000000
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "2026101700001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "institution",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("name", sa.String(length=80), nullable=False),
        sa.Column("email", sa.String(length=120), nullable=False),
        sa.Column("account_number", sa.String(length=80), nullable=False),
        sa.Column("address", sa.String(length=80), nullable=False),
        sa.Column("phone", sa.String(length=15), nullable=False),
        sa.Column("logo", sa.String(length=255), nullable=True),
        sa.Column("banner", sa.String(length=255), nullable=True),
        sa.Column(
            "role", sa.String(length=32), nullable=False, server_default=sa.text("'institution'")
        ),
        sa.Column(
            "status", sa.String(length=16), nullable=False, server_default=sa.text("'pending'")
        ),
        sa.Column("owner_id", sa.String(length=36), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()
        ),
        sa.PrimaryKeyConstraint("id", name="pk_institution"),
        sa.UniqueConstraint("name", name="uq_institution_name"),
        sa.UniqueConstraint("email", name="uq_institution_email"),
        sa.CheckConstraint(
            "status IN ('pending', 'approved', 'denied')",
            name="ck_institution_status_check",
        ),
    )

    op.create_table(
        "user_account",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("name", sa.String(length=50), nullable=False),
        sa.Column("lastname", sa.String(length=50), nullable=False),
        sa.Column("email", sa.String(length=120), nullable=False),
        sa.Column("dni", sa.String(length=8), nullable=True),
        sa.Column("address", sa.String(length=80), nullable=True),
        sa.Column("phone", sa.String(length=15), nullable=True),
        sa.Column("img_profile", sa.String(length=130), nullable=True),
        sa.Column(
            "role", sa.String(length=32), nullable=False, server_default=sa.text("'student'")
        ),
        sa.Column("is_admin", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("institution_id", sa.String(length=36), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()
        ),
        sa.PrimaryKeyConstraint("id", name="pk_user_account"),
        sa.UniqueConstraint("email", name="uq_user_account_email"),
        sa.ForeignKeyConstraint(
            ["institution_id"],
            ["institution.id"],
            name="fk_user_account_institution_id_institution",
            ondelete="SET NULL",
        ),
    )

    op.create_table(
        "payment",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("user_id", sa.String(length=36), nullable=False),
        sa.Column("receipt_url", sa.String(length=255), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()
        ),
        sa.PrimaryKeyConstraint("id", name="pk_payment"),
        sa.ForeignKeyConstraint(
            ["user_id"],
            ["user_account.id"],
            name="fk_payment_user_id_user_account",
            ondelete="CASCADE",
        ),
    )
    op.create_index("ix_payment_user_id", "payment", ["user_id"])
    op.create_index("ix_user_account_institution_id", "user_account", ["institution_id"])


def downgrade() -> None:
    op.drop_index("ix_user_account_institution_id", table_name="user_account")
    op.drop_index("ix_payment_user_id", table_name="payment")
    op.drop_table("payment")
    op.drop_table("user_account")
    op.drop_table("institution")
