"""initial_schema

Users, external logins, OTP requests and throttles, partner API keys.

Revision ID: 4c1e2a7f9b30
Revises:
Create Date: 2026-10-17 09:12:44.218305

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "4c1e2a7f9b30"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

SEQUENCES = (
    "users_id_seq",
    "external_logins_id_seq",
    "otp_requests_id_seq",
    "api_keys_id_seq",
)


def upgrade() -> None:
    """Upgrade schema."""
    for name in SEQUENCES:
        op.execute(sa.schema.CreateSequence(sa.Sequence(name)))

    op.create_table(
        "users",
        sa.Column(
            "id",
            sa.BigInteger(),
            server_default=sa.text("nextval('users_id_seq')"),
            nullable=False,
        ),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("password_hash", sa.String(length=255), nullable=True),
        sa.Column("phone_number", sa.String(length=20), nullable=True),
        sa.Column(
            "is_email_verified", sa.Boolean(), server_default="false", nullable=False
        ),
        sa.Column(
            "is_phone_verified", sa.Boolean(), server_default="false", nullable=False
        ),
        sa.Column(
            "created_at",
            postgresql.TIMESTAMP(timezone=True),
            server_default=sa.text("NOW()"),
            nullable=False,
        ),
        sa.Column("updated_at", postgresql.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("last_login_at", postgresql.TIMESTAMP(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email", name="uq_users_email"),
        sa.UniqueConstraint("phone_number", name="uq_users_phone_number"),
    )

    op.create_table(
        "external_logins",
        sa.Column(
            "id",
            sa.BigInteger(),
            server_default=sa.text("nextval('external_logins_id_seq')"),
            nullable=False,
        ),
        sa.Column("user_id", sa.BigInteger(), nullable=False),
        sa.Column("provider", sa.String(length=50), nullable=False),
        sa.Column("provider_user_id", sa.String(length=255), nullable=False),
        sa.Column("provider_email", sa.String(length=255), nullable=True),
        sa.Column("provider_display_name", sa.String(length=255), nullable=True),
        sa.Column(
            "created_at",
            postgresql.TIMESTAMP(timezone=True),
            server_default=sa.text("NOW()"),
            nullable=False,
        ),
        sa.Column("last_used_at", postgresql.TIMESTAMP(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "provider", "provider_user_id", name="uq_external_login_identity"
        ),
        sa.UniqueConstraint(
            "user_id", "provider", name="uq_external_login_user_provider"
        ),
    )
    op.create_index(
        "idx_external_logins_user_id", "external_logins", ["user_id"], unique=False
    )

    op.create_table(
        "otp_requests",
        sa.Column(
            "id",
            sa.BigInteger(),
            server_default=sa.text("nextval('otp_requests_id_seq')"),
            nullable=False,
        ),
        sa.Column("identifier", sa.String(length=255), nullable=False),
        sa.Column("code", sa.String(length=6), nullable=False),
        sa.Column("user_id", sa.BigInteger(), nullable=True),
        sa.Column("created_at", postgresql.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("expires_at", postgresql.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("is_used", sa.Boolean(), server_default="false", nullable=False),
        sa.Column("attempt_count", sa.Integer(), server_default="0", nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "idx_otp_requests_identifier_created",
        "otp_requests",
        ["identifier", "created_at"],
        unique=False,
    )

    op.create_table(
        "otp_rate_limits",
        sa.Column("identifier", sa.String(length=255), nullable=False),
        sa.Column("request_count", sa.Integer(), server_default="0", nullable=False),
        sa.Column("window_start", postgresql.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("blocked_until", postgresql.TIMESTAMP(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("identifier"),
    )

    op.create_table(
        "api_keys",
        sa.Column(
            "id",
            sa.BigInteger(),
            server_default=sa.text("nextval('api_keys_id_seq')"),
            nullable=False,
        ),
        sa.Column("partner_key", sa.String(length=50), nullable=False),
        sa.Column("partner_name", sa.String(length=255), nullable=False),
        sa.Column("key", sa.String(length=128), nullable=False),
        sa.Column("key_prefix", sa.String(length=32), nullable=False),
        sa.Column(
            "scopes", postgresql.ARRAY(sa.Text()), server_default="{}", nullable=False
        ),
        sa.Column(
            "allowed_ips",
            postgresql.ARRAY(sa.Text()),
            server_default="{}",
            nullable=False,
        ),
        sa.Column(
            "allowed_origins",
            postgresql.ARRAY(sa.Text()),
            server_default="{}",
            nullable=False,
        ),
        sa.Column(
            "rate_limit_per_minute", sa.Integer(), server_default="60", nullable=False
        ),
        sa.Column("is_active", sa.Boolean(), server_default="true", nullable=False),
        sa.Column("expires_at", postgresql.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("usage_count", sa.BigInteger(), server_default="0", nullable=False),
        sa.Column("last_used_at", postgresql.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column(
            "created_at",
            postgresql.TIMESTAMP(timezone=True),
            server_default=sa.text("NOW()"),
            nullable=False,
        ),
        sa.Column("updated_at", postgresql.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("created_by", sa.String(length=255), nullable=True),
        sa.Column("updated_by", sa.String(length=255), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("partner_key", name="uq_api_keys_partner_key"),
        sa.UniqueConstraint("key", name="uq_api_keys_key"),
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table("api_keys")
    op.drop_table("otp_rate_limits")
    op.drop_index("idx_otp_requests_identifier_created", table_name="otp_requests")
    op.drop_table("otp_requests")
    op.drop_index("idx_external_logins_user_id", table_name="external_logins")
    op.drop_table("external_logins")
    op.drop_table("users")
    for name in reversed(SEQUENCES):
        op.execute(sa.schema.DropSequence(sa.Sequence(name)))
