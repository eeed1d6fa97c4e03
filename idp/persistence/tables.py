"""SQLAlchemy table definitions for the identity provider.

These table definitions are used with SQLAlchemy Core.
They match the schema defined in Alembic migrations.
"""

from sqlalchemy import (
    BigInteger,
    Boolean,
    Column,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    Sequence,
    String,
    Table,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import ARRAY, TIMESTAMP

# Metadata object for all tables
metadata = MetaData()

users_id_seq = Sequence("users_id_seq", metadata=metadata)
external_logins_id_seq = Sequence("external_logins_id_seq", metadata=metadata)
otp_requests_id_seq = Sequence("otp_requests_id_seq", metadata=metadata)
api_keys_id_seq = Sequence("api_keys_id_seq", metadata=metadata)

# ============================================================================
# USERS TABLE
# ============================================================================
users_table = Table(
    "users",
    metadata,
    Column("id", BigInteger, users_id_seq, primary_key=True),
    Column("email", String(255), nullable=True),  # Lowercased
    Column("password_hash", String(255), nullable=True),  # bcrypt
    Column("phone_number", String(20), nullable=True),  # E.164
    Column("is_email_verified", Boolean, nullable=False, server_default="false"),
    Column("is_phone_verified", Boolean, nullable=False, server_default="false"),
    Column(
        "created_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    Column("updated_at", TIMESTAMP(timezone=True), nullable=True),
    Column("last_login_at", TIMESTAMP(timezone=True), nullable=True),
    UniqueConstraint("email", name="uq_users_email"),
    UniqueConstraint("phone_number", name="uq_users_phone_number"),
)

# ============================================================================
# EXTERNAL LOGINS TABLE (third-party identities)
# ============================================================================
external_logins_table = Table(
    "external_logins",
    metadata,
    Column("id", BigInteger, external_logins_id_seq, primary_key=True),
    Column(
        "user_id", BigInteger, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    ),
    Column("provider", String(50), nullable=False),  # Lowercased
    Column("provider_user_id", String(255), nullable=False),
    Column("provider_email", String(255), nullable=True),
    Column("provider_display_name", String(255), nullable=True),
    Column(
        "created_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    Column("last_used_at", TIMESTAMP(timezone=True), nullable=True),
    UniqueConstraint("provider", "provider_user_id", name="uq_external_login_identity"),
    UniqueConstraint("user_id", "provider", name="uq_external_login_user_provider"),
)

Index("idx_external_logins_user_id", external_logins_table.c.user_id)

# ============================================================================
# OTP REQUESTS TABLE
# ============================================================================
otp_requests_table = Table(
    "otp_requests",
    metadata,
    Column("id", BigInteger, otp_requests_id_seq, primary_key=True),
    Column("identifier", String(255), nullable=False),
    Column("code", String(6), nullable=False),
    Column(
        "user_id", BigInteger, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    ),
    Column("created_at", TIMESTAMP(timezone=True), nullable=False),
    Column("expires_at", TIMESTAMP(timezone=True), nullable=False),
    Column("is_used", Boolean, nullable=False, server_default="false"),
    Column("attempt_count", Integer, nullable=False, server_default="0"),
)

Index(
    "idx_otp_requests_identifier_created",
    otp_requests_table.c.identifier,
    otp_requests_table.c.created_at,
)

# ============================================================================
# OTP RATE LIMITS TABLE
# ============================================================================
otp_rate_limits_table = Table(
    "otp_rate_limits",
    metadata,
    Column("identifier", String(255), primary_key=True),
    Column("request_count", Integer, nullable=False, server_default="0"),
    Column("window_start", TIMESTAMP(timezone=True), nullable=False),
    Column("blocked_until", TIMESTAMP(timezone=True), nullable=True),
)

# ============================================================================
# API KEYS TABLE (partner credentials)
# ============================================================================
api_keys_table = Table(
    "api_keys",
    metadata,
    Column("id", BigInteger, api_keys_id_seq, primary_key=True),
    Column("partner_key", String(50), nullable=False),
    Column("partner_name", String(255), nullable=False),
    Column("key", String(128), nullable=False),
    Column("key_prefix", String(32), nullable=False),
    Column("scopes", ARRAY(Text), nullable=False, server_default="{}"),
    Column("allowed_ips", ARRAY(Text), nullable=False, server_default="{}"),
    Column("allowed_origins", ARRAY(Text), nullable=False, server_default="{}"),
    Column("rate_limit_per_minute", Integer, nullable=False, server_default="60"),
    Column("is_active", Boolean, nullable=False, server_default="true"),
    Column("expires_at", TIMESTAMP(timezone=True), nullable=True),
    Column("usage_count", BigInteger, nullable=False, server_default="0"),
    Column("last_used_at", TIMESTAMP(timezone=True), nullable=True),
    Column("description", Text, nullable=True),
    Column(
        "created_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    Column("updated_at", TIMESTAMP(timezone=True), nullable=True),
    Column("created_by", String(255), nullable=True),
    Column("updated_by", String(255), nullable=True),
    UniqueConstraint("partner_key", name="uq_api_keys_partner_key"),
    UniqueConstraint("key", name="uq_api_keys_key"),
)
