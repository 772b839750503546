"""login events and audit trail

Revision ID: 0002_login_events_audit
Revises: 0001_initial
Create Date: 2024-01-02 00:00:00.000000
"""

from alembic import op
import sqlalchemy as sa


revision = "0002_login_events_audit"
down_revision = "0001_initial"
branch_labels = None
depends_on = None


class GUID(sa.TypeDecorator):
    impl = sa.CHAR
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            from sqlalchemy.dialects.postgresql import UUID

            return dialect.type_descriptor(UUID(as_uuid=True))
        return dialect.type_descriptor(sa.CHAR(36))


def upgrade() -> None:
    op.create_table(
        "login_events",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("store_id", sa.String(length=100), nullable=False),
        sa.Column("client_store_id", sa.String(length=100), nullable=False),
        sa.Column("manager_name", sa.String(length=255), nullable=False),
        sa.Column("manager_number", sa.String(length=50), nullable=False),
        sa.Column("login_type", sa.String(length=20), nullable=False),
        sa.Column("login_date", sa.Date(), nullable=False),
        sa.Column("brand_id", GUID(), sa.ForeignKey("brands.id"), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_login_events_brand_date", "login_events", ["brand_id", "login_date"], unique=False)
    op.create_index("ix_login_events_login_date", "login_events", ["login_date"], unique=False)

    op.create_table(
        "audit_events",
        sa.Column("id", GUID(), primary_key=True),
        sa.Column("user_id", GUID(), nullable=True),
        sa.Column("actor", sa.String(length=150), nullable=False),
        sa.Column("action", sa.String(length=255), nullable=False),
        sa.Column("entity_type", sa.String(length=50), nullable=True),
        sa.Column("entity_id", sa.String(length=64), nullable=True),
        sa.Column("metadata", sa.JSON(), nullable=True),
        sa.Column("result", sa.String(length=20), nullable=False),
        sa.Column("trace_id", sa.String(length=64), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_audit_events_user_id", "audit_events", ["user_id"], unique=False)
    op.create_index("ix_audit_events_trace_id", "audit_events", ["trace_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_audit_events_trace_id", table_name="audit_events")
    op.drop_index("ix_audit_events_user_id", table_name="audit_events")
    op.drop_table("audit_events")
    op.drop_index("ix_login_events_login_date", table_name="login_events")
    op.drop_index("ix_login_events_brand_date", table_name="login_events")
    op.drop_table("login_events")
