"""001 – Initial schema: enums, tables, indexes.

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-19 10:00:00.000000+00:00
"""

from alembic import op
import sqlalchemy as sa

# Revision identifiers
revision = "001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

ENUM_TYPES: list[tuple[str, list[str]]] = [
    ("app_role", ["admin", "user"]),
    ("leave_type", ["sick", "vacation", "personal", "other"]),
    ("leave_status", ["pending", "approved", "rejected"]),
]

TABLES_IN_DROP_ORDER = [
    "activity_logs",
    "attendance",
    "leaves",
    "admin_data",
    "user_roles",
    "profiles",
]


def _create_enum(name: str, values: list[str]) -> None:
    vals = ", ".join(f"'{v}'" for v in values)
    op.execute(sa.text(f"CREATE TYPE {name} AS ENUM ({vals})"))


def _drop_enum(name: str) -> None:
    op.execute(sa.text(f"DROP TYPE IF EXISTS {name}"))


# ---------------------------------------------------------------------------
# UPGRADE
# ---------------------------------------------------------------------------


def upgrade() -> None:
    # ── Extensions ────────────────────────────────────────────────────────
    op.execute('CREATE EXTENSION IF NOT EXISTS "pgcrypto"')

    # ── Enum types ────────────────────────────────────────────────────────
    for name, values in ENUM_TYPES:
        _create_enum(name, values)

    # ── 1. profiles (id is the auth provider's identity id) ───────────────
    op.execute("""
        CREATE TABLE profiles (
            id          UUID PRIMARY KEY,
            name        TEXT NOT NULL,
            email       TEXT NOT NULL UNIQUE,
            department  TEXT,
            hire_date   DATE,
            created_at  TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at  TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)

    # ── 2. user_roles (at most one row per identity) ──────────────────────
    op.execute("""
        CREATE TABLE user_roles (
            id          UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            user_id     UUID NOT NULL UNIQUE REFERENCES profiles(id) ON DELETE CASCADE,
            role        app_role NOT NULL DEFAULT 'user',
            created_at  TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)

    # ── 3. admin_data (confidential, admins only) ─────────────────────────
    op.execute("""
        CREATE TABLE admin_data (
            id          UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            user_id     UUID NOT NULL UNIQUE REFERENCES profiles(id) ON DELETE CASCADE,
            position    TEXT,
            salary      NUMERIC(10, 2),
            notes       TEXT,
            created_at  TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at  TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)

    # ── 4. leaves ─────────────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE leaves (
            id            UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            user_id       UUID NOT NULL REFERENCES profiles(id) ON DELETE CASCADE,
            type          leave_type NOT NULL,
            start_date    DATE NOT NULL,
            end_date      DATE NOT NULL,
            reason        TEXT NOT NULL,
            status        leave_status NOT NULL DEFAULT 'pending',
            review_notes  TEXT,
            reviewed_by   UUID REFERENCES profiles(id) ON DELETE SET NULL,
            reviewed_at   TIMESTAMPTZ,
            created_at    TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at    TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_leaves_date_order CHECK (end_date >= start_date)
        )
    """)

    # ── 5. attendance ─────────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE attendance (
            id          UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            user_id     UUID NOT NULL REFERENCES profiles(id) ON DELETE CASCADE,
            clock_in    TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            clock_out   TIMESTAMPTZ,
            notes       TEXT,
            marked_by   UUID REFERENCES profiles(id) ON DELETE SET NULL,
            created_at  TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at  TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_attendance_clock_order CHECK (clock_out IS NULL OR clock_out >= clock_in)
        )
    """)

    # ── 6. activity_logs (append-only) ────────────────────────────────────
    op.execute("""
        CREATE TABLE activity_logs (
            id           UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            user_id      UUID NOT NULL REFERENCES profiles(id) ON DELETE CASCADE,
            action       VARCHAR(100) NOT NULL,
            description  TEXT,
            created_at   TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)

    # ── Indexes ───────────────────────────────────────────────────────────
    op.execute("CREATE INDEX idx_leaves_user_id ON leaves(user_id)")
    op.execute("CREATE INDEX idx_leaves_status ON leaves(status)")
    op.execute("CREATE INDEX idx_attendance_user_id ON attendance(user_id)")
    op.execute("CREATE INDEX idx_user_roles_user_id ON user_roles(user_id)")
    op.execute("CREATE INDEX idx_activity_logs_user_id ON activity_logs(user_id)")
    op.execute("CREATE INDEX idx_admin_data_user_id ON admin_data(user_id)")


# ---------------------------------------------------------------------------
# DOWNGRADE
# ---------------------------------------------------------------------------


def downgrade() -> None:
    for table in TABLES_IN_DROP_ORDER:
        op.execute(sa.text(f"DROP TABLE IF EXISTS {table} CASCADE"))
    for name, _ in reversed(ENUM_TYPES):
        _drop_enum(name)
