"""002 – Row-level security: has_role() and per-table policies.

The API binds the caller to ``app.current_user_id`` at the start of each
transaction. Policies below read it through ``app_current_user_id()`` and
apply to any non-owner database role the service connects as; the service
layer enforces the same table independently.

Revision ID: 002_row_level_security
Revises: 001_initial_schema
Create Date: 2026-10-19 10:30:00.000000+00:00
"""

from alembic import op
import sqlalchemy as sa

# Revision identifiers
revision = "002_row_level_security"
down_revision = "001_initial_schema"
branch_labels = None
depends_on = None


RLS_TABLES = [
    "profiles",
    "user_roles",
    "admin_data",
    "leaves",
    "attendance",
    "activity_logs",
]

# (name, table, command, USING, WITH CHECK)
POLICIES: list[tuple[str, str, str, str | None, str | None]] = [
    # profiles
    ("profiles_select", "profiles", "SELECT",
     "id = app_current_user_id() OR has_role(app_current_user_id(), 'admin')", None),
    ("profiles_insert", "profiles", "INSERT",
     None, "id = app_current_user_id()"),
    ("profiles_update", "profiles", "UPDATE",
     "id = app_current_user_id() OR has_role(app_current_user_id(), 'admin')",
     "id = app_current_user_id() OR has_role(app_current_user_id(), 'admin')"),
    ("profiles_delete", "profiles", "DELETE",
     "has_role(app_current_user_id(), 'admin')", None),
    # user_roles
    ("user_roles_select", "user_roles", "SELECT",
     "user_id = app_current_user_id() OR has_role(app_current_user_id(), 'admin')", None),
    ("user_roles_admin", "user_roles", "ALL",
     "has_role(app_current_user_id(), 'admin')",
     "has_role(app_current_user_id(), 'admin')"),
    # admin_data
    ("admin_data_admin", "admin_data", "ALL",
     "has_role(app_current_user_id(), 'admin')",
     "has_role(app_current_user_id(), 'admin')"),
    # leaves
    ("leaves_select", "leaves", "SELECT",
     "user_id = app_current_user_id() OR has_role(app_current_user_id(), 'admin')", None),
    ("leaves_insert", "leaves", "INSERT",
     None, "user_id = app_current_user_id()"),
    ("leaves_update", "leaves", "UPDATE",
     "has_role(app_current_user_id(), 'admin')",
     "has_role(app_current_user_id(), 'admin')"),
    ("leaves_delete", "leaves", "DELETE",
     "has_role(app_current_user_id(), 'admin')", None),
    # attendance
    ("attendance_select", "attendance", "SELECT",
     "user_id = app_current_user_id() OR has_role(app_current_user_id(), 'admin')", None),
    ("attendance_insert", "attendance", "INSERT",
     None, "has_role(app_current_user_id(), 'admin')"),
    ("attendance_update", "attendance", "UPDATE",
     "has_role(app_current_user_id(), 'admin')",
     "has_role(app_current_user_id(), 'admin')"),
    ("attendance_delete", "attendance", "DELETE",
     "has_role(app_current_user_id(), 'admin')", None),
    # activity_logs
    ("activity_logs_select", "activity_logs", "SELECT",
     "user_id = app_current_user_id() OR has_role(app_current_user_id(), 'admin')", None),
    ("activity_logs_insert", "activity_logs", "INSERT",
     None, "user_id = app_current_user_id()"),
]


def _create_policy(
    name: str,
    table: str,
    command: str,
    using: str | None,
    check: str | None,
) -> None:
    sql = f"CREATE POLICY {name} ON {table} FOR {command}"
    if using:
        sql += f" USING ({using})"
    if check:
        sql += f" WITH CHECK ({check})"
    op.execute(sa.text(sql))


# ---------------------------------------------------------------------------
# UPGRADE
# ---------------------------------------------------------------------------


def upgrade() -> None:
    # ── Caller identity for the current transaction ───────────────────────
    op.execute("""
        CREATE OR REPLACE FUNCTION app_current_user_id()
        RETURNS UUID
        LANGUAGE SQL
        STABLE
        AS $$
            SELECT NULLIF(current_setting('app.current_user_id', true), '')::uuid
        $$
    """)

    # ── Role predicate: direct lookup, bypasses RLS on user_roles ─────────
    op.execute("""
        CREATE OR REPLACE FUNCTION has_role(_user_id UUID, _role app_role)
        RETURNS BOOLEAN
        LANGUAGE SQL
        STABLE
        SECURITY DEFINER
        SET search_path = public
        AS $$
            SELECT EXISTS (
                SELECT 1
                FROM user_roles
                WHERE user_id = _user_id
                  AND role = _role
            )
        $$
    """)

    for table in RLS_TABLES:
        op.execute(sa.text(f"ALTER TABLE {table} ENABLE ROW LEVEL SECURITY"))

    for name, table, command, using, check in POLICIES:
        _create_policy(name, table, command, using, check)


# ---------------------------------------------------------------------------
# DOWNGRADE
# ---------------------------------------------------------------------------


def downgrade() -> None:
    for name, table, _, _, _ in reversed(POLICIES):
        op.execute(sa.text(f"DROP POLICY IF EXISTS {name} ON {table}"))
    for table in RLS_TABLES:
        op.execute(sa.text(f"ALTER TABLE {table} DISABLE ROW LEVEL SECURITY"))
    op.execute("DROP FUNCTION IF EXISTS has_role(UUID, app_role)")
    op.execute("DROP FUNCTION IF EXISTS app_current_user_id()")
