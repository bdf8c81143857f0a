"""003 – Signup provisioning policies and profile column guard.

The signup hook runs with no caller identity; it sets ``app.provisioning``
for its own transaction and these policies let it create the profile, the
default ``user`` role and the optional position record. A trigger keeps
``email`` and ``hire_date`` out of reach of self-service profile updates.

Revision ID: 003_provisioning_and_profile_guard
Revises: 002_row_level_security
Create Date: 2026-10-20 09:00:00.000000+00:00
"""

from alembic import op
import sqlalchemy as sa

# Revision identifiers
revision = "003_provisioning_and_profile_guard"
down_revision = "002_row_level_security"
branch_labels = None
depends_on = None


# (name, table, command, USING, WITH CHECK)
POLICIES: list[tuple[str, str, str, str | None, str | None]] = [
    ("profiles_provision_select", "profiles", "SELECT", "app_provisioning()", None),
    ("profiles_provision_insert", "profiles", "INSERT", None, "app_provisioning()"),
    ("user_roles_provision_select", "user_roles", "SELECT", "app_provisioning()", None),
    ("user_roles_provision_insert", "user_roles", "INSERT",
     None, "app_provisioning() AND role = 'user'"),
    ("admin_data_provision_select", "admin_data", "SELECT", "app_provisioning()", None),
    ("admin_data_provision_insert", "admin_data", "INSERT",
     None, "app_provisioning() AND salary IS NULL"),
]


def upgrade() -> None:
    op.execute("""
        CREATE OR REPLACE FUNCTION app_provisioning()
        RETURNS BOOLEAN
        LANGUAGE SQL
        STABLE
        AS $$
            SELECT COALESCE(current_setting('app.provisioning', true), '') = 'on'
        $$
    """)

    for name, table, command, using, check in POLICIES:
        sql = f"CREATE POLICY {name} ON {table} FOR {command}"
        if using:
            sql += f" USING ({using})"
        if check:
            sql += f" WITH CHECK ({check})"
        op.execute(sa.text(sql))

    # Row policies cannot restrict columns. Callers may rename themselves
    # and change department; email never changes, hire_date only by admins.
    op.execute("""
        CREATE OR REPLACE FUNCTION profiles_guard_update()
        RETURNS TRIGGER
        LANGUAGE plpgsql
        AS $$
        BEGIN
            IF app_current_user_id() IS NULL THEN
                RETURN NEW;
            END IF;
            IF NEW.id IS DISTINCT FROM OLD.id
               OR NEW.email IS DISTINCT FROM OLD.email THEN
                RAISE EXCEPTION 'profiles.id and profiles.email are immutable'
                    USING ERRCODE = 'insufficient_privilege';
            END IF;
            IF NEW.hire_date IS DISTINCT FROM OLD.hire_date
               AND NOT has_role(app_current_user_id(), 'admin') THEN
                RAISE EXCEPTION 'only admins may change profiles.hire_date'
                    USING ERRCODE = 'insufficient_privilege';
            END IF;
            RETURN NEW;
        END
        $$
    """)
    op.execute("""
        CREATE TRIGGER profiles_guard_update
        BEFORE UPDATE ON profiles
        FOR EACH ROW EXECUTE FUNCTION profiles_guard_update()
    """)


def downgrade() -> None:
    op.execute("DROP TRIGGER IF EXISTS profiles_guard_update ON profiles")
    op.execute("DROP FUNCTION IF EXISTS profiles_guard_update()")
    for name, table, _, _, _ in reversed(POLICIES):
        op.execute(sa.text(f"DROP POLICY IF EXISTS {name} ON {table}"))
    op.execute("DROP FUNCTION IF EXISTS app_provisioning()")
