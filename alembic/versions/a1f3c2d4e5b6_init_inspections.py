from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "a1f3c2d4e5b6"
down_revision: Union[str, Sequence[str], None] = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # --- identity ---
    op.create_table(
        "users",
        sa.Column("id", sa.String(36), primary_key=True, nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("password_hash", sa.String(), nullable=False),
        sa.Column(
            "is_active",
            sa.Boolean(),
            nullable=False,
            server_default=sa.sql.expression.true(),
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index(op.f("ix_users_email"), "users", ["email"], unique=True)
    op.create_index("ix_users_active", "users", ["is_active"])

    op.create_table(
        "profiles",
        sa.Column("id", sa.String(36), primary_key=True, nullable=False),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("full_name", sa.String(), nullable=False, server_default=""),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
    )
    op.create_index(op.f("ix_profiles_user_id"), "profiles", ["user_id"], unique=True)

    # --- roles: หนึ่ง user หนึ่งแถว ---
    op.create_table(
        "user_roles",
        sa.Column("id", sa.String(36), primary_key=True, nullable=False),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default="employee"),
        sa.Column("assigned_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.CheckConstraint("role IN ('admin','employee')", name="ck_user_roles_role"),
    )
    op.create_index(op.f("ix_user_roles_user_id"), "user_roles", ["user_id"], unique=True)

    # --- branches ---
    op.create_table(
        "branches",
        sa.Column("id", sa.String(36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("manager_name", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index(op.f("ix_branches_name"), "branches", ["name"])

    # --- checklist ---
    op.create_table(
        "inspection_types",
        sa.Column("id", sa.String(36), primary_key=True, nullable=False),
        sa.Column("number", sa.Integer(), nullable=False),
        sa.Column("category", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("weight", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.sql.expression.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint("weight IN (1, 2)", name="ck_inspection_types_weight"),
    )
    op.create_index(op.f("ix_inspection_types_number"), "inspection_types", ["number"])
    op.create_index("ix_inspection_types_active_number", "inspection_types", ["active", "number"])

    # --- visits ---
    op.create_table(
        "visits",
        sa.Column("id", sa.String(36), primary_key=True, nullable=False),
        sa.Column("branch_id", sa.String(36), nullable=False),
        sa.Column("inspector_id", sa.String(36), nullable=True),
        sa.Column("visit_date", sa.Date(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("total_score", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("max_score", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("percentage", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("evaluation", sa.String(), nullable=False, server_default="INSUFICIENTE"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(["branch_id"], ["branches.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["inspector_id"], ["users.id"], ondelete="SET NULL"),
    )
    op.create_index(op.f("ix_visits_branch_id"), "visits", ["branch_id"])
    op.create_index(op.f("ix_visits_inspector_id"), "visits", ["inspector_id"])
    op.create_index("ix_visits_branch_date", "visits", ["branch_id", "visit_date"])

    # inspection_type_id ไม่มี FK: ลบ type แล้วผลเก่ายังอยู่
    op.create_table(
        "inspection_results",
        sa.Column("id", sa.String(36), primary_key=True, nullable=False),
        sa.Column("visit_id", sa.String(36), nullable=False),
        sa.Column("inspection_type_id", sa.String(36), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("observations", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(["visit_id"], ["visits.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("visit_id", "inspection_type_id", name="uq_inspection_results_visit_type"),
        sa.CheckConstraint("status IN ('ok','irregular')", name="ck_inspection_results_status"),
    )
    op.create_index(op.f("ix_inspection_results_visit_id"), "inspection_results", ["visit_id"])
    op.create_index(op.f("ix_inspection_results_inspection_type_id"), "inspection_results", ["inspection_type_id"])


def downgrade() -> None:
    op.drop_table("inspection_results")
    op.drop_table("visits")
    op.drop_table("inspection_types")
    op.drop_table("branches")
    op.drop_table("user_roles")
    op.drop_table("profiles")
    op.drop_table("users")
