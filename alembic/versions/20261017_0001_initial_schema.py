"""initial schema: users, tuitions, applications, payments, notifications

Revision ID: 20261017_0001
Revises:
Create Date: 2026-10-17
"""

from alembic import op
import sqlalchemy as sa


revision = "20261017_0001"
down_revision = None
branch_labels = None
depends_on = None

USER_ROLES = ("student", "tutor", "admin")
USER_STATUSES = ("pending", "approved", "active", "rejected", "suspended", "blocked")
APPROVAL_STATUSES = ("pending", "approved", "rejected")
TUITION_STATUSES = ("open", "ongoing", "completed", "closed")
TUTORING_TYPES = ("home", "online", "both")
MEDIUMS = ("bangla", "english", "english_version", "both")
GENDER_PREFERENCES = ("male", "female", "any")
APPLICATION_STATUSES = ("pending", "accepted", "rejected", "withdrawn")
PAYMENT_STATUSES = ("pending", "completed", "failed", "refunded")
NOTIFICATION_TYPES = (
    "application_received",
    "application_accepted",
    "application_rejected",
    "tuition_approved",
    "tuition_rejected",
    "payment_received",
    "payment_made",
    "payment_refunded",
    "account_update",
)
PRIORITIES = ("low", "medium", "high", "urgent")

ENUM_TYPES = (
    "user_role_enum",
    "user_status_enum",
    "tutoring_type_enum",
    "medium_enum",
    "student_gender_enum",
    "tutor_gender_enum",
    "tuition_approval_status_enum",
    "tuition_status_enum",
    "application_status_enum",
    "payment_status_enum",
    "notification_type_enum",
    "notification_priority_enum",
)


def upgrade() -> None:
    # ── users ─────────────────────────────────────────────────────────────────
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("hashed_password", sa.String(length=255), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("phone", sa.String(length=20), nullable=True),
        sa.Column("avatar_url", sa.Text(), nullable=True),
        sa.Column("address", sa.String(length=255), nullable=True),
        sa.Column("location", sa.String(length=255), nullable=True),
        sa.Column("role", sa.Enum(*USER_ROLES, name="user_role_enum"), nullable=False),
        sa.Column("status", sa.Enum(*USER_STATUSES, name="user_status_enum"), nullable=False),
        sa.Column("approved_by_id", sa.Uuid(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("approved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        sa.Column("grade", sa.String(length=50), nullable=True),
        sa.Column("institution", sa.String(length=255), nullable=True),
        sa.Column("subjects", sa.JSON(), nullable=True),
        sa.Column("experience_years", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("bio", sa.String(length=500), nullable=True),
        sa.Column("hourly_rate", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("rating", sa.Float(), nullable=False, server_default="0"),
        sa.Column("total_reviews", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_earnings", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_role", "users", ["role"])
    op.create_index("ix_users_status", "users", ["status"])

    # ── tuitions ──────────────────────────────────────────────────────────────
    op.create_table(
        "tuitions",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("student_id", sa.Uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("subject", sa.String(length=100), nullable=False),
        sa.Column("grade", sa.String(length=50), nullable=False),
        sa.Column("location", sa.String(length=255), nullable=False),
        sa.Column("salary", sa.Integer(), nullable=False),
        sa.Column("days_per_week", sa.Integer(), nullable=False),
        sa.Column("class_duration", sa.String(length=50), nullable=True),
        sa.Column("tutoring_type", sa.Enum(*TUTORING_TYPES, name="tutoring_type_enum"), nullable=False),
        sa.Column("preferred_medium", sa.Enum(*MEDIUMS, name="medium_enum"), nullable=False),
        sa.Column("student_gender", sa.Enum(*GENDER_PREFERENCES, name="student_gender_enum"), nullable=False),
        sa.Column(
            "tutor_gender_preference",
            sa.Enum(*GENDER_PREFERENCES, name="tutor_gender_enum"),
            nullable=False,
        ),
        sa.Column("requirements", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column(
            "approval_status",
            sa.Enum(*APPROVAL_STATUSES, name="tuition_approval_status_enum"),
            nullable=False,
        ),
        sa.Column("approved_by_id", sa.Uuid(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("approved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("rejected_by_id", sa.Uuid(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("rejected_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        sa.Column("status", sa.Enum(*TUITION_STATUSES, name="tuition_status_enum"), nullable=False),
        sa.Column("approved_tutor_id", sa.Uuid(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("closed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("view_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_tuitions_student_id", "tuitions", ["student_id"])
    op.create_index("ix_tuitions_subject", "tuitions", ["subject"])
    op.create_index("ix_tuitions_approval_status", "tuitions", ["approval_status"])
    op.create_index("ix_tuitions_status", "tuitions", ["status"])
    op.create_index("ix_tuitions_created_at", "tuitions", ["created_at"])
    op.create_index("ix_tuitions_visibility", "tuitions", ["approval_status", "status", "created_at"])

    # ── applications ──────────────────────────────────────────────────────────
    op.create_table(
        "applications",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("tuition_id", sa.Uuid(), sa.ForeignKey("tuitions.id", ondelete="CASCADE"), nullable=False),
        sa.Column("tutor_id", sa.Uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("student_id", sa.Uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("qualifications", sa.Text(), nullable=False),
        sa.Column("experience", sa.String(length=255), nullable=False),
        sa.Column("expected_salary", sa.Integer(), nullable=False),
        sa.Column("message", sa.Text(), nullable=True),
        sa.Column("status", sa.Enum(*APPLICATION_STATUSES, name="application_status_enum"), nullable=False),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        sa.Column("responded_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("applied_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("tuition_id", "tutor_id", name="uq_applications_tuition_tutor"),
    )
    op.create_index("ix_applications_tuition_id", "applications", ["tuition_id"])
    op.create_index("ix_applications_status", "applications", ["status"])
    op.create_index("ix_applications_applied_at", "applications", ["applied_at"])
    op.create_index("ix_applications_tutor_status", "applications", ["tutor_id", "status"])
    op.create_index("ix_applications_student_status", "applications", ["student_id", "status"])

    # ── payments ──────────────────────────────────────────────────────────────
    op.create_table(
        "payments",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("tuition_id", sa.Uuid(), sa.ForeignKey("tuitions.id", ondelete="SET NULL"), nullable=True),
        sa.Column(
            "application_id",
            sa.Uuid(),
            sa.ForeignKey("applications.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("student_id", sa.Uuid(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("tutor_id", sa.Uuid(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("amount", sa.Integer(), nullable=False),
        sa.Column("platform_fee", sa.Integer(), nullable=False),
        sa.Column("tutor_receives", sa.Integer(), nullable=False),
        sa.Column("currency", sa.String(length=3), nullable=False),
        sa.Column("payment_method", sa.String(length=50), nullable=False),
        sa.Column("transaction_id", sa.String(length=255), nullable=False),
        sa.Column("gateway_order_id", sa.String(length=255), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("status", sa.Enum(*PAYMENT_STATUSES, name="payment_status_enum"), nullable=False),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("refund_reason", sa.Text(), nullable=True),
        sa.Column("refunded_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("refunded_by_id", sa.Uuid(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_payments_transaction_id", "payments", ["transaction_id"], unique=True)
    op.create_index("ix_payments_tuition_id", "payments", ["tuition_id"])
    op.create_index("ix_payments_status", "payments", ["status"])
    op.create_index("ix_payments_created_at", "payments", ["created_at"])
    op.create_index("ix_payments_student_status", "payments", ["student_id", "status"])
    op.create_index("ix_payments_tutor_status", "payments", ["tutor_id", "status"])
    # One completed payment per application; refunded rows do not block re-acceptance
    op.create_index(
        "uq_payments_application_completed",
        "payments",
        ["application_id"],
        unique=True,
        postgresql_where=sa.text("status = 'completed'"),
        sqlite_where=sa.text("status = 'completed'"),
    )

    # ── notifications ─────────────────────────────────────────────────────────
    op.create_table(
        "notifications",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column(
            "notification_type",
            sa.Enum(*NOTIFICATION_TYPES, name="notification_type_enum"),
            nullable=False,
        ),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("link", sa.String(length=512), nullable=True),
        sa.Column("priority", sa.Enum(*PRIORITIES, name="notification_priority_enum"), nullable=False),
        sa.Column("extra_data", sa.JSON(), nullable=True),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("read_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_notifications_user_id", "notifications", ["user_id"])
    op.create_index("ix_notifications_notification_type", "notifications", ["notification_type"])
    op.create_index("ix_notifications_is_read", "notifications", ["is_read"])
    op.create_index("ix_notifications_created_at", "notifications", ["created_at"])


def downgrade() -> None:
    op.drop_table("notifications")
    op.drop_table("payments")
    op.drop_table("applications")
    op.drop_table("tuitions")
    op.drop_table("users")

    bind = op.get_bind()
    if bind.dialect.name == "postgresql":
        for enum_name in ENUM_TYPES:
            sa.Enum(name=enum_name).drop(bind, checkfirst=True)
