"""add tutor reviews

Revision ID: 20261017_0002
Revises: 20261017_0001
Create Date: 2026-10-17
"""

from alembic import op
import sqlalchemy as sa


revision = "20261017_0002"
down_revision = "20261017_0001"
branch_labels = None
depends_on = None


def upgrade() -> None:
    bind = op.get_bind()
    if bind.dialect.name == "postgresql":
        op.execute("ALTER TYPE notification_type_enum ADD VALUE IF NOT EXISTS 'review_received'")

    op.create_table(
        "reviews",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("tutor_id", sa.Uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("student_id", sa.Uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("rating", sa.Integer(), nullable=False),
        sa.Column("comment", sa.Text(), nullable=False),
        sa.Column("helpful", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("tutor_id", "student_id", name="uq_reviews_tutor_student"),
        sa.CheckConstraint("rating BETWEEN 1 AND 5", name="ck_reviews_rating_range"),
    )
    op.create_index("ix_reviews_student_id", "reviews", ["student_id"])
    op.create_index("ix_reviews_tutor_created", "reviews", ["tutor_id", "created_at"])


def downgrade() -> None:
    # PostgreSQL cannot drop an enum value; 'review_received' stays on the type
    op.drop_index("ix_reviews_tutor_created", table_name="reviews")
    op.drop_index("ix_reviews_student_id", table_name="reviews")
    op.drop_table("reviews")
