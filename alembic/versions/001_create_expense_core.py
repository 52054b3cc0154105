"""create expense core tables

Revision ID: 001_create_expense_core
Revises: 
Create Date: 2026-10-19

"""

from alembic import op
import sqlalchemy as sa


revision = "001_create_expense_core"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "members",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("member_code", sa.String(length=50), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("role", sa.String(length=20), server_default=sa.text("'MEMBER'"), nullable=False),
        sa.Column("bank_code", sa.String(length=4), nullable=True),
        sa.Column("branch_code", sa.String(length=3), nullable=True),
        sa.Column("account_type", sa.String(length=1), nullable=True),
        sa.Column("account_number", sa.String(length=7), nullable=True),
        sa.Column("account_holder_kana", sa.String(length=30), nullable=True),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("member_code", name="uq_members_member_code"),
    )

    op.create_table(
        "internal_categories",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("code", sa.String(length=50), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("code", name="uq_internal_categories_code"),
    )

    op.create_table(
        "number_sequences",
        sa.Column("name", sa.String(length=50), primary_key=True, nullable=False),
        sa.Column("last_value", sa.Integer(), server_default=sa.text("0"), nullable=False),
    )

    op.create_table(
        "expense_applications",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("application_number", sa.String(length=30), nullable=False),
        sa.Column("member_id", sa.Uuid(), sa.ForeignKey("members.id"), nullable=False),
        sa.Column("expense_date", sa.Date(), nullable=False),
        sa.Column("amount", sa.Integer(), nullable=False),
        sa.Column("proposed_amount", sa.Integer(), nullable=True),
        sa.Column("final_amount", sa.Integer(), nullable=True),
        sa.Column("status", sa.String(length=20), server_default=sa.text("'DRAFT'"), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("is_cash_payment", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("internal_category_id", sa.Uuid(), sa.ForeignKey("internal_categories.id"), nullable=True),
        sa.Column("approved_by_id", sa.Uuid(), sa.ForeignKey("members.id"), nullable=True),
        sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("approved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("rejected_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("version", sa.Integer(), server_default=sa.text("1"), nullable=False),
        sa.UniqueConstraint("application_number", name="uq_expense_applications_application_number"),
        sa.CheckConstraint("amount > 0", name="ck_expense_applications_amount_positive"),
    )
    op.create_index("ix_expense_applications_member_id", "expense_applications", ["member_id"])
    op.create_index("ix_expense_applications_status", "expense_applications", ["status"])

    op.create_table(
        "application_comments",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column(
            "application_id",
            sa.Uuid(),
            sa.ForeignKey("expense_applications.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("author_id", sa.Uuid(), sa.ForeignKey("members.id"), nullable=False),
        sa.Column("comment", sa.Text(), nullable=False),
        sa.Column("comment_type", sa.String(length=20), server_default=sa.text("'GENERAL'"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_application_comments_application_id", "application_comments", ["application_id"])

    op.create_table(
        "receipts",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column(
            "application_id",
            sa.Uuid(),
            sa.ForeignKey("expense_applications.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("file_name", sa.String(length=255), nullable=False),
        sa.Column("file_path", sa.String(length=500), nullable=False),
        sa.Column("mime_type", sa.String(length=100), nullable=False),
        sa.Column("file_size", sa.Integer(), nullable=False),
        sa.Column("ocr_status", sa.String(length=20), server_default=sa.text("'PENDING'"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_receipts_application_id", "receipts", ["application_id"])

    op.create_table(
        "ocr_results",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("receipt_id", sa.Uuid(), sa.ForeignKey("receipts.id", ondelete="CASCADE"), nullable=False),
        sa.Column("extracted_date", sa.String(length=20), nullable=True),
        sa.Column("extracted_amount", sa.Integer(), nullable=True),
        sa.Column("extracted_store_name", sa.String(length=255), nullable=True),
        sa.Column("raw_text", sa.Text(), nullable=True),
        sa.Column("confidence", sa.Float(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("receipt_id", name="uq_ocr_results_receipt_id"),
    )

    op.create_table(
        "payments",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("application_id", sa.Uuid(), sa.ForeignKey("expense_applications.id"), nullable=False),
        sa.Column("batch_id", sa.String(length=40), nullable=False),
        sa.Column("payment_status", sa.String(length=20), server_default=sa.text("'PENDING'"), nullable=False),
        sa.Column("payment_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("application_id", name="uq_payments_application_id"),
    )
    op.create_index("ix_payments_batch_id", "payments", ["batch_id"])

    op.create_table(
        "notification_logs",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column(
            "application_id",
            sa.Uuid(),
            sa.ForeignKey("expense_applications.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("kind", sa.String(length=20), nullable=False),
        sa.Column("recipient_email", sa.String(length=255), nullable=False),
        sa.Column("status", sa.String(length=10), nullable=False),
        sa.Column("error", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("actor_id", sa.Uuid(), sa.ForeignKey("members.id", ondelete="SET NULL"), nullable=True),
        sa.Column("entity_type", sa.String(length=50), nullable=False),
        sa.Column("entity_id", sa.String(length=64), nullable=False),
        sa.Column("action", sa.String(length=50), nullable=False),
        sa.Column("old_value", sa.JSON(), nullable=True),
        sa.Column("new_value", sa.JSON(), nullable=True),
        sa.Column("change_summary", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_audit_logs_entity_id", "audit_logs", ["entity_id"])


def downgrade() -> None:
    op.drop_index("ix_audit_logs_entity_id", table_name="audit_logs")
    op.drop_table("audit_logs")
    op.drop_table("notification_logs")
    op.drop_index("ix_payments_batch_id", table_name="payments")
    op.drop_table("payments")
    op.drop_table("ocr_results")
    op.drop_index("ix_receipts_application_id", table_name="receipts")
    op.drop_table("receipts")
    op.drop_index("ix_application_comments_application_id", table_name="application_comments")
    op.drop_table("application_comments")
    op.drop_index("ix_expense_applications_status", table_name="expense_applications")
    op.drop_index("ix_expense_applications_member_id", table_name="expense_applications")
    op.drop_table("expense_applications")
    op.drop_table("number_sequences")
    op.drop_table("internal_categories")
    op.drop_table("members")
