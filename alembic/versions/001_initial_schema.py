"""Initial CRM schema.

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-17

Creates every CRM table:
- users: agent logins
- clients, interactions, documents, checklist_items: client records and activity
- properties, shared_properties: the listing catalogue and what was shared with whom
- requests, stages, processes, process_tasks: client workflows
- client_actions, action_tasks: onboarding and process actions
- requirements, rental_preferences, purchase_preferences, gathered_properties
- email_queue, document_requests, meetings: fan-out side effects
- commissions, transactions, financial_goals: finances
- leads, lead_interactions: prospects

Child rows reference their parents with ON DELETE CASCADE so deleting a
client removes everything attached to it; optional activity links use
SET NULL.
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

# revision identifiers, used by Alembic.
revision: str = "001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id() -> sa.Column:
    return sa.Column(
        "id",
        UUID(as_uuid=True),
        primary_key=True,
        server_default=sa.text("gen_random_uuid()"),
    )


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def _fk(name: str, target: str, ondelete: str = "CASCADE", nullable: bool = False) -> sa.Column:
    return sa.Column(
        name,
        UUID(as_uuid=True),
        sa.ForeignKey(f"{target}.id", ondelete=ondelete),
        nullable=nullable,
    )


def upgrade() -> None:
    # ── users ───────────────────────────────────────────────────────────

    op.create_table(
        "users",
        _id(),
        sa.Column("email", sa.String(255), unique=True, nullable=False),
        sa.Column("name", sa.String(200), nullable=True),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("role", sa.String(50), server_default=sa.text("'agent'"), nullable=False),
        sa.Column("is_active", sa.Boolean(), server_default=sa.text("true"), nullable=False),
        *_timestamps(),
    )

    # ── clients & catalogue ─────────────────────────────────────────────

    op.create_table(
        "clients",
        _id(),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("status", sa.String(50), server_default=sa.text("'Active'"), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("pinned", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        sa.Column("last_contact", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_clients_name", "clients", ["name"])
    op.create_index("ix_clients_email", "clients", ["email"])

    op.create_table(
        "properties",
        _id(),
        sa.Column("title", sa.String(300), nullable=False),
        sa.Column("address", sa.String(500), nullable=False),
        sa.Column("price", sa.Float(), nullable=False),
        sa.Column("type", sa.String(100), nullable=False),
        sa.Column("listing_type", sa.String(20), server_default=sa.text("'SALE'"), nullable=False),
        sa.Column("bedrooms", sa.Integer(), nullable=True),
        sa.Column("bathrooms", sa.Integer(), nullable=True),
        sa.Column("area", sa.Float(), server_default=sa.text("0"), nullable=False),
        sa.Column("status", sa.String(50), server_default=sa.text("'Available'"), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("features", sa.JSON(), server_default=sa.text("'[]'::json"), nullable=False),
        sa.Column("images", sa.JSON(), server_default=sa.text("'[]'::json"), nullable=False),
        sa.Column("source", sa.String(200), nullable=True),
        sa.Column("location", sa.String(300), nullable=True),
        sa.Column("year_built", sa.Integer(), nullable=True),
        sa.Column("link", sa.String(1000), nullable=True),
        # Rental listings
        sa.Column("furnished", sa.Boolean(), nullable=True),
        sa.Column("pets_allowed", sa.Boolean(), nullable=True),
        sa.Column("lease_term", sa.String(100), nullable=True),
        # Sale listings
        sa.Column("lot_size", sa.Float(), nullable=True),
        sa.Column("basement", sa.Boolean(), nullable=True),
        sa.Column("garage", sa.Boolean(), nullable=True),
        sa.Column("parking_spaces", sa.Integer(), nullable=True),
        sa.Column("property_style", sa.String(100), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_properties_price", "properties", ["price"])
    op.create_index("ix_properties_listing_type", "properties", ["listing_type"])

    op.create_table(
        "leads",
        _id(),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), server_default=sa.text("''"), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("source", sa.String(100), nullable=True),
        sa.Column("status", sa.String(20), server_default=sa.text("'NEW'"), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("last_contact", sa.DateTime(timezone=True), nullable=True),
        sa.Column("emails_sent", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("converted_at", sa.DateTime(timezone=True), nullable=True),
        _fk("converted_client_id", "clients", ondelete="SET NULL", nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_leads_status", "leads", ["status"])

    # ── workflows ───────────────────────────────────────────────────────

    op.create_table(
        "requests",
        _id(),
        _fk("client_id", "clients"),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("status", sa.String(50), server_default=sa.text("'ACTIVE'"), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_requests_client_id", "requests", ["client_id"])

    op.create_table(
        "stages",
        _id(),
        _fk("client_id", "clients"),
        sa.Column("title", sa.String(300), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("order", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("status", sa.String(50), server_default=sa.text("'ACTIVE'"), nullable=False),
        sa.Column("start_date", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_stages_client_id", "stages", ["client_id"])

    op.create_table(
        "processes",
        _id(),
        _fk("stage_id", "stages", nullable=True),
        _fk("request_id", "requests", nullable=True),
        sa.Column("title", sa.String(300), nullable=False),
        sa.Column("description", sa.Text(), server_default=sa.text("''"), nullable=False),
        sa.Column("type", sa.String(20), server_default=sa.text("'TASK'"), nullable=False),
        sa.Column("status", sa.String(20), server_default=sa.text("'PENDING'"), nullable=False),
        sa.Column("due_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_processes_stage_id", "processes", ["stage_id"])
    op.create_index("ix_processes_request_id", "processes", ["request_id"])

    op.create_table(
        "process_tasks",
        _id(),
        _fk("process_id", "processes"),
        sa.Column("type", sa.String(30), nullable=False),
        sa.Column("status", sa.String(20), server_default=sa.text("'PENDING'"), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_process_tasks_process_id", "process_tasks", ["process_id"])

    op.create_table(
        "client_actions",
        _id(),
        _fk("client_id", "clients"),
        sa.Column("category", sa.String(20), server_default=sa.text("'onboarding'"), nullable=False),
        sa.Column("title", sa.String(300), nullable=False),
        sa.Column("description", sa.Text(), server_default=sa.text("''"), nullable=False),
        sa.Column("type", sa.String(20), server_default=sa.text("'TASK'"), nullable=False),
        sa.Column("status", sa.String(20), server_default=sa.text("'PENDING'"), nullable=False),
        sa.Column("due_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_client_actions_client_id", "client_actions", ["client_id"])
    op.create_index("ix_client_actions_category", "client_actions", ["category"])

    op.create_table(
        "action_tasks",
        _id(),
        _fk("action_id", "client_actions"),
        sa.Column("type", sa.String(30), nullable=False),
        sa.Column("status", sa.String(20), server_default=sa.text("'PENDING'"), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_action_tasks_action_id", "action_tasks", ["action_id"])

    # ── requirements ────────────────────────────────────────────────────

    op.create_table(
        "requirements",
        _id(),
        _fk("client_id", "clients"),
        _fk("request_id", "requests", nullable=True),
        _fk("stage_id", "stages", nullable=True),
        sa.Column("name", sa.String(200), server_default=sa.text("'New Requirement'"), nullable=False),
        sa.Column("type", sa.String(20), server_default=sa.text("'PURCHASE'"), nullable=False),
        sa.Column("property_type", sa.String(100), nullable=True),
        sa.Column("budget_min", sa.Float(), server_default=sa.text("0"), nullable=False),
        sa.Column("budget_max", sa.Float(), server_default=sa.text("0"), nullable=False),
        sa.Column("bedrooms", sa.Integer(), nullable=True),
        sa.Column("bathrooms", sa.Integer(), nullable=True),
        sa.Column("preferred_locations", sa.JSON(), server_default=sa.text("'[]'::json"), nullable=False),
        sa.Column("additional_requirements", sa.Text(), nullable=True),
        sa.Column("status", sa.String(50), server_default=sa.text("'Active'"), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_requirements_client_id", "requirements", ["client_id"])
    op.create_index("ix_requirements_request_id", "requirements", ["request_id"])
    op.create_index("ix_requirements_stage_id", "requirements", ["stage_id"])

    op.create_table(
        "rental_preferences",
        _id(),
        sa.Column(
            "requirement_id",
            UUID(as_uuid=True),
            sa.ForeignKey("requirements.id", ondelete="CASCADE"),
            unique=True,
            nullable=False,
        ),
        sa.Column("lease_term", sa.String(100), server_default=sa.text("'Long-term'"), nullable=False),
        sa.Column("furnished", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        sa.Column("pets_allowed", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        sa.Column("max_rental_budget", sa.Float(), server_default=sa.text("0"), nullable=False),
        sa.Column("preferred_move_in_date", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "purchase_preferences",
        _id(),
        sa.Column(
            "requirement_id",
            UUID(as_uuid=True),
            sa.ForeignKey("requirements.id", ondelete="CASCADE"),
            unique=True,
            nullable=False,
        ),
        sa.Column("property_age", sa.String(100), nullable=True),
        sa.Column("preferred_style", sa.String(100), nullable=True),
        sa.Column("parking", sa.Integer(), nullable=True),
        sa.Column("lot_size", sa.Float(), nullable=True),
        sa.Column("basement", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        sa.Column("garage", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "gathered_properties",
        _id(),
        _fk("requirement_id", "requirements"),
        _fk("property_id", "properties", nullable=True),
        sa.Column("title", sa.String(300), nullable=True),
        sa.Column("address", sa.String(500), nullable=True),
        sa.Column("price", sa.Float(), nullable=True),
        sa.Column("bedrooms", sa.Integer(), nullable=True),
        sa.Column("bathrooms", sa.Integer(), nullable=True),
        sa.Column("area", sa.Float(), nullable=True),
        sa.Column("link", sa.String(1000), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("status", sa.String(50), server_default=sa.text("'Pending'"), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_gathered_properties_requirement_id", "gathered_properties", ["requirement_id"])

    # ── client activity ─────────────────────────────────────────────────

    op.create_table(
        "interactions",
        _id(),
        _fk("client_id", "clients"),
        sa.Column("type", sa.String(100), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("date", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        _fk("stage_id", "stages", ondelete="SET NULL", nullable=True),
        _fk("request_id", "requests", ondelete="SET NULL", nullable=True),
        _fk("requirement_id", "requirements", ondelete="SET NULL", nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_interactions_client_id", "interactions", ["client_id"])
    op.create_index("ix_interactions_date", "interactions", ["date"])

    op.create_table(
        "documents",
        _id(),
        _fk("client_id", "clients"),
        _fk("stage_id", "stages", nullable=True),
        sa.Column("name", sa.String(300), nullable=False),
        sa.Column("url", sa.String(1000), nullable=False),
        sa.Column("type", sa.String(100), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_documents_client_id", "documents", ["client_id"])

    op.create_table(
        "checklist_items",
        _id(),
        sa.Column("text", sa.Text(), nullable=False),
        sa.Column("completed", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        _fk("client_id", "clients", nullable=True),
        _fk("stage_id", "stages", nullable=True),
        _fk("request_id", "requests", nullable=True),
        _fk("requirement_id", "requirements", nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "(CASE WHEN client_id IS NULL THEN 0 ELSE 1 END"
            " + CASE WHEN stage_id IS NULL THEN 0 ELSE 1 END"
            " + CASE WHEN request_id IS NULL THEN 0 ELSE 1 END"
            " + CASE WHEN requirement_id IS NULL THEN 0 ELSE 1 END) = 1",
            name="ck_checklist_items_single_owner",
        ),
    )
    for owner in ("client_id", "stage_id", "request_id", "requirement_id"):
        op.create_index(f"ix_checklist_items_{owner}", "checklist_items", [owner])

    op.create_table(
        "shared_properties",
        _id(),
        _fk("client_id", "clients"),
        _fk("property_id", "properties"),
        _fk("stage_id", "stages", ondelete="SET NULL", nullable=True),
        sa.Column("status", sa.String(50), server_default=sa.text("'Shared'"), nullable=False),
        sa.Column("shared_date", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_shared_properties_client_id", "shared_properties", ["client_id"])
    op.create_index("ix_shared_properties_property_id", "shared_properties", ["property_id"])

    # ── notifications ───────────────────────────────────────────────────

    op.create_table(
        "email_queue",
        _id(),
        sa.Column("to", sa.String(255), nullable=False),
        sa.Column("subject", sa.String(500), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("status", sa.String(20), server_default=sa.text("'PENDING'"), nullable=False),
        _fk("client_id", "clients", ondelete="SET NULL", nullable=True),
        _fk("lead_id", "leads", ondelete="SET NULL", nullable=True),
        sa.Column("sent_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_email_queue_status", "email_queue", ["status"])

    op.create_table(
        "document_requests",
        _id(),
        _fk("client_id", "clients"),
        sa.Column("title", sa.String(300), nullable=False),
        sa.Column("description", sa.Text(), server_default=sa.text("''"), nullable=False),
        sa.Column("status", sa.String(20), server_default=sa.text("'PENDING'"), nullable=False),
        sa.Column("due_date", sa.DateTime(timezone=True), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_document_requests_client_id", "document_requests", ["client_id"])

    op.create_table(
        "meetings",
        _id(),
        _fk("client_id", "clients"),
        sa.Column("title", sa.String(300), nullable=False),
        sa.Column("description", sa.Text(), server_default=sa.text("''"), nullable=False),
        sa.Column("status", sa.String(20), server_default=sa.text("'PENDING'"), nullable=False),
        sa.Column("suggested_date", sa.DateTime(timezone=True), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_meetings_client_id", "meetings", ["client_id"])

    # ── finances ────────────────────────────────────────────────────────

    op.create_table(
        "commissions",
        _id(),
        sa.Column("amount", sa.Float(), nullable=False),
        sa.Column("percentage", sa.Float(), nullable=True),
        sa.Column("status", sa.String(20), server_default=sa.text("'PENDING'"), nullable=False),
        sa.Column("due_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("paid_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        _fk("property_id", "properties"),
        _fk("client_id", "clients"),
        *_timestamps(),
    )
    op.create_index("ix_commissions_status", "commissions", ["status"])
    op.create_index("ix_commissions_due_date", "commissions", ["due_date"])

    op.create_table(
        "transactions",
        _id(),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("amount", sa.Float(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("category", sa.String(100), nullable=False),
        sa.Column("date", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        _fk("client_id", "clients", ondelete="SET NULL", nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_transactions_type", "transactions", ["type"])
    op.create_index("ix_transactions_date", "transactions", ["date"])

    op.create_table(
        "financial_goals",
        _id(),
        sa.Column("title", sa.String(300), nullable=False),
        sa.Column("target_amount", sa.Float(), nullable=False),
        sa.Column("current_amount", sa.Float(), server_default=sa.text("0"), nullable=False),
        sa.Column("start_date", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("achieved", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        *_timestamps(),
    )

    # ── lead activity ───────────────────────────────────────────────────

    op.create_table(
        "lead_interactions",
        _id(),
        _fk("lead_id", "leads"),
        sa.Column("type", sa.String(50), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("date", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_lead_interactions_lead_id", "lead_interactions", ["lead_id"])


def downgrade() -> None:
    for table in (
        "lead_interactions",
        "financial_goals",
        "transactions",
        "commissions",
        "meetings",
        "document_requests",
        "email_queue",
        "shared_properties",
        "checklist_items",
        "documents",
        "interactions",
        "gathered_properties",
        "purchase_preferences",
        "rental_preferences",
        "requirements",
        "action_tasks",
        "client_actions",
        "process_tasks",
        "processes",
        "stages",
        "requests",
        "leads",
        "properties",
        "clients",
        "users",
    ):
        op.drop_table(table)
