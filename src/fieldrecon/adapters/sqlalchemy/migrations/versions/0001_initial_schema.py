"""Initial schema: third parties and contract templates.

Revision ID: 0001
Revises:
Create Date: 2026-10-19
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

from fieldrecon.adapters.sqlalchemy.mappings import (
    AttributeMapType,
    TemplateFieldsType,
    UTCDateTime,
)
from fieldrecon.domain.model import STANDARD_ATTRIBUTES

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "third_party",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("company_id", sa.String(length=64), nullable=False),
        sa.Column("third_party_type", sa.String(length=64), nullable=True),
        *(sa.Column(attribute, sa.String(), nullable=True) for attribute in STANDARD_ATTRIBUTES),
        sa.Column("attributes", AttributeMapType(), nullable=False),
        sa.Column("active", sa.Boolean(), nullable=False),
        sa.Column("updated_by", sa.String(), nullable=True),
        sa.Column("updated_at", UTCDateTime(), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_third_party"),
    )
    op.create_index(
        "ix_third_party_company_id", "third_party", ["company_id", "third_party_type"]
    )

    op.create_table(
        "contract_template",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("company_id", sa.String(length=64), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("third_party_type", sa.String(length=64), nullable=True),
        sa.Column("category", sa.String(), nullable=True),
        sa.Column("active", sa.Boolean(), nullable=False),
        sa.Column("fields", TemplateFieldsType(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_contract_template"),
    )
    op.create_index(
        "ix_contract_template_company_id",
        "contract_template",
        ["company_id", "third_party_type"],
    )


def downgrade() -> None:
    op.drop_index("ix_contract_template_company_id", table_name="contract_template")
    op.drop_table("contract_template")
    op.drop_index("ix_third_party_company_id", table_name="third_party")
    op.drop_table("third_party")
