"""Base schema: entity headers, child collections, tracking tables, sync log.

Revision ID: 0001_base_schema
Revises:
Create Date: 2026-10-19
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from alembic import context, op
from sqlalchemy.schema import CreateSchema

from plmsync.adapters.sqlalchemy.mappings import build_metadata

if TYPE_CHECKING:
    from sqlalchemy import MetaData

revision = "0001_base_schema"
down_revision = None
branch_labels = None
depends_on = None


def _metadata() -> MetaData:
    return build_metadata(context.config.attributes.get("schema"))


def upgrade() -> None:
    metadata = _metadata()
    bind = op.get_bind()
    if metadata.schema and bind.dialect.name == "postgresql":
        op.execute(CreateSchema(metadata.schema, if_not_exists=True))
    metadata.create_all(bind=bind, checkfirst=True)


def downgrade() -> None:
    _metadata().drop_all(bind=op.get_bind(), checkfirst=True)
