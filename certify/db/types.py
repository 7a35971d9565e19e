"""Column types shared by models."""

from sqlalchemy import JSON
from sqlalchemy.dialects.postgresql import JSONB

# JSONB on PostgreSQL; plain JSON on SQLite (tests, local runs).
JSONType = JSON().with_variant(JSONB(), "postgresql")
