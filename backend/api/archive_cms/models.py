from __future__ import annotations

from sqlalchemy import Column, DateTime, Integer, MetaData, String, Table

metadata = MetaData()

# Wire names (Class, WebName, OrgName, OrgWebLink) are mapped in schemas.py.
archive_index = Table(
    "archive_index",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("class_name", String(200), nullable=False),
    Column("web_name", String(400), nullable=False),
    Column("org_name", String(400), nullable=False),
    Column("org_web_link", String(2048), nullable=False),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=False),
)
