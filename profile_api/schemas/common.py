"""Common schemas."""
from pydantic import BaseModel


class SchemaColumns(BaseModel):
    """Columns found on the users table, sorted."""

    columns: list[str]
