"""Shared metadata for the scheduling tables."""

from sqlalchemy import MetaData

# Single metadata so foreign keys between tables resolve on create_all
metadata = MetaData()
