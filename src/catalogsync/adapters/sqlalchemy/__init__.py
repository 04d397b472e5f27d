"""SQLAlchemy adapter package for catalogsync."""

from __future__ import annotations

from .mappings import identity_mapping_table, mapper_registry, start_mappers
from .repositories import SqlAlchemyIdentityMappingRepository, SqlAlchemyIdentityMappingStore
from .unit_of_work import SqlAlchemyUnitOfWork, shutdown, startup

__all__ = [
    "SqlAlchemyIdentityMappingRepository",
    "SqlAlchemyIdentityMappingStore",
    "SqlAlchemyUnitOfWork",
    "identity_mapping_table",
    "mapper_registry",
    "shutdown",
    "start_mappers",
    "startup",
]
