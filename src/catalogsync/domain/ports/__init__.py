"""Domain port definitions for adapters."""

from __future__ import annotations

from .catalog import CatalogGateway, RemoteIds
from .mapping import IdentityMapping, IdentityMappingRepository, IdentityMappingStore
from .source import DatasetSource
from .unit_of_work import (
    MappingRepositories,
    MappingUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "CatalogGateway",
    "DatasetSource",
    "IdentityMapping",
    "IdentityMappingRepository",
    "IdentityMappingStore",
    "MappingRepositories",
    "MappingUnitOfWork",
    "RemoteIds",
    "RepositoryCollection",
    "UnitOfWork",
]
