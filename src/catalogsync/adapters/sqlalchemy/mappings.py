"""SQLAlchemy mapping metadata for the identity mapping table."""

from __future__ import annotations

import logging
from functools import cache

from sqlalchemy import BigInteger, Column, String, Table, orm
from sqlalchemy.orm import configure_mappers

from catalogsync.domain.ports.mapping import IdentityMapping

log = logging.getLogger(__name__)

mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

# Columns may only ever be added; older readers ignore what they do not map.
identity_mapping_table = Table(
    "identity_mapping",
    mapper_registry.metadata,
    Column("identity_key", String(255), primary_key=True),
    Column("product_id", BigInteger, nullable=False),
    Column("variant_id", BigInteger, nullable=False),
)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(IdentityMapping, identity_mapping_table)

    configure_mappers()
    return mapper_registry
