"""Repository and store implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, cast

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from catalogsync.adapters.sqlalchemy.mappings import identity_mapping_table
from catalogsync.domain.errors import MappingStoreError
from catalogsync.domain.ports.catalog import RemoteIds
from catalogsync.domain.ports.mapping import IdentityMapping, IdentityMappingStore

if TYPE_CHECKING:
    from collections.abc import Callable

    from sqlalchemy.orm import Session

    from catalogsync.domain.ports.unit_of_work import MappingUnitOfWork

log = getLogger(__name__)


class SqlAlchemyIdentityMappingRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, identity_key: str) -> IdentityMapping | None:
        return self.session.get(IdentityMapping, identity_key)

    def upsert(self, mapping: IdentityMapping) -> None:
        # merge replaces the row sharing the primary key
        self.session.merge(mapping)

    def count(self) -> int:
        stmt = select(func.count()).select_from(identity_mapping_table)
        return int(self.session.execute(stmt).scalar_one())


class SqlAlchemyIdentityMappingStore(IdentityMappingStore):
    """Identity mapping store running each operation in its own unit of work."""

    def __init__(self, unit_of_work_factory: Callable[[], MappingUnitOfWork]) -> None:
        self._uow_factory = unit_of_work_factory

    def lookup(self, identity_key: str) -> RemoteIds | None:
        try:
            with self._uow_factory() as uow:
                mapping = uow.repositories.mappings.get(identity_key)
                return mapping.remote_ids if mapping is not None else None
        except SQLAlchemyError as exc:
            raise MappingStoreError(f"Lookup failed for {identity_key}: {exc}") from exc

    def upsert(self, identity_key: str, product_id: int, variant_id: int) -> None:
        mapping = IdentityMapping(
            identity_key=identity_key,
            product_id=product_id,
            variant_id=variant_id,
        )
        try:
            with self._uow_factory() as uow:
                uow.repositories.mappings.upsert(mapping)
                uow.commit()
        except SQLAlchemyError as exc:
            raise MappingStoreError(f"Upsert failed for {identity_key}: {exc}") from exc
        log.debug("Mapped %s -> product %s / variant %s", identity_key, product_id, variant_id)

    def count(self) -> int:
        try:
            with self._uow_factory() as uow:
                return uow.repositories.mappings.count()
        except SQLAlchemyError as exc:
            raise MappingStoreError(f"Count failed: {exc}") from exc


if TYPE_CHECKING:
    from catalogsync.domain.ports.mapping import IdentityMappingRepository

    _session_stub = cast("Session", object())
    _repo_check: IdentityMappingRepository = SqlAlchemyIdentityMappingRepository(_session_stub)
