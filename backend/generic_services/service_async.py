"""
Async GenericService.

Each call runs the synchronous GenericService inside AsyncSession.run_sync,
so entity methods, lazy loads and DTO mapping run on the session's sync
side while the caller awaits.
"""

from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from .service import DeleteAction, GenericService
from .setup import GenericServicesRegistry
from .status import StatusGeneric


class GenericServiceAsync(StatusGeneric):
    """Async counterpart of GenericService; also the status of its operations"""

    def __init__(self, db: AsyncSession, registry: GenericServicesRegistry):
        super().__init__()
        self.db = db
        self.registry = registry

    async def _run(self, operation: str, *args: Any, **kwargs: Any) -> Any:
        def work(sync_session: Session):
            service = GenericService(sync_session, self.registry)
            return service, getattr(service, operation)(*args, **kwargs)

        service, result = await self.db.run_sync(work)
        self.combine_errors(service)
        if service.is_valid:
            self.message = service.message
        return result

    async def read_single_async(self, type_: type, *keys: Any, **filters: Any) -> Optional[Any]:
        return await self._run("read_single", type_, *keys, **filters)

    async def read_many_no_tracked_async(self, type_: type) -> list:
        return await self._run("read_many_no_tracked", type_)

    async def create_and_save_async(self, entity_or_dto: Any, method_name: Optional[str] = None) -> Optional[Any]:
        return await self._run("create_and_save", entity_or_dto, method_name)

    async def update_and_save_async(self, entity_or_dto: Any, method_name: Optional[str] = None) -> None:
        await self._run("update_and_save", entity_or_dto, method_name)

    async def delete_and_save_async(self, entity_type: type, *keys: Any) -> None:
        await self._run("delete_and_save", entity_type, *keys)

    async def delete_with_action_and_save_async(self, entity_type: type, action: Optional[DeleteAction], *keys: Any) -> None:
        await self._run("delete_with_action_and_save", entity_type, action, *keys)
