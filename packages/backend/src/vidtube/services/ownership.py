"""Ownership-checked mutations for owned resources.

Learn: Every edit/delete on a video, comment, tweet or playlist must only
succeed for the resource's owner. Instead of "load, compare owner, then
write" (two round-trips with a race in between), the owner check is part
of the write itself:

    UPDATE comments SET ... WHERE id = :id AND owner_id = :caller
    DELETE FROM comments     WHERE id = :id AND owner_id = :caller

Zero matched rows means either the id doesn't exist or the caller isn't
the owner. We deliberately don't tell those apart — both raise NotFound —
so non-owners can't probe for the existence of other users' resources.
"""

import uuid
from typing import Any, Optional

from sqlalchemy import delete, update
from sqlalchemy.engine import Row
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.db.models import utcnow
from vidtube.errors import NotFound


class OwnedResourceService:
    """Base for services whose model has an `id` and an `owner_id` column."""

    model: Any = None
    not_found_message = "Resource not found or you are not allowed to modify it"

    def __init__(self, db: AsyncSession):
        self.db = db

    def _owned(self, resource_id: uuid.UUID, owner_id: uuid.UUID):
        return (
            self.model.id == resource_id,
            self.model.owner_id == owner_id,
        )

    async def _update_owned(
        self,
        resource_id: uuid.UUID,
        owner_id: uuid.UUID,
        **values: Any,
    ) -> None:
        """Apply `values` iff the caller owns the row. Raises NotFound otherwise.

        Does not commit — the caller decides the transaction boundary.
        """
        stmt = (
            update(self.model)
            .where(*self._owned(resource_id, owner_id))
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        if result.rowcount == 0:
            raise NotFound(self.not_found_message)

    async def _delete_owned(
        self,
        resource_id: uuid.UUID,
        owner_id: uuid.UUID,
        *returning: Any,
    ) -> Optional[Row]:
        """Delete iff the caller owns the row. Raises NotFound otherwise.

        Pass columns in `returning` to get them back from the deleted row
        (e.g. media public ids that need cleaning up afterwards).
        """
        stmt = delete(self.model).where(*self._owned(resource_id, owner_id))
        if returning:
            stmt = stmt.returning(*returning)
        stmt = stmt.execution_options(synchronize_session=False)

        result = await self.db.execute(stmt)
        if returning:
            row = result.first()
            if row is None:
                raise NotFound(self.not_found_message)
            return row
        if result.rowcount == 0:
            raise NotFound(self.not_found_message)
        return None

    async def _lock_owned(self, resource_id: uuid.UUID, owner_id: uuid.UUID) -> None:
        """Claim the owned row for the current transaction.

        Used when the mutation touches a child table (e.g. playlist videos):
        the conditional touch on the parent both checks ownership and takes
        the row lock for the rest of the transaction.
        """
        await self._update_owned(resource_id, owner_id, updated_at=utcnow())
