from typing import Any, Dict
from app.core.config import settings
from app.repository.repo_remote_store import RemoteStore, RemoteResponse, EqFilter, Ordering


class MedicationRepository:
    """Medication table access. Every call is scoped by the owner's user_id."""

    def __init__(self, store: RemoteStore, table: str = settings.MEDICATION_TABLE):
        self.store = store
        self.table = table

    async def get_by_user_id(self, user_id: str) -> RemoteResponse:
        return await self.store.select(
            self.table,
            filters=[EqFilter('user_id', user_id)],
            order=Ordering('created_at', ascending=False),
        )

    async def create(self, user_id: str, medication_data: Dict[str, Any]) -> RemoteResponse:
        row = {**medication_data, 'user_id': user_id}
        return await self.store.insert(self.table, [row], single=True)

    async def update(self, medication_id: str, user_id: str, updates: Dict[str, Any]) -> RemoteResponse:
        return await self.store.update(
            self.table,
            updates,
            filters=[EqFilter('id', medication_id), EqFilter('user_id', user_id)],
            single=True,
        )

    async def delete(self, medication_id: str, user_id: str) -> RemoteResponse:
        return await self.store.delete(
            self.table,
            filters=[EqFilter('id', medication_id), EqFilter('user_id', user_id)],
        )
