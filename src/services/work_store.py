"""Persistence interface used by the schedule sync services."""

from abc import ABC, abstractmethod
from typing import Optional

from src.models.activity import WorkActivity
from src.models.work import Work
from src.services import supabase_client


class WorkStore(ABC):
    """Key/value persistence for works and their activity rows.

    Every method raises ``PersistenceError`` when the backing storage fails.
    """

    @abstractmethod
    async def get_work(self, work_id: int) -> Optional[Work]:
        """Work by id, or None."""

    @abstractmethod
    async def update_work(self, work_id: int, fields: dict) -> Optional[Work]:
        """Update columns of a work; None when no row matched."""

    @abstractmethod
    async def list_works_with_schedule(self) -> list[Work]:
        """Every work whose schedule_data is set."""

    @abstractmethod
    async def list_activities(self, work_id: int) -> list[WorkActivity]:
        """Activities of a work ordered by display_order."""

    @abstractmethod
    async def get_activity(self, activity_id: int) -> Optional[WorkActivity]:
        ...

    @abstractmethod
    async def has_activities(self, work_id: int) -> bool:
        ...

    @abstractmethod
    async def insert_activities(self, rows: list[WorkActivity]) -> list[WorkActivity]:
        """Insert rows and return them with their assigned ids."""

    @abstractmethod
    async def update_activity(self, activity_id: int, fields: dict) -> Optional[WorkActivity]:
        ...

    @abstractmethod
    async def delete_activities(self, work_id: int) -> None:
        ...


class SupabaseWorkStore(WorkStore):
    """WorkStore backed by the Supabase ``works``/``work_activities`` tables."""

    async def get_work(self, work_id: int) -> Optional[Work]:
        row = await supabase_client.get_work(work_id)
        return Work.model_validate(row) if row else None

    async def update_work(self, work_id: int, fields: dict) -> Optional[Work]:
        row = await supabase_client.update_work(work_id, fields)
        return Work.model_validate(row) if row else None

    async def list_works_with_schedule(self) -> list[Work]:
        rows = await supabase_client.get_works_with_schedule()
        return [Work.model_validate(row) for row in rows]

    async def list_activities(self, work_id: int) -> list[WorkActivity]:
        rows = await supabase_client.get_activities_by_work(work_id)
        return [WorkActivity.model_validate(row) for row in rows]

    async def get_activity(self, activity_id: int) -> Optional[WorkActivity]:
        row = await supabase_client.get_activity(activity_id)
        return WorkActivity.model_validate(row) if row else None

    async def has_activities(self, work_id: int) -> bool:
        return await supabase_client.check_activities_exist(work_id)

    async def insert_activities(self, rows: list[WorkActivity]) -> list[WorkActivity]:
        inserted = await supabase_client.insert_activities([row.to_insert_row() for row in rows])
        return [WorkActivity.model_validate(row) for row in inserted]

    async def update_activity(self, activity_id: int, fields: dict) -> Optional[WorkActivity]:
        row = await supabase_client.update_activity(activity_id, fields)
        return WorkActivity.model_validate(row) if row else None

    async def delete_activities(self, work_id: int) -> None:
        await supabase_client.delete_activities_by_work(work_id)
