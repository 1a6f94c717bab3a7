"""Generic Supabase table repository"""
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from pydantic import BaseModel
from supabase import Client

T = TypeVar('T', bound=BaseModel)
CreateT = TypeVar('CreateT', bound=BaseModel)
UpdateT = TypeVar('UpdateT', bound=BaseModel)

Filters = Dict[str, Any]


class BaseRepository(Generic[T, CreateT, UpdateT]):
    """
    CRUD over one Supabase table, returning pydantic records.

    Filters are column -> value maps combined with AND. A ``None`` value
    matches SQL NULL and a list or tuple matches any of its members.
    Payloads are dumped in JSON mode, so ``Decimal`` amounts travel as
    exact strings rather than floats.
    """

    def __init__(self, client: Client, table_name: str, model_class: Type[T]):
        self._client = client
        self._table_name = table_name
        self._model_class = model_class

    def _table(self):
        return self._client.table(self._table_name)

    @staticmethod
    def _apply_filters(query, filters: Optional[Filters]):
        for column, value in (filters or {}).items():
            if value is None:
                query = query.is_(column, "null")
            elif isinstance(value, (list, tuple)):
                query = query.in_(column, list(value))
            else:
                query = query.eq(column, value)
        return query

    @staticmethod
    def _payload(data: BaseModel) -> Dict[str, Any]:
        return data.model_dump(exclude_unset=True, mode='json')

    def _to_model(self, row: Dict[str, Any]) -> T:
        return self._model_class(**row)

    def _to_models(self, rows: Optional[List[Dict[str, Any]]]) -> List[T]:
        return [self._to_model(row) for row in rows or []]

    async def find_by_id(self, id: str) -> Optional[T]:
        return await self.find_one({"id": id})

    async def find_by_filters(
        self,
        filters: Filters,
        limit: Optional[int] = None,
        order_by: Optional[str] = None,
        desc: bool = False,
        offset: int = 0
    ) -> List[T]:
        query = self._apply_filters(self._table().select("*"), filters)
        if order_by:
            query = query.order(order_by, desc=desc)
        if limit:
            query = query.limit(limit)
        if offset:
            query = query.offset(offset)

        return self._to_models(query.execute().data)

    async def find_all(
        self,
        limit: Optional[int] = None,
        offset: int = 0,
        order_by: Optional[str] = None,
        desc: bool = False
    ) -> List[T]:
        return await self.find_by_filters({}, limit=limit, order_by=order_by, desc=desc, offset=offset)

    async def find_one(self, filters: Filters) -> Optional[T]:
        results = await self.find_by_filters(filters, limit=1)
        return results[0] if results else None

    async def create(self, data: CreateT) -> T:
        response = self._table().insert(self._payload(data)).execute()
        if not response.data:
            raise ValueError(f"Failed to create {self._table_name} record")
        return self._to_model(response.data[0])

    async def update(self, id: str, data: UpdateT) -> Optional[T]:
        """Update one record; ``None`` when it does not exist"""
        updated = await self.update_by_filters({"id": id}, data)
        return updated[0] if updated else None

    async def update_by_filters(self, filters: Filters, data: UpdateT) -> List[T]:
        """
        Update every record matching ``filters``

        Only rows still matching at write time are changed, which makes this
        usable as a compare-and-set. Returns the rows actually updated.
        """
        payload = self._payload(data)
        if not payload:
            return await self.find_by_filters(filters)

        query = self._apply_filters(self._table().update(payload), filters)
        return self._to_models(query.execute().data)

    async def delete(self, id: str) -> bool:
        response = self._table().delete().eq("id", id).execute()
        return bool(response.data)

    async def count(self, filters: Optional[Filters] = None) -> int:
        query = self._apply_filters(self._table().select("id", count="exact"), filters)
        return query.execute().count or 0
