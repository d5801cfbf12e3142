from __future__ import annotations

from typing import Generic, List, Optional, Protocol, TypeVar

from ..database import InMemoryCollection, InMemoryDatabase
from ..models.donation import Donation
from ..models.volunteer import Volunteer

RecordT = TypeVar("RecordT", Donation, Volunteer)


class Repository(Protocol[RecordT]):
    def get(self, record_id: str) -> Optional[RecordT]: ...

    def list(self) -> List[RecordT]: ...

    def upsert(self, record: RecordT) -> RecordT: ...

    def delete(self, record_id: str) -> bool: ...

    def exists(self, record_id: str) -> bool: ...


class InMemoryRepository(Generic[RecordT]):
    """Stores pydantic records by ``id``; reads hand out copies."""

    def __init__(self, collection: InMemoryCollection) -> None:
        self.collection = collection

    def get(self, record_id: str) -> Optional[RecordT]:
        record = self.collection.find_one(record_id)
        return record.model_copy(deep=True) if record is not None else None

    def list(self) -> List[RecordT]:
        return [record.model_copy(deep=True) for record in self.collection.all()]

    def upsert(self, record: RecordT) -> RecordT:
        self.collection.put(record.id, record.model_copy(deep=True))
        return record

    def delete(self, record_id: str) -> bool:
        return self.collection.delete(record_id)

    def exists(self, record_id: str) -> bool:
        return self.collection.contains(record_id)


class DonationRepository(InMemoryRepository[Donation]):
    def __init__(self, database: InMemoryDatabase) -> None:
        super().__init__(database.get_collection("donations"))


class VolunteerRepository(InMemoryRepository[Volunteer]):
    def __init__(self, database: InMemoryDatabase) -> None:
        super().__init__(database.get_collection("volunteers"))
