"""
Store port used by the task service.

The service only talks to this Protocol, so the Mongo collection can be
swapped for an in-memory double in tests.
"""

from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence, Tuple

from bson import ObjectId

Document = Dict[str, Any]
# (field, direction) where direction is pymongo.ASCENDING / pymongo.DESCENDING
SortSpec = Tuple[str, int]


class TaskStore(Protocol):
    def insert(self, doc: Mapping[str, Any]) -> Document: ...

    def find_by_id(self, task_id: ObjectId) -> Optional[Document]: ...

    def find(self, query: Mapping[str, Any], sort: SortSpec) -> List[Document]: ...

    def update(
        self,
        task_id: ObjectId,
        set_fields: Mapping[str, Any],
        unset_fields: Sequence[str] = (),
    ) -> Optional[Document]: ...

    def delete(self, task_id: ObjectId) -> bool: ...
