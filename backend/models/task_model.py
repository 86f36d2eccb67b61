from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union


class _Missing:
    """Marker for a field that was not sent at all (as opposed to null)."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self):
        return False

    def __repr__(self):
        return "MISSING"


MISSING = _Missing()

# Fields the list endpoint may sort by; they are also the stored field names.
SORTABLE_FIELDS = ("createdAt", "title", "dueDate", "category", "done", "archived")
TOGGLE_FIELDS = ("done", "archived")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def isoformat_utc(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


@dataclass
class Task:
    title: str
    category: str = ""
    due_date: Optional[datetime] = None
    done: bool = False
    archived: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    id: Optional[str] = None

    @classmethod
    def from_doc(cls, doc: Dict[str, Any]) -> "Task":
        # Older documents may predate category/archived, so fall back to defaults.
        return cls(
            id=str(doc["_id"]) if doc.get("_id") is not None else None,
            title=doc.get("title", ""),
            category=doc.get("category") or "",
            due_date=doc.get("dueDate"),
            done=bool(doc.get("done", False)),
            archived=bool(doc.get("archived", False)),
            created_at=doc.get("createdAt"),
            updated_at=doc.get("updatedAt"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "category": self.category,
            "dueDate": isoformat_utc(self.due_date),
            "done": self.done,
            "archived": self.archived,
            "createdAt": isoformat_utc(self.created_at),
            "updatedAt": isoformat_utc(self.updated_at),
        }


@dataclass
class TaskUpdate:
    """Partial update. MISSING leaves a field alone; due_date=None clears it."""

    title: Union[str, _Missing] = field(default=MISSING)
    category: Union[str, _Missing] = field(default=MISSING)
    due_date: Union[datetime, None, _Missing] = field(default=MISSING)
    done: Union[bool, _Missing] = field(default=MISSING)
    archived: Union[bool, _Missing] = field(default=MISSING)

    def is_empty(self) -> bool:
        return all(
            getattr(self, name) is MISSING
            for name in ("title", "category", "due_date", "done", "archived")
        )

    def to_store_changes(self):
        """Split into ($set fields, $unset fields) using stored field names."""
        set_fields: Dict[str, Any] = {}
        unset_fields = []
        if self.title is not MISSING:
            set_fields["title"] = self.title
        if self.category is not MISSING:
            set_fields["category"] = self.category
        if self.due_date is None:
            unset_fields.append("dueDate")
        elif self.due_date is not MISSING:
            set_fields["dueDate"] = self.due_date
        if self.done is not MISSING:
            set_fields["done"] = self.done
        if self.archived is not MISSING:
            set_fields["archived"] = self.archived
        return set_fields, unset_fields
