import logging
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

from pymongo import ASCENDING, DESCENDING

from backend.models.task_model import (
    SORTABLE_FIELDS,
    TOGGLE_FIELDS,
    Task,
    TaskUpdate,
)
from backend.services.errors import NotFoundError, ValidationError
from backend.services.ports import TaskStore
from backend.utils.db import to_object_id

logger = logging.getLogger(__name__)

DEFAULT_SORT = "createdAt"

# Seconds fraction of any length; fromisoformat before 3.11 only takes 3 or 6 digits
_FRACTION_RE = re.compile(r"(\d{2}:\d{2}:\d{2})\.(\d+)")


def parse_bool(value: Any) -> Optional[bool]:
    # Existing clients send query strings, so only the exact spellings count.
    if value == "true" or value is True:
        return True
    if value == "false" or value is False:
        return False
    return None


def parse_due_date(raw: Any) -> Optional[datetime]:
    """Parse an ISO-8601 date-time string into an aware UTC datetime.

    Empty values mean "no due date". A trailing ``Z`` is accepted and naive
    values are taken as UTC. Fractions of a second are padded or cut to
    microseconds.
    """
    if raw is None or raw == "":
        return None
    if not isinstance(raw, str):
        raise ValidationError("dueDate must be an ISO-8601 string", field="dueDate")
    text = raw.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    text = _FRACTION_RE.sub(
        lambda m: "%s.%s" % (m.group(1), (m.group(2) + "000000")[:6]), text, count=1
    )
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        raise ValidationError("Invalid dueDate format", field="dueDate") from None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _clean_title(raw: Any) -> str:
    if not isinstance(raw, str):
        raise ValidationError("Title is required", field="title")
    title = raw.strip()
    if not title:
        raise ValidationError("Title is required", field="title")
    return title


def _clean_category(raw: Any) -> str:
    if raw is None:
        return ""
    if not isinstance(raw, str):
        raise ValidationError("category must be a string", field="category")
    return raw.strip()


def _coerce_bool(raw: Any) -> bool:
    parsed = parse_bool(raw)
    if parsed is not None:
        return parsed
    return bool(raw)


def build_list_query(
    category: Optional[str] = None,
    include_archived: Any = None,
    done: Any = None,
    sort: Optional[str] = None,
    order: Optional[str] = None,
):
    """Translate list parameters into a (query, sort) pair for the store."""
    query: Dict[str, Any] = {}
    if category:
        query["category"] = category
    if parse_bool(include_archived) is not True:
        # $ne also matches documents written before the flag existed
        query["archived"] = {"$ne": True}
    done_flag = parse_bool(done)
    if done_flag is not None:
        query["done"] = done_flag

    sort_key = sort if sort in SORTABLE_FIELDS else DEFAULT_SORT
    direction = ASCENDING if order == "asc" else DESCENDING
    return query, (sort_key, direction)


def parse_update(payload: Mapping[str, Any]) -> TaskUpdate:
    """Build a TaskUpdate from a request body.

    null for dueDate clears it; null for any other field counts as absent.
    """
    update = TaskUpdate()
    if payload.get("title") is not None:
        update.title = _clean_title(payload["title"])
    if payload.get("category") is not None:
        update.category = _clean_category(payload["category"])
    if "dueDate" in payload:
        update.due_date = parse_due_date(payload["dueDate"])
    if payload.get("done") is not None:
        update.done = _coerce_bool(payload["done"])
    if payload.get("archived") is not None:
        update.archived = _coerce_bool(payload["archived"])
    return update


class TaskService:
    def __init__(self, store: TaskStore):
        self.store = store

    def list_tasks(
        self,
        category: Optional[str] = None,
        include_archived: Any = None,
        done: Any = None,
        sort: Optional[str] = None,
        order: Optional[str] = None,
    ) -> List[Task]:
        query, sort_spec = build_list_query(category, include_archived, done, sort, order)
        return [Task.from_doc(doc) for doc in self.store.find(query, sort_spec)]

    def get_task(self, task_id: str) -> Task:
        oid = to_object_id(task_id)
        doc = self.store.find_by_id(oid)
        if doc is None:
            raise NotFoundError()
        return Task.from_doc(doc)

    def create_task(self, payload: Mapping[str, Any]) -> Task:
        if not isinstance(payload, Mapping):
            raise ValidationError("Request body must be a JSON object")
        title = _clean_title(payload.get("title"))
        category = _clean_category(payload.get("category"))
        due_date = parse_due_date(payload.get("dueDate"))

        doc: Dict[str, Any] = {
            "title": title,
            "category": category,
            "done": False,
            "archived": False,
        }
        if due_date is not None:
            doc["dueDate"] = due_date
        created = Task.from_doc(self.store.insert(doc))
        logger.info("Created task id=%s", created.id)
        return created

    def update_task(self, task_id: str, payload: Mapping[str, Any]) -> Task:
        oid = to_object_id(task_id)
        if not isinstance(payload, Mapping):
            raise ValidationError("Request body must be a JSON object")
        update = parse_update(payload)
        if update.is_empty():
            doc = self.store.find_by_id(oid)
        else:
            set_fields, unset_fields = update.to_store_changes()
            doc = self.store.update(oid, set_fields, unset_fields)
        if doc is None:
            raise NotFoundError()
        return Task.from_doc(doc)

    def toggle_task(self, task_id: str, field: Optional[str], value: Any = None) -> Task:
        """Set ``field`` to ``value``, or invert its stored value when no bool is given.

        The invert reads the current document right before writing. Two
        concurrent inverts can read the same value and both write its
        opposite, so one of them is lost.
        """
        oid = to_object_id(task_id)
        if not field:
            raise ValidationError("field required", field="field")
        if field not in TOGGLE_FIELDS:
            raise ValidationError(
                "field must be one of: %s" % ", ".join(TOGGLE_FIELDS), field="field"
            )

        if isinstance(value, bool):
            next_value = value
        else:
            current = self.store.find_by_id(oid)
            if current is None:
                raise NotFoundError()
            next_value = not bool(current.get(field, False))

        doc = self.store.update(oid, {field: next_value})
        if doc is None:
            raise NotFoundError()
        logger.info("Toggled task id=%s %s=%s", task_id, field, next_value)
        return Task.from_doc(doc)

    def archive_task(self, task_id: str) -> Task:
        return self.toggle_task(task_id, "archived")

    def delete_task(self, task_id: str) -> None:
        oid = to_object_id(task_id)
        if not self.store.delete(oid):
            raise NotFoundError()
        logger.info("Deleted task id=%s", task_id)
