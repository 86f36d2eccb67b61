from pymongo import ReturnDocument
from pymongo.errors import PyMongoError

from backend.models.task_model import utcnow
from backend.services.errors import StoreError


class MongoTaskStore:
    """TaskStore backed by a single pymongo collection.

    createdAt/updatedAt are stamped here on insert and on every update.
    Driver failures surface as StoreError; a missing document is reported as
    None (or False for delete), never as an exception.
    """

    def __init__(self, collection):
        self.collection = collection

    def insert(self, doc):
        now = utcnow()
        doc = dict(doc, createdAt=now, updatedAt=now)
        try:
            res = self.collection.insert_one(doc)
            # Read back so datetimes carry the millisecond precision BSON keeps
            return self.collection.find_one({"_id": res.inserted_id})
        except PyMongoError as exc:
            raise StoreError("Failed to insert task") from exc

    def find_by_id(self, task_id):
        try:
            return self.collection.find_one({"_id": task_id})
        except PyMongoError as exc:
            raise StoreError("Failed to load task") from exc

    def find(self, query, sort):
        try:
            return list(self.collection.find(query).sort([sort]))
        except PyMongoError as exc:
            raise StoreError("Failed to list tasks") from exc

    def update(self, task_id, set_fields, unset_fields=()):
        changes = {"$set": dict(set_fields, updatedAt=utcnow())}
        if unset_fields:
            changes["$unset"] = {name: "" for name in unset_fields}
        try:
            return self.collection.find_one_and_update(
                {"_id": task_id},
                changes,
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as exc:
            raise StoreError("Failed to update task") from exc

    def delete(self, task_id):
        try:
            res = self.collection.delete_one({"_id": task_id})
        except PyMongoError as exc:
            raise StoreError("Failed to delete task") from exc
        return res.deleted_count > 0
