import atexit

from bson import ObjectId
from bson.errors import InvalidId
from flask import current_app
from pymongo import MongoClient

from backend.services.errors import ValidationError


def init_app(app):
    """Create the app-wide MongoClient.

    The client keeps its own connection pool, so it lives as long as the
    process and is closed at interpreter exit rather than per request.
    """
    client = MongoClient(
        app.config["MONGO_URI"],
        serverSelectionTimeoutMS=app.config["MONGO_TIMEOUT_MS"],
        tz_aware=True,
        connect=False,
    )
    app.extensions["mongo_client"] = client
    atexit.register(client.close)
    return client


def get_db(app=None):
    app = app or current_app
    client = app.extensions["mongo_client"]
    return client[app.config["MONGO_DB_NAME"]]


def to_object_id(value):
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise ValidationError("Invalid task id", field="id") from None
