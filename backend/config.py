import os

from dotenv import load_dotenv

# Load .env from project root so local development MONGO_URI is picked up
load_dotenv()


def _split_origins(raw):
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


class Config:
    # MONGO_URL is the variable name used by earlier deployments of the API
    MONGO_URI = os.environ.get(
        "MONGO_URI",
        os.environ.get("MONGO_URL", "mongodb://localhost:27017/?directConnection=true"),
    )
    MONGO_DB_NAME = os.environ.get("MONGO_DB_NAME", "anywhere_todo")
    MONGO_TASKS_COLLECTION = os.environ.get("MONGO_TASKS_COLLECTION", "tasks")
    MONGO_TIMEOUT_MS = int(os.environ.get("MONGO_TIMEOUT_MS", "2000"))

    # Empty list means any origin is allowed
    CORS_ORIGINS = _split_origins(os.environ.get("CORS_ORIGIN", ""))

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
    SERVICE_NAME = os.environ.get("SERVICE_NAME", "anywhere-todo")

    ENV = os.environ.get("FLASK_ENV", "development")
    DEBUG = os.environ.get("FLASK_DEBUG", "1") == "1"
    JSON_SORT_KEYS = False
