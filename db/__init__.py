from db.database import get_engine, get_session, init_db
from db.models import Document
from db.store import ArrayRemove, ArrayUnion, DocumentStore, Increment

__all__ = [
    "get_engine",
    "get_session",
    "init_db",
    "Document",
    "DocumentStore",
    "ArrayUnion",
    "ArrayRemove",
    "Increment",
]
