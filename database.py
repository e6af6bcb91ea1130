"""
Storage accessor.

Two backends expose the same get-all / create / update / delete operations per
collection: MongoDB (DATABASE_URL + DATABASE_NAME) and an in-memory store that
stands in for browser local storage and is seeded with mock data. Every
successful write is announced on ``events.bus``.
"""
import copy
import logging
import os
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from bson import ObjectId
from dotenv import load_dotenv
from pydantic import BaseModel
from pymongo import MongoClient, ReturnDocument

from events import DataChange, bus
from seed import COLLECTIONS as SEED_DATA

load_dotenv()

logger = logging.getLogger(__name__)

COLLECTIONS = ['agent', 'schedule', 'task', 'incident', 'message', 'calendarevent', 'building', 'settings']
VERSION_KEY = 'version'


class StorageUnavailable(Exception):
    """Raised when the configured backend cannot be reached or is not configured."""


def _as_dict(data: Union[BaseModel, Dict[str, Any]]) -> Dict[str, Any]:
    if isinstance(data, BaseModel):
        return data.model_dump(mode='json', exclude={'id'})
    return copy.deepcopy(data)


def _matches(doc: Dict[str, Any], filter_dict: Dict[str, Any]) -> bool:
    return all(doc.get(key) == value for key, value in filter_dict.items())


class MemoryStore:
    """Key-value style store, one list of documents per collection."""

    name = 'memory'

    def __init__(self, seed: Optional[Dict[str, List[Dict[str, Any]]]] = None):
        self._collections: Dict[str, List[Dict[str, Any]]] = {c: [] for c in COLLECTIONS}
        self._version = 0
        for collection_name, docs in (seed or {}).items():
            self._collections[collection_name] = copy.deepcopy(docs)

    def version(self) -> int:
        """Write counter; every insert, update or delete bumps it."""
        return self._version

    def collection_names(self) -> List[str]:
        return sorted(self._collections)

    def find(self, collection_name: str, filter_dict: Optional[Dict[str, Any]] = None, limit: Optional[int] = None):
        docs = [copy.deepcopy(d) for d in self._collections.get(collection_name, [])
                if _matches(d, filter_dict or {})]
        return docs[:limit] if limit else docs

    def find_one(self, collection_name: str, doc_id: str):
        for doc in self._collections.get(collection_name, []):
            if doc['id'] == doc_id:
                return copy.deepcopy(doc)
        return None

    def insert(self, collection_name: str, data: Dict[str, Any]) -> str:
        doc = copy.deepcopy(data)
        doc.setdefault('id', str(ObjectId()))
        self._collections.setdefault(collection_name, []).append(doc)
        self._version += 1
        return doc['id']

    def update(self, collection_name: str, doc_id: str, updates: Dict[str, Any]):
        for doc in self._collections.get(collection_name, []):
            if doc['id'] == doc_id:
                doc.update(copy.deepcopy(updates))
                self._version += 1
                return copy.deepcopy(doc)
        return None

    def delete(self, collection_name: str, doc_id: str) -> bool:
        docs = self._collections.get(collection_name, [])
        kept = [d for d in docs if d['id'] != doc_id]
        if len(kept) == len(docs):
            return False
        self._collections[collection_name] = kept
        self._version += 1
        return True


def _object_id(doc_id: str):
    return ObjectId(doc_id) if ObjectId.is_valid(doc_id) else doc_id


def _from_mongo(doc: Dict[str, Any]) -> Dict[str, Any]:
    doc = dict(doc)
    doc['id'] = str(doc.pop('_id'))
    return doc


class MongoStore:
    name = 'mongo'

    def __init__(self, database):
        self.db = database

    def version(self) -> int:
        doc = self.db['meta'].find_one({'_id': VERSION_KEY})
        return doc['value'] if doc else 0

    def _bump(self) -> None:
        # shared by every worker on the same database
        self.db['meta'].update_one({'_id': VERSION_KEY}, {'$inc': {'value': 1}}, upsert=True)

    def collection_names(self) -> List[str]:
        return self.db.list_collection_names()

    def find(self, collection_name: str, filter_dict: Optional[Dict[str, Any]] = None, limit: Optional[int] = None):
        cursor = self.db[collection_name].find(filter_dict or {})
        if limit:
            cursor = cursor.limit(limit)
        return [_from_mongo(d) for d in cursor]

    def find_one(self, collection_name: str, doc_id: str):
        doc = self.db[collection_name].find_one({'_id': _object_id(doc_id)})
        return _from_mongo(doc) if doc else None

    def insert(self, collection_name: str, data: Dict[str, Any]) -> str:
        data = dict(data)
        if 'id' in data:
            data['_id'] = _object_id(data.pop('id'))
        result = self.db[collection_name].insert_one(data)
        self._bump()
        return str(result.inserted_id)

    def update(self, collection_name: str, doc_id: str, updates: Dict[str, Any]):
        updates = {k: v for k, v in updates.items() if k != 'id'}
        doc = self.db[collection_name].find_one_and_update(
            {'_id': _object_id(doc_id)}, {'$set': updates}, return_document=ReturnDocument.AFTER
        )
        if doc:
            self._bump()
        return _from_mongo(doc) if doc else None

    def delete(self, collection_name: str, doc_id: str) -> bool:
        deleted = self.db[collection_name].delete_one({'_id': _object_id(doc_id)}).deleted_count > 0
        if deleted:
            self._bump()
        return deleted


# ----- Backend selection -----

db = None
database_url = os.getenv("DATABASE_URL")
database_name = os.getenv("DATABASE_NAME")


def _build_store():
    global db
    backend = os.getenv("STORAGE_BACKEND") or ('mongo' if database_url and database_name else 'memory')
    if backend == 'mongo':
        if not (database_url and database_name):
            raise StorageUnavailable("Database not available. Check DATABASE_URL and DATABASE_NAME environment variables.")
        db = MongoClient(database_url)[database_name]
        logger.info("using MongoDB storage, database %s", database_name)
        return MongoStore(db)
    seed_data = os.getenv("SEED_MOCK_DATA", "1") not in ("0", "false", "no")
    logger.info("using in-memory storage (seeded: %s)", seed_data)
    return MemoryStore(SEED_DATA if seed_data else None)


_store = None


def get_store():
    global _store
    if _store is None:
        _store = _build_store()
    return _store


def set_store(store) -> None:
    """Swap the active backend (tests use a fresh MemoryStore)."""
    global _store
    _store = store


# ----- Collection operations -----

def create_document(collection_name: str, data: Union[BaseModel, dict]) -> str:
    data_dict = _as_dict(data)
    now = datetime.now(timezone.utc)
    data_dict.setdefault('created_at', now)
    data_dict['updated_at'] = now
    doc_id = get_store().insert(collection_name, data_dict)
    logger.debug("created %s/%s", collection_name, doc_id)
    bus.publish(DataChange(collection=collection_name, action='create', document_id=doc_id))
    return doc_id


def get_documents(collection_name: str, filter_dict: Optional[dict] = None, limit: Optional[int] = None) -> List[dict]:
    return get_store().find(collection_name, filter_dict, limit)


def get_document(collection_name: str, doc_id: str) -> Optional[dict]:
    return get_store().find_one(collection_name, doc_id)


def data_version() -> int:
    """Storage-wide write counter, read from the backend itself."""
    return get_store().version()


def update_document(collection_name: str, doc_id: str, updates: Union[BaseModel, dict]) -> Optional[dict]:
    updates_dict = _as_dict(updates)
    updates_dict['updated_at'] = datetime.now(timezone.utc)
    doc = get_store().update(collection_name, doc_id, updates_dict)
    if doc is not None:
        logger.debug("updated %s/%s", collection_name, doc_id)
        bus.publish(DataChange(collection=collection_name, action='update', document_id=doc_id))
    return doc


def delete_document(collection_name: str, doc_id: str) -> bool:
    deleted = get_store().delete(collection_name, doc_id)
    if deleted:
        logger.debug("deleted %s/%s", collection_name, doc_id)
        bus.publish(DataChange(collection=collection_name, action='delete', document_id=doc_id))
    return deleted
