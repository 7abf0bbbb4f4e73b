import logging

from flask import current_app

from twitchviewer.storage.base import DuplicateKeyError, Storage
from twitchviewer.storage.memory import MemStorage
from twitchviewer.storage.sql import DatabaseStorage

logger = logging.getLogger(__name__)

EXTENSION_KEY = 'twitchviewer.storage'

BACKENDS = {
    'memory': MemStorage,
    'database': DatabaseStorage,
}


def init_storage(app, storage=None):
    if storage is None:
        backend = app.config.get('STORAGE_BACKEND', 'database')
        if backend not in BACKENDS:
            raise ValueError(f"Unknown STORAGE_BACKEND: {backend}")
        storage = BACKENDS[backend]()
    app.extensions[EXTENSION_KEY] = storage
    logger.info(f"Storage backend: {type(storage).__name__}")
    return storage


def get_storage():
    return current_app.extensions[EXTENSION_KEY]


__all__ = ['DuplicateKeyError', 'Storage', 'MemStorage', 'DatabaseStorage', 'init_storage', 'get_storage']
