from typing import Dict, Any, Optional, List, NamedTuple, Callable
from collections import defaultdict
from functools import wraps
from threading import RLock
from types import SimpleNamespace
import logging

from cache_ttl.exceptions import KeyNotFoundError
from cache_ttl.plugin import PRE_SET_ITEM, POST_HAS_ITEM, POST_GET_ITEM

logger = logging.getLogger(__name__)


class CacheItem(NamedTuple):
    key: str
    value: Any
    extra: Optional[Dict[str, Any]]


class DataStore:
    """
    A dictionary of key-(value, extra) entries with lifecycle hooks and plugin extensions
    """
    def __init__(self):
        self._store: Dict[str, CacheItem] = {}
        # hooks re-enter get_extra / remove_item
        self._lock = RLock()
        self._hooks: Dict[str, List[Callable]] = defaultdict(list)
        self.extensions = SimpleNamespace()

    """
    -----------------------PLUGINS-------------------------
    """
    def use(self, plugin) -> "DataStore":
        """
        - Register the plugin's hooks, in order, after those already registered
        - Bind the plugin's extensions to this cache
        """
        for hook in plugin.hooks:
            self._hooks[hook.event].append(hook.handler)
        for name, operation in plugin.create_extensions(self).items():
            setattr(self.extensions, name, self._locked(operation))
        logger.debug(f"Registered plugin {type(plugin).__name__}")
        return self

    def _locked(self, operation: Callable) -> Callable:
        """
        Run an extension as one call under the store lock
        """
        @wraps(operation)
        def run(*args, **kwargs):
            with self._lock:
                return operation(*args, **kwargs)
        return run

    def _run_hooks(self, event: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        for handler in self._hooks.get(event, []):
            payload = handler(payload)
        return payload

    """
    -----------------------ITEM OPERATIONS-------------------------
    """
    def set_item(self, key: str, value: Any, extra: Optional[Dict[str, Any]] = None) -> str:
        """
        - Set a key-value pair with optional auxiliary data
        - Hook errors propagate and nothing is stored
        """
        with self._lock:
            payload = self._run_hooks(PRE_SET_ITEM, {
                "cache_instance": self, "key": key, "value": value, "extra": extra,
            })
            self._store[payload["key"]] = CacheItem(payload["key"], payload["value"], payload["extra"])
            logger.debug(f"Set key '{key}'")
            return "OK"

    def get_item(self, key: str) -> Optional[CacheItem]:
        """
        - Get the entry by key
        - Return None if key does not exist
        """
        with self._lock:
            logger.debug(f"Getting item for key '{key}'")
            payload = self._run_hooks(POST_GET_ITEM, {
                "cache_instance": self, "key": key, "item": self._store.get(key),
            })
            return payload["item"]

    def has_item(self, key: str) -> bool:
        with self._lock:
            payload = self._run_hooks(POST_HAS_ITEM, {
                "cache_instance": self, "key": key, "result": key in self._store,
            })
            return bool(payload["result"])

    def remove_item(self, key: str) -> bool:
        """
        - Delete a key (value and auxiliary data) from the store
        - Return True if key was deleted, False if it did not exist
        """
        with self._lock:
            logger.debug(f"Deleting key '{key}'")
            return self._store.pop(key, None) is not None

    """
    -----------------------AUXILIARY DATA-------------------------
    """
    def get_extra(self, key: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            item = self._store.get(key)
            return item.extra if item is not None else None

    def set_extra(self, key: str, extra: Dict[str, Any]) -> None:
        """
        - Replace the auxiliary data of an existing key, value untouched
        - Throw error if the key is not set
        """
        with self._lock:
            item = self._store.get(key)
            if item is None:
                raise KeyNotFoundError(key)
            self._store[key] = item._replace(extra=extra)

    """
    KEY MANAGEMENT
    """
    def list_keys(self) -> List[str]:
        """
        - List all stored keys, expired ones included until they are next accessed
        """
        with self._lock:
            return list(self._store.keys())

    def flush(self) -> str:
        """
        - Clear the entire store
        """
        with self._lock:
            self._store.clear()
            return "OK"
