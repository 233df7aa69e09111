from typing import Optional
import logging
import math

from cache_ttl.clock import SystemClock
from cache_ttl.datastore import DataStore
from cache_ttl.metadata import ttl_data_of
from cache_ttl.parser import CommandParser

logger = logging.getLogger(__name__)

class Executor:
    """
    Run text commands against a DataStore that has the TTL plugin registered
    """
    def __init__(self, db: DataStore, parser: CommandParser, clock=None):
        self._dispatch = {
            "set": self._set,
            "get": self._get,
            "exists": self._exists,
            "touch": self._touch,
            "ttl": self._ttl,
            "del": db.remove_item,
            "keys": self._keys,
            "flushdb": db.flush,
        }
        self._db = db
        self._parser = parser
        self._clock = clock or SystemClock()

    def execute(self, command_str: str) -> str:
        """
        Execute a command on the database
        """
        logger.debug(f"Command string: {command_str}")
        try:
            cmd, args = self._parser.parse(command_str)
            logger.debug(f"Parsed command: {cmd} with args: {args}")

            # dispatch the command to get corresponding response
            result = self._dispatch[cmd](*args)

            if isinstance(result, (int, bool)):
                result = f"(integer) {int(result)}"

            logger.debug(f"Executed command: {cmd} with args: {args}, result: {result}")
            return str(result)
        except Exception as e:
            return f"ERROR: {str(e)}"

    """
    -----------------------COMMANDS-------------------------
    """
    def _set(self, key: str, value: str, ttl: Optional[int] = None) -> str:
        extra = {"ttl": ttl} if ttl is not None else None
        return self._db.set_item(key, value, extra)

    def _get(self, key: str) -> str:
        item = self._db.get_item(key)
        return '(nil)' if item is None else str(item.value)

    def _exists(self, key: str) -> bool:
        return self._db.has_item(key)

    def _touch(self, key: str) -> int:
        """
        - Return seconds left after renewal, 0 if the key has no TTL
        """
        if not self._db.has_item(key):
            return 0
        ttl_data = self._db.extensions.touch(key)
        if not ttl_data:
            return 0
        return math.ceil(ttl_data.remaining(self._clock.now()))

    def _ttl(self, key: str) -> int:
        """
        - Get the time to live for a key
        """
        if not self._db.has_item(key):
            return -2  # convention: -2 when key expired or does not exist
        ttl_data = ttl_data_of(self._db.get_extra(key))
        if ttl_data is None:
            return -1  # no expiration set
        return math.ceil(ttl_data.remaining(self._clock.now()))

    def _keys(self) -> str:
        keys = self._db.list_keys()
        return " ".join(keys) if keys else '(empty)'
