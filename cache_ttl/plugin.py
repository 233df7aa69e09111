"""
TTL plugin for a host cache.

The host calls the hooks inline from its own write/read/existence-check
operations and continues with whatever payload the hook returns. Expiration
is lazy: an expired entry is only removed when it is next read or checked.
"""
from typing import Any, Callable, Dict, List, Mapping, NamedTuple, Optional, Protocol, Union
import logging

from cache_ttl.clock import SystemClock
from cache_ttl.metadata import TtlData, TTL_DATA_KEY, TTL_REQUEST_KEY, validate_ttl, ttl_data_of

logger = logging.getLogger(__name__)

PRE_SET_ITEM = "preSetItem"
POST_HAS_ITEM = "postHasItem"
POST_GET_ITEM = "postGetItem"

Payload = Dict[str, Any]


class CacheInstance(Protocol):
    """
    Capabilities the plugin needs from its host
    """
    def get_extra(self, key: str) -> Optional[Dict[str, Any]]: ...

    def set_extra(self, key: str, extra: Dict[str, Any]) -> None: ...

    def remove_item(self, key: str) -> Any: ...


class Clock(Protocol):
    def now(self) -> float: ...


class Hook(NamedTuple):
    event: str
    handler: Callable[[Payload], Payload]


class TtlPlugin:
    """
    Input:
        - `clock`: time source with a `now()` method, defaults to the system clock.
        - `preserve_extra`: when True `touch` keeps the other auxiliary keys of an entry,
          when False it replaces the auxiliary data with exactly `{ttlData: ...}`.
    """
    def __init__(self, clock: Optional[Clock] = None, preserve_extra: bool = True):
        self._clock = clock or SystemClock()
        self._preserve_extra = preserve_extra
        self.hooks: List[Hook] = [
            Hook(PRE_SET_ITEM, self.pre_set_item),
            Hook(POST_HAS_ITEM, self.post_has_item),
            Hook(POST_GET_ITEM, self.post_get_item),
        ]

    """
    -----------------------HOOKS-------------------------
    """
    def pre_set_item(self, payload: Payload) -> Payload:
        """
        - Turn an `extra.ttl` request into an immutable `extra.ttlData` record
        - Raise TtlTypeError / TtlValueError on an invalid request, before anything changes
        """
        extra = payload.get("extra")
        if not extra or extra.get(TTL_REQUEST_KEY) is None:
            return payload

        ttl = validate_ttl(extra[TTL_REQUEST_KEY])
        ttl_data = TtlData.create(ttl, self._clock.now())
        logger.debug(f"Key '{payload.get('key')}' valid till {ttl_data.valid_till} (ttl {ttl}s)")

        # build a new mapping, the caller's extra is left as it was
        new_extra = {k: v for k, v in extra.items() if k != TTL_REQUEST_KEY}
        new_extra[TTL_DATA_KEY] = ttl_data
        return {**payload, "extra": new_extra}

    def post_has_item(self, payload: Payload) -> Payload:
        """
        - Report an expired key as missing and evict it from the host
        """
        if not payload.get("result"):
            return payload

        cache_instance, key = payload["cache_instance"], payload["key"]
        ttl_data = ttl_data_of(cache_instance.get_extra(key))
        if ttl_data is None:
            return payload

        if ttl_data.is_expired(self._clock.now()):
            self._evict(cache_instance, key)
            return {**payload, "result": False}
        return payload

    def post_get_item(self, payload: Payload) -> Payload:
        """
        - Turn a read of an expired item into a miss and evict it from the host
        """
        item = payload.get("item")
        if item is None:
            return payload

        extra = item.get("extra") if isinstance(item, Mapping) else getattr(item, "extra", None)
        ttl_data = ttl_data_of(extra)
        if ttl_data is None:
            return payload

        if ttl_data.is_expired(self._clock.now()):
            self._evict(payload["cache_instance"], payload["key"])
            return {**payload, "item": None}
        return payload

    def _evict(self, cache_instance: CacheInstance, key: str) -> None:
        logger.info(f"Key '{key}' expired, removing it")
        cache_instance.remove_item(key)

    """
    -----------------------EXTENSIONS-------------------------
    """
    def create_extensions(self, cache_instance: CacheInstance) -> Dict[str, Callable]:
        """
        Operations bound to `cache_instance`, exposed by the host to application code
        """
        def touch(key: str) -> Union[TtlData, bool]:
            return self.touch(cache_instance, key)

        return {"touch": touch}

    def touch(self, cache_instance: CacheInstance, key: str) -> Union[TtlData, bool]:
        """
        - Renew the deadline of `key` to now + ttl, keeping `ttl` and `created`
        - Return the new record, or False if the key has no TTL to renew
        """
        extra = cache_instance.get_extra(key)
        ttl_data = ttl_data_of(extra)
        if ttl_data is None:
            logger.debug(f"Nothing to touch for key '{key}'")
            return False

        renewed = ttl_data.renewed(self._clock.now())
        new_extra = dict(extra) if self._preserve_extra else {}
        new_extra[TTL_DATA_KEY] = renewed
        cache_instance.set_extra(key, new_extra)
        logger.debug(f"Touched key '{key}', valid till {renewed.valid_till}")
        return renewed


def ttl_plugin(**kwargs) -> TtlPlugin:
    return TtlPlugin(**kwargs)
