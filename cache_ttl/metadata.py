"""
TTL metadata stored in an entry's auxiliary data under `ttlData`
  - `ttl`: duration in seconds (positive integer)
  - `created`: timestamp when the record was first computed
  - `valid_till`: timestamp after which the entry is expired
"""
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Union

from cache_ttl.exceptions import TtlTypeError, TtlValueError

TTL_DATA_KEY = "ttlData"
TTL_REQUEST_KEY = "ttl"


def validate_ttl(ttl: Any) -> int:
    """
    Check a requested ttl, raising on anything that is not a positive int
    """
    # bool is a subclass of int but never a duration
    if isinstance(ttl, bool) or not isinstance(ttl, int):
        raise TtlTypeError()
    if ttl <= 0:
        raise TtlValueError()
    return ttl


@dataclass(frozen=True)
class TtlData:
    ttl: int
    created: float
    valid_till: float

    def __post_init__(self):
        validate_ttl(self.ttl)

    @classmethod
    def create(cls, ttl: int, now: float) -> "TtlData":
        ttl = validate_ttl(ttl)
        return cls(ttl=ttl, created=now, valid_till=now + ttl)

    def renewed(self, now: float) -> "TtlData":
        """
        Same duration and creation time, deadline pushed to `now + ttl`
        """
        return TtlData(ttl=self.ttl, created=self.created, valid_till=now + self.ttl)

    def is_expired(self, now: float) -> bool:
        return now > self.valid_till

    def remaining(self, now: float) -> float:
        return self.valid_till - now

    def to_dict(self) -> Dict[str, Any]:
        return {"ttl": self.ttl, "created": self.created, "validTill": self.valid_till}

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "TtlData":
        return cls(ttl=data["ttl"], created=data["created"], valid_till=data["validTill"])

    @classmethod
    def coerce(cls, data: Union["TtlData", Mapping[str, Any], None]) -> Optional["TtlData"]:
        """
        Accept a record or its wire form (auxiliary data restored from persistence)
        """
        if data is None or isinstance(data, TtlData):
            return data
        return cls.from_mapping(data)


def ttl_data_of(extra: Optional[Mapping[str, Any]]) -> Optional[TtlData]:
    """
    Return the TTL record held in auxiliary data, or None when there is none
    """
    if not extra:
        return None
    return TtlData.coerce(extra.get(TTL_DATA_KEY))
