from typing import Any, Callable, List, Tuple
import logging
import re

from cache_ttl.exceptions import ParserError, TtlTypeError

logger = logging.getLogger(__name__)

# double-quoted, single-quoted or bare words
TOKEN_PATTERN = re.compile(r'"([^"]*)"|\'([^\']*)\'|(\S+)')


def parse_ttl(arg: str) -> int:
    """
    Seconds for SET, sign kept so the plugin reports non-positive values
    """
    if not re.fullmatch(r'[+-]?\d+', arg):
        raise TtlTypeError()
    return int(arg)


class CommandParser:
    def __init__(self):
        # command -> (required converters, optional converters)
        self._signatures = {
            "set": ((str, str), (parse_ttl,)),   # set key value [ttl]
            "get": ((str,), ()),
            "exists": ((str,), ()),
            "touch": ((str,), ()),
            "ttl": ((str,), ()),
            "del": ((str,), ()),
            "keys": ((), ()),
            "flushdb": ((), ()),
        }

    def tokenize(self, command: str) -> List[str]:
        return [g1 or g2 or g3 for (g1, g2, g3) in TOKEN_PATTERN.findall(command)]

    def parse(self, command: str) -> Tuple[str, List[Any]]:
        """
        Parse a command string
        Return a tuple of (command_name, typed args)
        """
        parts = self.tokenize(command)
        logger.debug(f"Tokens: {parts}")
        if not parts:
            raise ParserError("Empty command")

        cmd, args = parts[0].lower(), parts[1:]
        if cmd not in self._signatures:
            raise ParserError(f"Unknown command: {cmd}")

        required, optional = self._signatures[cmd]
        if not len(required) <= len(args) <= len(required) + len(optional):
            raise ParserError(
                f"Wrong number of arguments for '{cmd}': "
                f"expected {self._usage(required, optional)}, got {len(args)}"
            )

        converters: Tuple[Callable[[str], Any], ...] = required + optional
        return cmd, [convert(arg) for convert, arg in zip(converters, args)]

    def _usage(self, required: tuple, optional: tuple) -> str:
        if not optional:
            return str(len(required))
        return f"{len(required)} to {len(required) + len(optional)}"
