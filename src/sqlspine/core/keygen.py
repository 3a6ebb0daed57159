"""Random values for duplicated primary keys and table-copy names.

The random source is always passed in. Production code gets a fresh
``random.SystemRandom``; tests hand over a seeded ``random.Random`` and get
reproducible keys.
"""

from __future__ import annotations

import random
import string

_ALPHANUMERIC = string.ascii_letters + string.digits

_INTEGER_TYPES = frozenset(
    {
        "int", "integer", "tinyint", "smallint", "mediumint", "bigint",
        "int2", "int4", "int8", "serial", "smallserial", "bigserial",
        "number",
    }
)
_STRING_TYPES = frozenset(
    {
        "char", "varchar", "text", "tinytext", "mediumtext", "longtext",
        "nchar", "nvarchar", "ntext", "varchar2", "nvarchar2",
        "character", "character varying", "string", "bpchar", "clob",
    }
)


def base_type(declared: str) -> str:
    """``"VARCHAR(255)"`` -> ``"varchar"``, ``"bigint unsigned"`` -> ``"bigint"``."""
    name = declared.split("(", 1)[0].strip().lower()
    for suffix in (" unsigned", " signed"):
        if name.endswith(suffix):
            name = name[: -len(suffix)]
    return name


def is_integer_type(declared: str) -> bool:
    return base_type(declared) in _INTEGER_TYPES


def is_string_type(declared: str) -> bool:
    return base_type(declared) in _STRING_TYPES


class KeyGenerator:
    """
    Generates replacement key values.

    Args:
        rng: Random source; defaults to ``random.SystemRandom()``
        integer_ceiling: Exclusive upper bound for integer keys
        string_length: Length of alphanumeric string keys
        suffix_length: Letters in a table-copy suffix
    """

    def __init__(
        self,
        rng: random.Random | None = None,
        *,
        integer_ceiling: int = 1_000_000,
        string_length: int = 6,
        suffix_length: int = 5,
    ):
        self._rng = rng or random.SystemRandom()
        self.integer_ceiling = integer_ceiling
        self.string_length = string_length
        self.suffix_length = suffix_length

    def integer(self) -> int:
        return self._rng.randrange(0, self.integer_ceiling)

    def string(self) -> str:
        return "".join(self._rng.choice(_ALPHANUMERIC) for _ in range(self.string_length))

    def suffix(self) -> str:
        return "".join(self._rng.choice(string.ascii_letters) for _ in range(self.suffix_length))

    def for_type(self, declared: str | None) -> int | str | None:
        """Fresh value for a key column of ``declared`` type, or None if unsupported."""
        if declared is None:
            return None
        if is_integer_type(declared):
            return self.integer()
        if is_string_type(declared):
            return self.string()
        return None


__all__ = [
    "KeyGenerator",
    "base_type",
    "is_integer_type",
    "is_string_type",
]
