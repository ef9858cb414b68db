"""
Validated, schema-qualified table identifiers
"""

import re
from typing import NamedTuple

from core.exceptions import InvalidIdentifierError

_IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]{0,62}$")


class QualifiedTableName(NamedTuple):
    """
    A destination table addressed as ``schema.table``.

    Registry rows are untrusted text; only names that pass ``parse`` are
    ever turned into statements, and even then through dialect quoting.
    """
    schema: str
    name: str

    @classmethod
    def parse(cls, value: str) -> "QualifiedTableName":
        """
        Parse and validate a schema-qualified table name.

        Raises:
            InvalidIdentifierError: If the value is not exactly two
                allow-listed identifiers joined by a dot
        """
        if not isinstance(value, str):
            raise InvalidIdentifierError(
                "Table name must be a string",
                context={"identifier": repr(value)}
            )

        parts = value.strip().split(".")
        if len(parts) != 2 or not all(_IDENTIFIER_PATTERN.match(p) for p in parts):
            raise InvalidIdentifierError(
                "Table name must be a schema-qualified identifier (schema.table)",
                context={"identifier": value}
            )
        return cls(schema=parts[0], name=parts[1])

    def __str__(self) -> str:
        return f"{self.schema}.{self.name}"
