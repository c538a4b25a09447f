"""
SNMP Value Models - Typed results returned by the SNMP query boundary.

The collector never looks at easysnmp objects directly: every variable is
reduced to one of three kinds before it leaves the session wrapper.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union


class SNMPValueKind(str, Enum):
    """What the device returned for a single OID."""
    ABSENT = "absent"
    INTEGER = "integer"
    STRING = "string"


@dataclass(frozen=True)
class SNMPValue:
    """One variable binding from a GET response."""
    oid: str
    kind: SNMPValueKind
    value: Optional[Union[int, str]] = None

    @classmethod
    def absent(cls, oid: str) -> "SNMPValue":
        return cls(oid=oid, kind=SNMPValueKind.ABSENT)

    @classmethod
    def integer(cls, oid: str, value: int) -> "SNMPValue":
        return cls(oid=oid, kind=SNMPValueKind.INTEGER, value=value)

    @classmethod
    def string(cls, oid: str, value: str) -> "SNMPValue":
        return cls(oid=oid, kind=SNMPValueKind.STRING, value=value)

    @property
    def is_absent(self) -> bool:
        return self.kind is SNMPValueKind.ABSENT
