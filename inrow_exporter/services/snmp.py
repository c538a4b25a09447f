"""
SNMP Service - Thin session wrapper around easysnmp.

Only GET requests are needed. Results come back as typed ``SNMPValue``
objects in request order so callers never deal with easysnmp's
string-typed variables.
"""

import logging
from typing import Callable, List, Optional, Sequence

from easysnmp import Session, EasySNMPError, EasySNMPConnectionError, EasySNMPTimeoutError

from inrow_exporter.models.snmp import SNMPValue

logger = logging.getLogger(__name__)

DEFAULT_PORT = 161
DEFAULT_TIMEOUT = 2
DEFAULT_VERSION = 2

ABSENT_TYPES = frozenset({"NOSUCHOBJECT", "NOSUCHINSTANCE", "ENDOFMIBVIEW", "NULL"})
INTEGER_TYPES = frozenset({
    "INTEGER", "INTEGER32", "UNSIGNED32", "UNSIGNED", "GAUGE", "COUNTER", "COUNTER64", "TICKS",
})


class SNMPException(Exception):
    """Base exception for SNMP session errors."""
    pass


class SNMPConnectionError(SNMPException):
    """The session to the device could not be opened."""
    pass


class SNMPQueryError(SNMPException):
    """A GET request failed or timed out."""
    pass


def to_snmp_value(oid: str, snmp_type: Optional[str], raw: Optional[str]) -> SNMPValue:
    """Classify one easysnmp variable as absent, integer or string."""
    if raw is None or snmp_type is None or snmp_type.upper() in ABSENT_TYPES:
        return SNMPValue.absent(oid)
    if snmp_type.upper() in INTEGER_TYPES:
        try:
            return SNMPValue.integer(oid, int(raw))
        except (TypeError, ValueError):
            logger.debug(f"Non-numeric value {raw!r} for integer OID {oid}")
            return SNMPValue.string(oid, str(raw))
    return SNMPValue.string(oid, str(raw))


class SNMPSession:
    """An open SNMP v2c session to a single device."""

    def __init__(self, host: str, session: Session):
        self.host = host
        self._session: Optional[Session] = session

    def get(self, oids: Sequence[str]) -> List[SNMPValue]:
        """
        Fetch several OIDs in a single GET request.

        Args:
            oids: Numeric OIDs to request

        Returns:
            One SNMPValue per requested OID, in request order

        Raises:
            SNMPQueryError: If the request fails or times out
        """
        if self._session is None:
            raise SNMPQueryError(f"Session to {self.host} is closed")
        try:
            variables = self._session.get(list(oids))
        except EasySNMPTimeoutError as e:
            raise SNMPQueryError(f"SNMP request to {self.host} timed out: {e}") from e
        except EasySNMPError as e:
            raise SNMPQueryError(f"SNMP request to {self.host} failed: {e}") from e

        if len(variables) != len(oids):
            raise SNMPQueryError(
                f"Expected {len(oids)} variables from {self.host}, got {len(variables)}"
            )
        return [
            to_snmp_value(oid, var.snmp_type, var.value)
            for oid, var in zip(oids, variables)
        ]

    def close(self) -> None:
        # easysnmp releases the underlying net-snmp handle when the session is collected
        self._session = None

    def __enter__(self) -> "SNMPSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


SessionFactory = Callable[..., SNMPSession]


def open_session(
    host: str,
    community: str,
    port: int = DEFAULT_PORT,
    timeout: int = DEFAULT_TIMEOUT,
    version: int = DEFAULT_VERSION,
    retries: int = 0,
) -> SNMPSession:
    """
    Open an SNMP session to a device.

    Raises:
        SNMPConnectionError: If easysnmp cannot create the session
    """
    try:
        session = Session(
            hostname=host,
            remote_port=port,
            community=community,
            version=version,
            timeout=timeout,
            retries=retries,
            use_numeric=True,
        )
    except EasySNMPConnectionError as e:
        raise SNMPConnectionError(f"Could not open SNMP session to {host}: {e}") from e
    except EasySNMPError as e:
        raise SNMPConnectionError(f"SNMP session error for {host}: {e}") from e
    return SNMPSession(host, session)
