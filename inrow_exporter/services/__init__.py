from .snmp import SNMPSession, SNMPException, SNMPConnectionError, SNMPQueryError, open_session

__all__ = [
    "SNMPSession",
    "SNMPException",
    "SNMPConnectionError",
    "SNMPQueryError",
    "open_session",
]
