"""FastAPI dependencies shared by the HTTP routes."""

from fastapi import Request

from inrow_exporter.config import Settings
from inrow_exporter.services.snmp import SessionFactory, open_session


def get_settings(request: Request) -> Settings:
    """Settings the running application was created with."""
    return request.app.state.settings


def get_session_factory() -> SessionFactory:
    """Opens SNMP sessions for the collector; overridden in tests."""
    return open_session
