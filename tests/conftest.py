"""
Pytest configuration and fixtures for all tests
"""
import threading
import time

import pytest
from fastapi.testclient import TestClient

from inrow_exporter.config import Settings
from inrow_exporter.deps import get_session_factory
from inrow_exporter.main import create_app
from inrow_exporter.models.descriptors import IDENTITY_OIDS, build_descriptor_table
from inrow_exporter.models.snmp import SNMPValue
from inrow_exporter.services.snmp import SNMPConnectionError, SNMPQueryError


# Raw readings as an InRow unit reports them (fixed-point integers)
DEFAULT_TELEMETRY = {
    "1.3.6.1.4.1.318.1.1.13.3.2.2.2.5.0": 250,    # airflow
    "1.3.6.1.4.1.318.1.1.13.3.2.2.2.7.0": 215,    # rack inlet
    "1.3.6.1.4.1.318.1.1.13.3.2.2.2.9.0": 180,    # supply air
    "1.3.6.1.4.1.318.1.1.13.3.2.2.2.11.0": 320,   # return air
    "1.3.6.1.4.1.318.1.1.13.3.2.2.2.16.0": 550,   # fan speed
    "1.3.6.1.4.1.318.1.1.13.3.2.2.2.24.0": 120,   # entering fluid
    "1.3.6.1.4.1.318.1.1.13.3.2.2.2.26.0": 160,   # leaving fluid
}


class FakeDevice:
    """Behaviour of a simulated InRow unit."""

    def __init__(
        self,
        name="inrow-1",
        location="Row A",
        telemetry=None,
        identity=None,
        unreachable=False,
        identity_error=False,
        telemetry_error=False,
        delay=0.0,
    ):
        self.name = name
        self.location = location
        self.telemetry = dict(DEFAULT_TELEMETRY) if telemetry is None else telemetry
        self.identity = identity
        self.unreachable = unreachable
        self.identity_error = identity_error
        self.telemetry_error = telemetry_error
        self.delay = delay


class FakeSession:
    def __init__(self, host, device):
        self.host = host
        self.device = device
        self.closed = False
        self.closed_at = None
        self.requests = []

    def get(self, oids):
        oids = list(oids)
        self.requests.append(oids)
        if self.device.delay:
            time.sleep(self.device.delay)

        if oids == list(IDENTITY_OIDS):
            if self.device.identity_error:
                raise SNMPQueryError(f"SNMP request to {self.host} timed out")
            if self.device.identity is not None:
                return list(self.device.identity)
            return [
                SNMPValue.string(oids[0], self.device.name),
                SNMPValue.string(oids[1], self.device.location),
            ]

        if self.device.telemetry_error:
            raise SNMPQueryError(f"SNMP request to {self.host} timed out")
        values = []
        for oid in oids:
            raw = self.device.telemetry.get(oid)
            if raw is None:
                values.append(SNMPValue.absent(oid))
            elif isinstance(raw, str):
                values.append(SNMPValue.string(oid, raw))
            else:
                values.append(SNMPValue.integer(oid, raw))
        return values

    def close(self):
        self.closed = True
        self.closed_at = time.monotonic()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


class FakeSessionFactory:
    """Stands in for ``open_session``; hosts missing from ``devices`` are unreachable."""

    def __init__(self, devices=None):
        self.devices = devices or {}
        self.calls = []
        self.sessions = []
        self._lock = threading.Lock()

    def __call__(self, host, community, **kwargs):
        with self._lock:
            self.calls.append((host, community, kwargs))
        device = self.devices.get(host)
        if device is None or device.unreachable:
            raise SNMPConnectionError(f"Could not open SNMP session to {host}")
        session = FakeSession(host, device)
        with self._lock:
            self.sessions.append(session)
        return session


@pytest.fixture
def descriptors():
    return build_descriptor_table()


@pytest.fixture
def devices():
    """Two healthy units and one that never answers."""
    return {
        "10.0.0.10": FakeDevice(name="inrow-a1", location="Row A"),
        "10.0.0.11": FakeDevice(name="inrow-b1", location="Row B"),
        "10.0.0.12": FakeDevice(unreachable=True),
    }


@pytest.fixture
def session_factory(devices):
    return FakeSessionFactory(devices)


@pytest.fixture
def test_settings():
    """Override settings for testing"""
    return Settings(
        LISTEN_ADDRESS=":9335",
        METRICS_PATH="/metrics",
        SNMP_TARGETS="10.0.0.10,10.0.0.11,10.0.0.12",
        SNMP_COMMUNITY="testcommunity",
    )


@pytest.fixture
def client(test_settings, session_factory):
    """Create test client backed by fake devices"""
    app = create_app(test_settings)
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def make_device():
    return FakeDevice


@pytest.fixture
def make_factory():
    return FakeSessionFactory
