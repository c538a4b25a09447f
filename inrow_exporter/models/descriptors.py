"""
Metric Descriptors - The fixed metric contract of the exporter.

The descriptor table is built once at startup and handed to every collector
instance. It maps each exposed metric to the PowerNet-MIB OID it is read from
and the fixed-point divisor the device encodes it with.

Exposed metrics (prefix ``apc_inrow_``):
- up{target}: 1 if identity and telemetry were both read this scrape
- airflow{target,name,location}: liters per second (raw / 100)
- rack_inlet_temp, supply_air_temp, return_air_temp,
  entering_fluid_temp, leaving_fluid_temp: raw / 10
- fan_speed: raw / 10
"""

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

DEFAULT_PREFIX = "apc_inrow_"

UP_LABELS: Tuple[str, ...] = ("target",)
TELEMETRY_LABELS: Tuple[str, ...] = ("target", "name", "location")

# airIRRCUnitIdent (name, location)
IDENTITY_OIDS: Tuple[str, str] = (
    "1.3.6.1.4.1.318.1.1.13.3.2.2.1.2.0",
    "1.3.6.1.4.1.318.1.1.13.3.2.2.1.3.0",
)

# (suffix, help, oid, divisor) from airIRRCUnitStatus
_TELEMETRY = (
    ("airflow", "Air flow in liters per second.", "1.3.6.1.4.1.318.1.1.13.3.2.2.2.5.0", 100),
    ("rack_inlet_temp", "Rack inlet temp", "1.3.6.1.4.1.318.1.1.13.3.2.2.2.7.0", 10),
    ("supply_air_temp", "Supply air temp", "1.3.6.1.4.1.318.1.1.13.3.2.2.2.9.0", 10),
    ("return_air_temp", "Return air temp", "1.3.6.1.4.1.318.1.1.13.3.2.2.2.11.0", 10),
    ("fan_speed", "Fan speed", "1.3.6.1.4.1.318.1.1.13.3.2.2.2.16.0", 10),
    ("entering_fluid_temp", "Entering fluid temp", "1.3.6.1.4.1.318.1.1.13.3.2.2.2.24.0", 10),
    ("leaving_fluid_temp", "Leaving fluid temp", "1.3.6.1.4.1.318.1.1.13.3.2.2.2.26.0", 10),
)


@dataclass(frozen=True)
class MetricDescriptor:
    """Name, help text and labels of one gauge, plus where its value comes from."""
    name: str
    documentation: str
    labels: Tuple[str, ...]
    oid: Optional[str] = None
    divisor: int = 1

    def convert(self, raw: int) -> float:
        """Turn the device's fixed-point integer into the physical value."""
        return float(raw) / self.divisor


@dataclass(frozen=True)
class Sample:
    """A single gauge value produced by a collection unit."""
    descriptor: MetricDescriptor
    label_values: Tuple[str, ...]
    value: float


@dataclass(frozen=True)
class DescriptorTable:
    up: MetricDescriptor
    identity_oids: Tuple[str, ...]
    telemetry: Tuple[MetricDescriptor, ...]

    @property
    def telemetry_oids(self) -> Tuple[str, ...]:
        return tuple(d.oid for d in self.telemetry)

    @property
    def all(self) -> Tuple[MetricDescriptor, ...]:
        return (self.up,) + self.telemetry

    def by_oid(self) -> Dict[str, MetricDescriptor]:
        return {d.oid: d for d in self.telemetry}


def build_descriptor_table(prefix: str = DEFAULT_PREFIX) -> DescriptorTable:
    """Build the immutable descriptor table for all exposed metrics."""
    up = MetricDescriptor(
        name=f"{prefix}up",
        documentation="Scrape of target was successful",
        labels=UP_LABELS,
    )
    telemetry = tuple(
        MetricDescriptor(
            name=f"{prefix}{suffix}",
            documentation=documentation,
            labels=TELEMETRY_LABELS,
            oid=oid,
            divisor=divisor,
        )
        for suffix, documentation, oid, divisor in _TELEMETRY
    )
    return DescriptorTable(up=up, identity_oids=IDENTITY_OIDS, telemetry=telemetry)
