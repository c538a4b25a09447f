from inrow_exporter.models.snmp import SNMPValue, SNMPValueKind
from inrow_exporter.models.descriptors import (
    DescriptorTable,
    MetricDescriptor,
    Sample,
    build_descriptor_table,
)

__all__ = [
    "SNMPValue",
    "SNMPValueKind",
    "DescriptorTable",
    "MetricDescriptor",
    "Sample",
    "build_descriptor_table",
]
