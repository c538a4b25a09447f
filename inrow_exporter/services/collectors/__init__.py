"""
Collectors Package - Prometheus collectors for polled devices.

This package contains collector modules for:
- InRow: APC InRow precision cooling units (airflow, temperatures, fan speed)
"""

from inrow_exporter.services.collectors.inrow import InRowCollector

__all__ = ["InRowCollector"]
