"""
APC InRow Exporter - Prometheus exporter for APC InRow cooling units.

Polls airflow, temperature and fan speed values from InRow units over SNMP
and re-exposes them in the Prometheus text exposition format.
"""

__version__ = "0.1.0"
EXPORTER_NAME = "apc_inrow_exporter"
