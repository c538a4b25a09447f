"""
InRow Collector Service - SNMP telemetry from APC InRow cooling units.

Every call to ``collect()`` polls every configured target in parallel, one
worker per target, and waits for all of them before yielding metrics.
Each worker:

1. opens an SNMP session to its target
2. reads the unit name and location (used as labels)
3. reads the seven telemetry values and scales them to physical units
4. reports ``apc_inrow_up`` (1 on full success, 0 on any failure)

A target failing at any step only affects its own ``up`` series.
"""

import logging
import queue
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from prometheus_client.core import GaugeMetricFamily
from prometheus_client.registry import Collector

from inrow_exporter.config import Settings
from inrow_exporter.models.descriptors import DescriptorTable, MetricDescriptor, Sample
from inrow_exporter.models.snmp import SNMPValueKind
from inrow_exporter.services.snmp import (
    DEFAULT_PORT,
    DEFAULT_TIMEOUT,
    DEFAULT_VERSION,
    SessionFactory,
    SNMPException,
    SNMPQueryError,
    SNMPSession,
    open_session,
)

logger = logging.getLogger(__name__)

Sink = Callable[[Sample], None]


class InRowCollector(Collector):
    """Prometheus collector polling a static list of InRow units."""

    def __init__(
        self,
        targets: Sequence[str],
        community: str,
        descriptors: DescriptorTable,
        session_factory: SessionFactory = open_session,
        port: int = DEFAULT_PORT,
        timeout: int = DEFAULT_TIMEOUT,
        retries: int = 0,
        max_workers: Optional[int] = None,
    ):
        """
        Initialize InRow collector.

        Args:
            targets: Host addresses of the InRow units
            community: SNMP v2c community shared by all targets
            descriptors: Metric descriptor table built at startup
            session_factory: Callable opening an SNMP session to a host
            port: SNMP port
            timeout: Session timeout in seconds
            retries: SNMP retries per request
            max_workers: Parallelism cap, None polls every target at once
        """
        self.targets = tuple(targets)
        self.community = community
        self.descriptors = descriptors
        self.session_factory = session_factory
        self.port = port
        self.timeout = timeout
        self.retries = retries
        self.max_workers = max_workers
        self._telemetry_by_oid: Dict[str, MetricDescriptor] = descriptors.by_oid()

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        descriptors: DescriptorTable,
        session_factory: SessionFactory = open_session,
    ) -> "InRowCollector":
        return cls(
            targets=settings.target_list,
            community=settings.SNMP_COMMUNITY,
            descriptors=descriptors,
            session_factory=session_factory,
            port=settings.SNMP_PORT,
            timeout=settings.SNMP_TIMEOUT,
            retries=settings.SNMP_RETRIES,
            max_workers=settings.SNMP_MAX_WORKERS,
        )

    # ------------------------------------------------------------------
    # prometheus_client Collector interface
    # ------------------------------------------------------------------

    def describe(self) -> Iterable[GaugeMetricFamily]:
        # Registering the collector must not poll devices
        return [self._new_family(d) for d in self.descriptors.all]

    def collect(self) -> Iterator[GaugeMetricFamily]:
        families = {d.name: self._new_family(d) for d in self.descriptors.all}
        for sample in self.scrape():
            families[sample.descriptor.name].add_metric(list(sample.label_values), sample.value)

        for family in families.values():
            if family.samples:
                yield family

    @staticmethod
    def _new_family(descriptor: MetricDescriptor) -> GaugeMetricFamily:
        return GaugeMetricFamily(descriptor.name, descriptor.documentation, labels=list(descriptor.labels))

    # ------------------------------------------------------------------
    # Fan-out / fan-in
    # ------------------------------------------------------------------

    def scrape(self) -> List[Sample]:
        """
        Poll every target in parallel and return all samples.

        Returns only after every worker has finished. Sample order across
        targets is not defined.
        """
        if not self.targets:
            logger.warning("No targets configured, nothing to scrape")
            return []

        stream: "queue.SimpleQueue[Sample]" = queue.SimpleQueue()
        workers = self.max_workers or len(self.targets)
        start_time = time.monotonic()

        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="inrow-collect") as pool:
            futures = [pool.submit(self.collect_target, target, stream.put) for target in self.targets]
            for future in as_completed(futures):
                future.result()

        samples = []
        while not stream.empty():
            samples.append(stream.get_nowait())

        logger.debug(
            f"Scraped {len(self.targets)} targets in {time.monotonic() - start_time:.3f}s "
            f"({len(samples)} samples)"
        )
        return samples

    # ------------------------------------------------------------------
    # Per-target protocol
    # ------------------------------------------------------------------

    def collect_target(self, target: str, sink: Sink) -> None:
        """Poll one target, write its samples to ``sink`` and always finish with its up value."""
        try:
            success = self._poll_target(target, sink)
        except Exception:
            logger.exception(f"Unexpected error while polling {target}")
            success = False

        sink(Sample(self.descriptors.up, (target,), 1.0 if success else 0.0))

    def _poll_target(self, target: str, sink: Sink) -> bool:
        try:
            session = self.session_factory(
                target,
                self.community,
                port=self.port,
                timeout=self.timeout,
                version=DEFAULT_VERSION,
                retries=self.retries,
            )
        except SNMPException as e:
            logger.info(f"Connect to {target} failed: {e}")
            return False

        with session:
            identity = self._get_identity(session, target)
            if identity is None:
                return False
            name, location = identity

            try:
                values = session.get(self.descriptors.telemetry_oids)
            except SNMPQueryError as e:
                logger.info(f"Telemetry query to {target} failed: {e}")
                return False

            labels = (target, name, location)
            for value in values:
                if value.is_absent:
                    continue

                descriptor = self._telemetry_by_oid.get(value.oid)
                if descriptor is None:
                    continue

                if value.kind is not SNMPValueKind.INTEGER:
                    logger.warning(
                        f"Ignoring non-integer value {value.value!r} for {descriptor.name} on {target}"
                    )
                    continue

                sink(Sample(descriptor, labels, descriptor.convert(value.value)))

        return True

    def _get_identity(self, session: SNMPSession, target: str) -> Optional[Tuple[str, str]]:
        """Read unit name and location, or None if the query fails or is malformed."""
        try:
            values = session.get(self.descriptors.identity_oids)
        except SNMPQueryError as e:
            logger.info(f"Identity query to {target} failed: {e}")
            return None

        if len(values) != 2 or any(v.kind is not SNMPValueKind.STRING for v in values):
            logger.info(f"Malformed identity response from {target}: {values}")
            return None

        return str(values[0].value), str(values[1].value)
