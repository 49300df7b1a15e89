import platform
from contextlib import contextmanager

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Histogram,
    Info,
    PlatformCollector,
    ProcessCollector,
)

from packet_sd import __version__

REQUEST_BUCKETS = (0.001, 0.01, 0.1, 0.5, 1.0, 2.0, 5.0, 10.0)


class Metrics:
    """Self-monitoring metrics for one process, kept in their own registry."""

    def __init__(self, registry=None):
        self.registry = registry or CollectorRegistry()

        self.request_duration = Histogram(
            "prometheus_packet_sd_request_duration_seconds",
            "Histogram of latencies for requests to the Packet API.",
            buckets=REQUEST_BUCKETS,
            registry=self.registry
        )
        self.request_failures = Counter(
            "prometheus_packet_sd_request_failures_total",
            "Total number of failed requests to the Packet API.",
            registry=self.registry
        )

        ProcessCollector(registry=self.registry)
        PlatformCollector(registry=self.registry)
        build = Info(
            "prometheus_packet_sd_build",
            "Build information for prometheus-packet-sd.",
            registry=self.registry
        )
        build.info({"version": __version__, "pythonversion": platform.python_version()})

    @contextmanager
    def track_request(self):
        """Time one API call; count it as failed if the body raises."""
        with self.request_failures.count_exceptions(), self.request_duration.time():
            yield
