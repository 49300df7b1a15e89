import logging
import time

logger = logging.getLogger(__name__)

META_PREFIX = "__meta_packet_"
ADDRESS_LABEL = "__address__"
TAG_SEPARATOR = ","


def label_name(postfix):
    return META_PREFIX + postfix


def join_host_port(host, port):
    if ":" in host:
        return f"[{host}]:{port}"
    return f"{host}:{port}"


def create_target(device, port, separator=TAG_SEPARATOR):
    """Map one device to a target group carrying its Packet metadata labels.

    Every label is always present; absent device fields become empty values.
    Tags are wrapped in the separator ("a", "b" -> ",a,b,") so a regex can
    match a single tag without special-casing the first or last one.
    """
    tags = ""
    if device.tags:
        tags = separator + separator.join(device.tags) + separator
    network = device.network
    addr = join_host_port(network.private_ipv4, port)

    return {
        "source": f"packet/{device.id}",
        "targets": [{ADDRESS_LABEL: addr}],
        "labels": {
            ADDRESS_LABEL: addr,
            label_name("hostname"): device.hostname,
            label_name("state"): device.state,
            label_name("billing_cycle"): device.billing_cycle,
            label_name("plan"): device.plan,
            label_name("facility"): device.facility,
            label_name("private_ipv4"): network.private_ipv4,
            label_name("public_ipv4"): network.public_ipv4,
            label_name("public_ipv6"): network.public_ipv6,
            label_name("tags"): tags,
            label_name("project_id"): device.project_id,
        },
    }


def tombstone(source):
    """An empty group telling the consumer to drop everything for source."""
    return {"source": source}


def reconcile(previous, targets):
    """Append tombstones for sources that vanished since the previous cycle.

    Returns the batch to publish and the new snapshot of live sources.
    """
    current = {tg["source"] for tg in targets}
    batch = list(targets)
    for source in sorted(previous - current):
        logger.debug("device deleted source=%s", source)
        batch.append(tombstone(source))
    return batch, current


class PacketDiscoverer:
    """Periodically turns the Packet inventory into Prometheus target groups."""

    def __init__(self, client, metrics, port=9100, refresh=30, project_id="",
                 separator=TAG_SEPARATOR):
        if refresh <= 0:
            raise ValueError(f"refresh interval must be positive, got {refresh}")
        self.client = client
        self.metrics = metrics
        self.port = port
        self.refresh = refresh
        self.project_id = project_id
        self.separator = separator
        self.lasts = set()

    def fetch(self):
        """List devices of the configured project, or of every visible project.

        Any failed call aborts the whole fetch; partial results are dropped.
        """
        if self.project_id:
            with self.metrics.track_request():
                return self.client.list_devices(self.project_id)

        with self.metrics.track_request():
            projects = self.client.list_projects()
        devices = []
        for project in projects:
            with self.metrics.track_request():
                devices.extend(self.client.list_devices(project["id"]))
        return devices

    def get_targets(self):
        devices = self.fetch()
        logger.debug("get devices nb=%d", len(devices))

        targets = []
        for device in devices:
            tg = create_target(device, self.port, self.separator)
            logger.debug("device added source=%s", tg["source"])
            targets.append(tg)

        batch, self.lasts = reconcile(self.lasts, targets)
        return batch

    def run(self, stop, channel):
        """Publish a batch per refresh tick until stop is set.

        channel is a queue; put blocks until the consumer has room, so a slow
        consumer slows discovery down. A failed cycle publishes nothing and
        is retried on the next tick.
        """
        next_tick = time.monotonic() + self.refresh
        while True:
            try:
                batch = self.get_targets()
            except Exception as e:
                logger.error("failed to refresh targets err=%s", e)
            else:
                channel.put(batch)

            if stop.wait(max(0.0, next_tick - time.monotonic())):
                logger.info("discovery stopped")
                return
            # Missed ticks are dropped, not queued up.
            now = time.monotonic()
            while next_tick <= now:
                next_tick += self.refresh
