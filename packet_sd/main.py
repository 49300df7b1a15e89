import logging
import queue
import signal
import sys
import threading
import time

from packet_sd import __version__
from packet_sd.adapter import Adapter
from packet_sd.client import PacketAPIError, PacketClient
from packet_sd.config import Config, ConfigError
from packet_sd.discovery import PacketDiscoverer
from packet_sd.logger import PacketLogger, configure_logging
from packet_sd.metrics import Metrics
from packet_sd.web import create_app

logger = logging.getLogger("packet_sd")


def check_credentials(client):
    """Fail fast on a bad token instead of looping on 401s."""
    try:
        client.list_projects()
    except PacketAPIError as e:
        logger.error("failed to check Packet credentials err=%s", e)
        sys.exit(1)


def start(config, client, metrics, stop):
    """Start discovery and file writing in background threads."""
    channel = queue.Queue(maxsize=1)
    disc = PacketDiscoverer(
        client,
        metrics,
        port=config.port,
        refresh=config.refresh,
        project_id=config.project_id,
    )
    adapter = Adapter(config.output_file, channel)

    # adapter first: stop_workers joins in this order
    threads = [
        threading.Thread(target=adapter.run, args=(stop,), name="adapter", daemon=True),
        threading.Thread(target=disc.run, args=(stop, channel), name="discovery", daemon=True),
    ]
    for t in threads:
        t.start()
    return threads


def stop_workers(stop, threads, timeout=5.0):
    """Signal the workers and wait for them, so an in-flight file write completes."""
    stop.set()
    deadline = time.monotonic() + timeout
    for t in threads:
        t.join(max(0.0, deadline - time.monotonic()))
        if t.is_alive():
            logger.warning("worker did not stop in time thread=%s", t.name)


def main():
    try:
        config = Config()
    except ConfigError as e:
        print(f"configuration error: {e}", file=sys.stderr)
        sys.exit(1)

    configure_logging(config.log_level)
    logger.info("starting prometheus-packet-sd version=%s", __version__)

    client = PacketClient(
        config.token,
        base_url=config.api_url,
        timeout=config.api_timeout,
        logger=PacketLogger(logger),
    )
    check_credentials(client)

    metrics = Metrics()
    stop = threading.Event()

    def handle_shutdown(signum, frame):
        logger.info("shutdown signal received signal=%s", signum)
        stop.set()
        sys.exit(0)

    signal.signal(signal.SIGINT, handle_shutdown)
    signal.signal(signal.SIGTERM, handle_shutdown)

    threads = start(config, client, metrics, stop)

    logger.debug("listening for connections addr=%s:%d", config.listen_host, config.listen_port)
    try:
        create_app(metrics).run(host=config.listen_host, port=config.listen_port)
    except OSError as e:
        logger.error("failed to listen addr=%s:%d err=%s", config.listen_host, config.listen_port, e)
        sys.exit(1)
    finally:
        stop_workers(stop, threads)


if __name__ == "__main__":
    main()
