import logging
import sys

LOG_FORMAT = "ts=%(asctime)s caller=%(filename)s:%(lineno)d level=%(levelname)s msg=\"%(message)s\""


def configure_logging(level="INFO"):
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt="%Y-%m-%dT%H:%M:%S%z",
        stream=sys.stdout
    )


class PacketLogger:
    """Logging capability handed to the Packet API client."""

    def __init__(self, logger=None):
        self.logger = logger or logging.getLogger("packet_sd")

    def debugf(self, fmt, *args):
        self.logger.debug(fmt, *args, stacklevel=2)

    def infof(self, fmt, *args):
        self.logger.info(fmt, *args, stacklevel=2)

    def warnf(self, fmt, *args):
        self.logger.warning(fmt, *args, stacklevel=2)

    def fatalf(self, fmt, *args):
        self.logger.error(fmt, *args, stacklevel=2)
        sys.exit(1)

    def log_http(self, request):
        self.logger.debug("HTTP request method=%s url=%s", request.method, request.url, stacklevel=2)
