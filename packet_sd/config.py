import os

from packet_sd.client import PACKET_API_URL

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


class ConfigError(Exception):
    pass


class Config:
    """Settings read from the environment."""

    def __init__(self, environ=None):
        env = os.environ if environ is None else environ

        self.token = env.get("PACKET_AUTH_TOKEN", "")
        if not self.token:
            raise ConfigError("PACKET_AUTH_TOKEN is required")

        self.project_id = env.get("PACKET_PROJECT_ID", "")
        self.output_file = env.get("OUTPUT_FILE", "packet.json")
        self.refresh = _int(env, "TARGET_REFRESH_SECONDS", "30", low=1)
        self.port = _int(env, "TARGET_PORT", "9100", low=1, high=65535)
        self.api_url = env.get("PACKET_API_URL", PACKET_API_URL)
        self.api_timeout = _int(env, "PACKET_API_TIMEOUT_SECONDS", "30", low=1)
        self.log_level = env.get("LOG_LEVEL", "INFO").upper()
        if self.log_level not in LOG_LEVELS:
            raise ConfigError(f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}")
        self.listen_host, self.listen_port = parse_listen_address(
            env.get("WEB_LISTEN_ADDRESS", ":9465")
        )


def _int(env, name, default, low=None, high=None):
    raw = env.get(name, default)
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from None
    if (low is not None and value < low) or (high is not None and value > high):
        raise ConfigError(f"{name} out of range: {value}")
    return value


def parse_listen_address(address):
    """Split "host:port"; an empty host means all interfaces."""
    host, sep, port = address.rpartition(":")
    if not sep or not port.isdigit():
        raise ConfigError(f"invalid listen address {address!r}")
    return host.strip("[]") or "0.0.0.0", int(port)
