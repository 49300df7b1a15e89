from urllib.parse import urljoin

import requests

from packet_sd import __version__
from packet_sd.logger import PacketLogger
from packet_sd.models import Device

PACKET_API_URL = "https://api.packet.net/"
PER_PAGE = 100


class PacketAPIError(Exception):
    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.status_code = status_code


class PacketClient:
    """Read-only access to the Packet projects and devices endpoints."""

    def __init__(self, token, consumer_token="prometheus_sd", base_url=PACKET_API_URL,
                 timeout=30, logger=None, session=None):
        self.base_url = base_url if base_url.endswith("/") else base_url + "/"
        self.timeout = timeout
        self.logger = logger or PacketLogger()
        self.session = session or requests.Session()
        self.session.headers.update({
            "X-Auth-Token": token,
            "X-Consumer-Token": consumer_token,
            "Accept": "application/json",
            "Content-Type": "application/json",
            "User-Agent": f"prometheus-packet-sd/{__version__}",
        })

    def list_projects(self):
        return self._list("projects", "projects")

    def list_devices(self, project_id: str):
        items = self._list(f"projects/{project_id}/devices", "devices")
        return [Device.from_api(item) for item in items]

    def _list(self, path, key):
        """Fetch every page of a collection endpoint."""
        items = []
        url = urljoin(self.base_url, path)
        params = {"page": 1, "per_page": PER_PAGE}
        while url:
            body = self._get(url, params)
            items.extend(body.get(key) or [])
            next_page = ((body.get("meta") or {}).get("next") or {}).get("href")
            # next href is server-absolute and already carries the paging query string
            url = urljoin(self.base_url, next_page) if next_page else None
            params = None
        return items

    def _get(self, url, params):
        request = self.session.prepare_request(requests.Request("GET", url, params=params))
        self.logger.log_http(request)
        try:
            response = self.session.send(request, timeout=self.timeout)
        except requests.RequestException as e:
            raise PacketAPIError(f"GET {url} failed: {e}") from e

        if not response.ok:
            raise PacketAPIError(
                f"GET {url} returned {response.status_code}: {_error_detail(response)}",
                status_code=response.status_code
            )
        try:
            body = response.json()
        except ValueError as e:
            raise PacketAPIError(f"GET {url} returned invalid JSON: {e}", response.status_code) from e
        if not isinstance(body, dict):
            raise PacketAPIError(
                f"GET {url} returned {type(body).__name__}, expected an object",
                status_code=response.status_code
            )
        return body


def _error_detail(response):
    try:
        body = response.json()
    except ValueError:
        body = None
    errors = body.get("errors") if isinstance(body, dict) else None
    if errors:
        return ", ".join(str(e) for e in errors)
    return response.reason or ""
