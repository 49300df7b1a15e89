import pytest

from packet_sd.metrics import Metrics
from packet_sd.models import Device, NetworkInfo


def make_device(id="d1", tags=(), private_ipv4="10.0.0.1", **kwargs):
    return Device(id=id, tags=tuple(tags), network=NetworkInfo(private_ipv4=private_ipv4), **kwargs)


class FakeClient:
    """Stands in for PacketClient; devices maps project id -> devices or an exception."""

    def __init__(self, projects=None, devices=None):
        self.projects = projects if projects is not None else []
        self.devices = devices or {}
        self.calls = []

    def list_projects(self):
        self.calls.append(("list_projects",))
        if isinstance(self.projects, Exception):
            raise self.projects
        return [{"id": p} for p in self.projects]

    def list_devices(self, project_id):
        self.calls.append(("list_devices", project_id))
        result = self.devices.get(project_id, [])
        if isinstance(result, Exception):
            raise result
        return list(result)


@pytest.fixture
def metrics():
    return Metrics()


def sample(metrics, name):
    return metrics.registry.get_sample_value(name) or 0.0
