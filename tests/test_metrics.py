import platform

import pytest

from packet_sd.metrics import Metrics


def test_track_request_records_success():
    metrics = Metrics()

    with metrics.track_request():
        pass

    assert metrics.registry.get_sample_value("prometheus_packet_sd_request_duration_seconds_count") == 1
    assert metrics.registry.get_sample_value("prometheus_packet_sd_request_failures_total") == 0


def test_track_request_records_failure_and_reraises():
    metrics = Metrics()

    with pytest.raises(RuntimeError):
        with metrics.track_request():
            raise RuntimeError("api down")

    assert metrics.registry.get_sample_value("prometheus_packet_sd_request_duration_seconds_count") == 1
    assert metrics.registry.get_sample_value("prometheus_packet_sd_request_failures_total") == 1


def test_handles_are_isolated():
    first, second = Metrics(), Metrics()

    with pytest.raises(ValueError):
        with first.track_request():
            raise ValueError()

    assert second.registry.get_sample_value("prometheus_packet_sd_request_failures_total") == 0


def test_build_info_is_registered():
    metrics = Metrics()
    value = metrics.registry.get_sample_value(
        "prometheus_packet_sd_build_info",
        labels={"version": "0.1.0", "pythonversion": platform.python_version()},
    )
    assert value == 1
