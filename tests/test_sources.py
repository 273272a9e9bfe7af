"""Tests for the demo generator, payload mapping and device client."""

from datetime import datetime, timezone
from unittest.mock import Mock

import pytest
import requests

from core.smokewatch.device_client import DeviceClient
from core.smokewatch.exceptions import ConfigurationError, DeviceUnreachableError, SensorError
from core.smokewatch.sources import DemoSampleSource, DeviceSampleSource, sample_from_payload

FIXED_TIME = datetime(2024, 5, 4, 14, 0, tzinfo=timezone.utc)


class TestDemoSampleSource:

    def test_first_sample(self):
        source = DemoSampleSource(seed=7, clock=lambda: FIXED_TIME)
        sample = source.read()

        assert sample.timestamp == FIXED_TIME
        # 215 + 10% of the 10° gap, ±0.75 noise
        assert 215.25 <= sample.pit <= 216.75
        assert sample.fan_duty == 22
        meat, ambient = sample.probes
        assert meat.name == "Pork Shoulder"
        assert meat.target == 195.0
        assert 150.05 <= meat.temperature <= 150.1
        assert ambient.temperature == pytest.approx(sample.pit - 15)

    def test_pit_converges_and_fan_backs_off(self):
        source = DemoSampleSource(seed=3, noise=0.0, clock=lambda: FIXED_TIME)
        samples = [source.read() for _ in range(100)]

        assert samples[-1].pit == pytest.approx(225.0, abs=0.01)
        # Without noise the pit never overshoots, so the fan keeps ramping
        assert samples[-1].fan_duty == 100

    def test_meat_rises_monotonically(self):
        source = DemoSampleSource(seed=11)
        temps = [source.read().primary_probe.temperature for _ in range(20)]

        assert all(b > a for a, b in zip(temps, temps[1:]))

    def test_fan_decreases_above_target(self):
        source = DemoSampleSource(start_pit=240.0, start_fan=50.0, noise=0.0)
        assert source.read().fan_duty == 48

    def test_seed_is_reproducible(self):
        a = DemoSampleSource(seed=5, clock=lambda: FIXED_TIME)
        b = DemoSampleSource(seed=5, clock=lambda: FIXED_TIME)
        assert [a.read() for _ in range(5)] == [b.read() for _ in range(5)]


class TestSampleFromPayload:

    def test_dashboard_shape(self):
        sample = sample_from_payload(
            {
                "pitTemp": 224.5,
                "fanSpeed": 40,
                "probes": [
                    {"id": 1, "name": "Brisket", "temp": 160.2, "target": 203},
                    {"id": 2, "name": "Ambient", "temp": 210.0, "target": 0},
                ],
            },
            timestamp=FIXED_TIME,
        )

        assert sample.timestamp == FIXED_TIME
        assert sample.pit == 224.5
        assert sample.fan_duty == 40
        assert sample.primary_probe.name == "Brisket"
        assert sample.primary_probe.target == 203.0
        assert len(sample.probes) == 2

    def test_alternative_keys(self):
        sample = sample_from_payload({"pit": "230", "fan": 7.6, "probes": [{"temperature": 99}]})

        assert sample.pit == 230.0
        assert sample.fan_duty == 8
        assert sample.primary_probe.id == 1
        assert sample.primary_probe.target == 0.0
        assert sample.timestamp.tzinfo is not None

    def test_fan_duty_is_clamped(self):
        assert sample_from_payload({"pit": 200, "fan": 150}).fan_duty == 100
        assert sample_from_payload({"pit": 200, "fan": -5}).fan_duty == 0

    def test_probe_without_reading_is_skipped(self):
        sample = sample_from_payload({"pit": 200, "probes": [{"id": 1, "temp": None}]})
        assert sample.probes == ()

    def test_missing_pit(self):
        with pytest.raises(SensorError):
            sample_from_payload({"fanSpeed": 10})

    def test_non_numeric_pit(self):
        with pytest.raises(SensorError):
            sample_from_payload({"pitTemp": "hot"})

    def test_non_dict_payload(self):
        with pytest.raises(SensorError):
            sample_from_payload(["not", "a", "dict"])


class TestDeviceClient:

    @pytest.fixture
    def client(self):
        client = DeviceClient(timeout=4.0)
        client.session = Mock()
        return client

    def test_get_status(self, client):
        response = Mock()
        response.json.return_value = {"pitTemp": 225}
        client.session.get.return_value = response

        assert client.get_status("192.168.1.50") == {"pitTemp": 225}
        client.session.get.assert_called_once_with("http://192.168.1.50/json", timeout=4.0)

    def test_missing_address(self, client):
        with pytest.raises(ConfigurationError):
            client.get_status("")
        client.session.get.assert_not_called()

    def test_timeout_is_unreachable(self, client):
        client.session.get.side_effect = requests.exceptions.ConnectTimeout("timed out")
        with pytest.raises(DeviceUnreachableError):
            client.get_status("10.0.0.9")

    def test_http_error_is_unreachable(self, client):
        response = Mock()
        response.raise_for_status.side_effect = requests.exceptions.HTTPError("500 Server Error")
        client.session.get.return_value = response
        with pytest.raises(DeviceUnreachableError):
            client.get_status("10.0.0.9")

    def test_invalid_json_is_unreachable(self, client):
        response = Mock()
        response.json.side_effect = ValueError("Expecting value")
        client.session.get.return_value = response
        with pytest.raises(DeviceUnreachableError):
            client.get_status("10.0.0.9")


def test_device_sample_source_maps_payload():
    client = Mock(spec=DeviceClient)
    client.get_status.return_value = {"pitTemp": 226.0, "fanSpeed": 0, "probes": []}
    source = DeviceSampleSource(client, "10.0.0.9")

    sample = source.read()

    client.get_status.assert_called_once_with("10.0.0.9")
    assert sample.pit == 226.0
    assert sample.fan_duty == 0


class TestNonFiniteReadings:

    @pytest.mark.parametrize("payload", [
        {"pitTemp": 225.0, "fanSpeed": float("inf")},
        {"pitTemp": 225.0, "fanSpeed": float("nan")},
        {"pitTemp": float("inf"), "fanSpeed": 10},
        {"pitTemp": float("nan"), "fanSpeed": 10},
        {"pitTemp": "1e400"},
        {"pitTemp": 225.0, "probes": [{"id": 1, "temp": float("nan"), "target": 195}]},
    ])
    def test_rejected_as_sensor_error(self, payload):
        with pytest.raises(SensorError):
            sample_from_payload(payload)

    def test_non_finite_probe_id_falls_back_to_position(self):
        sample = sample_from_payload({"pit": 200, "probes": [{"id": float("inf"), "temp": 150}]})
        assert sample.primary_probe.id == 1


class TestDemoTarget:

    def test_target_provider_is_followed(self):
        target = {"value": 225.0}
        source = DemoSampleSource(noise=0.0, target_provider=lambda: target["value"])
        for _ in range(100):
            source.read()

        target["value"] = 250.0
        samples = [source.read() for _ in range(100)]

        assert source.pit_target == 250.0
        assert samples[-1].pit == pytest.approx(250.0, abs=0.01)
