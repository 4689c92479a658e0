"""Unit tests for capture domain entities and render models."""

import pytest

from capture_console.capture.domain import (
    CapabilityDisplayState,
    CapabilitySnapshot,
    CaptureStatus,
    build_panel_model,
)
from capture_console.capture.domain.constants import ADMIN_GUIDANCE, DRIVER_GUIDANCE
from capture_console.capture.domain.render import (
    format_last_packet,
    format_packet_count,
    format_throughput,
)


class TestCapabilitySnapshot:
    """Derived capability and payload parsing."""

    @pytest.mark.parametrize("is_admin", [True, False])
    @pytest.mark.parametrize("driver_found", [True, False])
    def test_can_capture_is_conjunction(self, is_admin, driver_found):
        snapshot = CapabilitySnapshot(is_admin=is_admin, driver_found=driver_found)

        assert snapshot.can_capture is (is_admin and driver_found)

    def test_from_payload_ignores_reported_can_capture(self):
        snapshot = CapabilitySnapshot.from_payload(
            {"is_admin": False, "driver_found": True, "can_capture": True}
        )

        assert snapshot.can_capture is False

    def test_from_payload_accepts_driver_alias(self):
        snapshot = CapabilitySnapshot.from_payload({"is_admin": True, "windivert_driver_found": True})

        assert snapshot == CapabilitySnapshot(is_admin=True, driver_found=True)

    @pytest.mark.parametrize(
        "payload",
        [
            {"is_admin": True},
            {"is_admin": "yes", "driver_found": True},
            ["is_admin", "driver_found"],
        ],
    )
    def test_from_payload_rejects_malformed(self, payload):
        with pytest.raises(ValueError):
            CapabilitySnapshot.from_payload(payload)

    def test_to_payload_includes_derived_flag(self):
        payload = CapabilitySnapshot(is_admin=True, driver_found=False).to_payload()

        assert payload == {"is_admin": True, "driver_found": False, "can_capture": False}


class TestCaptureStatus:
    """Validation of the status value object."""

    def test_defaults(self):
        status = CaptureStatus(is_running=False)

        assert status.packet_count == 0
        assert status.bytes_per_second == 0.0
        assert status.last_packet_time is None

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"packet_count": -1},
            {"packet_count": True},
            {"packet_count": 1.5},
            {"bytes_per_second": -0.1},
        ],
    )
    def test_rejects_invalid_values(self, kwargs):
        with pytest.raises(ValueError):
            CaptureStatus(is_running=True, **kwargs)

    def test_from_payload(self):
        status = CaptureStatus.from_payload(
            {
                "is_running": True,
                "packet_count": 10,
                "bytes_per_second": 512,
                "last_packet_time": "12:00:01",
            }
        )

        assert status == CaptureStatus(
            is_running=True,
            packet_count=10,
            bytes_per_second=512.0,
            last_packet_time="12:00:01",
        )

    def test_from_payload_rejects_non_numeric_rate(self):
        with pytest.raises(ValueError):
            CaptureStatus.from_payload({"is_running": True, "bytes_per_second": "fast"})


class TestFormatting:
    """Display formatting rules."""

    def test_packet_count_is_grouped(self):
        assert format_packet_count(1234567) == "1,234,567"
        assert format_packet_count(0) == "0"

    def test_throughput_has_two_decimals(self):
        assert format_throughput(1024.5) == "1024.50"
        assert format_throughput(0) == "0.00"

    def test_missing_last_packet_uses_placeholder(self):
        assert format_last_packet(None) == "N/A"
        assert format_last_packet("") == "N/A"
        assert format_last_packet("12:00:01") == "12:00:01"


class TestBuildPanelModel:
    """Control enablement and capability display state."""

    @pytest.mark.parametrize("is_admin", [True, False])
    @pytest.mark.parametrize("driver_found", [True, False])
    @pytest.mark.parametrize("running", [None, True, False])
    def test_control_enablement(self, is_admin, driver_found, running):
        capability = CapabilitySnapshot(is_admin=is_admin, driver_found=driver_found)
        status = None if running is None else CaptureStatus(is_running=running)

        model = build_panel_model(capability, status)

        assert model.start_enabled is (capability.can_capture and not running)
        assert model.stop_enabled is bool(running)

    def test_loading_without_capability(self):
        model = build_panel_model(None, None)

        assert model.capability.state is CapabilityDisplayState.LOADING
        assert model.start_enabled is False
        assert model.status is None

    def test_error_without_capability(self):
        model = build_panel_model(None, None, capability_error="Error checking privileges: boom")

        assert model.capability.state is CapabilityDisplayState.ERROR
        assert model.capability.error_message == "Error checking privileges: boom"
        assert model.start_enabled is False

    def test_guidance_when_incapable(self):
        model = build_panel_model(CapabilitySnapshot(is_admin=False, driver_found=False), None)

        assert model.capability.guidance == (ADMIN_GUIDANCE, DRIVER_GUIDANCE)

    def test_status_render(self):
        status = CaptureStatus(
            is_running=True,
            packet_count=1234567,
            bytes_per_second=1024.5,
            last_packet_time=None,
        )

        model = build_panel_model(CapabilitySnapshot(True, True), status)

        assert model.status.state_label == "Running"
        assert model.status.packet_count == "1,234,567"
        assert model.status.throughput == "1024.50"
        assert model.status.last_packet == "N/A"
