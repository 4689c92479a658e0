"""Unit tests for LocalCaptureService and the platform checks it relies on."""

from datetime import datetime, timezone

import pytest

from capture_console.capture.domain import CapabilitySnapshot
from capture_console.capture.services import CaptureServiceError, LocalCaptureService
from capture_console.capture.services.local_service import (
    ALREADY_RUNNING_MESSAGE,
    DRIVER_NOT_FOUND_MESSAGE,
    NOT_RUNNING_MESSAGE,
    REQUIRES_ADMIN_MESSAGE,
)
from capture_console.capture.services import platform_checks
from capture_console.capture.services.platform_checks import (
    PrivilegeDetectionError,
    find_capture_driver,
)


class FakeClock:
    def __init__(self, now: float = 100.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def make_service(*, admin=True, driver=True, clock=None) -> LocalCaptureService:
    return LocalCaptureService(
        admin_check=lambda: admin,
        driver_check=lambda: driver,
        clock=clock or FakeClock(),
    )


class TestCapability:
    """Capability reporting."""

    @pytest.mark.asyncio
    async def test_reports_checks(self):
        service = make_service(admin=False, driver=True)

        snapshot = await service.check_capability()

        assert snapshot == CapabilitySnapshot(is_admin=False, driver_found=True)

    @pytest.mark.asyncio
    async def test_privilege_detection_failure_is_service_error(self):
        def broken():
            raise PrivilegeDetectionError("token query failed")

        service = LocalCaptureService(admin_check=broken, driver_check=lambda: True)

        with pytest.raises(CaptureServiceError) as excinfo:
            await service.check_capability()

        assert excinfo.value.code == "PRIVILEGE_DETECTION_FAILED"
        assert "token query failed" in excinfo.value.message


class TestStartStop:
    """Session transitions and their refusals."""

    @pytest.mark.asyncio
    async def test_start_reports_fresh_session(self):
        service = make_service()

        status = await service.start_capture()

        assert status.is_running is True
        assert status.packet_count == 0
        assert status.bytes_per_second == 0.0
        assert status.last_packet_time is None

    @pytest.mark.asyncio
    async def test_start_twice_fails(self):
        service = make_service()
        await service.start_capture()

        with pytest.raises(CaptureServiceError) as excinfo:
            await service.start_capture()

        assert excinfo.value.message == ALREADY_RUNNING_MESSAGE
        assert excinfo.value.status == 409

    @pytest.mark.asyncio
    async def test_start_requires_admin(self):
        service = make_service(admin=False)

        with pytest.raises(CaptureServiceError) as excinfo:
            await service.start_capture()

        assert excinfo.value.message == REQUIRES_ADMIN_MESSAGE
        assert service.is_running is False

    @pytest.mark.asyncio
    async def test_start_requires_driver(self):
        service = make_service(driver=False)

        with pytest.raises(CaptureServiceError) as excinfo:
            await service.start_capture()

        assert excinfo.value.message == DRIVER_NOT_FOUND_MESSAGE
        assert excinfo.value.code == "DRIVER_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_stop_when_idle_fails(self):
        service = make_service()

        with pytest.raises(CaptureServiceError) as excinfo:
            await service.stop_capture()

        assert excinfo.value.message == NOT_RUNNING_MESSAGE

    @pytest.mark.asyncio
    async def test_stop_keeps_counters(self):
        service = make_service()
        await service.start_capture()
        service.record_packet(100)
        service.record_packet(50)

        status = await service.stop_capture()

        assert status.is_running is False
        assert status.packet_count == 2
        assert status.bytes_per_second == 0.0
        assert status.last_packet_time is not None

    @pytest.mark.asyncio
    async def test_restart_resets_counters(self):
        service = make_service()
        await service.start_capture()
        service.record_packet(100)
        await service.stop_capture()

        status = await service.start_capture()

        assert status.packet_count == 0
        assert status.last_packet_time is None


class TestPacketAccounting:
    """Packet feed and throughput window."""

    @pytest.mark.asyncio
    async def test_packets_ignored_when_idle(self):
        service = make_service()

        assert service.record_packet(100) is False
        assert (await service.get_capture_status()).packet_count == 0

    @pytest.mark.asyncio
    async def test_throughput_over_trailing_window(self):
        clock = FakeClock(10.0)
        service = make_service(clock=clock)
        await service.start_capture()

        service.record_packet(400)
        clock.now = 10.5
        service.record_packet(624)
        status = await service.get_capture_status()
        assert status.bytes_per_second == pytest.approx(1024.0)

        clock.now = 11.2
        status = await service.get_capture_status()
        assert status.bytes_per_second == pytest.approx(624.0)

        clock.now = 20.0
        status = await service.get_capture_status()
        assert status.bytes_per_second == 0.0
        assert status.packet_count == 2

    @pytest.mark.asyncio
    async def test_last_packet_time_is_iso(self):
        service = make_service()
        await service.start_capture()
        stamp = datetime(2024, 5, 1, 12, 0, 1, tzinfo=timezone.utc)

        service.record_packet(60, timestamp=stamp)

        status = await service.get_capture_status()
        assert status.last_packet_time == stamp.isoformat()

    @pytest.mark.asyncio
    async def test_window_pruned_without_status_reads(self):
        clock = FakeClock(10.0)
        service = make_service(clock=clock)
        await service.start_capture()

        for step in range(50):
            clock.now = 10.0 + step * 0.5
            service.record_packet(10)

        # Only packets inside the trailing one-second window are retained.
        assert len(service._recent) <= 3
        assert service._packet_count == 50

    @pytest.mark.asyncio
    async def test_negative_length_rejected(self):
        service = make_service()
        await service.start_capture()

        with pytest.raises(ValueError):
            service.record_packet(-1)


class TestFindCaptureDriver:
    """Driver discovery on the filesystem."""

    def test_non_windows_reports_present(self, tmp_path):
        assert find_capture_driver(platform="linux", application_dir=tmp_path) is True

    def test_missing_everywhere(self, tmp_path):
        app_dir = tmp_path / "app"
        drivers = tmp_path / "drivers"
        app_dir.mkdir()
        drivers.mkdir()

        assert find_capture_driver(
            platform="win32",
            application_dir=app_dir,
            system_drivers_dir=drivers,
        ) is False

    def test_local_install_needs_library_and_sys(self, tmp_path):
        app_dir = tmp_path / "app"
        app_dir.mkdir()
        (app_dir / "WinDivert.dll").write_bytes(b"")

        kwargs = dict(platform="win32", application_dir=app_dir, system_drivers_dir=tmp_path / "none")
        assert find_capture_driver(**kwargs) is False

        (app_dir / "WinDivert64.sys").write_bytes(b"")
        assert find_capture_driver(**kwargs) is True

    def test_extra_search_dir(self, tmp_path):
        extra = tmp_path / "extra"
        extra.mkdir()
        (extra / "WinDivert64.dll").write_bytes(b"")
        (extra / "WinDivert64.sys").write_bytes(b"")

        assert find_capture_driver(
            [extra],
            platform="win32",
            application_dir=tmp_path,
            system_drivers_dir=tmp_path / "none",
        ) is True

    def test_system_install(self, tmp_path):
        drivers = tmp_path / "drivers"
        drivers.mkdir()
        (drivers / "WinDivert64.sys").write_bytes(b"")

        assert find_capture_driver(
            platform="win32",
            application_dir=tmp_path,
            system_drivers_dir=drivers,
        ) is True


class TestIsRunningAsAdmin:
    """Privilege detection on POSIX hosts."""

    def test_root_is_admin(self, monkeypatch):
        monkeypatch.setattr(platform_checks.sys, "platform", "linux")
        monkeypatch.setattr(platform_checks.os, "geteuid", lambda: 0, raising=False)

        assert platform_checks.is_running_as_admin() is True

    def test_regular_user_is_not_admin(self, monkeypatch):
        monkeypatch.setattr(platform_checks.sys, "platform", "linux")
        monkeypatch.setattr(platform_checks.os, "geteuid", lambda: 1000, raising=False)

        assert platform_checks.is_running_as_admin() is False

    def test_missing_euid_raises(self, monkeypatch):
        monkeypatch.setattr(platform_checks.sys, "platform", "linux")
        monkeypatch.delattr(platform_checks.os, "geteuid", raising=False)

        with pytest.raises(PrivilegeDetectionError):
            platform_checks.is_running_as_admin()


@pytest.mark.hardware
class TestHostCapability:
    """Real privilege and driver checks; needs an elevated host with WinDivert."""

    @pytest.mark.asyncio
    async def test_host_can_capture(self):
        service = LocalCaptureService()

        snapshot = await service.check_capability()

        assert snapshot.can_capture is True
        await service.start_capture()
        assert (await service.stop_capture()).is_running is False
