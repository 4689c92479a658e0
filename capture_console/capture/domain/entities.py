"""Value objects exchanged with the capture service."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping


def _require_bool(payload: Mapping[str, Any], *keys: str) -> bool:
    for key in keys:
        if key in payload:
            value = payload[key]
            if not isinstance(value, bool):
                raise ValueError(f"'{key}' must be a boolean, got {value!r}")
            return value
    raise ValueError(f"missing field '{keys[0]}'")


@dataclass(slots=True, frozen=True)
class CapabilitySnapshot:
    """Result of the privilege + driver check; replaced wholesale on re-check."""

    is_admin: bool
    driver_found: bool

    @property
    def can_capture(self) -> bool:
        return self.is_admin and self.driver_found

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "CapabilitySnapshot":
        """Parse the service's JSON shape.

        ``can_capture`` in the payload is ignored; it is always derived.
        """
        if not isinstance(payload, Mapping):
            raise ValueError(f"capability payload must be an object, got {type(payload).__name__}")
        return cls(
            is_admin=_require_bool(payload, "is_admin"),
            driver_found=_require_bool(payload, "driver_found", "windivert_driver_found"),
        )

    def to_payload(self) -> dict[str, bool]:
        return {
            "is_admin": self.is_admin,
            "driver_found": self.driver_found,
            "can_capture": self.can_capture,
        }


@dataclass(slots=True, frozen=True)
class CaptureStatus:
    """Live state reported by the capture service."""

    is_running: bool
    packet_count: int = 0
    bytes_per_second: float = 0.0
    last_packet_time: str | None = None

    def __post_init__(self) -> None:
        if isinstance(self.packet_count, bool) or not isinstance(self.packet_count, int):
            raise ValueError(f"packet_count must be an integer, got {self.packet_count!r}")
        if self.packet_count < 0:
            raise ValueError(f"packet_count must be >= 0, got {self.packet_count}")
        if self.bytes_per_second < 0:
            raise ValueError(f"bytes_per_second must be >= 0, got {self.bytes_per_second}")

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "CaptureStatus":
        if not isinstance(payload, Mapping):
            raise ValueError(f"status payload must be an object, got {type(payload).__name__}")
        rate = payload.get("bytes_per_second", 0.0)
        if isinstance(rate, bool) or not isinstance(rate, (int, float)):
            raise ValueError(f"bytes_per_second must be a number, got {rate!r}")
        last = payload.get("last_packet_time")
        return cls(
            is_running=_require_bool(payload, "is_running"),
            packet_count=payload.get("packet_count", 0),
            bytes_per_second=float(rate),
            last_packet_time=None if last is None else str(last),
        )

    def to_payload(self) -> dict[str, Any]:
        return {
            "is_running": self.is_running,
            "packet_count": self.packet_count,
            "bytes_per_second": self.bytes_per_second,
            "last_packet_time": self.last_packet_time,
        }


__all__ = ["CapabilitySnapshot", "CaptureStatus"]
