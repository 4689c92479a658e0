"""Command + user action routing for the capture console."""

from __future__ import annotations

from typing import Any, TYPE_CHECKING

from capture_console.core.logging_utils import LoggerLike, ensure_structured_logger

if TYPE_CHECKING:  # pragma: no cover - avoids circular import at runtime
    from .application import CaptureApp


class CommandRouter:
    """Route stdin commands and UI actions to the controller."""

    def __init__(self, logger: LoggerLike, app: "CaptureApp") -> None:
        self.logger = ensure_structured_logger(logger, fallback_name="Capture").getChild("CommandRouter")
        self.app = app

    async def handle_command(self, command: dict[str, Any]) -> bool:
        action = (command.get("command") or "").lower()
        self.logger.debug("Handling command: %s", action)
        controller = self.app.controller
        if action == "start_capture":
            await controller.start()
            return True
        if action == "stop_capture":
            await controller.stop()
            return True
        if action == "get_status":
            controller.render()
            return True
        if action == "check_capability":
            await controller.refresh_capability()
            return True
        if action == "quit":
            self.app.request_shutdown("quit command received")
            return True
        self.logger.debug("Unhandled command: %s", action)
        return False

    async def handle_user_action(self, action: str, **kwargs: Any) -> bool:
        action = (action or "").strip().lower()
        self.logger.debug("Handling user action: %s", action)
        controller = self.app.controller
        if action == "start":
            await controller.start()
            return True
        if action == "stop":
            await controller.stop()
            return True
        if action == "recheck":
            await controller.refresh_capability()
            return True
        if action == "status":
            controller.render()
            return True
        if action in {"quit", "exit"}:
            self.app.request_shutdown("quit requested")
            return True
        self.logger.debug("Unhandled user action: %s", action)
        return False


__all__ = ["CommandRouter"]
