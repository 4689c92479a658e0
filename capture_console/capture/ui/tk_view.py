"""Tk panel for the capture console."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional

try:  # pragma: no cover - Tk unavailable on display-less hosts
    import tkinter as tk
    from tkinter import messagebox, ttk
except Exception:  # pragma: no cover
    tk = None  # type: ignore
    ttk = None  # type: ignore
    messagebox = None  # type: ignore

from capture_console.core.logging_utils import LoggerLike, ensure_structured_logger

from ..domain import CapabilityDisplayState, CaptureControlError, PanelRenderModel
from .view import describe_capability

WINDOW_TITLE = "Capture Console"
GUIDANCE_COLOR = "#c62828"


@dataclass(slots=True)
class ViewCallbacks:
    start: Callable[[], None]
    stop: Callable[[], None]
    recheck: Callable[[], None]


class TkCaptureView:
    """Render pushes arrive from the asyncio thread and are applied on Tk's."""

    def __init__(
        self,
        root: Any,
        call_in_gui: Callable[..., None],
        callbacks: ViewCallbacks,
        *,
        logger: LoggerLike = None,
        window_geometry: Optional[str] = None,
    ) -> None:
        if tk is None or ttk is None:
            raise RuntimeError("Tk is not available on this host")
        self.root = root
        self._call_in_gui = call_in_gui
        self._callbacks = callbacks
        self.logger = ensure_structured_logger(logger, fallback_name="Capture").getChild("TkView")

        self.root.title(WINDOW_TITLE)
        if window_geometry:
            try:
                self.root.geometry(window_geometry)
            except tk.TclError:
                self.logger.warning("Ignoring invalid window geometry %r", window_geometry)

        self._capability_var = tk.StringVar(value="Loading status...")
        self._guidance_var = tk.StringVar(value="")
        self._state_var = tk.StringVar(value="")
        self._packets_var = tk.StringVar(value="")
        self._throughput_var = tk.StringVar(value="")
        self._last_packet_var = tk.StringVar(value="")
        self._last_model: Optional[PanelRenderModel] = None
        self._build_content()
        self.logger.debug("Capture view attached")

    # ------------------------------------------------------------------
    # ViewPort

    def render(self, model: PanelRenderModel) -> None:
        self._call_in_gui(self._apply_model, model)

    def show_error(self, error: CaptureControlError) -> None:
        self._call_in_gui(self._show_error_dialog, error.title, error.message)

    # ------------------------------------------------------------------
    # GUI-thread helpers

    def _apply_model(self, model: PanelRenderModel) -> None:
        self._last_model = model
        self._capability_var.set(describe_capability(model))
        self._guidance_var.set("\n".join(model.capability.guidance))

        self._start_button.state(["!disabled"] if model.start_enabled else ["disabled"])
        self._stop_button.state(["!disabled"] if model.stop_enabled else ["disabled"])
        checking = model.capability.state is CapabilityDisplayState.LOADING
        self._recheck_button.state(["disabled"] if checking else ["!disabled"])

        status = model.status
        if status is None:
            self._status_frame.grid_remove()
            return
        self._status_frame.grid()
        self._state_var.set(status.state_label)
        self._packets_var.set(status.packet_count)
        self._throughput_var.set(f"{status.throughput} bytes/s")
        self._last_packet_var.set(status.last_packet)

    def _show_error_dialog(self, title: str, message: str) -> None:
        # A failed request pushes no new model; restore controls disabled on click.
        if self._last_model is not None:
            self._apply_model(self._last_model)
        if messagebox is not None:
            messagebox.showerror(title, message, parent=self.root)

    def _on_start(self) -> None:
        # Disable right away; the next render or error dialog restores it.
        self._start_button.state(["disabled"])
        self._callbacks.start()

    def _on_stop(self) -> None:
        self._stop_button.state(["disabled"])
        self._callbacks.stop()

    # ------------------------------------------------------------------
    # UI construction

    def _build_content(self) -> None:
        assert ttk is not None and tk is not None
        self.root.columnconfigure(0, weight=1)

        capability_frame = ttk.LabelFrame(self.root, text="Privilege & Driver Status", padding=8)
        capability_frame.grid(row=0, column=0, sticky="ew", padx=8, pady=(8, 4))
        capability_frame.columnconfigure(0, weight=1)
        ttk.Label(capability_frame, textvariable=self._capability_var).grid(row=0, column=0, sticky="w")
        tk.Label(
            capability_frame,
            textvariable=self._guidance_var,
            fg=GUIDANCE_COLOR,
            justify="left",
            wraplength=420,
        ).grid(row=1, column=0, sticky="w", pady=(6, 0))

        controls = ttk.Frame(self.root, padding=(8, 4))
        controls.grid(row=1, column=0, sticky="ew")
        self._start_button = ttk.Button(controls, text="Start Capture", command=self._on_start)
        self._start_button.grid(row=0, column=0, padx=(0, 6))
        self._stop_button = ttk.Button(controls, text="Stop Capture", command=self._on_stop)
        self._stop_button.grid(row=0, column=1, padx=(0, 6))
        self._recheck_button = ttk.Button(controls, text="Re-check", command=self._callbacks.recheck)
        self._recheck_button.grid(row=0, column=2)
        for button in (self._start_button, self._stop_button, self._recheck_button):
            button.state(["disabled"])

        self._status_frame = ttk.LabelFrame(self.root, text="Capture Status", padding=8)
        self._status_frame.grid(row=2, column=0, sticky="ew", padx=8, pady=(4, 8))
        rows = (
            ("Status:", self._state_var),
            ("Packets Captured:", self._packets_var),
            ("Throughput:", self._throughput_var),
            ("Last Packet:", self._last_packet_var),
        )
        for index, (label, variable) in enumerate(rows):
            ttk.Label(self._status_frame, text=label).grid(row=index, column=0, sticky="w")
            ttk.Label(self._status_frame, textvariable=variable).grid(row=index, column=1, sticky="w", padx=(6, 0))
        self._status_frame.grid_remove()


__all__ = ["TkCaptureView", "ViewCallbacks"]
