from .tk_view import TkCaptureView, ViewCallbacks
from .view import ConsoleView, ViewPort

__all__ = ["ConsoleView", "TkCaptureView", "ViewCallbacks", "ViewPort"]
