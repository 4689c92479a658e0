"""Constants for the capture module."""

DEFAULT_POLL_INTERVAL = 0.5
THROUGHPUT_WINDOW_SECONDS = 1.0
LAST_PACKET_PLACEHOLDER = "N/A"

DRIVER_NAME = "WinDivert"
DRIVER_VERSION = "2.2.2-A"
DRIVER_URL = "https://reqrypt.org/windivert.html"
DRIVER_LIBRARIES = ("WinDivert64.dll", "WinDivert.dll")
DRIVER_SYS_FILES = ("WinDivert64.sys", "WinDivert.sys")

ADMIN_GUIDANCE = "Please restart the application as Administrator to capture traffic."
DRIVER_GUIDANCE = (
    f"Please download {DRIVER_NAME} {DRIVER_VERSION} from {DRIVER_URL} and place "
    "WinDivert.dll and WinDivert64.sys in the application directory."
)
