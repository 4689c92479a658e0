"""Capture session panel: capability gate, start/stop control and status polling."""
