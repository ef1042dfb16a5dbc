"""Capture data models."""

from capture.models.capture_source import CaptureConstraints, CaptureSource

__all__ = ["CaptureConstraints", "CaptureSource"]
