"""Publish data models."""

from publish.models.publish_handle import PublishHandle
from publish.models.session_description import SessionDescription

__all__ = ["PublishHandle", "SessionDescription"]
