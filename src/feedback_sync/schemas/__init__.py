"""Pydantic schemas for the feedback sync engine.

This module provides read models and the provider-agnostic payload builders.
"""

from .base import SchemaBase
from .domain import (
    FeedbackSnapshot,
    IntegrationConfigRead,
    LinkStateRead,
    ProjectSnapshot,
    RemoteRef,
    Resource,
)
from .enums import FeedbackCategory, FeedbackStatus, ProviderId
from .payload import (
    ItemPayload,
    build_item_payload,
    merge_tags,
    render_comment,
    render_description,
)

__all__ = [
    # Base
    "SchemaBase",
    # Enums
    "FeedbackCategory",
    "FeedbackStatus",
    "ProviderId",
    # Domain
    "FeedbackSnapshot",
    "IntegrationConfigRead",
    "LinkStateRead",
    "ProjectSnapshot",
    "RemoteRef",
    "Resource",
    # Payload
    "ItemPayload",
    "build_item_payload",
    "merge_tags",
    "render_comment",
    "render_description",
]
