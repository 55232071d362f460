"""Schemas for the live_video_requests table."""

from .live_request import LiveVideoRequest, Product
from .live_request_status import LiveRequestStatus

__all__ = [
    "LiveRequestStatus",
    "LiveVideoRequest",
    "Product",
]
