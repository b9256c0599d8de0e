"""Services package"""
from .delivery_service import DeliveryService
from .host_validator import HostValidator
from .inspection_service import InspectionService
from .media_source import MediaSource
from .transcoder import Transcoder

__all__ = [
    "DeliveryService",
    "HostValidator",
    "InspectionService",
    "MediaSource",
    "Transcoder"
]
