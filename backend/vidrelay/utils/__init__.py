"""Utils package"""
from .file_utils import safe_filename

__all__ = [
    "safe_filename"
]
