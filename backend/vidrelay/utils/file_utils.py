"""File naming helpers"""
import re


def safe_filename(title: str, ext: str) -> str:
    """Replace runs of non-word characters so the title fits in a header"""
    stem = re.sub(r"[^\w\-]+", "_", title or "", flags=re.ASCII)
    return f"{stem or 'video'}.{ext}"
