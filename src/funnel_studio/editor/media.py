"""Media helpers shared by the editor canvas and the public renderer."""

import re
from typing import Optional

IMAGE_ASPECT_RATIOS = {
    "S": "16/9",
    "M": "4/3",
    "L": "5/4",
    "XL": "1/1",
}

_YOUTUBE = re.compile(r"(?:youtube\.com/(?:watch\?v=|embed/)|youtu\.be/)([a-zA-Z0-9_-]{11})")
_VIMEO = re.compile(r"vimeo\.com/(?:video/)?(\d+)")
_LOOM = re.compile(r"loom\.com/share/([a-zA-Z0-9]+)")
_WISTIA = re.compile(r"wistia\.com/medias/([a-zA-Z0-9]+)")


def video_embed_url(url: Optional[str]) -> Optional[str]:
    """Convert a share URL into an embeddable player URL.

    Returns None when the URL is empty or not a recognised host.
    """
    if not url:
        return None

    match = _YOUTUBE.search(url)
    if match:
        return f"https://www.youtube.com/embed/{match.group(1)}"

    match = _VIMEO.search(url)
    if match:
        return f"https://player.vimeo.com/video/{match.group(1)}"

    match = _LOOM.search(url)
    if match:
        return f"https://www.loom.com/embed/{match.group(1)}"

    match = _WISTIA.search(url)
    if match:
        return f"https://fast.wistia.net/embed/iframe/{match.group(1)}"

    if "/embed/" in url or "player.vimeo.com" in url:
        return url

    return None


def aspect_ratio(image_size: Optional[str]) -> str:
    return IMAGE_ASPECT_RATIOS.get(image_size or "M", IMAGE_ASPECT_RATIOS["M"])
