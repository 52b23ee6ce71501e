"""Selection of the best image and video renditions offered upstream."""

import logging
import re
from collections import namedtuple
from typing import Awaitable, Callable, Iterable, Mapping, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

# One encoded rendition; width is 0 for adaptive streams
StreamVariant = namedtuple("StreamVariant", ["width", "height", "urls"])

PREFERRED_IMAGE_LABEL = "16x9"
QUALITY_PREFERENCE = ("veryhigh", "high", "low")

# Known suffixes of high bitrate renditions, least preferred first
HIGH_RESOLUTION_SUFFIXES = [
    "3256k_p15v12.mp4",
    "3296k_p15v13.mp4",
    "3328k_p36v12.mp4",
    "3328k_p36v13.mp4",
    "3328k_p36v14.mp4",
    "3328k_p35v14.mp4",
    "3360k_p36v15.mp4",
]

_DIMENSIONS = re.compile(r"([0-9]+)x([0-9]+)")
_RENDITION_SUFFIX = re.compile(r"_[0-9]+k_p[0-9]+v[0-9]+\.mp4\Z")


def parse_dimensions(label: str) -> tuple[int, int]:
    """Return width and height of a label like '1280x720', (0, 0) otherwise."""
    match = _DIMENSIONS.search(label)
    if not match:
        return 0, 0
    return int(match.group(1)), int(match.group(2))


def find_largest_image_url(layouts: Mapping[str, str]) -> str:
    """Return the URL whose resolution label describes the largest area.

    Labels without dimensions (e.g. 'auto') never win. On equal areas the
    first label in iteration order is kept.
    """
    biggest_area = 0
    best_url = ""
    for resolution, url in layouts.items():
        width, height = parse_dimensions(resolution)
        area = width * height
        if area > biggest_area:
            biggest_area = area
            best_url = url
    return best_url


def find_preferred_image(images: Mapping[str, T]) -> T | None:
    """Return the 16x9 image if offered, otherwise the first candidate."""
    if PREFERRED_IMAGE_LABEL in images:
        return images[PREFERRED_IMAGE_LABEL]
    return next(iter(images.values()), None)


def expand_image_template(src: str, width: int) -> str:
    """Fill the width placeholder of an image URL template."""
    return src.replace("{width}", str(width))


def find_nearest_width_url(variants: Iterable[StreamVariant], target_width: int) -> str:
    """Return the MP4 URL whose width is closest to target_width.

    A candidate replaces the current best only when strictly closer, so the
    first of equally distant candidates wins. Returns an empty string when
    no URL contains 'mp4'.
    """
    best_width = 0
    best_url = ""
    for variant in variants:
        for url in variant.urls:
            if "mp4" not in url:
                continue
            if abs(target_width - variant.width) < abs(target_width - best_width):
                best_width = variant.width
                best_url = url
    return best_url


async def find_best_quality_url(
    quality_to_url: Mapping[str, str],
    upgrade: Callable[[str], Awaitable[str]] | None = None,
) -> str:
    """Pick veryhigh, then high, then low, then anything that is left.

    The veryhigh URL is passed through upgrade when given.
    """
    for quality in QUALITY_PREFERENCE:
        url = quality_to_url.get(quality)
        if url is None:
            continue
        if quality == "veryhigh" and upgrade is not None:
            return await upgrade(url)
        return url
    return next(iter(quality_to_url.values()), "")


async def find_highest_resolution_url(
    url: str, probe: Callable[[str], Awaitable[bool]]
) -> str:
    """Try known higher bitrate renditions of url and return the best existing one.

    Candidates are checked from the end of HIGH_RESOLUTION_SUFFIXES to its
    start. The original URL is returned if its file name does not follow
    the rendition naming scheme or no candidate exists.
    """
    match = _RENDITION_SUFFIX.search(url)
    if not match:
        return url

    url_prefix = url[: match.start()] + "_"
    for suffix in reversed(HIGH_RESOLUTION_SUFFIXES):
        candidate = url_prefix + suffix
        if await probe(candidate):
            logger.debug(f"Upgraded {url} to {candidate}")
            return candidate
    return url
