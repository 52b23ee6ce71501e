"""RSS 2.0 feed model with iTunes podcast extensions.

The models mirror the XML structure one to one. Serialization keeps a fixed
element order and leaves out every optional element that has no data, so
the output is stable enough to compare against stored documents.
"""

import re
from datetime import datetime
from email.utils import format_datetime
from typing import List, Optional

from lxml import etree
from pydantic import BaseModel, Field

ITUNES_NS = "http://www.itunes.com/dtds/podcast-1.0.dtd"
_ITUNES = f"{{{ITUNES_NS}}}"

# Everything outside the XML 1.0 Char production
_INVALID_XML_CHARS = re.compile(
    r"[^\x09\x0A\x0D\x20-\uD7FF\uE000-\uFFFD\U00010000-\U0010FFFF]"
)


def itunes_duration(seconds: int) -> str:
    """Format seconds as S, M:SS or H:MM:SS."""
    seconds = max(0, int(seconds))
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    if minutes:
        return f"{minutes}:{secs:02d}"
    return str(secs)


def _clean(value: str) -> str:
    return _INVALID_XML_CHARS.sub("", value)


def _add_text(
    parent: etree._Element, tag: str, value: str | None, required: bool = False
) -> None:
    if not value and not required:
        return
    etree.SubElement(parent, tag).text = _clean(value or "")


def _add_cdata(parent: etree._Element, tag: str, value: str | None) -> None:
    if not value:
        return
    text = _clean(value)
    element = etree.SubElement(parent, tag)
    # lxml refuses CDATA sections containing their own terminator
    element.text = text if "]]>" in text else etree.CDATA(text)


def _add_date(parent: etree._Element, tag: str, value: datetime | None) -> None:
    if value is None:
        return
    etree.SubElement(parent, tag).text = format_datetime(value)


class FeedImage(BaseModel):
    """The RSS channel image."""

    url: str
    title: str = ""
    link: str = ""
    height: int = 0
    width: int = 0

    def append_to(self, parent: etree._Element) -> etree._Element:
        element = etree.SubElement(parent, "image")
        _add_text(element, "url", self.url, required=True)
        _add_text(element, "title", self.title)
        _add_text(element, "link", self.link)
        if self.height:
            _add_text(element, "height", str(self.height))
        if self.width:
            _add_text(element, "width", str(self.width))
        return element


class ITunesImage(BaseModel):
    """The itunes:image element, referencing its URL via href."""

    href: str


class Enclosure(BaseModel):
    """Media file attached to an item."""

    url: str
    type: str
    length: Optional[int] = None


class FeedItem(BaseModel):
    """An episode in the feed."""

    title: str = ""
    link: str = ""
    description: str = ""
    pub_date: Optional[datetime] = None
    guid: str = ""
    enclosure: Optional[Enclosure] = None
    itunes_duration: str = ""
    itunes_title: str = ""
    itunes_subtitle: str = ""
    itunes_summary: str = ""
    itunes_image: Optional[ITunesImage] = None

    def append_to(self, parent: etree._Element) -> etree._Element:
        element = etree.SubElement(parent, "item")
        _add_text(element, "title", self.title, required=True)
        _add_text(element, "link", self.link)
        _add_cdata(element, "description", self.description)
        _add_date(element, "pubDate", self.pub_date)
        if self.guid:
            guid = etree.SubElement(element, "guid", isPermaLink="false")
            guid.text = _clean(self.guid)
        if self.enclosure and self.enclosure.url:
            enclosure = etree.SubElement(element, "enclosure")
            enclosure.set("url", _clean(self.enclosure.url))
            enclosure.set("type", self.enclosure.type)
            if self.enclosure.length is not None:
                enclosure.set("length", str(self.enclosure.length))
        _add_text(element, f"{_ITUNES}duration", self.itunes_duration)
        _add_text(element, f"{_ITUNES}title", self.itunes_title)
        _add_text(element, f"{_ITUNES}subtitle", self.itunes_subtitle)
        _add_cdata(element, f"{_ITUNES}summary", self.itunes_summary)
        if self.itunes_image and self.itunes_image.href:
            etree.SubElement(
                element, f"{_ITUNES}image", href=_clean(self.itunes_image.href)
            )
        return element


class Channel(BaseModel):
    """The channel describing the show itself."""

    title: str = ""
    description: str = ""
    link: str = ""
    last_build_date: Optional[datetime] = None
    image: Optional[FeedImage] = None
    itunes_subtitle: str = ""
    itunes_author: str = ""
    itunes_summary: str = ""
    itunes_category: str = ""
    itunes_image: Optional[ITunesImage] = None
    itunes_explicit: bool = False
    items: List[FeedItem] = []

    def append_to(self, parent: etree._Element) -> etree._Element:
        element = etree.SubElement(parent, "channel")
        _add_text(element, "title", self.title, required=True)
        _add_cdata(element, "description", self.description)
        _add_text(element, "link", self.link)
        _add_date(element, "lastBuildDate", self.last_build_date)
        if self.image:
            self.image.append_to(element)
        _add_text(element, f"{_ITUNES}subtitle", self.itunes_subtitle)
        _add_text(element, f"{_ITUNES}author", self.itunes_author)
        _add_cdata(element, f"{_ITUNES}summary", self.itunes_summary)
        if self.itunes_category:
            etree.SubElement(
                element, f"{_ITUNES}category", text=_clean(self.itunes_category)
            )
        if self.itunes_image and self.itunes_image.href:
            etree.SubElement(
                element, f"{_ITUNES}image", href=_clean(self.itunes_image.href)
            )
        _add_text(
            element,
            f"{_ITUNES}explicit",
            "true" if self.itunes_explicit else "false",
            required=True,
        )
        for item in self.items:
            item.append_to(element)
        return element


class Feed(BaseModel):
    """Root of an RSS document."""

    version: str = "2.0"
    channel: Channel = Field(default_factory=Channel)

    def to_xml(self) -> str:
        """Serialize the feed to an indented XML document."""
        root = etree.Element("rss", nsmap={"itunes": ITUNES_NS})
        root.set("version", self.version)
        self.channel.append_to(root)
        return etree.tostring(
            root, encoding="UTF-8", xml_declaration=True, pretty_print=True
        ).decode("utf-8")
