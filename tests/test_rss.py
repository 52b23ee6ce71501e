from datetime import datetime, timedelta, timezone

import pytest
from lxml import etree

from mediathek2rss.models.rss import (
    ITUNES_NS,
    Channel,
    Enclosure,
    Feed,
    FeedImage,
    FeedItem,
    ITunesImage,
    itunes_duration,
)


@pytest.mark.parametrize(
    "seconds, expected",
    [
        (0, "0"),
        (5, "5"),
        (59, "59"),
        (60, "1:00"),
        (605, "10:05"),
        (3599, "59:59"),
        (3600, "1:00:00"),
        (3661, "1:01:01"),
        (360000, "100:00:00"),
        (-5, "0"),
    ],
)
def test_itunes_duration(seconds, expected):
    assert itunes_duration(seconds) == expected


def test_minimal_feed():
    xml = Feed(channel=Channel(title="Show")).to_xml()

    assert xml == (
        "<?xml version='1.0' encoding='UTF-8'?>\n"
        f'<rss xmlns:itunes="{ITUNES_NS}" version="2.0">\n'
        "  <channel>\n"
        "    <title>Show</title>\n"
        "    <itunes:explicit>false</itunes:explicit>\n"
        "  </channel>\n"
        "</rss>\n"
    )


def test_empty_title_is_still_emitted():
    root = etree.fromstring(Feed().to_xml().encode("utf-8"))
    assert root.find("channel/title") is not None


def test_full_item_element_order():
    item = FeedItem(
        title="Episode",
        link="https://example.org/episode",
        description="About <it>",
        pub_date=datetime(2021, 1, 12, 17, 0, tzinfo=timezone.utc),
        guid="ep-1",
        enclosure=Enclosure(url="https://example.org/ep.mp4", type="video/mp4", length=42),
        itunes_duration="1:00",
        itunes_title="Episode",
        itunes_subtitle="Sub",
        itunes_summary="About <it>",
        itunes_image=ITunesImage(href="https://example.org/ep.jpg"),
    )
    root = etree.fromstring(Feed(channel=Channel(title="Show", items=[item])).to_xml().encode("utf-8"))
    element = root.find("channel/item")

    assert [child.tag for child in element] == [
        "title",
        "link",
        "description",
        "pubDate",
        "guid",
        "enclosure",
        f"{{{ITUNES_NS}}}duration",
        f"{{{ITUNES_NS}}}title",
        f"{{{ITUNES_NS}}}subtitle",
        f"{{{ITUNES_NS}}}summary",
        f"{{{ITUNES_NS}}}image",
    ]
    assert element.findtext("pubDate") == "Tue, 12 Jan 2021 17:00:00 +0000"
    assert element.find("guid").get("isPermaLink") == "false"
    assert element.find("enclosure").attrib == {
        "url": "https://example.org/ep.mp4",
        "type": "video/mp4",
        "length": "42",
    }
    assert element.find(f"{{{ITUNES_NS}}}image").get("href") == "https://example.org/ep.jpg"


def test_description_is_cdata():
    item = FeedItem(title="Episode", description="Rock & <b>Roll</b>")
    xml = Feed(channel=Channel(title="Show", items=[item])).to_xml()

    assert "<description><![CDATA[Rock & <b>Roll</b>]]></description>" in xml


def test_description_with_cdata_terminator_is_escaped():
    item = FeedItem(title="Episode", description="a ]]> b")
    root = etree.fromstring(Feed(channel=Channel(title="Show", items=[item])).to_xml().encode("utf-8"))

    assert root.findtext("channel/item/description") == "a ]]> b"


def test_empty_optional_fields_are_omitted():
    item = FeedItem(
        title="Episode",
        enclosure=Enclosure(url="", type="video/mp4"),
        itunes_image=ITunesImage(href=""),
    )
    root = etree.fromstring(Feed(channel=Channel(title="Show", items=[item])).to_xml().encode("utf-8"))
    element = root.find("channel/item")

    assert [child.tag for child in element] == ["title"]


def test_channel_element_order():
    channel = Channel(
        title="Show",
        description="About",
        link="https://example.org",
        last_build_date=datetime(2021, 1, 20, 12, 0, tzinfo=timezone(timedelta(hours=1))),
        image=FeedImage(url="https://example.org/i.jpg", title="Image", link="https://example.org", height=100, width=200),
        itunes_subtitle="Sub",
        itunes_author="Author",
        itunes_summary="About",
        itunes_category="Comedy",
        itunes_image=ITunesImage(href="https://example.org/i.jpg"),
        itunes_explicit=True,
    )
    root = etree.fromstring(Feed(channel=channel).to_xml().encode("utf-8"))
    element = root.find("channel")

    assert [child.tag for child in element] == [
        "title",
        "description",
        "link",
        "lastBuildDate",
        "image",
        f"{{{ITUNES_NS}}}subtitle",
        f"{{{ITUNES_NS}}}author",
        f"{{{ITUNES_NS}}}summary",
        f"{{{ITUNES_NS}}}category",
        f"{{{ITUNES_NS}}}image",
        f"{{{ITUNES_NS}}}explicit",
    ]
    assert [child.tag for child in element.find("image")] == ["url", "title", "link", "height", "width"]
    assert element.findtext("lastBuildDate") == "Wed, 20 Jan 2021 12:00:00 +0100"
    assert element.find(f"{{{ITUNES_NS}}}category").get("text") == "Comedy"
    assert element.find(f"{{{ITUNES_NS}}}category").text is None
    assert element.findtext(f"{{{ITUNES_NS}}}explicit") == "true"


def test_invalid_xml_characters_are_stripped():
    xml = Feed(channel=Channel(title="Bad\x00 \x0bTitle")).to_xml()
    root = etree.fromstring(xml.encode("utf-8"))

    assert root.findtext("channel/title") == "Bad Title"


def test_special_characters_are_escaped():
    xml = Feed(channel=Channel(title="Rock & Roll <live>")).to_xml()
    assert "<title>Rock &amp; Roll &lt;live&gt;</title>" in xml
