"""ZDF feed provider."""

import asyncio
import logging
from datetime import datetime, timezone

from mediathek2rss.models.parameters import RequestParameters
from mediathek2rss.models.rss import (
    Channel,
    Enclosure,
    Feed,
    FeedImage,
    FeedItem,
    ITunesImage,
    itunes_duration,
)
from mediathek2rss.providers.base import FeedProvider
from mediathek2rss.providers.zdf_api import ZdfApi, ZdfVideoDescription
from mediathek2rss.services.selection import (
    find_best_quality_url,
    find_highest_resolution_url,
    find_largest_image_url,
)

logger = logging.getLogger(__name__)

VIDEO_MIME_TYPE = "video/mp4"


class ZdfFeedProvider(FeedProvider):
    """Builds feeds for shows of the ZDF Mediathek.

    Shows are identified by their path below https://www.zdf.de/, e.g.
    'comedy/zdf-magazin-royale'. ZDF delivers a fixed set of quality tiers,
    so the requested width is not used for stream selection.
    """

    def __init__(self, http=None, settings=None, clock=None):
        super().__init__(http, settings)
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    @property
    def name(self) -> str:
        return "ZDF"

    async def build(self, show_identifier: str, parameters: RequestParameters) -> str:
        api = await ZdfApi.create(self.http, self.max_episodes)
        show = await api.get_show(show_identifier)
        search_result = await api.get_show_videos(show)

        videos = [
            hit.video
            for hit in search_result.results
            if hit.video.duration >= parameters.min_length
        ]
        logger.info(
            f"Building ZDF feed for {show_identifier} with {len(videos)} of "
            f"{len(search_result.results)} episodes"
        )
        items = await asyncio.gather(*(self._build_item(api, video) for video in videos))

        image_url = find_largest_image_url(show.image.layouts)
        description = show.description
        feed = Feed(
            channel=Channel(
                title=show.title,
                description=description,
                link=show.url,
                last_build_date=self._clock(),
                image=FeedImage(url=image_url, title=show.image.alt_text, link=show.url),
                itunes_subtitle=show.title,
                itunes_summary=description,
                itunes_image=ITunesImage(href=image_url),
                items=list(items),
            )
        )
        return feed.to_xml()

    async def _build_item(self, api: ZdfApi, video: ZdfVideoDescription) -> FeedItem:
        streams = await api.get_streams(video)
        video_url = await find_best_quality_url(
            streams.quality_urls(),
            upgrade=lambda url: find_highest_resolution_url(url, api.probe),
        )
        if not video_url:
            logger.debug(f"No MP4 stream for ZDF video {video.id}")

        return FeedItem(
            title=video.title,
            link=video.url,
            description=video.description,
            pub_date=video.date,
            guid=video.id,
            enclosure=Enclosure(url=video_url, type=VIDEO_MIME_TYPE),
            itunes_duration=itunes_duration(video.duration),
            itunes_title=video.title,
            itunes_summary=video.description,
            itunes_image=ITunesImage(href=find_largest_image_url(video.image.layouts)),
        )
