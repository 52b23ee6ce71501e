"""ARD Mediathek feed provider."""

import asyncio
import logging

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
from mediathek2rss.providers.ard_api import ArdApi, ArdImage, ArdTeaser
from mediathek2rss.providers.base import FeedProvider
from mediathek2rss.services.selection import (
    expand_image_template,
    find_nearest_width_url,
    find_preferred_image,
)

logger = logging.getLogger(__name__)

SHOW_LINK_PREFIX = "https://www.ardmediathek.de/ard/sendung/"
VIDEO_LINK_PREFIX = "https://www.ardmediathek.de/ard/video/"
VIDEO_MIME_TYPE = "video/mp4"


def _image_url(image: ArdImage | None, width: int) -> str:
    if image is None:
        return ""
    return expand_image_template(image.src, width)


class ArdFeedProvider(FeedProvider):
    """Builds feeds for shows of the ARD Mediathek.

    Shows are identified by their alphanumeric id, as found at the end of
    https://www.ardmediathek.de/ard/sendung/<id>.
    """

    @property
    def name(self) -> str:
        return "ARD"

    def api(self) -> ArdApi:
        return ArdApi(self.http, self.max_episodes)

    async def build(self, show_identifier: str, parameters: RequestParameters) -> str:
        api = self.api()
        show = await api.get_show(show_identifier)

        show_info = show.teasers[0].show
        feed_title = show_info.title
        feed_image_url = _image_url(
            find_preferred_image(show_info.images), parameters.width
        )

        teasers = [t for t in show.teasers if t.duration >= parameters.min_length]
        logger.info(
            f"Building ARD feed for {show_identifier} with {len(teasers)} of "
            f"{len(show.teasers)} episodes"
        )
        items = await asyncio.gather(
            *(self._build_item(api, teaser, parameters) for teaser in teasers)
        )

        feed = Feed(
            channel=Channel(
                title=feed_title,
                description=show_info.long_synopsis,
                link=SHOW_LINK_PREFIX + show_identifier,
                image=FeedImage(url=feed_image_url, title=feed_title),
                itunes_image=ITunesImage(href=feed_image_url),
                items=list(items),
            )
        )
        return feed.to_xml()

    async def _build_item(
        self, api: ArdApi, teaser: ArdTeaser, parameters: RequestParameters
    ) -> FeedItem:
        video = await api.get_video(teaser.links.target.href)
        widget = video.main_widget
        stream_url = find_nearest_width_url(video.stream_variants(), parameters.width)
        if not stream_url:
            logger.debug(f"No MP4 stream for ARD video {teaser.id}")

        return FeedItem(
            title=teaser.long_title,
            link=VIDEO_LINK_PREFIX + teaser.id,
            description=widget.synopsis,
            pub_date=teaser.broadcasted_on,
            guid=teaser.id,
            enclosure=Enclosure(url=stream_url, type=VIDEO_MIME_TYPE),
            itunes_duration=itunes_duration(teaser.duration),
            itunes_title=teaser.long_title,
            itunes_summary=widget.synopsis,
            itunes_image=ITunesImage(href=_image_url(widget.image, parameters.width)),
        )

