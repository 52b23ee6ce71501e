"""Client for the ZDF content API."""

import logging
import re
from datetime import datetime
from typing import List, Optional

from pydantic import Field

from mediathek2rss.core.errors import UpstreamMalformedError
from mediathek2rss.models.upstream import UpstreamModel, parse_response

logger = logging.getLogger(__name__)

BEARER_TOKEN_SOURCE_URL = "https://www.zdf.de/nachrichten/heute-journal"
ZDF_API_BASE = "https://api.zdf.de"
SHOW_API_PREFIX = f"{ZDF_API_BASE}/content/documents/zdf/"
PLAYER_ID = "ngplayer_2_4"
PROGRESSIVE_MIME_TYPE = "video/mp4"
AUDIO_LANGUAGE = "deu"
AUDIO_CLASS = "main"

_BEARER_TOKEN = re.compile(r"[\"']?apiToken[\"']?:\s*[\"']([a-z0-9]+)[\"']")


class ZdfTeaserImage(UpstreamModel):
    """Image offered in several layouts keyed by resolution label."""

    alt_text: str = Field("", alias="altText")
    layouts: dict[str, str] = {}


class ZdfModule(UpstreamModel):
    description: str = Field("", alias="shorttext-text")


class ZdfSearchReference(UpstreamModel):
    result_count: int = Field(0, alias="totalResultsCount")
    search_url_template: str = Field("", alias="self")


class ZdfShow(UpstreamModel):
    """A show without its videos."""

    id: str = ""
    title: str = ""
    image: ZdfTeaserImage = Field(default_factory=ZdfTeaserImage, alias="teaserImageRef")
    url: str = Field("", alias="http://zdf.de/rels/sharing-url")
    search: ZdfSearchReference = Field(
        default_factory=ZdfSearchReference,
        alias="http://zdf.de/rels/search/page-video-counter-with-video",
    )
    modules: List[ZdfModule] = Field(default_factory=list, alias="module")

    @property
    def description(self) -> str:
        """First non-empty module description, or an empty string."""
        for module in self.modules:
            if module.description:
                return module.description
        return ""

    def search_url(self, max_episodes: int) -> str:
        search_path = self.search.search_url_template.replace(
            "limit=0", f"limit={max_episodes}"
        )
        return f"{ZDF_API_BASE}{search_path}"


class ZdfStreamsReference(UpstreamModel):
    duration: int = 0
    url_template: str = Field("", alias="http://zdf.de/rels/streams/ptmd-template")


class ZdfMainVideoContent(UpstreamModel):
    target: ZdfStreamsReference = Field(
        default_factory=ZdfStreamsReference, alias="http://zdf.de/rels/target"
    )


class ZdfVideoDescription(UpstreamModel):
    """A video without its streams."""

    id: str = ""
    title: str = Field("", alias="teaserHeadline")
    description: str = Field("", alias="teasertext")
    date: Optional[datetime] = Field(None, alias="editorialDate")
    image: ZdfTeaserImage = Field(default_factory=ZdfTeaserImage, alias="teaserImageRef")
    url: str = Field("", alias="http://zdf.de/rels/sharing-url")
    main_video_content: ZdfMainVideoContent = Field(
        default_factory=ZdfMainVideoContent, alias="mainVideoContent"
    )

    @property
    def duration(self) -> int:
        return self.main_video_content.target.duration

    def streams_url(self) -> str:
        streams_path = self.main_video_content.target.url_template.replace(
            "{playerId}", PLAYER_ID
        )
        return f"{ZDF_API_BASE}{streams_path}"


class ZdfSearchHit(UpstreamModel):
    video: ZdfVideoDescription = Field(
        default_factory=ZdfVideoDescription, alias="http://zdf.de/rels/target"
    )


class ZdfSearchResult(UpstreamModel):
    """Result of the video search for a show."""

    result_count: int = Field(0, alias="totalResultsCount")
    results: List[ZdfSearchHit] = Field(
        default_factory=list, alias="http://zdf.de/rels/search/results"
    )


class ZdfTrack(UpstreamModel):
    cdn: str = ""
    track_class: str = Field("", alias="class")
    language: str = ""
    uri: str = ""


class ZdfAudio(UpstreamModel):
    tracks: List[ZdfTrack] = []


class ZdfQuality(UpstreamModel):
    hd: bool = False
    mime_codec: str = Field("", alias="mimeCodec")
    quality: str = ""
    audio: ZdfAudio = Field(default_factory=ZdfAudio)


class ZdfFormat(UpstreamModel):
    is_adaptive: bool = Field(False, alias="isAdaptive")
    mime_type: str = Field("", alias="mimeType")
    type: str = ""
    qualities: List[ZdfQuality] = []


class ZdfStream(UpstreamModel):
    formats: List[ZdfFormat] = Field(default_factory=list, alias="formitaeten")


class ZdfVideoStreams(UpstreamModel):
    """All streams available for a video."""

    priority_list: List[ZdfStream] = Field(default_factory=list, alias="priorityList")

    def quality_urls(self) -> dict[str, str]:
        """Map quality tiers to URLs of progressive MP4 streams with German main audio.

        When several tracks share a tier the last one wins.
        """
        quality_to_url: dict[str, str] = {}
        for stream in self.priority_list:
            for format_ in stream.formats:
                if format_.is_adaptive or format_.mime_type != PROGRESSIVE_MIME_TYPE:
                    continue
                for quality in format_.qualities:
                    for track in quality.audio.tracks:
                        if track.language == AUDIO_LANGUAGE and track.track_class == AUDIO_CLASS:
                            quality_to_url[quality.quality] = track.uri
        return quality_to_url


class ZdfApi:
    """Access to the ZDF API.

    Create instances via `ZdfApi.create`, which fetches the bearer token
    every later request has to carry.
    """

    def __init__(self, http, max_episodes: int, bearer_token: str = ""):
        self._http = http
        self.max_episodes = max_episodes
        self.bearer_token = bearer_token

    @classmethod
    async def create(cls, http, max_episodes: int) -> "ZdfApi":
        """Create the API and bootstrap its bearer token.

        Raises:
            UpstreamUnavailableError: If the token page cannot be loaded.
            UpstreamMalformedError: If the page contains no token.
        """
        api = cls(http, max_episodes)
        await api._init_bearer_token()
        return api

    async def _init_bearer_token(self) -> None:
        page = await self._http.get(BEARER_TOKEN_SOURCE_URL)
        match = _BEARER_TOKEN.search(page.decode("utf-8", errors="replace"))
        if not match:
            raise UpstreamMalformedError("Could not find bearer token on ZDF main page")
        self.bearer_token = match.group(1)
        logger.debug(f"Bootstrapped ZDF bearer token from {BEARER_TOKEN_SOURCE_URL}")

    def _headers(self) -> dict[str, str]:
        if not self.bearer_token:
            return {}
        return {"Api-Auth": f"Bearer {self.bearer_token}"}

    async def _get(self, url: str) -> bytes:
        return await self._http.get(url, headers=self._headers())

    async def get_show(self, show_path: str) -> ZdfShow:
        """Load a show by its path, e.g. 'comedy/zdf-magazin-royale'."""
        url = SHOW_API_PREFIX + show_path
        return parse_response(ZdfShow, await self._get(url), url)

    async def get_show_videos(self, show: ZdfShow) -> ZdfSearchResult:
        """Load at most max_episodes videos of a show."""
        url = show.search_url(self.max_episodes)
        return parse_response(ZdfSearchResult, await self._get(url), url)

    async def get_streams(self, video: ZdfVideoDescription) -> ZdfVideoStreams:
        """Load the streams available for a video."""
        url = video.streams_url()
        return parse_response(ZdfVideoStreams, await self._get(url), url)

    async def probe(self, url: str) -> bool:
        """Check whether a stream URL exists without downloading it."""
        return await self._http.probe(url)
