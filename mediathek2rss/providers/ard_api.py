"""Client for the ARD Mediathek page gateway API."""

import hashlib
import logging
import random
import re
import time
from datetime import datetime
from typing import Any, List, Optional

from pydantic import Field, field_validator

from mediathek2rss.core.errors import (
    RemediationFailedError,
    UpstreamMalformedError,
    UpstreamUnavailableError,
)
from mediathek2rss.models.upstream import UpstreamModel, parse_response
from mediathek2rss.services.selection import StreamVariant

logger = logging.getLogger(__name__)

ARD_API_BASE = "https://api.ardmediathek.de/page-gateway"
FUNK_CHANNEL = "funk"
FUNK_DOMAIN_ID = 741
FUNK_DOMAIN_HASH = "CA4SDGOBTRM421IRNO0"
NEXX_API_BASE = f"https://api.nexx.cloud/v3/{FUNK_DOMAIN_ID}"

_FUNK_VIDEO_ID = re.compile(r"video/([0-9]+)\Z")
# Entries look like "3001:1280x720:2-w7FWPztXm9hnZpbjMcKq"
_FILE_DISTRIBUTION = re.compile(r"[0-9]+:([0-9]+)x([0-9]+):([^:,]+)")


class ArdImage(UpstreamModel):
    """Image whose src contains a {width} placeholder."""

    title: str = ""
    src: str = ""
    aspect_ratio: str = Field("", alias="aspectRatio")
    alt: str = ""


class ArdShowInfo(UpstreamModel):
    id: str = ""
    title: str = ""
    long_synopsis: str = Field("", alias="longSynopsis")
    images: dict[str, ArdImage] = {}


class ArdTarget(UpstreamModel):
    href: str = ""


class ArdLinks(UpstreamModel):
    target: ArdTarget = Field(default_factory=ArdTarget)


class ArdTeaser(UpstreamModel):
    """Episode entry of a show listing."""

    id: str = ""
    long_title: str = Field("", alias="longTitle")
    links: ArdLinks = Field(default_factory=ArdLinks)
    show: ArdShowInfo = Field(default_factory=ArdShowInfo)
    images: dict[str, ArdImage] = {}
    broadcasted_on: Optional[datetime] = Field(None, alias="broadcastedOn")
    duration: int = 0


class ArdShow(UpstreamModel):
    teasers: List[ArdTeaser] = []

    def has_valid_teaser(self) -> bool:
        """The first teaser must name its show and offer at least one image."""
        if not self.teasers:
            return False
        show = self.teasers[0].show
        return bool(show.title) and bool(show.images)


class ArdMediaStream(UpstreamModel):
    cdn: str = Field("", alias="_cdn")
    width: int = Field(0, alias="_width")
    height: int = Field(0, alias="_height")
    urls: List[str] = Field(default_factory=list, alias="_stream")

    @field_validator("urls", mode="before")
    @classmethod
    def _single_url_to_list(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [value]
        return value

    def to_variant(self) -> StreamVariant:
        return StreamVariant(width=self.width, height=self.height, urls=self.urls)


class ArdMedia(UpstreamModel):
    media_stream_array: List[ArdMediaStream] = Field(
        default_factory=list, alias="_mediaStreamArray"
    )


class ArdEmbedded(UpstreamModel):
    media_array: List[ArdMedia] = Field(default_factory=list, alias="_mediaArray")


class ArdMediaCollection(UpstreamModel):
    embedded: ArdEmbedded = Field(default_factory=ArdEmbedded)


class ArdWidget(UpstreamModel):
    media_collection: ArdMediaCollection = Field(
        default_factory=ArdMediaCollection, alias="mediaCollection"
    )
    image: ArdImage = Field(default_factory=ArdImage)
    synopsis: str = ""


class ArdAtiCustomVars(UpstreamModel):
    channel: str = ""
    metadata_id: str = Field("", alias="metadataId")


class ArdTracking(UpstreamModel):
    ati_custom_vars: ArdAtiCustomVars = Field(
        default_factory=ArdAtiCustomVars, alias="atiCustomVars"
    )


class ArdVideo(UpstreamModel):
    """Details of a single episode including its media streams."""

    tracking: ArdTracking = Field(default_factory=ArdTracking)
    widgets: List[ArdWidget] = []

    @property
    def main_widget(self) -> ArdWidget:
        if not self.widgets:
            raise UpstreamMalformedError("The video has no widgets")
        return self.widgets[0]

    def stream_variants(self) -> List[StreamVariant]:
        """Streams of the first media entry of the main widget."""
        media_array = self.main_widget.media_collection.embedded.media_array
        if not media_array:
            raise UpstreamMalformedError("The video has no media")
        return [stream.to_variant() for stream in media_array[0].media_stream_array]

    def non_adaptive_stream_count(self) -> int:
        return sum(
            1
            for widget in self.widgets
            for media in widget.media_collection.embedded.media_array
            for stream in media.media_stream_array
            if stream.width != 0
        )

    def replace_streams(self, streams: List[ArdMediaStream]) -> None:
        for widget in self.widgets:
            for media in widget.media_collection.embedded.media_array:
                media.media_stream_array = list(streams)


class NexxGeneral(UpstreamModel):
    cid: str = ""


class NexxSessionResult(UpstreamModel):
    general: NexxGeneral = Field(default_factory=NexxGeneral)


class NexxSession(UpstreamModel):
    result: NexxSessionResult = Field(default_factory=NexxSessionResult)


class NexxStreamData(UpstreamModel):
    cdn_type: str = Field("", alias="cdnType")
    cdn_shield_https: str = Field("", alias="cdnShieldHTTPS")
    q_account: str = Field("", alias="qAccount")
    q_prefix: str = Field("", alias="qPrefix")
    q_locator: str = Field("", alias="qLocator")
    azure_file_distribution: str = Field("", alias="azureFileDistribution")


class NexxVideoResult(UpstreamModel):
    stream_data: NexxStreamData = Field(
        default_factory=NexxStreamData, alias="streamdata"
    )


class NexxVideoMetadata(UpstreamModel):
    result: NexxVideoResult = Field(default_factory=NexxVideoResult)

    def media_streams(self) -> List[ArdMediaStream]:
        """Build progressive MP4 streams from the file distribution entries."""
        data = self.result.stream_data
        streams = []
        for width, height, selector in _FILE_DISTRIBUTION.findall(
            data.azure_file_distribution
        ):
            url = (
                f"https://{data.cdn_shield_https}{data.q_account}/files/"
                f"{data.q_prefix}/{data.q_locator}/{selector}.mp4"
            )
            streams.append(
                ArdMediaStream(
                    cdn=data.cdn_type, width=int(width), height=int(height), urls=[url]
                )
            )
        return streams


class ArdApi:
    """Access to the ARD Mediathek API.

    max_episodes limits how many episodes of a show are requested.
    """

    def __init__(self, http, max_episodes: int):
        self._http = http
        self.max_episodes = max_episodes

    def show_url(self, show_id: str) -> str:
        return (
            f"{ARD_API_BASE}/widgets/ard/asset/{show_id}"
            f"?pageNumber=0&pageSize={self.max_episodes}"
        )

    async def get_show(self, show_id: str) -> ArdShow:
        """Load a show and its most recent episodes.

        Raises:
            UpstreamUnavailableError: If the request fails.
            UpstreamMalformedError: If the response is unusable.
        """
        url = self.show_url(show_id)
        show = parse_response(ArdShow, await self._http.get(url), url)
        if not show.has_valid_teaser():
            raise UpstreamMalformedError(f"The show {show_id} has no valid teasers")
        return show

    async def get_video(self, url: str) -> ArdVideo:
        """Load the details of an episode from its API URL.

        Videos of the funk channel often lack progressive streams. Those are
        looked up at the nexx backend; if that fails the video is returned
        unchanged.
        """
        video = parse_response(ArdVideo, await self._http.get(url), url)

        custom_vars = video.tracking.ati_custom_vars
        if custom_vars.channel != FUNK_CHANNEL:
            return video
        match = _FUNK_VIDEO_ID.search(custom_vars.metadata_id)
        if not match:
            return video

        try:
            await self._replace_streams_from_funk(match.group(1), video)
        except RemediationFailedError as e:
            logger.warning(f"Could not replace media streams by funk videos: {e}")
        return video

    async def _replace_streams_from_funk(self, funk_video_id: str, video: ArdVideo) -> None:
        if video.non_adaptive_stream_count() != 0:
            return

        try:
            cid = await self._init_nexx_session()
            metadata = await self._get_nexx_video_metadata(funk_video_id, cid)
        except (UpstreamUnavailableError, UpstreamMalformedError) as e:
            raise RemediationFailedError(
                f"nexx lookup of funk video {funk_video_id} failed: {e}", e
            )

        streams = metadata.media_streams()
        if not streams:
            logger.debug(f"No file distribution for funk video {funk_video_id}")
            return
        video.replace_streams(streams)

    async def _init_nexx_session(self) -> str:
        device_id = f"{int(time.time())}:{random.randint(10000, 99999)}"
        url = f"{NEXX_API_BASE}/session/init"
        body = await self._http.post(url, {"nxp_devh": device_id})
        session = parse_response(NexxSession, body, url)
        if not session.result.general.cid:
            raise UpstreamMalformedError("No cid from initializing nexx session")
        return session.result.general.cid

    async def _get_nexx_video_metadata(self, video_id: str, cid: str) -> NexxVideoMetadata:
        data = {
            "addStatusDetails": "1",
            "addStreamDetails": "1",
            "addFeatures": "1",
            "addCaptions": "1",
            "addBumpers": "1",
            "captionFormat": "data",
        }
        request_token = hashlib.md5(
            f"byid{FUNK_DOMAIN_ID}{FUNK_DOMAIN_HASH}".encode("utf-8")
        ).hexdigest()
        headers = {"x-request-cid": cid, "x-request-token": request_token}
        url = f"{NEXX_API_BASE}/videos/byid/{video_id}"
        body = await self._http.post(url, data, headers=headers)
        return parse_response(NexxVideoMetadata, body, url)
