from datetime import datetime, timezone
from pathlib import Path

import pytest

from mediathek2rss.core.config import Settings
from mediathek2rss.core.errors import UpstreamUnavailableError

TESTDATA = Path(__file__).parent / "testdata"

ARD_SHOW_ID = "Y3JpZDovL2Rhc2Vyc3RlLmRlL3Rlc3Q"
ARD_SHOW_URL = (
    "https://api.ardmediathek.de/page-gateway/widgets/ard/asset/"
    f"{ARD_SHOW_ID}?pageNumber=0&pageSize=50"
)
ARD_ITEM_URL = (
    "https://api.ardmediathek.de/page-gateway/pages/ard/item/{}"
    "?devicetype=pc&embedded=true"
)
NEXX_SESSION_URL = "https://api.nexx.cloud/v3/741/session/init"
NEXX_VIDEO_URL = "https://api.nexx.cloud/v3/741/videos/byid/1234567"

ZDF_SHOW_PATH = "comedy/test-show"
ZDF_TOKEN = "5bb200097db507149612d7d983131d06c79706d5"
ZDF_STREAM_PREFIX = "https://rodlzdf.example/zdf/21/01/210101_sendung_tst/1/210101_sendung_tst_"
ZDF_BUILD_TIME = datetime(2021, 1, 20, 12, 0, tzinfo=timezone.utc)


class FixtureHttpClient:
    """Stands in for HttpClient, answering from files in tests/testdata."""

    def __init__(self, responses: dict, reachable=()):
        self.responses = dict(responses)
        self.reachable = set(reachable)
        self.requests = []

    def _respond(self, url: str) -> bytes:
        if url not in self.responses:
            raise UpstreamUnavailableError(f"Request to {url} failed: 404 Not Found")
        response = self.responses[url]
        if isinstance(response, bytes):
            return response
        return (TESTDATA / response).read_bytes()

    async def get(self, url, headers=None):
        self.requests.append(("GET", url, dict(headers or {}), None))
        return self._respond(url)

    async def post(self, url, data, headers=None):
        self.requests.append(("POST", url, dict(headers or {}), dict(data)))
        return self._respond(url)

    async def probe(self, url, headers=None):
        self.requests.append(("HEAD", url, dict(headers or {}), None))
        return url in self.reachable

    async def aclose(self):
        pass

    def urls(self, method=None):
        return [url for m, url, _, _ in self.requests if method in (None, m)]


def read_testdata(name: str) -> str:
    return (TESTDATA / name).read_text(encoding="utf-8")


def ard_responses() -> dict:
    return {
        ARD_SHOW_URL: "ard_show.json",
        ARD_ITEM_URL.format("Y3JpZDovL2VwMQ"): "ard_video_1.json",
        ARD_ITEM_URL.format("Y3JpZDovL2VwMg"): "ard_video_2.json",
        ARD_ITEM_URL.format("Y3JpZDovL2VwMw"): "ard_video_funk.json",
        NEXX_SESSION_URL: "nexx_session.json",
        NEXX_VIDEO_URL: "nexx_video.json",
    }


def zdf_responses() -> dict:
    return {
        "https://www.zdf.de/nachrichten/heute-journal": "zdf_token_page.html",
        f"https://api.zdf.de/content/documents/zdf/{ZDF_SHOW_PATH}": "zdf_show.json",
        "https://api.zdf.de/search/documents?q=%2A&limit=50&contentTypes=episode": "zdf_search.json",
        "https://api.zdf.de/tmd/2/ngplayer_2_4/vod/ptmd/mediathek/210101_sendung_tst": "zdf_streams_1.json",
        "https://api.zdf.de/tmd/2/ngplayer_2_4/vod/ptmd/mediathek/210108_clip_tst": "zdf_streams_2.json",
        "https://api.zdf.de/tmd/2/ngplayer_2_4/vod/ptmd/mediathek/210115_sendung_tst": "zdf_streams_3.json",
    }


ZDF_REACHABLE = {
    ZDF_STREAM_PREFIX + "3328k_p36v13.mp4",
    ZDF_STREAM_PREFIX + "3328k_p36v14.mp4",
}


@pytest.fixture
def settings():
    return Settings(max_episodes=50, cache_duration=300, _env_file=None)


@pytest.fixture
def ard_http():
    return FixtureHttpClient(ard_responses())


@pytest.fixture
def zdf_http():
    return FixtureHttpClient(zdf_responses(), reachable=ZDF_REACHABLE)
