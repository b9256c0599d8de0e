"""Unit tests for the delivery pipeline."""

import httpx
import pytest

from conftest import REDDIT_URL, REDDIT_VIDEO, TWITTER_URL, YOUTUBE_URL, FakeMediaSource, reddit_payload
from vidrelay.errors import (
    CapabilityNotImplementedError,
    FormatNoLongerAvailableError,
    InvalidDownloadTypeError,
    TranscodeFailureError,
    UnsupportedHostError,
)
from vidrelay.models.domain import DownloadRequest, Platform
from vidrelay.services.resolvers import RedditResolver
from vidrelay.utils.file_utils import safe_filename


async def collect(delivery):
    return b"".join([chunk async for chunk in delivery.body])


class TestSafeFilename:

    def test_non_word_runs_replaced(self):
        assert safe_filename("Never Gonna Give You Up!", "mp4") == "Never_Gonna_Give_You_Up_.mp4"

    def test_quotes_and_unicode_removed(self):
        assert safe_filename('a "b" – c', "mp3") == "a_b_c.mp3"

    def test_empty_title(self):
        assert safe_filename("", "mp4") == "video.mp4"


class TestPassthrough:

    @pytest.mark.asyncio
    async def test_mp4_streams_without_transcoding(self, delivery_service, fake_transcoder):
        delivery = await delivery_service.deliver(DownloadRequest(YOUTUBE_URL, "mp4", "18"))

        assert delivery.media_type == "video/mp4"
        assert delivery.filename == "Never_Gonna_Give_You_Up_.mp4"
        assert await collect(delivery) == b"chunk-1chunk-2"
        assert fake_transcoder.calls == []
        assert FakeMediaSource.instances[0].source.url.endswith("itag=18")
        assert FakeMediaSource.instances[0].closed is True

    @pytest.mark.asyncio
    async def test_re_resolves_on_every_download(self, delivery_service, youtube_extractor):
        await collect(await delivery_service.deliver(DownloadRequest(YOUTUBE_URL, "mp4")))
        await collect(await delivery_service.deliver(DownloadRequest(YOUTUBE_URL, "mp4")))
        assert len(youtube_extractor.calls) == 2


class TestTranscoding:

    @pytest.mark.asyncio
    async def test_mp3_goes_through_transcoder(self, delivery_service, fake_transcoder):
        delivery = await delivery_service.deliver(DownloadRequest(YOUTUBE_URL, "mp3", "140"))

        assert delivery.media_type == "audio/mpeg"
        assert delivery.filename.endswith(".mp3")
        assert await collect(delivery) == b"mp3:chunk-1mp3:chunk-2"
        assert fake_transcoder.calls == ["mp3"]

    @pytest.mark.asyncio
    async def test_transcoder_startup_failure_releases_source(self, delivery_service):
        class BrokenTranscoder:
            async def transcode(self, source, target_codec="mp3"):
                raise TranscodeFailureError()
                yield b""

        delivery_service.transcoder = BrokenTranscoder()
        with pytest.raises(TranscodeFailureError):
            await delivery_service.deliver(DownloadRequest(YOUTUBE_URL, "mp3"))
        assert FakeMediaSource.instances[0].closed is True


class TestFailures:

    @pytest.mark.asyncio
    async def test_invalid_type(self, delivery_service):
        with pytest.raises(InvalidDownloadTypeError):
            await delivery_service.deliver(DownloadRequest(YOUTUBE_URL, "avi"))

    @pytest.mark.asyncio
    async def test_validation_happens_before_resolution(self, delivery_service, youtube_extractor):
        with pytest.raises(UnsupportedHostError):
            await delivery_service.deliver(DownloadRequest("https://vimeo.com/1", "mp4"))
        assert youtube_extractor.calls == []

    @pytest.mark.asyncio
    async def test_unsupported_host_reported_before_unknown_type(self, delivery_service):
        with pytest.raises(UnsupportedHostError):
            await delivery_service.deliver(DownloadRequest("https://vimeo.com/1", "avi"))

    @pytest.mark.asyncio
    async def test_reddit_mp3_refused_before_scraping(self, delivery_service, inspection_service):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json=reddit_payload(REDDIT_VIDEO))

        inspection_service.resolvers[Platform.REDDIT] = RedditResolver(transport=httpx.MockTransport(handler))
        with pytest.raises(CapabilityNotImplementedError) as exc_info:
            await delivery_service.deliver(DownloadRequest(REDDIT_URL, "mp3"))
        assert "MP3" in exc_info.value.message
        assert seen == []
        assert FakeMediaSource.instances == []

    @pytest.mark.asyncio
    async def test_twitter_refused_without_streaming(self, delivery_service):
        with pytest.raises(CapabilityNotImplementedError):
            await delivery_service.deliver(DownloadRequest(TWITTER_URL, "mp4"))
        assert FakeMediaSource.instances == []

    @pytest.mark.asyncio
    async def test_stale_format(self, delivery_service):
        with pytest.raises(FormatNoLongerAvailableError):
            await delivery_service.deliver(DownloadRequest(YOUTUBE_URL, "mp4", "9999"))

    @pytest.mark.asyncio
    async def test_mid_stream_failure_propagates_and_releases(self, delivery_service):
        def failing_source(source):
            return FakeMediaSource(source, chunks=(b"a", b"b", b"c"), fail_after=1)

        delivery_service.source_factory = failing_source
        delivery = await delivery_service.deliver(DownloadRequest(YOUTUBE_URL, "mp4"))

        received = []
        with pytest.raises(ConnectionError):
            async for chunk in delivery.body:
                received.append(chunk)
        assert received == [b"a"]
        assert FakeMediaSource.instances[0].closed is True

    @pytest.mark.asyncio
    async def test_consumer_stopping_early_releases_source(self, delivery_service):
        delivery = await delivery_service.deliver(DownloadRequest(YOUTUBE_URL, "mp4"))
        body = delivery.body
        assert await body.__anext__() == b"chunk-1"
        await body.aclose()
        assert FakeMediaSource.instances[0].closed is True


class TestRedirect:

    @pytest.mark.asyncio
    async def test_reddit_redirects_to_fallback(self, delivery_service, inspection_service):
        transport = httpx.MockTransport(lambda request: httpx.Response(200, json=reddit_payload(REDDIT_VIDEO)))
        inspection_service.resolvers[Platform.REDDIT] = RedditResolver(transport=transport, proxy_media=False)

        delivery = await delivery_service.deliver(DownloadRequest(REDDIT_URL, "mp4"))
        assert delivery.is_redirect
        assert delivery.redirect_url == "https://v.redd.it/xyz/DASH_720.mp4"
        assert FakeMediaSource.instances == []

    @pytest.mark.asyncio
    async def test_reddit_proxied_when_hotlinking_blocked(self, delivery_service, inspection_service):
        transport = httpx.MockTransport(lambda request: httpx.Response(200, json=reddit_payload(REDDIT_VIDEO)))
        inspection_service.resolvers[Platform.REDDIT] = RedditResolver(transport=transport, proxy_media=True)

        delivery = await delivery_service.deliver(DownloadRequest(REDDIT_URL, "mp4"))
        assert not delivery.is_redirect
        assert delivery.filename == "Cat_does_a_flip.mp4"
        assert await collect(delivery) == b"chunk-1chunk-2"
