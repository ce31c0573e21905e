import unittest

import httpx

from favtube.errors import NotFoundError, ResolutionError, ValidationError
from favtube.services import YouTubeResolver


class YouTubeResolverTestCase(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self.requests = []

    def _resolver(self, handler, api_key=None) -> YouTubeResolver:
        def recording(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        return YouTubeResolver(api_key=api_key, transport=httpx.MockTransport(recording))

    async def test_oembed_without_api_key(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            self.assertEqual("/oembed", request.url.path)
            self.assertIn("dQw4w9WgXcQ", request.url.params["url"])
            return httpx.Response(200, json={"title": "Never Gonna", "thumbnail_url": "https://t/x.jpg"})

        video = await self._resolver(handler).resolve("https://youtu.be/dQw4w9WgXcQ")

        self.assertEqual("dQw4w9WgXcQ", video.id)
        self.assertEqual("Never Gonna", video.title)
        self.assertEqual("https://t/x.jpg", video.thumbnail_url)
        self.assertIsNone(video.duration)
        self.assertEqual(0, video.rating)

    async def test_oembed_not_found(self) -> None:
        resolver = self._resolver(lambda request: httpx.Response(404))
        with self.assertRaises(NotFoundError):
            await resolver.resolve("dQw4w9WgXcQ")

    async def test_search_needs_api_key(self) -> None:
        resolver = self._resolver(lambda request: httpx.Response(500))
        with self.assertRaises(ValidationError):
            await resolver.resolve("lofi beats to study")
        self.assertEqual([], self.requests)

    async def test_data_api_details(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            self.assertEqual("/youtube/v3/videos", request.url.path)
            self.assertEqual("secret", request.url.params["key"])
            return httpx.Response(
                200,
                json={
                    "items": [
                        {
                            "snippet": {
                                "title": "Song A",
                                "thumbnails": {"medium": {"url": "https://t/m.jpg"}},
                            },
                            "contentDetails": {"duration": "PT3M45S"},
                            "statistics": {"viewCount": "1234"},
                        }
                    ]
                },
            )

        video = await self._resolver(handler, api_key="secret").resolve(
            "https://www.youtube.com/watch?v=dQw4w9WgXcQ"
        )

        self.assertEqual("Song A", video.title)
        self.assertEqual("https://t/m.jpg", video.thumbnail_url)
        self.assertEqual("3:45", video.duration)
        self.assertEqual(1234, video.view_count)

    async def test_search_then_details(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path.endswith("/search"):
                self.assertEqual("lofi beats", request.url.params["q"])
                return httpx.Response(200, json={"items": [{"id": {"videoId": "jfKfPfyJRdk"}}]})
            self.assertEqual("jfKfPfyJRdk", request.url.params["id"])
            return httpx.Response(200, json={"items": [{"snippet": {"title": "Lofi"}}]})

        video = await self._resolver(handler, api_key="secret").resolve("lofi beats")

        self.assertEqual("jfKfPfyJRdk", video.id)
        self.assertEqual("Lofi", video.title)
        self.assertEqual(2, len(self.requests))

    async def test_search_without_results(self) -> None:
        resolver = self._resolver(lambda request: httpx.Response(200, json={"items": []}), api_key="k")
        with self.assertRaises(NotFoundError):
            await resolver.resolve("nothing matches this")

    async def test_upstream_failure(self) -> None:
        resolver = self._resolver(lambda request: httpx.Response(503), api_key="k")
        with self.assertRaises(ResolutionError):
            await resolver.resolve("dQw4w9WgXcQ")

        def boom(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("offline", request=request)

        with self.assertRaises(ResolutionError):
            await self._resolver(boom).resolve("dQw4w9WgXcQ")

    async def test_malformed_url(self) -> None:
        resolver = self._resolver(lambda request: httpx.Response(200, json={}))
        with self.assertRaises(ValidationError):
            await resolver.resolve("https://vimeo.com/123")


if __name__ == "__main__":
    unittest.main()
