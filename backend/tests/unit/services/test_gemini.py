"""Unit tests for the Gemini recommendation and cover-art client."""

import json

import httpx
import pytest

from vibesync.core.exceptions import ConfigurationError, GenerationError
from vibesync.services.gemini import GeminiClient


class Recorder:
    """Collects requests and answers with a canned response."""

    def __init__(self, status_code=200, body=None):
        self.status_code = status_code
        self.body = body if body is not None else {}
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, json=self.body)

    @property
    def payload(self):
        return json.loads(self.requests[0].content)


def make_client(recorder, api_key="test_api_key"):
    return GeminiClient(
        api_key=api_key,
        text_model="test-text-model",
        image_model="test-image-model",
        base_url="https://gemini.test/v1beta",
        transport=httpx.MockTransport(recorder),
    )


def text_response(text):
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


class TestGenerateRecommendations:
    """Tests for playlist curation."""

    @pytest.mark.asyncio
    async def test_missing_api_key(self, preferences):
        recorder = Recorder()

        with pytest.raises(ConfigurationError, match="Missing Gemini API Key"):
            await make_client(recorder, api_key="").generate_recommendations(preferences)

        assert recorder.requests == []

    @pytest.mark.asyncio
    async def test_request_includes_all_preferences(
        self, preferences, gemini_text_response
    ):
        recorder = Recorder(body=gemini_text_response)

        await make_client(recorder).generate_recommendations(preferences)

        request = recorder.requests[0]
        assert str(request.url) == (
            "https://gemini.test/v1beta/models/test-text-model:generateContent"
        )
        assert request.headers["x-goog-api-key"] == "test_api_key"

        instruction = recorder.payload["systemInstruction"]["parts"][0]["text"]
        for fragment in (
            "Mood: 12/100",
            "Energy: 34/100",
            "Popularity: 56/100",
            "Danceability: 78/100",
            "Acousticness: 90/100",
            "Instrumentalness: 89/100",
            "Genre: Jazz Fusion",
            "Context: rainy night drive, neon reflections",
            "exactly 25 tracks",
        ):
            assert fragment in instruction

    @pytest.mark.asyncio
    async def test_request_declares_schema(self, preferences, gemini_text_response):
        recorder = Recorder(body=gemini_text_response)

        await make_client(recorder).generate_recommendations(preferences)

        config = recorder.payload["generationConfig"]
        assert config["responseMimeType"] == "application/json"
        schema = config["responseSchema"]
        assert schema["required"] == ["playlistName", "playlistDescription", "tracks"]
        track_schema = schema["properties"]["tracks"]["items"]
        assert set(track_schema["required"]) == {
            "id",
            "title",
            "artist",
            "reason",
            "genre",
            "popularityScore",
        }
        assert "album" in track_schema["properties"]

    @pytest.mark.asyncio
    async def test_parses_result(self, preferences, gemini_text_response):
        recorder = Recorder(body=gemini_text_response)

        result = await make_client(recorder).generate_recommendations(preferences)

        assert result.playlist_name == "Neon Rainfall"
        assert len(result.tracks) == 4
        assert result.tracks[0].album == "OutRun"
        assert result.tracks[1].album is None
        assert result.cover_image == ""
        assert result.timestamp > 0

    @pytest.mark.asyncio
    async def test_popularity_clamped(self, preferences, playlist_payload):
        playlist_payload["tracks"][0]["popularityScore"] = 140
        playlist_payload["tracks"][1]["popularityScore"] = -5
        recorder = Recorder(body=text_response(json.dumps(playlist_payload)))

        result = await make_client(recorder).generate_recommendations(preferences)

        assert result.tracks[0].popularity_score == 100
        assert result.tracks[1].popularity_score == 0
        assert result.tracks[2].popularity_score == 3

    @pytest.mark.asyncio
    async def test_empty_response(self, preferences):
        recorder = Recorder(body={"candidates": []})

        with pytest.raises(GenerationError, match="empty response"):
            await make_client(recorder).generate_recommendations(preferences)

    @pytest.mark.asyncio
    async def test_malformed_json(self, preferences):
        recorder = Recorder(body=text_response('{"playlistName": "Half'))

        with pytest.raises(GenerationError, match="malformed"):
            await make_client(recorder).generate_recommendations(preferences)

    @pytest.mark.asyncio
    async def test_missing_required_track_field(self, preferences, playlist_payload):
        del playlist_payload["tracks"][0]["reason"]
        recorder = Recorder(body=text_response(json.dumps(playlist_payload)))

        with pytest.raises(GenerationError):
            await make_client(recorder).generate_recommendations(preferences)

    @pytest.mark.asyncio
    async def test_http_error(self, preferences):
        recorder = Recorder(status_code=403, body={"error": {"message": "denied"}})

        with pytest.raises(GenerationError, match="Track generation failed"):
            await make_client(recorder).generate_recommendations(preferences)

    @pytest.mark.asyncio
    async def test_non_json_body(self, preferences):
        def handler(request):
            return httpx.Response(200, text="<html>proxy error</html>")

        with pytest.raises(GenerationError, match="Track generation failed"):
            await make_client(handler).generate_recommendations(preferences)

    @pytest.mark.asyncio
    async def test_body_not_an_object(self, preferences):
        recorder = Recorder(body=["unexpected"])

        with pytest.raises(GenerationError, match="malformed"):
            await make_client(recorder).generate_recommendations(preferences)

    @pytest.mark.asyncio
    async def test_null_text_part(self, preferences):
        recorder = Recorder(body={"candidates": [{"content": {"parts": [{"text": None}]}}]})

        with pytest.raises(GenerationError, match="empty response"):
            await make_client(recorder).generate_recommendations(preferences)


class TestGenerateCoverImage:
    """Tests for best-effort cover art."""

    @pytest.mark.asyncio
    async def test_returns_inline_image(self):
        recorder = Recorder(
            body={
                "candidates": [
                    {
                        "content": {
                            "parts": [
                                {"text": "Here is your cover."},
                                {"inlineData": {"mimeType": "image/jpeg", "data": "QUJDRA=="}},
                            ]
                        }
                    }
                ]
            }
        )

        image = await make_client(recorder).generate_cover_image(
            "Neon Rainfall", "Slow-burning fusion"
        )

        assert image == "QUJDRA=="
        request = recorder.requests[0]
        assert request.url.path.endswith("/models/test-image-model:generateContent")
        prompt = recorder.payload["contents"][0]["parts"][0]["text"]
        assert '"Neon Rainfall"' in prompt
        assert "Slow-burning fusion" in prompt
        assert "no text" in prompt
        assert recorder.payload["generationConfig"]["imageConfig"] == {"aspectRatio": "1:1"}

    @pytest.mark.asyncio
    async def test_quota_error_returns_empty(self):
        recorder = Recorder(status_code=429, body={"error": {"message": "quota"}})

        assert await make_client(recorder).generate_cover_image("A", "B") == ""

    @pytest.mark.asyncio
    async def test_no_candidates_returns_empty(self):
        recorder = Recorder(body={"candidates": []})

        assert await make_client(recorder).generate_cover_image("A", "B") == ""

    @pytest.mark.asyncio
    async def test_text_only_returns_empty(self):
        recorder = Recorder(body=text_response("I cannot draw that."))

        assert await make_client(recorder).generate_cover_image("A", "B") == ""

    @pytest.mark.asyncio
    async def test_malformed_body_returns_empty(self):
        recorder = Recorder(body={"candidates": ["not a candidate"]})

        assert await make_client(recorder).generate_cover_image("A", "B") == ""

    @pytest.mark.asyncio
    async def test_missing_key_returns_empty_without_request(self):
        recorder = Recorder()

        assert await make_client(recorder, api_key="").generate_cover_image("A", "B") == ""
        assert recorder.requests == []
