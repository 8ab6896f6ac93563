"""Tests for the HTTP API routes."""

from unittest.mock import MagicMock, patch

from video_studio.common.models.video import VideoGenerationResponse

POST = "video_studio.common.services.video_api.requests.post"


def _ok_response():
    response = MagicMock(status_code=200, ok=True, reason="OK")
    response.json.return_value = {"choices": []}
    return response


def _components(app):
    return app.extensions["video_studio_components"]


class TestGenerateVideo:
    def test_accepted_request(self, client):
        with patch(POST, return_value=_ok_response()):
            resp = client.post("/api/generate-video", json={"prompt": "Time-lapse of blooming flowers"})

        assert resp.status_code == 200
        data = resp.get_json()
        assert data["status"] == "processing"
        assert data["progress"] == 0
        assert data["estimatedTimeRemaining"] == 300
        assert data["id"].startswith("video_")
        assert "createdAt" in data

    def test_upstream_failure_is_failed_record(self, client):
        """Upstream errors come back as a 200 with a failed record."""
        with patch(POST, return_value=MagicMock(status_code=500, ok=False, reason="Internal Server Error")):
            resp = client.post("/api/generate-video", json={"prompt": "waves"})

        assert resp.status_code == 200
        assert resp.get_json()["status"] == "failed"
        assert "500" in resp.get_json()["error"]

    def test_missing_prompt(self, client):
        with patch(POST) as post:
            resp = client.post("/api/generate-video", json={"duration": 5})

        assert resp.status_code == 400
        assert resp.get_json() == {"error": "Video prompt is required"}
        post.assert_not_called()

    def test_oversized_prompt_rejected_before_client(self, client, app):
        client_mock = MagicMock()
        _components(app)["generation_client"] = client_mock

        resp = client.post("/api/generate-video", json={"prompt": "x" * 2001})

        assert resp.status_code == 400
        assert "2000" in resp.get_json()["error"]
        client_mock.generate_video.assert_not_called()

    def test_invalid_aspect_ratio(self, client):
        resp = client.post("/api/generate-video", json={"prompt": "x", "aspectRatio": "cinema"})

        assert resp.status_code == 400

    def test_infinite_duration_is_400(self, client, app):
        client_mock = MagicMock()
        _components(app)["generation_client"] = client_mock

        resp = client.post(
            "/api/generate-video",
            data='{"prompt": "x", "duration": Infinity}',
            content_type="application/json",
        )

        assert resp.status_code == 400
        assert "duration" in resp.get_json()["error"]
        client_mock.generate_video.assert_not_called()

    def test_request_normalised_before_generation(self, client, app):
        client_mock = MagicMock()
        client_mock.generate_video.return_value = VideoGenerationResponse(
            id="video_1", status="processing", created_at="2024-05-01T10:00:00.000Z"
        )
        _components(app)["generation_client"] = client_mock

        client.post(
            "/api/generate-video",
            json={"prompt": "  city  ", "duration": 99, "quality": "premium", "systemPrompt": "Be terse"},
        )

        request_obj = client_mock.generate_video.call_args.args[0]
        assert request_obj.prompt == "city"
        assert request_obj.duration == 30
        assert request_obj.quality == "premium"
        assert client_mock.generate_video.call_args.kwargs["system_prompt"] == "Be terse"

    def test_internal_error_is_500(self, client, app):
        client_mock = MagicMock()
        client_mock.generate_video.side_effect = RuntimeError("boom")
        _components(app)["generation_client"] = client_mock

        resp = client.post("/api/generate-video", json={"prompt": "x"})

        assert resp.status_code == 500
        assert resp.get_json() == {"error": "Video generation failed", "details": "boom"}

    def test_descriptor(self, client):
        resp = client.get("/api/generate-video")

        assert resp.status_code == 200
        assert resp.get_json()["requiredFields"] == ["prompt"]


class TestVideoStatus:
    def test_requires_id(self, client):
        resp = client.get("/api/video-status")

        assert resp.status_code == 400
        assert resp.get_json() == {"error": "Video ID is required"}

    def test_returns_record(self, client, app):
        client_mock = MagicMock()
        client_mock.check_video_status.return_value = VideoGenerationResponse(
            id="video_9", status="processing", progress=42, created_at="2024-05-01T10:00:00.000Z"
        )
        _components(app)["generation_client"] = client_mock

        resp = client.get("/api/video-status?id=video_9")

        assert resp.status_code == 200
        assert resp.get_json()["progress"] == 42
        client_mock.check_video_status.assert_called_once_with("video_9")

    def test_simulated_status_shape(self, client):
        resp = client.get("/api/video-status?id=video_1")

        assert resp.status_code == 200
        assert resp.get_json()["status"] in ("processing", "completed")

    def test_internal_error_is_500(self, client, app):
        client_mock = MagicMock()
        client_mock.check_video_status.side_effect = RuntimeError("bad")
        _components(app)["generation_client"] = client_mock

        resp = client.get("/api/video-status?id=v")

        assert resp.status_code == 500
        assert resp.get_json()["details"] == "bad"

    def test_post_descriptor(self, client):
        assert client.post("/api/video-status").get_json()["requiredParams"] == ["id"]


class TestVideos:
    def test_download_url(self, client):
        resp = client.get("/api/videos?action=download&id=video_7")

        assert resp.status_code == 200
        assert resp.get_json()["downloadUrl"] == "https://placehold.co/1920x1080.mp4?text=Video+Download+video_7"

    def test_descriptor_without_action(self, client):
        resp = client.get("/api/videos")

        assert resp.status_code == 200
        assert "endpoints" in resp.get_json()

    def test_download_without_id_returns_descriptor(self, client):
        assert "endpoints" in client.get("/api/videos?action=download").get_json()

    def test_delete_acknowledged(self, client):
        resp = client.delete("/api/videos?id=video_7")

        assert resp.status_code == 200
        assert resp.get_json()["videoId"] == "video_7"

    def test_delete_requires_id(self, client):
        assert client.delete("/api/videos").status_code == 400
