"""影片生成工作室 API 路由。"""

from __future__ import annotations

import logging
from typing import Any, Dict

from flask import Blueprint, current_app, jsonify, request

from ..common.utils.validators import MAX_PROMPT_LENGTH, normalize_generation_request

logger = logging.getLogger(__name__)

api_bp = Blueprint("video_studio_api", __name__, url_prefix="/api")

DOWNLOAD_URL_TEMPLATE = "https://placehold.co/1920x1080.mp4?text=Video+Download+{video_id}"


def _components() -> Dict[str, Any]:
    return current_app.extensions["video_studio_components"]


def _internal_error(message: str, exc: Exception):
    logger.exception(message)
    return jsonify({"error": message, "details": str(exc) or "Unknown error"}), 500


# --- Generation ---

@api_bp.post("/generate-video")
def generate_video():
    """開始影片生成"""
    try:
        payload = request.get_json(silent=True) or {}
        if not isinstance(payload, dict):
            return jsonify({"error": "Request body must be a JSON object"}), 400
        try:
            video_request = normalize_generation_request(payload)
        except ValueError as exc:
            return jsonify({"error": str(exc)}), 400

        system_prompt = payload.get("systemPrompt")
        if not isinstance(system_prompt, str) or not system_prompt.strip():
            system_prompt = None

        client = _components()["generation_client"]
        result = client.generate_video(video_request, system_prompt=system_prompt)
        return jsonify(result.to_dict())
    except Exception as exc:
        return _internal_error("Video generation failed", exc)


@api_bp.get("/generate-video")
def describe_generate_video():
    return jsonify(
        {
            "message": "Video generation API is active",
            "endpoint": "/api/generate-video",
            "method": "POST",
            "description": "Generate videos using AI",
            "requiredFields": ["prompt"],
            "optionalFields": ["duration", "aspectRatio", "quality", "style", "systemPrompt"],
            "maxPromptLength": MAX_PROMPT_LENGTH,
        }
    )


# --- Status ---

@api_bp.get("/video-status")
def video_status():
    """輪詢影片生成狀態"""
    try:
        video_id = request.args.get("id")
        if not video_id:
            return jsonify({"error": "Video ID is required"}), 400

        client = _components()["generation_client"]
        result = client.check_video_status(video_id)
        return jsonify(result.to_dict())
    except Exception as exc:
        return _internal_error("Failed to check video status", exc)


@api_bp.post("/video-status")
def describe_video_status():
    return jsonify(
        {
            "message": "Video status API is active",
            "endpoint": "/api/video-status",
            "method": "GET",
            "description": "Check video generation status",
            "requiredParams": ["id"],
            "usage": "/api/video-status?id=VIDEO_ID",
        }
    )


# --- Video management ---

@api_bp.get("/videos")
def manage_videos():
    try:
        action = request.args.get("action")
        video_id = request.args.get("id")

        if action == "download" and video_id:
            return jsonify(
                {
                    "message": "Video download",
                    "videoId": video_id,
                    "downloadUrl": DOWNLOAD_URL_TEMPLATE.format(video_id=video_id),
                    "instructions": "Use the downloadUrl to fetch the video file",
                }
            )

        return jsonify(
            {
                "message": "Video management API is active",
                "endpoints": {
                    "download": "/api/videos?action=download&id=VIDEO_ID",
                    "list": "Use client-side storage for video list management",
                    "delete": "Use client-side storage for video deletion",
                },
                "description": "Manage generated videos",
                "note": "Video metadata is kept in client-side storage; this API only handles downloads.",
            }
        )
    except Exception as exc:
        return _internal_error("Video management operation failed", exc)


@api_bp.delete("/videos")
def delete_video():
    try:
        video_id = request.args.get("id")
        if not video_id:
            return jsonify({"error": "Video ID is required for deletion"}), 400

        return jsonify(
            {
                "message": "Video deletion processed",
                "videoId": video_id,
                "note": "Video metadata should be removed from client-side storage",
            }
        )
    except Exception as exc:
        return _internal_error("Video deletion failed", exc)
