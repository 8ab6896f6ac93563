"""影片生成工作室 Flask 應用。"""

from __future__ import annotations

import logging
from typing import Optional

from flask import Flask

from .common.services.video_api import VideoGenerationClient
from .config import VideoStudioConfig
from .routes import api
from .services import LocalStorage, StudioApiClient, VideoGenerationService, VideoStorage


def create_app(config: Optional[VideoStudioConfig] = None) -> Flask:
    config = config or VideoStudioConfig.load()
    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = Flask(__name__)
    app.config["SECRET_KEY"] = config.secret_key
    app.config["VIDEO_STUDIO_CONFIG"] = config

    components = {
        "generation_client": VideoGenerationClient(
            endpoint=config.api_endpoint,
            model=config.api_model,
            customer_id=config.customer_id,
            api_token=config.api_token,
            system_prompt=config.system_prompt,
            timeout=config.request_timeout,
        ),
    }
    app.extensions["video_studio_components"] = components

    app.register_blueprint(api.api_bp)

    return app


def create_generation_service(config: Optional[VideoStudioConfig] = None) -> VideoGenerationService:
    """建立用戶端流程：本機儲存 + 呼叫本服務 API 的 client。"""
    config = config or VideoStudioConfig.load()
    storage = VideoStorage(LocalStorage(config.storage_file, origin=config.origin))
    api_client = StudioApiClient(config.base_url, timeout=config.request_timeout)
    return VideoGenerationService(
        storage,
        api_client,
        poll_interval=config.poll_interval,
        download_dir=config.download_dir,
    )


def main() -> None:
    app = create_app()
    app.run(host="0.0.0.0", port=6055, debug=False)


if __name__ == "__main__":
    main()
