from __future__ import annotations

import logging

import uvicorn

from aurora_planner.api.app import create_app
from aurora_planner.config import load_settings


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - [PID:%(process)d] - %(message)s",
    )
    settings = load_settings(require_bot=False)
    uvicorn.run(create_app(settings=settings), host=settings.api_host, port=settings.api_port)


if __name__ == "__main__":
    main()
