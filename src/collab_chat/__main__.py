"""Entrypoint: python -m collab_chat"""
from __future__ import annotations

import uvicorn

from collab_chat.config import settings


def main() -> None:
    uvicorn.run(
        "collab_chat.app:create_app",
        factory=True,
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
