from __future__ import annotations

import uvicorn

from app.core.config import settings


def main() -> None:
    uvicorn.run("app.main:app", host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    main()
