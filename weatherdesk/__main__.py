"""Run the API with uvicorn: python -m weatherdesk."""

import uvicorn

from weatherdesk.core.config import Settings


def main() -> None:
    """Serve weatherdesk.main:app on API_HOST:API_PORT."""
    settings = Settings()
    uvicorn.run(
        "weatherdesk.main:app",
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
