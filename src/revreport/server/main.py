"""Main entry point for the revreport server."""

import uvicorn

from revreport.server.config import get_settings


def run():
    """Run the API server."""
    settings = get_settings()

    uvicorn.run(
        "revreport.server.app:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
