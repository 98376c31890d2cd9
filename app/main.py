import uvicorn

from app.core.app_factory import create_app
from app.core.config import settings
from app.core.lifecycle import ContactServer

app = create_app()


def run() -> None:
    """Serve the app with uvicorn on HOST:PORT."""
    config = uvicorn.Config(
        app,
        host=settings.app.host,
        port=settings.app.port,
        log_config=None,
        access_log=False,
    )
    ContactServer(config).run()


if __name__ == "__main__":
    run()
