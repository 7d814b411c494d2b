"""FastAPI application factory for the node probe server."""
from fastapi import FastAPI
import logging

from scylla_status.api import probes
from scylla_status.config import settings

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
)
logging.getLogger("uvicorn.access").setLevel(logging.ERROR)  # Probes hit every few seconds
logging.getLogger("kubernetes").setLevel(logging.WARNING)


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    app = FastAPI(
        title="ScyllaDB Node Probes",
        description="Readiness and liveness probes for ScyllaDB nodes",
        version=settings.APP_VERSION,
    )

    # Routes
    app.include_router(probes.router)

    return app


if __name__ == "__main__":
    import uvicorn
    app = create_app()
    uvicorn.run(app, host=settings.PROBE_HOST, port=settings.PROBE_PORT, log_level=settings.LOG_LEVEL)
