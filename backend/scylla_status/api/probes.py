"""Node probe endpoints."""
import asyncio
import logging
from typing import Awaitable

from fastapi import APIRouter, Depends, Request, Response, status

from scylla_status.api.dependencies import get_prober
from scylla_status.probeserver.prober import Prober

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Probes"])


async def _wait_for_disconnect(request: Request) -> None:
    while True:
        message = await request.receive()
        if message["type"] == "http.disconnect":
            return


async def _probe_until_disconnect(request: Request, probe: Awaitable[int]) -> Response:
    """Run a probe, cancelling it and its outbound calls if the caller goes away."""
    probe_task = asyncio.ensure_future(probe)
    disconnect_task = asyncio.ensure_future(_wait_for_disconnect(request))
    try:
        await asyncio.wait({probe_task, disconnect_task}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        for task in (probe_task, disconnect_task):
            if not task.done():
                task.cancel()

    if probe_task.done():
        return Response(status_code=probe_task.result())

    # Let the probe unwind so the ScyllaDB client gets closed.
    await asyncio.wait({probe_task})
    logger.debug(f"{request.url.path} probe: client disconnected, probe cancelled")
    return Response(status_code=status.HTTP_503_SERVICE_UNAVAILABLE)


@router.get("/readyz")
async def readyz(request: Request, prober: Prober = Depends(get_prober)):
    """Readiness probe - node is joined, Up/Normal and serving CQL."""
    return await _probe_until_disconnect(request, prober.readyz())


@router.get("/healthz")
async def healthz(request: Request, prober: Prober = Depends(get_prober)):
    """Liveness probe - ScyllaDB API of the node answers."""
    return await _probe_until_disconnect(request, prober.healthz())
