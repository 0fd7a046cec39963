import logging
import os
import platform
from contextlib import asynccontextmanager
from time import time

import anyio
import psutil
from fastapi import FastAPI, HTTPException, Query
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from rgstream import prometheus as prom
from rgstream.__version__ import __version__
from rgstream.config import configure_logging, get_app_env_variables, get_constants
from rgstream.engine import ProtocolError
from rgstream.models import HealthResponse, SearchOptions, SearchResponse
from rgstream.process import find_rg
from rgstream.search import SearchRequestError, search

log_level_name = configure_logging()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: check for ripgrep
    rg_path = find_rg()
    if rg_path:
        logger.info(f"ripgrep found at: {rg_path}")
    app.state.rg_path = rg_path

    yield

    logger.info("Shutting down rgstream")


app = FastAPI(
    title='rgstream',
    version=__version__,
    description="""
    Structured search results from ripgrep.

    ## Endpoints

    * `/v1/search` - Search paths and get per-line matches with trimmed left/right context
    * `/metrics` - Prometheus metrics
    * `/` - Service health and ripgrep availability
    """,
    license_info={"name": "MIT"},
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)


def get_os_info() -> dict:
    return {
        'system': platform.system(),
        'release': platform.release(),
        'version': platform.version(),
        'machine': platform.machine(),
    }


def get_system_resources() -> dict:
    mem = psutil.virtual_memory()
    return {
        'cpu_cores': psutil.cpu_count(logical=True),
        'cpu_cores_physical': psutil.cpu_count(logical=False),
        'ram_total_gb': round(mem.total / (1024**3), 2),
        'ram_available_gb': round(mem.available / (1024**3), 2),
        'ram_percent_used': mem.percent,
    }


def get_python_packages() -> dict:
    import importlib.metadata

    python_packages = {}
    key_packages = ['fastapi', 'pydantic', 'uvicorn', 'sh', 'psutil', 'prometheus-client', 'click']
    for package in key_packages:
        try:
            python_packages[package] = importlib.metadata.version(package)
        except importlib.metadata.PackageNotFoundError:
            pass
    return python_packages


@app.get('/', tags=['General'], response_model=HealthResponse)
async def health() -> HealthResponse:
    """
    Health check and system introspection endpoint.
    """
    prom.record_http_response('GET', '/', 200)
    return HealthResponse(
        status='ok',
        ripgrep_available=app.state.rg_path is not None,
        ripgrep_path=app.state.rg_path,
        app_version=__version__,
        python_version=platform.python_version(),
        os_info=get_os_info(),
        system_resources=get_system_resources(),
        python_packages=get_python_packages(),
        constants=get_constants(),
        environment=get_app_env_variables(),
    )


@app.get('/metrics', tags=['Monitoring'])
async def metrics():
    """Prometheus metrics endpoint."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


@app.get(
    '/v1/search',
    tags=['Search'],
    summary="Search paths with ripgrep and return structured matches",
    response_model=SearchResponse,
    responses={
        200: {"description": "Search completed (possibly with zero matches)"},
        400: {"description": "Missing corpus or blank query"},
        404: {"description": "Path not found"},
        502: {"description": "ripgrep produced output that could not be parsed"},
        503: {"description": "ripgrep not available"},
    },
)
async def search_endpoint(
    query: str = Query('', description="Search term, passed verbatim to ripgrep", examples=["error"]),
    path: list[str] = Query([], description="Corpus root paths (can specify multiple)", examples=["/var/log"]),
    regex: bool = Query(False, description="Treat query as a regex"),
    usecase: bool = Query(False, description="Case-sensitive search"),
    word: bool = Query(False, description="Match whole words only"),
    context: int | None = Query(None, ge=0, description="Characters of context on each side of a match"),
    per_span: bool | None = Query(None, description="One result per highlighted run"),
) -> SearchResponse:
    """
    Run ripgrep over the given paths and return one record per matching line.

    Each record carries origin, filename, 0-based line_number, left_context,
    match_text and right_context. Records are in ripgrep output order.

    Example:
    ```
    GET /v1/search?query=error&path=/var/log&context=20
    ```
    """
    if not app.state.rg_path:
        prom.record_error('service_unavailable')
        prom.record_http_response('GET', '/v1/search', 503)
        raise HTTPException(status_code=503, detail="ripgrep is not available on this system")

    for p in path:
        if not os.path.exists(p):
            prom.record_error('file_not_found')
            prom.record_http_response('GET', '/v1/search', 404)
            raise HTTPException(status_code=404, detail=f"Path not found: {p}")

    option_values = {'regex': regex, 'usecase': usecase, 'word': word}
    if context is not None:
        option_values['context'] = context
    if per_span is not None:
        option_values['per_span'] = per_span
    options = SearchOptions(**option_values)

    try:
        time_before = time()
        # Offload blocking process I/O to thread pool to keep event loop responsive
        response = await anyio.to_thread.run_sync(search, query, path, options, None, app.state.rg_path)
        logger.info(f"[API] {len(response.matches)} match(es) in {time() - time_before:.3f}s")
    except SearchRequestError as e:
        prom.record_error('invalid_params')
        prom.record_http_response('GET', '/v1/search', 400)
        raise HTTPException(status_code=400, detail=str(e))
    except ProtocolError as e:
        prom.record_error('protocol_error')
        prom.record_http_response('GET', '/v1/search', 502)
        raise HTTPException(status_code=502, detail=f"Malformed ripgrep output: {e}")
    except Exception as e:
        logger.error(f"Unexpected error: {str(e)}")
        prom.record_error('internal_error')
        prom.record_http_response('GET', '/v1/search', 500)
        raise HTTPException(status_code=500, detail=f"Internal error: {str(e)}")

    prom.record_http_response('GET', '/v1/search', 200)
    return response
