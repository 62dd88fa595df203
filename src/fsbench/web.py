import logging
import os
import platform
from collections.abc import Callable
from contextlib import asynccontextmanager
from pathlib import Path
from urllib.parse import quote

import anyio
import psutil
from fastapi import FastAPI, File, HTTPException, Request, UploadFile, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from fsbench import engine as engine_module

# Import real prometheus for server mode and swap it into the engine module
from fsbench import prometheus as prom
from fsbench.__version__ import __version__
from fsbench.archive import archive_files, remove_files, safe_upload_name
from fsbench.clients import ClientRegistry
from fsbench.engine import run_parallel, run_sequential
from fsbench.errors import InvalidInput, WorkerFault
from fsbench.locator import get_search_dirs, set_search_dirs
from fsbench.models import (
    DownloadFile,
    HealthResponse,
    RunResponse,
    SaveResultRequest,
    SaveResultResponse,
    SendMultipleRequest,
    SendSingleRequest,
    UploadResponse,
)
from fsbench.report import write_report
from fsbench.tasks import RunResult
from fsbench.utils import get_results_dir, get_uploads_dir


# Replace the noop prometheus in engine module with real one
engine_module.prom = prom

log_level_name = os.getenv('FSBENCH_LOG_LEVEL', 'INFO').upper()
log_level = getattr(logging, log_level_name, logging.INFO)
logging.basicConfig(level=log_level, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: candidate directories come from FSBENCH_SEARCH_DIRS (set by the
    # serve command) or default to uploads, files, files2 under the base dir
    search_dirs = set_search_dirs(None)
    app.state.search_dirs = search_dirs
    logger.info(f'Search directories ({len(search_dirs)}): {", ".join(str(d) for d in search_dirs)}')

    app.state.uploads_dir = get_uploads_dir()
    app.state.uploads_dir.mkdir(parents=True, exist_ok=True)
    app.state.results_dir = get_results_dir()
    logger.info(f'Uploads directory: {app.state.uploads_dir}')
    logger.info(f'Results directory: {app.state.results_dir}')

    app.state.echo_clients = ClientRegistry('echo')
    app.state.broadcast_clients = ClientRegistry('broadcast')

    yield

    logger.info('Shutting down fsbench')


app = FastAPI(
    title='fsbench',
    version=__version__,
    description="""
    Sequential versus parallel file-read benchmark.

    ## Endpoints

    * `/send-single` - Read files one at a time and report the elapsed time
    * `/send-multiple` - Read files in N concurrent chunks and report the elapsed time
    * `/save-result` - Store an experiment summary as a text report
    * `/upload` - Upload files; they are zipped and offered for download
    * `/ws`, `/ws/broadcast` - Websocket echo and broadcast
    * `/health`, `/metrics` - Service introspection

    ## File lookup

    Each file name is looked up in the search directories in order
    (uploads, files, files2 by default); the first match is read.
    Missing or unreadable files are reported per file and never fail the run.
    """,
    license_info={'name': 'MIT'},
    lifespan=lifespan,
    docs_url='/docs',
    redoc_url='/redoc',
)

# Browser frontends are served from a different origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=['*'],
    allow_methods=['*'],
    allow_headers=['*'],
)


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
    key_packages = ['fastapi', 'pydantic', 'uvicorn', 'psutil', 'prometheus-client', 'click']
    for package in key_packages:
        try:
            python_packages[package] = importlib.metadata.version(package)
        except importlib.metadata.PackageNotFoundError:
            pass

    return python_packages


def get_app_env_variables() -> dict:
    app_env_prefixes = ['FSBENCH_', 'UVICORN_', 'PROMETHEUS_']
    return {key: value for key, value in os.environ.items() if any(key.startswith(p) for p in app_env_prefixes)}


@app.get('/health', tags=['General'], response_model=HealthResponse)
async def health():
    """
    Health check and system introspection endpoint.

    Returns service status, version, the active search directories,
    CPU/RAM information (useful when comparing worker counts) and
    fsbench-related environment variables.
    """
    prom.record_http_response('GET', '/health', 200)
    return HealthResponse(
        status='ok',
        app_version=__version__,
        python_version=platform.python_version(),
        search_dirs=[str(d) for d in get_search_dirs()],
        system_resources=get_system_resources(),
        python_packages=get_python_packages(),
        environment=get_app_env_variables(),
    )


@app.get('/metrics', tags=['Monitoring'], include_in_schema=True)
async def metrics():
    """
    Prometheus metrics endpoint.

    **Metrics Categories:**
    - Runs (counts and durations by mode)
    - Files processed (by outcome status)
    - Parallel processing (chunks, active workers, worker faults)
    - Uploads, reports, websocket clients
    - Errors (by type) and HTTP responses
    """
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


async def run_benchmark(route: str, func: Callable[..., RunResult], *args) -> RunResult:
    """Run a blocking engine call off the event loop and map its errors to HTTP responses.

    The engine counts WorkerFault in errors_total itself.
    """
    try:
        result = await anyio.to_thread.run_sync(func, *args)
    except InvalidInput as e:
        prom.record_error('invalid_input')
        prom.record_http_response('POST', route, 400)
        raise HTTPException(status_code=400, detail=str(e))
    except WorkerFault as e:
        logger.error(f'Run on {route} failed: {e}')
        prom.record_http_response('POST', route, 500)
        raise HTTPException(status_code=500, detail=f'Worker fault: {e!s}')
    except Exception as e:
        logger.error(f'Run on {route} failed: {e}')
        prom.record_error('internal_error')
        prom.record_http_response('POST', route, 500)
        raise HTTPException(status_code=500, detail=f'Run failed: {e!s}')

    prom.record_http_response('POST', route, 200)
    return result


@app.post(
    '/send-single',
    tags=['Benchmark'],
    summary='Read files sequentially and report the elapsed time',
    response_model=RunResponse,
    responses={
        200: {'description': 'Run completed (individual files may have failed)'},
        400: {'description': 'fileNames missing or not a list of strings'},
    },
)
async def send_single(request: SendSingleRequest | None = None) -> RunResponse:
    """
    Process every file name one at a time, in order.

    - **fileNames**: list of file names to look up and read

    Returns per-file results in input order and `processingTime` as `"<N> ms"`.
    """
    file_names = request.fileNames if request else None
    logger.info(f'Single thread run, file names: {file_names}')

    result = await run_benchmark('/send-single', run_sequential, file_names)
    return RunResponse.from_result('Single thread run complete', result)


@app.post(
    '/send-multiple',
    tags=['Benchmark'],
    summary='Read files in concurrent chunks and report the elapsed time',
    response_model=RunResponse,
    responses={
        200: {'description': 'Run completed (individual files may have failed)'},
        400: {'description': 'fileNames missing or invalid, or unknown executor'},
        500: {'description': 'A chunk worker failed'},
    },
)
async def send_multiple(request: SendMultipleRequest | None = None) -> RunResponse:
    """
    Split the file names into `threads` contiguous chunks and process the chunks concurrently.

    - **fileNames**: list of file names to look up and read
    - **threads**: worker count; missing, zero or non-numeric values mean 1
    - **executor**: `thread` (default) or `process`

    Results are returned in input order regardless of which chunk finished first.
    """
    request = request or SendMultipleRequest()
    logger.info(f'Multi thread run, file names: {request.fileNames}, threads: {request.threads}')

    result = await run_benchmark(
        '/send-multiple', run_parallel, request.fileNames, request.threads, None, request.executor
    )
    return RunResponse.from_result('Multi thread run complete', result)


@app.post(
    '/save-result',
    tags=['Benchmark'],
    summary='Save experiment results as a text report',
    response_model=SaveResultResponse,
)
async def save_result(data: SaveResultRequest) -> SaveResultResponse:
    """
    Write a `Result_<timestamp>.txt` report into the results directory.
    """
    logger.info(f'Saving experiment result: {data.model_dump()}')
    try:
        file_path = await anyio.to_thread.run_sync(write_report, data, app.state.results_dir)
    except OSError as e:
        logger.error(f'Failed to save experiment result: {e}')
        prom.record_error('report_failed')
        prom.record_http_response('POST', '/save-result', 500)
        raise HTTPException(status_code=500, detail=f'Failed to save experiment result: {e!s}')

    prom.reports_written_total.inc()
    prom.record_http_response('POST', '/save-result', 200)
    return SaveResultResponse(message='Experiment result saved', filePath=str(file_path))


@app.post(
    '/upload',
    tags=['Files'],
    summary='Upload files and get them back as a zip archive',
    response_model=UploadResponse,
    responses={
        400: {'description': 'No files or an invalid file name'},
        500: {'description': 'Files could not be stored or archived'},
    },
)
async def upload(request: Request, files: list[UploadFile] = File(default=[])) -> UploadResponse:
    """
    Store the uploaded files in the uploads directory, zip them, delete the
    originals and return a download link for the archive.
    """
    if not files:
        prom.record_error('upload_failed')
        prom.record_http_response('POST', '/upload', 400)
        raise HTTPException(status_code=400, detail='No files uploaded')

    uploads_dir: Path = app.state.uploads_dir
    try:
        targets = [uploads_dir / safe_upload_name(file.filename) for file in files]
    except ValueError as e:
        prom.record_error('upload_failed')
        prom.record_http_response('POST', '/upload', 400)
        raise HTTPException(status_code=400, detail=str(e))

    # uploads/ is the first search directory; a failed upload leaves nothing in it
    saved: list[Path] = []
    try:
        for file, target in zip(files, targets):
            content = await file.read()
            await anyio.to_thread.run_sync(target.write_bytes, content)
            saved.append(target)
    except OSError as e:
        logger.error(f'Failed to store upload: {e}')
        await anyio.to_thread.run_sync(remove_files, saved)
        prom.record_error('upload_failed')
        prom.record_http_response('POST', '/upload', 500)
        raise HTTPException(status_code=500, detail=f'Failed to store upload: {e!s}')

    prom.uploaded_files_total.inc(len(saved))

    try:
        archive_path = await anyio.to_thread.run_sync(archive_files, saved, uploads_dir)
    except OSError as e:
        logger.error(f'Archive creation failed: {e}')
        await anyio.to_thread.run_sync(remove_files, saved)
        prom.record_error('archive_failed')
        prom.record_http_response('POST', '/upload', 500)
        raise HTTPException(status_code=500, detail=f'Archive creation failed: {e!s}')

    prom.record_http_response('POST', '/upload', 200)
    return UploadResponse(
        message='Files uploaded and archived',
        downloadFiles=[
            DownloadFile(
                url=f'{request.base_url}uploads/{quote(archive_path.name)}',
                displayName=archive_path.name,
            )
        ],
    )


@app.get('/uploads/{name}', tags=['Files'], summary='Download a file from the uploads directory')
async def download(name: str):
    uploads_dir: Path = app.state.uploads_dir
    path = (uploads_dir / name).resolve()
    if path.parent != uploads_dir.resolve() or not path.is_file():
        prom.record_http_response('GET', '/uploads', 404)
        raise HTTPException(status_code=404, detail=f'File not found: {name}')

    prom.record_http_response('GET', '/uploads', 200)
    return FileResponse(path, filename=path.name)


@app.websocket('/ws')
async def websocket_echo(websocket: WebSocket):
    """Echo every text message back to the sender."""
    registry: ClientRegistry = app.state.echo_clients
    await websocket.accept()
    registry.add(websocket)
    prom.websocket_clients.labels(channel='echo').inc()
    logger.info('WebSocket client connected')
    try:
        while True:
            message = await websocket.receive_text()
            logger.info(f'Message from client: {message}')
            await websocket.send_text(f'Server received: {message}')
    except WebSocketDisconnect:
        logger.info('WebSocket client disconnected')
    finally:
        registry.remove(websocket)
        prom.websocket_clients.labels(channel='echo').dec()


@app.websocket('/ws/broadcast')
async def websocket_broadcast(websocket: WebSocket):
    """Relay every text message to all connected broadcast clients."""
    registry: ClientRegistry = app.state.broadcast_clients
    await websocket.accept()
    registry.add(websocket)
    prom.websocket_clients.labels(channel='broadcast').inc()
    logger.info('WebSocket broadcast client connected')
    try:
        while True:
            message = await websocket.receive_text()
            logger.info(f'Broadcast message: {message}')
            for client in registry.snapshot():
                try:
                    await client.send_text(f'Server received: {message}')
                except (WebSocketDisconnect, RuntimeError) as e:
                    logger.warning(f'Dropping broadcast client: {e}')
                    registry.remove(client)
    except WebSocketDisconnect:
        logger.info('WebSocket broadcast client disconnected')
    finally:
        registry.remove(websocket)
        prom.websocket_clients.labels(channel='broadcast').dec()
