"""Pydantic models for API requests and responses"""

from typing import Any

from pydantic import BaseModel, Field

from fsbench.tasks import FileOutcome, RunResult


class HealthResponse(BaseModel):
    """Health check response with system introspection data"""

    status: str = Field(..., examples=['ok'])
    app_version: str = Field(..., examples=['0.1.0'], description='Application version')
    python_version: str = Field(..., examples=['3.13.1'], description='Python interpreter version')
    search_dirs: list[str] = Field(
        default_factory=list,
        examples=[['/srv/bench/uploads', '/srv/bench/files', '/srv/bench/files2']],
        description='Candidate directories in search order',
    )
    system_resources: dict[str, Any] = Field(
        default_factory=dict,
        examples=[{'cpu_cores': 8, 'cpu_cores_physical': 4, 'ram_total_gb': 16.0}],
        description='System resources (CPU cores and RAM)',
    )
    python_packages: dict[str, str] = Field(default_factory=dict, description='Key Python package versions')
    environment: dict[str, str] = Field(
        default_factory=dict, examples=[{'FSBENCH_LOG_LEVEL': 'INFO'}], description='fsbench environment variables'
    )


class SendSingleRequest(BaseModel):
    """Body of /send-single.

    fileNames is validated by the engine rather than by pydantic so that a
    missing or malformed list is rejected with 400 like every other invalid input.
    """

    fileNames: Any = Field(None, examples=[['a.txt', 'b.txt']], description='File names to read, in order')


class SendMultipleRequest(SendSingleRequest):
    """Body of /send-multiple"""

    threads: Any = Field(
        None, examples=[4], description='Worker count; missing, zero or non-numeric values fall back to 1'
    )
    executor: str = Field('thread', examples=['thread', 'process'], description='Execution substrate')


class FileOutcomeModel(BaseModel):
    """Outcome of processing one file

    Attributes:
        name: File name as submitted
        status: success, not_found or read_error
        detail: Error detail for failed files
        message: Human-readable summary line
    """

    name: str = Field(..., examples=['a.txt'])
    status: str = Field(..., examples=['success'])
    detail: str | None = Field(None, examples=[None])
    message: str = Field(..., examples=['File processed: a.txt'])

    @classmethod
    def from_outcome(cls, outcome: FileOutcome) -> 'FileOutcomeModel':
        return cls(**outcome.to_dict())


class RunResponse(BaseModel):
    """Response of /send-single and /send-multiple"""

    message: str = Field(..., examples=['Multi thread run complete'])
    processingTime: str = Field(..., examples=['42 ms'], description='Wall-clock time of the run')
    workers: int = Field(1, examples=[4], description='Effective worker count')
    chunks: int = Field(0, examples=[4], description='Number of chunks dispatched')
    results: list[FileOutcomeModel] = Field(default_factory=list)

    @classmethod
    def from_result(cls, message: str, result: RunResult) -> 'RunResponse':
        return cls(
            message=message,
            processingTime=result.processing_time,
            workers=result.workers,
            chunks=result.chunks,
            results=[FileOutcomeModel.from_outcome(o) for o in result.outcomes],
        )


class SaveResultRequest(BaseModel):
    """Experiment results to persist as a text report"""

    experiment_datetime: str = Field(..., examples=['2024-10-19 10:11:12'])
    file_count: int = Field(..., ge=0, examples=[100])
    single_thread_time: int | float = Field(..., ge=0, examples=[420], description='Sequential run time in ms')
    multi_thread_results: dict[str, int | float] = Field(
        default_factory=dict,
        examples=[{'2': 250, '4': 140}],
        description='Parallel run time in ms keyed by thread count',
    )


class SaveResultResponse(BaseModel):
    message: str = Field(..., examples=['Experiment result saved'])
    filePath: str = Field(..., examples=['/srv/bench/results/Result_20241019T101112345Z.txt'])


class DownloadFile(BaseModel):
    url: str = Field(..., examples=['http://localhost:8080/uploads/archive_1729332672345.zip'])
    displayName: str = Field(..., examples=['archive_1729332672345.zip'])


class UploadResponse(BaseModel):
    message: str = Field(..., examples=['Files uploaded and archived'])
    downloadFiles: list[DownloadFile] = Field(default_factory=list)
