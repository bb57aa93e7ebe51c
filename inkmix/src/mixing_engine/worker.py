from __future__ import annotations

import logging
from concurrent.futures import Executor, Future, ProcessPoolExecutor
from typing import Any, Literal, Mapping

from pydantic import BaseModel, ConfigDict, Field

from .config import ClusterConfig, KMeansConfig
from .pipeline import ImageAnalysisPipeline

logger = logging.getLogger(__name__)


class Pixel(BaseModel):
    r: int = Field(..., ge=0, le=255)
    g: int = Field(..., ge=0, le=255)
    b: int = Field(..., ge=0, le=255)


class AnalyzeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: Literal["analyze"] = "analyze"
    pixels: list[Pixel] = Field(..., min_length=1)
    color_count: int = Field(..., alias="colorCount", ge=1)
    selection_method: Literal["representative", "dominant"] = Field(
        default="representative", alias="selectionMethod"
    )
    similarity_threshold: float = Field(
        default=20.0, alias="similarityThreshold", gt=0
    )
    achromatic_threshold: float = Field(
        default=10.0, alias="achromaticThreshold", ge=0
    )
    request_id: str | None = Field(default=None, alias="requestId")
    seed: int | None = Field(default=None, description="Seed for k-means sampling")


class AnalyzeResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: Literal["analyze-result"] = "analyze-result"
    colors: list[str] = Field(default_factory=list)
    error: str | None = None
    request_id: str | None = Field(default=None, alias="requestId")

    def to_message(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


def analyze(request: AnalyzeRequest) -> list[str]:
    pipeline = ImageAnalysisPipeline(
        kmeans=KMeansConfig(random_state=request.seed),
        cluster=ClusterConfig(
            similarity_threshold=request.similarity_threshold,
            achromatic_threshold=request.achromatic_threshold,
            selection_method=request.selection_method,
        ),
    )
    pixels = [(p.r, p.g, p.b) for p in request.pixels]
    return pipeline.run(pixels, request.color_count).hex_colors


def handle_message(message: Mapping[str, Any]) -> dict[str, Any]:
    """Answer one ``analyze`` message with exactly one ``analyze-result``.

    Failures never cross the boundary as exceptions; they are reported in the
    ``error`` field with an empty color list.
    """
    request_id = message.get("requestId") if isinstance(message, Mapping) else None
    try:
        request = AnalyzeRequest.model_validate(message)
        colors = analyze(request)
    except Exception as exc:
        logger.exception("image analysis request %s failed", request_id)
        return AnalyzeResponse(
            colors=[], error=str(exc) or type(exc).__name__, request_id=request_id
        ).to_message()
    return AnalyzeResponse(colors=colors, request_id=request.request_id).to_message()


class ImageAnalysisWorker:
    """Runs ``analyze`` messages off the caller's thread, one at a time.

    A new submission does not cancel an earlier one; callers that submit
    concurrently should correlate responses through ``requestId``.
    """

    def __init__(self, executor: Executor | None = None) -> None:
        self._executor = executor or ProcessPoolExecutor(max_workers=1)
        self._in_flight: Future[dict[str, Any]] | None = None

    @property
    def busy(self) -> bool:
        return self._in_flight is not None and not self._in_flight.done()

    def submit(self, message: Mapping[str, Any]) -> Future[dict[str, Any]]:
        self._in_flight = self._executor.submit(handle_message, dict(message))
        return self._in_flight

    def analyze(
        self, message: Mapping[str, Any], timeout: float | None = None
    ) -> dict[str, Any]:
        return self.submit(message).result(timeout=timeout)

    def close(self) -> None:
        self._executor.shutdown(wait=True)

    def __enter__(self) -> ImageAnalysisWorker:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
