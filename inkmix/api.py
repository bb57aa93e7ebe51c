from __future__ import annotations

from typing import Any, Literal

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field
from starlette.concurrency import run_in_threadpool

from inkmix.src.mixing_engine.colors import color_from_hex
from inkmix.src.mixing_engine.config import ClusterConfig, EngineConfig, KMeansConfig
from inkmix.src.mixing_engine.errors import MixingEngineError
from inkmix.src.mixing_engine.formatting import format_recipe
from inkmix.src.mixing_engine.metric import interpret_distance
from inkmix.src.mixing_engine.models import UserPalette
from inkmix.src.mixing_engine.optimizer import RecipeOptimizer
from inkmix.src.mixing_engine.palette import default_palette, palette_from_records
from inkmix.src.mixing_engine.pipeline import ImageAnalysisPipeline
from inkmix.src.mixing_engine.worker import handle_message


class PaletteColorItem(BaseModel):
    id: str | None = Field(default=None, description="Stable color id")
    name: str | None = None
    hex: str = Field(..., description="Color as #RRGGBB")


class RecipeRequest(BaseModel):
    target: str = Field(..., description="Target color as #RRGGBB")
    palette: list[PaletteColorItem] | None = Field(
        default=None,
        description="Inks available for mixing. Defaults to the basic palette.",
    )
    max_ingredients: int = Field(default=4, ge=1, le=4)
    format: Literal["parts", "percentages", "ratio"] = "parts"


class IngredientItem(BaseModel):
    color_id: str
    name: str | None
    hex: str
    proportion: float
    percentage: float


class WarningItem(BaseModel):
    type: str
    message: str
    severity: str


class RecipeResponse(BaseModel):
    target_hex: str
    result_hex: str
    ingredients: list[IngredientItem]
    distance: float
    distance_band: str
    is_exact_match: bool
    is_unreachable: bool
    is_clean: bool
    is_dirty: bool
    is_warm: bool
    is_cool: bool
    warnings: list[WarningItem]
    explanations: list[str]
    formatted: str


class ExtractRequest(BaseModel):
    image_url: str = Field(..., description="HTTP(S) image URL")
    colors: int = Field(default=8, ge=1, le=64, description="Number of k-means clusters")
    selection_method: Literal["representative", "dominant"] = "representative"
    similarity_threshold: float = Field(default=20.0, gt=0)
    achromatic_threshold: float = Field(default=10.0, ge=0)
    seed: int | None = None


class QuantizedItem(BaseModel):
    hex: str
    population: int


class ExtractResponse(BaseModel):
    colors: list[str]
    quantized: list[QuantizedItem]
    iterations: int
    converged: bool


app = FastAPI(
    title="Inkmix API",
    version="1.0.0",
    description="Tattoo ink mixing recipes and palette extraction from images.",
)


def _build_optimizer() -> RecipeOptimizer:
    return RecipeOptimizer(EngineConfig())


def _build_pipeline(payload: ExtractRequest) -> ImageAnalysisPipeline:
    return ImageAnalysisPipeline(
        kmeans=KMeansConfig(random_state=payload.seed),
        cluster=ClusterConfig(
            similarity_threshold=payload.similarity_threshold,
            achromatic_threshold=payload.achromatic_threshold,
            selection_method=payload.selection_method,
        ),
    )


def _request_palette(payload: RecipeRequest) -> UserPalette:
    if payload.palette is None:
        return default_palette()
    return palette_from_records(
        [item.model_dump(exclude_none=True) for item in payload.palette],
        source="request.palette",
    )


@app.post("/recipes", response_model=RecipeResponse)
async def create_recipe(payload: RecipeRequest) -> RecipeResponse:
    try:
        target = color_from_hex(payload.target, id="target")
        palette = _request_palette(payload)
        result = await run_in_threadpool(
            _build_optimizer().find_recipe,
            target,
            palette,
            payload.max_ingredients,
        )
    except MixingEngineError as exc:
        raise HTTPException(
            status_code=400, detail=f"failed_to_find_recipe: {exc}"
        ) from exc

    ingredients = []
    for ingredient in result.recipe.ingredients:
        color = palette.get_color_by_id(ingredient.color_id)
        ingredients.append(
            IngredientItem(
                color_id=ingredient.color_id,
                name=color.name if color else None,
                hex=color.hex if color else "",
                proportion=float(ingredient.proportion),
                percentage=float(ingredient.proportion * 100.0),
            )
        )
    analysis = result.analysis
    return RecipeResponse(
        target_hex=result.recipe.target_color.hex,
        result_hex=result.recipe.result_color.hex,
        ingredients=ingredients,
        distance=float(result.distance),
        distance_band=interpret_distance(result.distance),
        is_exact_match=result.is_exact_match,
        is_unreachable=result.is_unreachable,
        is_clean=analysis.is_clean,
        is_dirty=analysis.is_dirty,
        is_warm=analysis.is_warm,
        is_cool=analysis.is_cool,
        warnings=[WarningItem(**w.to_dict()) for w in result.warnings],
        explanations=list(analysis.explanations),
        formatted=format_recipe(
            result.recipe, palette.get_color_by_id, payload.format
        ),
    )


@app.post("/analyze")
async def analyze_pixels(message: dict[str, Any]) -> dict[str, Any]:
    return await run_in_threadpool(handle_message, message)


@app.post("/extract", response_model=ExtractResponse)
async def extract_colors(payload: ExtractRequest) -> ExtractResponse:
    pipeline = _build_pipeline(payload)
    try:
        result = await run_in_threadpool(
            pipeline.run_image, payload.image_url, payload.colors
        )
    except Exception as exc:
        raise HTTPException(
            status_code=400, detail=f"failed_to_extract_colors: {exc}"
        ) from exc

    return ExtractResponse(
        colors=result.hex_colors,
        quantized=[
            QuantizedItem(hex=q.hex, population=int(q.population))
            for q in result.quantized
        ],
        iterations=result.iterations,
        converged=result.converged,
    )
