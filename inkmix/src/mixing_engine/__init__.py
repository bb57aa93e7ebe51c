from .analysis import analyze_recipe
from .clustering import PerceptualClusterer, postprocess_quantized_colors
from .colors import color_from_hex, color_from_hsl, color_from_rgb
from .config import ClusterConfig, EngineConfig, KMeansConfig, Settings, load_config
from .errors import ColorNotFound, MixingEngineError
from .formatting import format_recipe
from .mixing import mix_colors_sequential, mix_colors_subtractive
from .models import (
    Color,
    ColorAnalysis,
    ImageAnalysisResult,
    Recipe,
    RecipeIngredient,
    RecipeResult,
    RecipeWarning,
    UserPalette,
)
from .optimizer import RecipeOptimizer, find_recipe
from .palette import default_palette, load_palette
from .pipeline import ImageAnalysisPipeline
from .quantize import KMeansQuantizer, quantize_colors

__all__ = [
    "ClusterConfig",
    "Color",
    "ColorAnalysis",
    "ColorNotFound",
    "EngineConfig",
    "ImageAnalysisPipeline",
    "ImageAnalysisResult",
    "KMeansConfig",
    "KMeansQuantizer",
    "MixingEngineError",
    "PerceptualClusterer",
    "Recipe",
    "RecipeIngredient",
    "RecipeOptimizer",
    "RecipeResult",
    "RecipeWarning",
    "Settings",
    "UserPalette",
    "analyze_recipe",
    "color_from_hex",
    "color_from_hsl",
    "color_from_rgb",
    "default_palette",
    "find_recipe",
    "format_recipe",
    "load_config",
    "load_palette",
    "mix_colors_sequential",
    "mix_colors_subtractive",
    "postprocess_quantized_colors",
    "quantize_colors",
]
