from __future__ import annotations

import argparse
import json
import logging
from dataclasses import replace

from inkmix.src.mixing_engine.colors import color_from_hex
from inkmix.src.mixing_engine.config import SELECTION_METHODS, Settings, load_config
from inkmix.src.mixing_engine.errors import MixingEngineError
from inkmix.src.mixing_engine.formatting import RECIPE_FORMATS, format_recipe
from inkmix.src.mixing_engine.io import write_result_json
from inkmix.src.mixing_engine.metric import interpret_distance
from inkmix.src.mixing_engine.optimizer import RecipeOptimizer
from inkmix.src.mixing_engine.palette import load_palette
from inkmix.src.mixing_engine.pipeline import ImageAnalysisPipeline


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="inkmix",
        description="Tattoo ink mixing recipes and image palette extraction.",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Optional JSON config with 'engine', 'kmeans' and 'cluster' sections.",
    )
    parser.add_argument(
        "--verbose", action="store_true", help="Enable debug logging."
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    recipe = subparsers.add_parser(
        "recipe",
        help="Find a mixing recipe for a target color from a palette.",
    )
    recipe.add_argument("--target", required=True, help="Target color as #RRGGBB.")
    recipe.add_argument(
        "--palette",
        default=None,
        help="Path to a palette (.csv/.json). Defaults to the built-in basic palette.",
    )
    recipe.add_argument(
        "--max-ingredients",
        type=int,
        default=None,
        help="Maximum number of inks in the recipe (1-4).",
    )
    recipe.add_argument(
        "--format",
        choices=RECIPE_FORMATS,
        default="parts",
        help="How to phrase the proportions.",
    )
    recipe.add_argument(
        "--out",
        default=None,
        help="Optional JSON output path. If omitted, prints JSON to stdout.",
    )

    extract = subparsers.add_parser(
        "extract",
        help="Extract a compact set of representative colors from an image.",
    )
    extract.add_argument(
        "--image", required=True, help="Path or URL to the input image."
    )
    extract.add_argument(
        "--colors", type=int, default=8, help="Number of k-means clusters."
    )
    extract.add_argument("--method", choices=SELECTION_METHODS, default=None)
    extract.add_argument("--similarity-threshold", type=float, default=None)
    extract.add_argument("--achromatic-threshold", type=float, default=None)
    extract.add_argument(
        "--seed", type=int, default=None, help="Seed for reproducible clustering."
    )
    extract.add_argument(
        "--out",
        default=None,
        help="Optional JSON output path. If omitted, prints JSON to stdout.",
    )

    return parser


def _run_recipe(args: argparse.Namespace, settings: Settings) -> dict:
    target = color_from_hex(args.target, id="target")
    palette = load_palette(args.palette)
    result = RecipeOptimizer(settings.engine).find_recipe(
        target, palette, max_ingredients=args.max_ingredients
    )
    payload = result.to_dict()
    payload["distanceBand"] = interpret_distance(result.distance)
    payload["formatted"] = format_recipe(
        result.recipe, palette.get_color_by_id, args.format
    )
    return payload


def _run_extract(args: argparse.Namespace, settings: Settings) -> dict:
    kmeans = settings.kmeans
    if args.seed is not None:
        kmeans = replace(kmeans, random_state=args.seed)
    overrides = {
        "selection_method": args.method,
        "similarity_threshold": args.similarity_threshold,
        "achromatic_threshold": args.achromatic_threshold,
    }
    cluster = replace(
        settings.cluster, **{k: v for k, v in overrides.items() if v is not None}
    )
    pipeline = ImageAnalysisPipeline(kmeans=kmeans, cluster=cluster)
    return pipeline.run_image(args.image, args.colors).to_dict()


def main() -> None:
    parser = _build_parser()
    args = parser.parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        settings = load_config(args.config)
        if args.command == "recipe":
            payload = _run_recipe(args, settings)
        elif args.command == "extract":
            payload = _run_extract(args, settings)
        else:
            parser.error("unknown command")
    except (MixingEngineError, OSError) as exc:
        parser.error(str(exc))

    if args.out:
        write_result_json(payload, args.out)
    else:
        print(json.dumps(payload, indent=2, ensure_ascii=False))


if __name__ == "__main__":
    main()
