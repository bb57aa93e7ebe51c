from __future__ import annotations

from inkmix.src.mixing_engine.clustering import (
    cluster_similar_colors,
    is_near_black,
    is_near_white,
    postprocess_quantized_colors,
    select_representatives,
    sort_for_presentation,
    to_colors,
)
from inkmix.src.mixing_engine.colors import color_from_hex
from inkmix.src.mixing_engine.metric import delta_e_ciede2000
from inkmix.src.mixing_engine.models import QuantizedColor


def test_near_white_and_black_rules():
    assert is_near_white(color_from_hex("#FAFAFA"))
    assert is_near_white(color_from_hex("#D8D0D0"))
    assert not is_near_white(color_from_hex("#FFAAAA"))
    assert is_near_black(color_from_hex("#0A0A0A"))
    assert is_near_black(color_from_hex("#2A2626"))
    assert not is_near_black(color_from_hex("#4A1010"))


def test_excludes_base_pigments():
    colors = postprocess_quantized_colors(["#FFFFFF", "#000000", "#FF0000"])

    assert colors == ["#FF0000"]


def test_greedy_clusters_respect_threshold():
    threshold = 20.0
    colors = to_colors(["#FF0000", "#0000FF", "#F01010", "#1010F0", "#00AA00", "#E02020"])

    clusters = cluster_similar_colors(colors, threshold)

    assert len(clusters) == 3
    for cluster in clusters:
        for position, member in enumerate(cluster[1:], start=1):
            assert any(
                delta_e_ciede2000(member.lab, earlier.lab) < threshold
                for earlier in cluster[:position]
            )


def test_dominant_picks_highest_population():
    quantized = [
        QuantizedColor(hex="#FF0000", population=10),
        QuantizedColor(hex="#FE0101", population=50),
        QuantizedColor(hex="#0000FF", population=5),
    ]

    colors = postprocess_quantized_colors(quantized, selection_method="dominant")

    assert colors == ["#FE0101", "#0000FF"]


def test_representatives_of_small_cluster():
    cluster = to_colors(["#992222", "#CC3333", "#FF6666"])

    picked = select_representatives(cluster)

    # the lightest member is also the most saturated one
    assert [c.hex for c in picked] == ["#992222", "#FF6666"]


def test_representatives_of_large_cluster_include_extremes():
    cluster = to_colors(["#CC3333", "#992222", "#FF0000", "#E65C5C", "#B36B6B"])

    picked = select_representatives(cluster)

    hexes = [c.hex for c in picked]
    assert len(hexes) == len(set(hexes))
    assert "#992222" in hexes  # darkest
    assert "#FF0000" in hexes  # most saturated
    assert "#B36B6B" in hexes  # least saturated


def test_presentation_order():
    colors = to_colors(["#808080", "#0000FF", "#C0C0C0", "#FF0000", "#00FF00"])

    ordered = sort_for_presentation(colors, achromatic_threshold=10.0)

    assert [c.hex for c in ordered] == ["#FF0000", "#00FF00", "#0000FF", "#C0C0C0", "#808080"]


def test_near_equal_hues_sort_by_lightness():
    colors = to_colors(["#800000", "#FF8080", "#FF0000"])

    ordered = sort_for_presentation(colors, achromatic_threshold=10.0)

    assert [c.hex for c in ordered] == ["#FF8080", "#FF0000", "#800000"]


def test_accepts_mappings():
    colors = postprocess_quantized_colors(
        [{"hex": "ff0000", "population": 3}, {"hex": "#00ff00", "population": 1}]
    )

    assert colors == ["#FF0000", "#00FF00"]
