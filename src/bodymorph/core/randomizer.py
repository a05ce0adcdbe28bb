"""
Slider Randomization
====================

Single responsibility: Generate random, interval-aligned slider values.

Boundaries are percentages in [-100, 100]. The low end scales the slider
minimum, the high end scales the maximum, and the result is snapped to
the slider interval.
"""

import math
from typing import Iterable, List, Optional, Tuple

import numpy as np

from bodymorph.core.catalog import DecoratedSlider, SliderCatalog
from bodymorph.core.descriptor import Slider, format_descriptor
from bodymorph.core.exceptions import ValidationError

DEFAULT_BOUNDARIES = (-100.0, 100.0)


def _check_boundaries(boundaries: Tuple[float, float]) -> None:
    low, high = boundaries
    if not (-100 <= low <= high <= 100):
        raise ValidationError(
            f"Randomize boundaries must satisfy -100 <= low <= high <= 100, got {boundaries}"
        )


def random_slider_value(
    slider: DecoratedSlider,
    boundaries: Tuple[float, float] = DEFAULT_BOUNDARIES,
    rng: Optional[np.random.Generator] = None
) -> float:
    """
    Pick one random value for a slider.

    Args:
        slider: Slider with minimum, maximum and interval
        boundaries: (low, high) percentages
        rng: numpy Generator (default: fresh, unseeded)

    Returns:
        ``low + k * interval`` for a uniform integer k, rounded to 10 places
    """
    rng = rng if rng is not None else np.random.default_rng()
    low = slider.minimum * abs(boundaries[0] / 100)
    high = slider.maximum * (boundaries[1] / 100)

    if slider.interval <= 0 or high <= low:
        return round(low, 10)

    steps = math.floor((high - low) / slider.interval)
    step = int(rng.integers(0, steps + 1))
    return round(low + step * slider.interval, 10)


def random_slider_values(
    sliders: Iterable[DecoratedSlider],
    boundaries: Tuple[float, float] = DEFAULT_BOUNDARIES,
    rng: Optional[np.random.Generator] = None
) -> List[Slider]:
    """Random values for each slider, keyed by morph key."""
    _check_boundaries(boundaries)
    rng = rng if rng is not None else np.random.default_rng()
    return [
        Slider(s.morph_key, random_slider_value(s, boundaries, rng))
        for s in sliders
    ]


def randomize_descriptor(
    catalog: SliderCatalog,
    gender: int,
    boundaries: Tuple[float, float] = DEFAULT_BOUNDARIES,
    seed: Optional[int] = None
) -> str:
    """
    Random descriptor covering every slider of one gender.

    Sliders are visited category by category, in catalog order.

    Example:
        >>> text = randomize_descriptor(catalog, gender=1, boundaries=(-50, 50), seed=42)
        >>> [s.name for s in parse_descriptor(text)]
        ['BigButt', 'Thighs']
    """
    rng = np.random.default_rng(seed)
    sliders = [
        slider
        for category in catalog.categorized.get(gender, {}).values()
        for slider in category
    ]
    return format_descriptor(random_slider_values(sliders, boundaries, rng))
