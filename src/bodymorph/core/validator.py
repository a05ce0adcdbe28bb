"""
Preset Validation
=================

Single responsibility: Check raw preset sliders against the slider catalog.

Validation never raises for data problems. Unsupported sliders become
entries in ``errors``, out-of-range values are clamped and reported in
``warnings``, and the result always carries a usable descriptor.
"""

from dataclasses import dataclass
from typing import Iterable, Tuple

from bodymorph.core.catalog import GENDERS, SliderCatalog
from bodymorph.core.descriptor import Slider, format_descriptor, format_preset_line, format_value
from bodymorph.utils.logging import get_logger

logger = get_logger(__name__)

GENDER_AMBIGUOUS = -1


@dataclass(frozen=True)
class ValidatedPreset:
    """
    Result of validating one preset.

    Attributes:
        name: Preset name
        raw_sliders: Sliders as given
        clean_sliders: Supported sliders, clamped, in input order
        errors: One message per removed slider
        warnings: One message per clamped value
        gender: 0 or 1 by majority of matched sliders, -1 on a tie
        descriptor: ``name@value,...`` for ``clean_sliders``
    """
    name: str
    raw_sliders: Tuple[Slider, ...]
    clean_sliders: Tuple[Slider, ...]
    errors: Tuple[str, ...]
    warnings: Tuple[str, ...]
    gender: int
    descriptor: str

    @property
    def valid(self) -> bool:
        return not self.errors

    @property
    def bodygen_line(self) -> str:
        return format_preset_line(self.name, self.descriptor)


def unsupported_message(name: str) -> str:
    return f'Slider "{name}" is not supported. Removed.'


def below_minimum_message(name: str, value: float, minimum: float) -> str:
    return (
        f'Slider "{name}" value {format_value(value)} is less than minimum allowed. '
        f'Corrected to {format_value(minimum)}.'
    )


def above_maximum_message(name: str, value: float, maximum: float) -> str:
    return (
        f'Slider "{name}" value {format_value(value)} is greater than maximum allowed. '
        f'Corrected to {format_value(maximum)}.'
    )


def infer_gender(hits_0: int, hits_1: int) -> int:
    """Majority gender, or -1 when the counts are equal."""
    if hits_0 > hits_1:
        return 0
    if hits_1 > hits_0:
        return 1
    return GENDER_AMBIGUOUS


def validate_preset(
    catalog: SliderCatalog,
    raw_sliders: Iterable[Tuple[str, float]],
    name: str = ""
) -> ValidatedPreset:
    """
    Validate raw sliders against a catalog.

    Sliders are processed in input order. A slider whose name matches no
    morph key in either gender is dropped with an error. A matched slider
    is clamped to its descriptor's range (values exactly on a boundary are
    left alone) and counted towards the gender it matched, gender 0 first.

    Pure and deterministic: identical inputs give identical results,
    including element order.

    Args:
        catalog: Shared slider catalog
        raw_sliders: (name, value) pairs; values are fractions
        name: Preset name carried onto the result

    Returns:
        ValidatedPreset

    Example:
        >>> result = validate_preset(catalog, [("BigButt", 1.5)], name="Curvy")
        >>> result.descriptor, result.warnings
        ('BigButt@1', ('Slider "BigButt" value 1.5 is greater than maximum allowed. Corrected to 1.',))
    """
    raw = tuple(Slider(str(n), float(v)) for n, v in raw_sliders)
    clean = []
    errors = []
    warnings = []
    hits = {g: 0 for g in GENDERS}

    for slider in raw:
        match = catalog.find(slider.name)
        if match is None:
            errors.append(unsupported_message(slider.name))
            continue

        hit_gender, descriptor = match
        value = slider.value
        if value < descriptor.minimum:
            warnings.append(below_minimum_message(slider.name, value, descriptor.minimum))
            value = descriptor.minimum
        elif value > descriptor.maximum:
            warnings.append(above_maximum_message(slider.name, value, descriptor.maximum))
            value = descriptor.maximum

        clean.append(Slider(slider.name, float(value)))
        hits[hit_gender] += 1

    gender = infer_gender(hits[0], hits[1])
    logger.debug(
        f"Validated preset '{name}': {len(clean)}/{len(raw)} sliders kept, "
        f"{len(errors)} errors, {len(warnings)} warnings, gender {gender}"
    )

    return ValidatedPreset(
        name=name,
        raw_sliders=raw,
        clean_sliders=tuple(clean),
        errors=tuple(errors),
        warnings=tuple(warnings),
        gender=gender,
        descriptor=format_descriptor(clean),
    )
