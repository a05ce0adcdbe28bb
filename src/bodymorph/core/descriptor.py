"""
BodyGen Descriptor Grammar
==========================

Single responsibility: Convert slider lists to and from the canonical
``name@value,name@value`` text consumed by the BodyGen loader.
"""

from typing import Iterable, List, NamedTuple


class Slider(NamedTuple):
    """A slider name and its value as a signed fraction."""
    name: str
    value: float


# Same shape before and after validation
RawSlider = Slider
CleanSlider = Slider


def format_value(value: float) -> str:
    """
    Render a slider value in shortest round-trip form.

    Integral values are written without a fractional part.

    Example:
        >>> format_value(1.0), format_value(0.5), format_value(-0.25)
        ('1', '0.5', '-0.25')
    """
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def format_descriptor(sliders: Iterable[Slider]) -> str:
    """Join sliders as ``name@value,...`` in the given order."""
    return ",".join(f"{name}@{format_value(value)}" for name, value in sliders)


def parse_descriptor(text: str) -> List[Slider]:
    """
    Parse a descriptor back into sliders.

    Segments are split on ``,`` and then on the first ``@``; both parts are
    trimmed and empty segments are skipped.

    Raises:
        ValueError: If a segment has no ``@``, an empty name, or a non-numeric value
    """
    sliders = []
    for segment in text.split(","):
        segment = segment.strip()
        if not segment:
            continue
        name, sep, value = segment.partition("@")
        name, value = name.strip(), value.strip()
        if not sep or not name:
            raise ValueError(f"Malformed descriptor segment: {segment!r}")
        try:
            sliders.append(Slider(name, float(value)))
        except ValueError:
            raise ValueError(f"Invalid value for slider {name!r}: {value!r}") from None
    return sliders


def format_preset_line(name: str, descriptor: str) -> str:
    """A templates.ini entry: ``<preset name>=<descriptor>``."""
    return f"{name}={descriptor}"
