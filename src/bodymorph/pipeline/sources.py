"""
Source Ingestion
================

Single responsibility: Turn loosely-typed source records into typed structs.

Slider, category and preset records arrive as JSON-like data produced by
external parsers. They are converted here, at the boundary, so that the
core never handles untyped payloads.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from bodymorph.core.catalog import (
    CategoryEntry,
    SliderCategory,
    SliderDescriptor,
    SliderSource,
)
from bodymorph.core.descriptor import Slider
from bodymorph.core.exceptions import SourceError
from bodymorph.utils.logging import get_logger

logger = get_logger(__name__)

PathLike = Union[str, Path]


@dataclass(frozen=True)
class RawPreset:
    """
    A slider preset as read from a preset file.

    Attributes:
        name: Preset name
        set_name: Outfit/body set the preset targets
        groups: Group names used for filtering
        raw_sliders: Unvalidated sliders, values as fractions
    """
    name: str
    set_name: str = ""
    groups: Tuple[str, ...] = ()
    raw_sliders: Tuple[Slider, ...] = ()


@dataclass
class PresetFile:
    """Presets of one file, or the error that prevented reading it."""
    filename: str
    presets: List[RawPreset] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _read_json_array(filepath: PathLike) -> List[Any]:
    filepath = Path(filepath)
    with open(filepath, encoding='utf-8') as fh:
        data = json.load(fh)
    if not isinstance(data, list):
        raise SourceError(f"{filepath}: expected a JSON array, got {type(data).__name__}")
    return data


def _mapping(value: Any, where: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise SourceError(f"{where}: expected an object, got {type(value).__name__}")
    return value


def _number(record: Mapping[str, Any], key: str, where: str) -> float:
    try:
        return float(record[key])
    except KeyError:
        raise SourceError(f"{where}: missing '{key}'") from None
    except (TypeError, ValueError):
        raise SourceError(f"{where}: '{key}' is not a number: {record[key]!r}") from None


def _text(record: Mapping[str, Any], key: str, where: str) -> str:
    value = record.get(key)
    if value is None or str(value) == "":
        raise SourceError(f"{where}: missing '{key}'")
    return str(value)


# ============================================================================
# Slider sources
# ============================================================================

def descriptor_from_record(
    record: Mapping[str, Any],
    source_path: Optional[str] = None
) -> SliderDescriptor:
    """
    Convert one ``{name, morph, minimum, maximum, interval, gender}`` record.

    Raises:
        SourceError: If a field is missing or not numeric, or gender is not 0/1
    """
    record = _mapping(record, f"{source_path or '<records>'}: slider")
    where = f"{source_path or '<records>'}: slider {record.get('name', '?')!r}"
    gender = _number(record, 'gender', where)
    if gender not in (0, 1):
        raise SourceError(f"{where}: gender must be 0 or 1, got {record['gender']!r}")

    return SliderDescriptor(
        name=_text(record, 'name', where),
        morph_key=_text(record, 'morph', where),
        minimum=_number(record, 'minimum', where),
        maximum=_number(record, 'maximum', where),
        interval=_number(record, 'interval', where),
        gender=int(gender),
        source_path=source_path,
    )


def slider_sources_from_records(
    records: Iterable[Mapping[str, Any]],
    source_path: Optional[str] = None
) -> List[SliderSource]:
    """Group records by gender into sources, in order of first appearance."""
    grouped: Dict[int, List[SliderDescriptor]] = {}
    for record in records:
        descriptor = descriptor_from_record(record, source_path)
        grouped.setdefault(descriptor.gender, []).append(descriptor)

    return [
        SliderSource(gender=gender, descriptors=tuple(descriptors), source_path=source_path)
        for gender, descriptors in grouped.items()
    ]


def load_slider_sources(filepath: PathLike) -> List[SliderSource]:
    """
    Load a slider source JSON file.

    The file path is attached to every descriptor as provenance.

    Raises:
        FileNotFoundError: If the file doesn't exist
        SourceError: If the contents are malformed
    """
    source_path = str(filepath)
    try:
        records = _read_json_array(filepath)
    except json.JSONDecodeError as e:
        raise SourceError(f"{source_path}: invalid JSON: {e}") from e

    sources = slider_sources_from_records(records, source_path)
    logger.debug(f"Loaded {len(records)} sliders from {source_path}")
    return sources


# ============================================================================
# Category sources
# ============================================================================

def category_from_record(
    record: Mapping[str, Any],
    source_path: Optional[str] = None
) -> SliderCategory:
    """Convert one ``{categoryName, entries: [{morphKey, displayName}]}`` record."""
    where = f"{source_path or '<records>'}: category"
    record = _mapping(record, where)
    name = _text(record, 'categoryName', where)
    entries = []
    for entry in record.get('entries') or []:
        entry = _mapping(entry, f"{where} {name!r} entry")
        morph_key = _text(entry, 'morphKey', f"{where} {name!r}")
        entries.append(CategoryEntry(
            morph_key=morph_key,
            display_name=str(entry.get('displayName') or morph_key),
        ))
    return SliderCategory(category_name=name, entries=tuple(entries), source_path=source_path)


def load_category_sources(filepath: PathLike) -> List[SliderCategory]:
    """
    Load a category JSON file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        SourceError: If the contents are malformed
    """
    source_path = str(filepath)
    try:
        records = _read_json_array(filepath)
    except json.JSONDecodeError as e:
        raise SourceError(f"{source_path}: invalid JSON: {e}") from e
    return [category_from_record(r, source_path) for r in records]


# ============================================================================
# Presets
# ============================================================================

def _group_names(groups: Any, where: str) -> Tuple[str, ...]:
    if not groups:
        return ()
    if isinstance(groups, (Mapping, str)):
        groups = [groups]
    elif not isinstance(groups, Sequence):
        raise SourceError(f"{where}: 'groups' must be an array, got {groups!r}")
    names = []
    for group in groups:
        if isinstance(group, Mapping):
            names.append(_text(group, 'name', f"{where}: group"))
        elif isinstance(group, str) and group:
            names.append(group)
        else:
            raise SourceError(f"{where}: group must be an object or a name, got {group!r}")
    return tuple(names)


def preset_from_record(
    record: Mapping[str, Any],
    percent_values: bool = True,
    source_path: Optional[str] = None
) -> RawPreset:
    """
    Convert one ``{name, set, groups, sliders}`` preset record.

    Args:
        record: Parsed preset
        percent_values: Divide slider values by 100 (source files store percentages)
        source_path: File the record came from, used in error messages

    Raises:
        SourceError: If the record or one of its sliders/groups is not an
            object, a name is missing, or a slider value is not numeric
    """
    record = _mapping(record, f"{source_path or '<records>'}: preset")
    name = _text(record, 'name', f"{source_path or '<records>'}: preset")
    where = f"{source_path or '<records>'}: preset {name!r}"
    divisor = 100.0 if percent_values else 1.0

    raw = record.get('sliders') or []
    if isinstance(raw, (str, Mapping)) or not isinstance(raw, Sequence):
        raise SourceError(f"{where}: 'sliders' must be an array")
    sliders = []
    for slider in raw:
        slider = _mapping(slider, f"{where}: slider")
        slider_where = f"{where}: slider {slider.get('name', '?')!r}"
        sliders.append(Slider(
            _text(slider, 'name', slider_where),
            _number(slider, 'value', slider_where) / divisor,
        ))

    return RawPreset(
        name=name,
        set_name=str(record.get('set') or ""),
        groups=_group_names(record.get('groups'), where),
        raw_sliders=tuple(sliders),
    )


def load_presets(filepath: PathLike, percent_values: bool = True) -> PresetFile:
    """
    Load a preset JSON file.

    A file that cannot be read or converted yields a PresetFile carrying
    the error message instead of raising, so one broken file does not
    stop a folder scan.
    """
    filepath = Path(filepath)
    try:
        records = _read_json_array(filepath)
        presets = [preset_from_record(r, percent_values, filepath.name) for r in records]
    except (OSError, json.JSONDecodeError, SourceError) as e:
        logger.warning(f"Could not read presets from {filepath.name}: {e}")
        return PresetFile(filename=filepath.name, error=str(e))

    logger.debug(f"Loaded {len(presets)} presets from {filepath.name}")
    return PresetFile(filename=filepath.name, presets=presets)


def discover_preset_files(folder: PathLike) -> List[Path]:
    """All ``*.json`` preset files directly inside ``folder``, sorted."""
    return sorted(p for p in Path(folder).iterdir() if p.suffix.lower() == '.json')


def preset_groups(files: Iterable[PresetFile]) -> List[str]:
    """Distinct group names across all readable files, sorted."""
    names = {
        group
        for f in files
        for preset in f.presets
        for group in preset.groups
    }
    return sorted(names, key=str.lower)


def filter_presets(
    presets: Iterable[RawPreset],
    query: str = "",
    groups: Sequence[str] = ()
) -> List[RawPreset]:
    """
    Filter presets by name and group.

    A preset matches when its name contains ``query`` (case-insensitive)
    and, if any groups are selected, it belongs to at least one of them.
    """
    query = query.lower()
    selected = set(groups)
    return [
        p for p in presets
        if (not query or query in p.name.lower())
        and (not selected or selected.intersection(p.groups))
    ]
