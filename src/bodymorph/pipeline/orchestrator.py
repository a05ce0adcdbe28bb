"""
Conversion Pipeline Orchestrator
================================

Single responsibility: Coordinate batch work over the pure core functions.

Every batch helper isolates failures per item: a broken TRI or preset
file is reported on its own result and the rest of the batch continues.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from bodymorph.core.catalog import SliderCatalog
from bodymorph.core.exceptions import TriFormatError
from bodymorph.core.templates import TemplateDocument, TemplateEntry
from bodymorph.core.tri import TriFile, read_tri
from bodymorph.core.validator import ValidatedPreset, validate_preset
from bodymorph.pipeline.config import ConverterConfig
from bodymorph.pipeline.sources import (
    PresetFile,
    RawPreset,
    load_category_sources,
    load_slider_sources,
)
from bodymorph.utils.logging import get_logger
from bodymorph.utils.parallel import run_batch

logger = get_logger(__name__)


@dataclass(frozen=True)
class TriLoadResult:
    """Outcome of decoding one TRI file."""
    path: Path
    tri: Optional[TriFile] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.tri is not None


def build_catalog(config: ConverterConfig) -> SliderCatalog:
    """
    Load every configured source and build the shared catalog.

    Raises:
        SourceError: If a source file is malformed
    """
    slider_sources = [s for path in config.slider_sources for s in load_slider_sources(path)]
    category_sources = [c for path in config.category_sources for c in load_category_sources(path)]

    catalog = SliderCatalog.build(slider_sources, category_sources)
    logger.info(
        f"Slider catalog ready: {len(catalog)} sliders from "
        f"{len(config.slider_sources)} files, {len(category_sources)} categories"
    )
    return catalog


def validate_presets(
    catalog: SliderCatalog,
    presets: Sequence[RawPreset],
    num_workers: int = 1
) -> List[ValidatedPreset]:
    """
    Validate presets, in input order.

    Validation is pure, so presets are spread over a worker pool when
    ``num_workers > 1`` and results are returned in input order.
    """
    def run(preset: RawPreset) -> ValidatedPreset:
        return validate_preset(catalog, preset.raw_sliders, name=preset.name)

    results = run_batch(run, list(presets), num_workers, task_type="cpu")

    invalid = sum(1 for r in results if not r.valid)
    logger.info(f"Validated {len(results)} presets ({invalid} with removed sliders)")
    return results


def validate_preset_files(
    catalog: SliderCatalog,
    files: Iterable[PresetFile],
    num_workers: int = 1
) -> List[Tuple[PresetFile, List[ValidatedPreset]]]:
    """Validate the presets of every readable file; unreadable files get no results."""
    results = []
    for preset_file in files:
        if not preset_file.ok:
            logger.warning(f"Skipping {preset_file.filename}: {preset_file.error}")
            results.append((preset_file, []))
            continue
        results.append((preset_file, validate_presets(catalog, preset_file.presets, num_workers)))
    return results


def _load_tri(path: Path) -> TriLoadResult:
    try:
        return TriLoadResult(path=path, tri=read_tri(path))
    except (OSError, TriFormatError) as e:
        logger.warning(f"Failed to decode {path.name}: {e}")
        return TriLoadResult(path=path, error=str(e))


def decode_tri_files(
    paths: Iterable[Union[str, Path]],
    num_workers: int = 1
) -> List[TriLoadResult]:
    """
    Decode many TRI files, isolating failures per file.

    Returns:
        One TriLoadResult per path, in input order
    """
    paths = [Path(p) for p in paths]
    results = run_batch(_load_tri, paths, num_workers, task_type="io")

    failed = sum(1 for r in results if not r.ok)
    logger.info(f"Decoded {len(results) - failed}/{len(results)} TRI files")
    return results


def build_document(
    rules: Iterable[Tuple[Sequence[str], Iterable[Tuple[str, str]]]]
) -> TemplateDocument:
    """
    Assemble a template document from rule groups.

    Args:
        rules: (rule names, [(preset name, descriptor), ...]) pairs; the rule
            names of a group become one ``;``-joined compound key

    Returns:
        TemplateDocument; groups sharing a compound key are merged in order

    Example:
        >>> build_document([(["a.esm", "b.esm"], [("Curvy", "BigButt@1")])])
        {'a.esm;b.esm': [TemplateEntry(name='Curvy', value='BigButt@1')]}
    """
    document: TemplateDocument = {}
    for rule_names, presets in rules:
        key = ";".join(rule_names)
        if not key:
            raise ValueError("A rule group needs at least one rule name")
        entries = [TemplateEntry(name, descriptor) for name, descriptor in presets]
        if entries:
            document.setdefault(key, []).extend(entries)
    return document
