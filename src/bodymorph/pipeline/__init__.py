"""High-level pipeline orchestration.

Contains configuration, source ingestion, batch helpers and plugin output.
"""

from .config import ConverterConfig
from .orchestrator import (
    TriLoadResult,
    build_catalog,
    build_document,
    decode_tri_files,
    validate_preset_files,
    validate_presets,
)
from .output import Plugin, FileStatus, plugin_status, resolve_plugins, write_outputs
from .sources import (
    PresetFile,
    RawPreset,
    filter_presets,
    load_category_sources,
    load_presets,
    load_slider_sources,
    preset_groups,
)

__all__ = [
    'ConverterConfig',
    'TriLoadResult',
    'build_catalog',
    'build_document',
    'decode_tri_files',
    'validate_preset_files',
    'validate_presets',
    'Plugin',
    'FileStatus',
    'plugin_status',
    'resolve_plugins',
    'write_outputs',
    'PresetFile',
    'RawPreset',
    'filter_presets',
    'load_category_sources',
    'load_presets',
    'load_slider_sources',
    'preset_groups',
]
