"""Core morph data pipeline.

This module contains the pure operations of the converter:
- TRI decoding (sparse per-vertex morph channels)
- Slider catalog construction and lookup
- Preset validation and BodyGen descriptors
- Morph application for preview
- templates.ini / morphs.ini parsing and formatting
"""

from .tri import TriFile, MorphChannel, TriEntry, decode_tri, encode_tri, read_tri
from .catalog import (
    SliderCatalog,
    SliderDescriptor,
    SliderSource,
    SliderCategory,
    CategoryEntry,
    DecoratedSlider,
    UNCATEGORIZED,
)
from .descriptor import Slider, RawSlider, CleanSlider, format_descriptor, parse_descriptor
from .validator import ValidatedPreset, validate_preset, GENDER_AMBIGUOUS
from .morpher import MorphApplier, apply_morphs, create_applier, index_morphs
from .templates import (
    TemplateDocument,
    TemplateEntry,
    FormattedTemplates,
    parse_templates,
    validate_templates,
    format_document,
    format_templates,
)
from .randomizer import random_slider_values, randomize_descriptor
from .exceptions import *

__all__ = [
    # TRI
    "TriFile",
    "MorphChannel",
    "TriEntry",
    "decode_tri",
    "encode_tri",
    "read_tri",
    # Catalog
    "SliderCatalog",
    "SliderDescriptor",
    "SliderSource",
    "SliderCategory",
    "CategoryEntry",
    "DecoratedSlider",
    "UNCATEGORIZED",
    # Descriptors
    "Slider",
    "RawSlider",
    "CleanSlider",
    "format_descriptor",
    "parse_descriptor",
    # Validation
    "ValidatedPreset",
    "validate_preset",
    "GENDER_AMBIGUOUS",
    # Morphing
    "MorphApplier",
    "apply_morphs",
    "create_applier",
    "index_morphs",
    # Templates
    "TemplateDocument",
    "TemplateEntry",
    "FormattedTemplates",
    "parse_templates",
    "validate_templates",
    "format_document",
    "format_templates",
    # Randomizer
    "random_slider_values",
    "randomize_descriptor",
]
