"""BodyMorph - Slider preset to BodyGen morph conversion.

This package turns body-shape slider presets into validated BodyGen
morph descriptors, writes the templates.ini / morphs.ini files consumed
by the game's morph loader, and previews presets by applying TRI morph
channels to a base vertex buffer.

Quick Start:
    >>> from bodymorph.core import SliderCatalog, validate_preset, read_tri, create_applier
    >>> from bodymorph.pipeline import load_slider_sources
    >>>
    >>> catalog = SliderCatalog.build(load_slider_sources('sliders/cbbe.json'))
    >>> result = validate_preset(catalog, [("BigButt", 0.5)], name="Curvy")
    >>> result.bodygen_line
    'Curvy=BigButt@0.5'
    >>>
    >>> applier = create_applier(read_tri('femalebody.tri'))
    >>> morphed = applier.apply_descriptor(base_vertices, result.descriptor)

Modules:
    core: TRI decoding, slider catalog, validation, morphing, template grammar
    pipeline: Configuration, source ingestion, batch helpers, plugin output
    cli: Command-line interface
    utils: Logging, worker pools
"""

__version__ = "1.0.0"
__license__ = "MIT"

from .core.exceptions import (
    BodyMorphError,
    TriFormatError,
    BadMagicError,
    UnsupportedVersionError,
    OverrunError,
    TemplateGrammarError,
    NoMorphsDirectiveError,
    EmptyMorphsValueError,
    MorphIndexError,
    SourceError,
    ValidationError,
)

from .utils.logging import setup_logger, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Exceptions
    "BodyMorphError",
    "TriFormatError",
    "BadMagicError",
    "UnsupportedVersionError",
    "OverrunError",
    "TemplateGrammarError",
    "NoMorphsDirectiveError",
    "EmptyMorphsValueError",
    "MorphIndexError",
    "SourceError",
    "ValidationError",
    # Logging
    "setup_logger",
    "get_logger",
]
