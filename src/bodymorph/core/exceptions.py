"""Custom exceptions for body morph operations.

This module defines domain-specific exceptions that provide clear,
actionable error messages for the failure modes of TRI decoding,
template parsing, morph application and source ingestion.

Unsupported sliders and out-of-range values are deliberately absent here:
they are collected as plain strings on ``ValidatedPreset`` instead.
"""


class BodyMorphError(Exception):
    """Base exception for all bodymorph errors.

    All custom exceptions in the bodymorph package inherit from this base class.
    This allows catching all bodymorph-related errors with a single except clause.

    Example:
        >>> try:
        ...     tri = decode_tri(data)
        ... except BodyMorphError as e:
        ...     print(f"Skipping file: {e}")
    """
    pass


# ============================================================================
# TRI format errors
# ============================================================================

class TriFormatError(BodyMorphError):
    """Raised when a TRI buffer cannot be decoded.

    Fatal for the single file being decoded. Batch callers should flag
    the file and continue with the others.
    """
    pass


class BadMagicError(TriFormatError):
    """Raised when the buffer does not start with the ``PIRT`` magic.

    Attributes:
        magic: The four bytes actually found (may be shorter than 4)
    """

    def __init__(self, magic: bytes):
        self.magic = magic
        shown = magic.decode('ascii', errors='replace')
        super().__init__(f"Invalid TRI header: expected 'PIRT', got {shown!r}")


class UnsupportedVersionError(TriFormatError):
    """Raised when the TRI header carries a version other than 1.

    Attributes:
        version: Version number read from the header
    """

    def __init__(self, version: int):
        self.version = version
        super().__init__(f"Unsupported TRI version {version}")


class OverrunError(TriFormatError):
    """Raised when decoding would read past the end of the buffer.

    Attributes:
        offset: Byte offset of the attempted read
        needed: Number of bytes the read required
        available: Total size of the buffer

    Example:
        >>> raise OverrunError(offset=12, needed=4, available=14)
        OverrunError: TRI parse overrun at 12 (need 4, size 14)
    """

    def __init__(self, offset: int, needed: int, available: int):
        self.offset = offset
        self.needed = needed
        self.available = available
        super().__init__(
            f"TRI parse overrun at {offset} (need {needed}, size {available})"
        )


# ============================================================================
# Template grammar errors
# ============================================================================

class TemplateGrammarError(BodyMorphError):
    """Raised when templates.ini text violates the morph grammar.

    The message is meant to be shown verbatim to the user.
    """
    pass


class NoMorphsDirectiveError(TemplateGrammarError):
    """Raised when the text contains no ``#morphs=`` directive at all."""

    def __init__(self):
        super().__init__("No morphs setting found in templates.ini")


class EmptyMorphsValueError(TemplateGrammarError):
    """Raised when a ``#morphs=`` directive has an empty value.

    Attributes:
        line: 1-based line number of the offending directive
    """

    def __init__(self, line: int):
        self.line = line
        super().__init__(f"Morphs setting is empty in templates.ini:{line}")


# ============================================================================
# Morph application errors
# ============================================================================

class MorphIndexError(BodyMorphError, IndexError):
    """Raised when a morph channel references a vertex outside the base buffer.

    This is a caller contract violation: the TRI file was produced for a
    mesh with a different vertex count. It is never silently absorbed.

    Attributes:
        channel: Name of the morph channel
        index: Largest vertex index referenced by the channel
        num_vertices: Vertex count of the base buffer
    """

    def __init__(self, channel: str, index: int, num_vertices: int):
        self.channel = channel
        self.index = index
        self.num_vertices = num_vertices
        super().__init__(
            f"Morph '{channel}' references vertex {index:,} but the base mesh "
            f"has {num_vertices:,} vertices. The TRI file does not match this mesh."
        )


# ============================================================================
# Ingestion and configuration errors
# ============================================================================

class SourceError(BodyMorphError):
    """Raised when a slider, category or preset record is malformed.

    Example:
        >>> if gender not in (0, 1):
        ...     raise SourceError(f"{path}: gender must be 0 or 1, got {gender}")
    """
    pass


class ValidationError(BodyMorphError):
    """Raised when configuration validation fails.

    Example:
        >>> if num_workers < 1:
        ...     raise ValidationError(f"num_workers must be >= 1, got {num_workers}")
    """
    pass
