"""
Template INI Codec
==================

Single responsibility: Parse and format the templates.ini / morphs.ini grammar.

Grammar (line oriented, whitespace trimmed, blank lines ignored)::

    #morphs=pluginA.esm;pluginB.esm     sets the current rule key
    # anything else                     comment
    Preset1=BigButt@0.5,Thighs@-1       entry under the current rule key

Entries before the first directive and lines without ``=`` are ignored.
A directive with an empty value is a fatal error citing its line number.
"""

from typing import Dict, List, NamedTuple, Optional

from bodymorph.core.exceptions import EmptyMorphsValueError, NoMorphsDirectiveError
from bodymorph.utils.logging import get_logger

logger = get_logger(__name__)

MORPHS_DIRECTIVE = "#morphs="
RULE_SEPARATOR = ";"
NAME_SEPARATOR = "|"


class TemplateEntry(NamedTuple):
    """A named BodyGen descriptor (``name=value`` line)."""
    name: str
    value: str


class FormattedTemplates(NamedTuple):
    """Contents of the two output files."""
    templates: str
    morphs: str


# Rule key -> entries, both in document order
TemplateDocument = Dict[str, List[TemplateEntry]]


def _directive_value(line: str, lineno: int) -> Optional[str]:
    """Rule key of a ``#morphs=`` line, or None for any other line."""
    if not line.startswith(MORPHS_DIRECTIVE):
        return None
    key = line[len(MORPHS_DIRECTIVE):].strip()
    if not key:
        raise EmptyMorphsValueError(lineno)
    return key


def parse_templates(text: str) -> TemplateDocument:
    """
    Parse templates.ini text into a document.

    A rule key that appears again later keeps collecting into its existing
    entry list. A directive that is never followed by an entry creates no key.

    Args:
        text: templates.ini contents

    Returns:
        Ordered mapping of rule key to entries

    Raises:
        EmptyMorphsValueError: If a ``#morphs=`` directive has no value

    Example:
        >>> parse_templates("#morphs=pluginA.esm\\nPreset1=BigButt@0.5")
        {'pluginA.esm': [TemplateEntry(name='Preset1', value='BigButt@0.5')]}
    """
    document: TemplateDocument = {}
    current = None

    for lineno, raw in enumerate(text.split("\n"), start=1):
        line = raw.strip()
        if not line:
            continue

        if line.startswith("#"):
            key = _directive_value(line, lineno)
            if key is not None:
                current = key
            continue

        if current is None:
            continue

        name, sep, value = line.partition("=")
        name, value = name.strip(), value.strip()
        if not sep or not name or not value:
            continue
        document.setdefault(current, []).append(TemplateEntry(name, value))

    logger.debug(
        f"Parsed templates: {len(document)} rule keys, "
        f"{sum(len(e) for e in document.values())} entries"
    )
    return document


def validate_templates(text: str) -> None:
    """
    Check that the text has at least one non-empty ``#morphs=`` directive.

    Raises:
        EmptyMorphsValueError: If a directive has no value
        NoMorphsDirectiveError: If there is no directive at all
    """
    found = False
    for lineno, raw in enumerate(text.split("\n"), start=1):
        if _directive_value(raw.strip(), lineno) is not None:
            found = True
    if not found:
        raise NoMorphsDirectiveError()


def split_rule_key(key: str) -> List[str]:
    """Atomic rule names of a compound key; empty parts are dropped."""
    return [part.strip() for part in key.split(RULE_SEPARATOR) if part.strip()]


def format_document(document: TemplateDocument) -> FormattedTemplates:
    """
    Render a document as templates.ini and morphs.ini text.

    templates.ini repeats each rule key as a directive followed by its
    entries. morphs.ini fans each compound key out to one line per atomic
    rule, listing the entry names joined by ``|``. Rule keys without
    entries are omitted from both.

    Example:
        >>> format_document({"a.esm;b.esm": [TemplateEntry("P1", "X@1")]}).morphs
        'a.esm=P1\\n\\nb.esm=P1'
    """
    blocks = []
    morph_lines = []

    for key, entries in document.items():
        if not entries:
            continue
        blocks.append(f"{MORPHS_DIRECTIVE}{key}")
        blocks.append("\n\n".join(f"{e.name}={e.value}" for e in entries))

        names = NAME_SEPARATOR.join(e.name for e in entries)
        for rule in split_rule_key(key):
            morph_lines.append(f"{rule}={names}")

    return FormattedTemplates(
        templates="\n\n\n".join(blocks),
        morphs="\n\n".join(morph_lines),
    )


def format_templates(text: str) -> FormattedTemplates:
    """Validate, parse and format templates.ini text in one step."""
    validate_templates(text)
    return format_document(parse_templates(text))


def render_templates(document: TemplateDocument) -> str:
    """Compact templates.ini text for a document (one entry per line)."""
    lines = []
    for key, entries in document.items():
        lines.append(f"{MORPHS_DIRECTIVE}{key}")
        lines.extend(f"{e.name}={e.value}" for e in entries)
    return "\n".join(lines)
