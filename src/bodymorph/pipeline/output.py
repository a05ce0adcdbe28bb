"""
Plugin Output
=============

Single responsibility: Locate plugin folders and write templates.ini /
morphs.ini into each of them.

Plugin folders are the directories of the data root whose name ends in
``.esm``. When the starting point is an existing ``.ini`` file inside a
plugin folder, the root is that folder's parent.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, List, Union

from bodymorph.core.templates import FormattedTemplates, format_templates
from bodymorph.utils.logging import get_logger

logger = get_logger(__name__)

PLUGIN_SUFFIX = ".esm"
OUTPUT_FILES = {"templates": "templates.ini", "morphs": "morphs.ini"}


class FileStatus(str, Enum):
    UP_TO_DATE = "up-to-date"
    WILL_BE_UPDATED = "will be updated"
    WILL_BE_CREATED = "will be created"
    UNKNOWN = "unknown"


@dataclass
class Plugin:
    """A plugin folder and the state of its output files."""
    name: str
    path: Path
    source: bool = False
    templates: FileStatus = FileStatus.UNKNOWN
    morphs: FileStatus = FileStatus.UNKNOWN


def resolve_plugins(from_path: Union[str, Path]) -> List[Plugin]:
    """
    List the plugin folders reachable from ``from_path``.

    Args:
        from_path: Data root, or a ``.ini`` file inside one plugin folder

    Returns:
        Plugins sorted by name; ``source`` marks the folder the ``.ini`` came from
    """
    from_path = Path(from_path)
    folder = from_path
    root = from_path
    if from_path.suffix.lower() == ".ini":
        folder = from_path.parent
        root = folder.parent

    folder = folder.resolve()
    plugins = []
    for item in sorted(root.iterdir(), key=lambda p: p.name):
        if not item.is_dir() or not item.name.endswith(PLUGIN_SUFFIX):
            continue
        plugins.append(Plugin(name=item.name, path=item, source=item.resolve() == folder))

    logger.debug(f"Resolved {len(plugins)} plugins under {root}")
    return plugins


def _status(path: Path, content: str) -> FileStatus:
    if not path.exists():
        return FileStatus.WILL_BE_CREATED
    if path.read_text(encoding='utf-8') == content:
        return FileStatus.UP_TO_DATE
    return FileStatus.WILL_BE_UPDATED


def plugin_status(from_path: Union[str, Path], templates_text: str) -> List[Plugin]:
    """
    Report what writing ``templates_text`` would change in each plugin.

    Raises:
        TemplateGrammarError: If ``templates_text`` is not valid
    """
    formatted = format_templates(templates_text)
    contents: Dict[str, str] = formatted._asdict()

    plugins = resolve_plugins(from_path)
    for plugin in plugins:
        for key, filename in OUTPUT_FILES.items():
            setattr(plugin, key, _status(plugin.path / filename, contents[key]))
    return plugins


def write_formatted(folder: Path, formatted: FormattedTemplates) -> None:
    """Write both output files into one folder."""
    (folder / OUTPUT_FILES["templates"]).write_text(formatted.templates, encoding='utf-8')
    (folder / OUTPUT_FILES["morphs"]).write_text(formatted.morphs, encoding='utf-8')


def write_outputs(from_path: Union[str, Path], templates_text: str) -> int:
    """
    Format ``templates_text`` and write it into every plugin folder.

    Returns:
        Number of plugins written

    Raises:
        TemplateGrammarError: If ``templates_text`` is not valid; nothing is written
    """
    formatted = format_templates(templates_text)

    count = 0
    for plugin in resolve_plugins(from_path):
        write_formatted(plugin.path, formatted)
        logger.info(f"Wrote {OUTPUT_FILES['templates']} and {OUTPUT_FILES['morphs']} to {plugin.name}")
        count += 1
    return count
