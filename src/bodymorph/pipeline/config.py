"""
Converter Configuration
=======================

Single responsibility: Configure the preset conversion pipeline with validation.
"""

import json
from dataclasses import dataclass, field
from multiprocessing import cpu_count
from pathlib import Path
from typing import List, Optional, Union

import torch

from bodymorph.core.exceptions import ValidationError

VALID_LOG_LEVELS = {'DEBUG', 'INFO', 'WARNING', 'ERROR'}


@dataclass
class ConverterConfig:
    """
    Configuration for the preset conversion pipeline.

    This dataclass encapsulates all settings needed for conversion,
    with validation in __post_init__ to catch errors early.

    Attributes:
        data_folder: Game data folder holding the plugin (.esm) folders
        output_folder: Plugin folders that status/write target (default: data_folder)
        slider_sources: Slider source JSON files
        category_sources: Slider category JSON files
        percent_values: Preset values are 0-100 percentages to divide by 100
        num_workers: Number of parallel workers for batch validation/decoding
        device: PyTorch device for morph preview (overridden by --gpu/--cpu)
        verbose: Enable console logging
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)

    Example:
        >>> config = ConverterConfig(
        ...     data_folder=Path("Data"),
        ...     slider_sources=[Path("sliders/cbbe.json")],
        ... )
        >>> config.output_folder == config.data_folder
        True
    """

    data_folder: Path
    output_folder: Optional[Path] = None

    slider_sources: List[Path] = field(default_factory=list)
    category_sources: List[Path] = field(default_factory=list)
    percent_values: bool = True

    num_workers: int = field(default_factory=lambda: max(1, cpu_count() - 1))
    device: torch.device = field(default_factory=lambda: torch.device('cpu'))

    verbose: bool = True
    log_level: str = "INFO"

    def __post_init__(self):
        """
        Validate and normalize configuration after initialization.

        Raises:
            ValidationError: If any configuration is invalid
        """
        self.data_folder = Path(self.data_folder)
        self.output_folder = Path(self.output_folder) if self.output_folder else self.data_folder
        self.slider_sources = [Path(p) for p in self.slider_sources]
        self.category_sources = [Path(p) for p in self.category_sources]
        self.device = torch.device(self.device)

        if not self.data_folder.is_dir():
            raise ValidationError(f"Data folder not found: {self.data_folder}")

        for path in self.slider_sources + self.category_sources:
            if not path.exists():
                raise ValidationError(f"Source file not found: {path}")
            if path.suffix.lower() != '.json':
                raise ValidationError(
                    f"Invalid source format: {path.suffix}\n"
                    f"Supported formats: .json"
                )

        if self.device.type == 'cuda' and not torch.cuda.is_available():
            raise ValidationError("CUDA requested but not available, use device 'cpu'")

        if self.log_level.upper() not in VALID_LOG_LEVELS:
            raise ValidationError(
                f"Invalid log_level: {self.log_level}\n"
                f"Must be one of: {VALID_LOG_LEVELS}"
            )
        self.log_level = self.log_level.upper()

        if self.num_workers < 1:
            raise ValidationError(f"num_workers must be >= 1, got {self.num_workers}")

    @classmethod
    def from_json(cls, filepath: Union[str, Path]) -> "ConverterConfig":
        """
        Load configuration from a JSON file.

        Relative paths in the file are resolved against the file's folder.

        Raises:
            ValidationError: If the file is unreadable or a value is invalid
        """
        filepath = Path(filepath)
        try:
            with open(filepath, encoding='utf-8') as fh:
                data = json.load(fh)
        except (OSError, json.JSONDecodeError) as e:
            raise ValidationError(f"Could not read config {filepath}: {e}") from e

        base = filepath.parent

        def resolve(p):
            return p if p is None else base / p

        known = {f for f in cls.__dataclass_fields__}
        unknown = set(data) - known
        if unknown:
            raise ValidationError(f"Unknown config keys: {sorted(unknown)}")
        if 'data_folder' not in data:
            raise ValidationError("Config is missing 'data_folder'")

        data['data_folder'] = resolve(data['data_folder'])
        data['output_folder'] = resolve(data.get('output_folder'))
        data['slider_sources'] = [resolve(p) for p in data.get('slider_sources', [])]
        data['category_sources'] = [resolve(p) for p in data.get('category_sources', [])]
        return cls(**data)

    def __repr__(self) -> str:
        return (
            f"ConverterConfig(\n"
            f"  data_folder={self.data_folder},\n"
            f"  output_folder={self.output_folder},\n"
            f"  slider_sources={len(self.slider_sources)},\n"
            f"  category_sources={len(self.category_sources)},\n"
            f"  workers={self.num_workers},\n"
            f"  device={self.device}\n"
            f")"
        )
