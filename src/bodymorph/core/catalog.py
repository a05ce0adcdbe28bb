"""
Slider Catalog
==============

Single responsibility: Index slider descriptors per gender and decorate
them with their display categories.

A catalog is built once from already-parsed sources and is never mutated
afterwards, so a single instance can be shared by any number of
concurrent validation calls.
"""

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from bodymorph.core.exceptions import SourceError
from bodymorph.utils.logging import get_logger

logger = get_logger(__name__)

GENDERS = (0, 1)
GENDER_LABELS = {0: "Male (0)", 1: "Female (1)"}
UNCATEGORIZED = "Uncategorized"


@dataclass(frozen=True)
class SliderDescriptor:
    """
    One user-adjustable slider and its allowed range.

    Attributes:
        name: Display name of the slider
        morph_key: Join key against ``MorphChannel.name`` and raw slider names
        minimum: Lowest allowed value (fraction, not percentage)
        maximum: Highest allowed value
        interval: Step size used by editors and the randomizer
        gender: 0 or 1
        source_path: File the descriptor was read from (provenance only)
    """
    name: str
    morph_key: str
    minimum: float
    maximum: float
    interval: float
    gender: int
    source_path: Optional[str] = None


@dataclass(frozen=True)
class SliderSource:
    """All descriptors contributed by one source file for one gender."""
    gender: int
    descriptors: Tuple[SliderDescriptor, ...]
    source_path: Optional[str] = None

    def __post_init__(self):
        if self.gender not in GENDERS:
            raise SourceError(f"Slider source gender must be 0 or 1, got {self.gender!r}")
        object.__setattr__(self, 'descriptors', tuple(self.descriptors))


@dataclass(frozen=True)
class CategoryEntry:
    morph_key: str
    display_name: str


@dataclass(frozen=True)
class SliderCategory:
    """A named display grouping of morph keys."""
    category_name: str
    entries: Tuple[CategoryEntry, ...] = field(default_factory=tuple)
    source_path: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, 'entries', tuple(self.entries))


@dataclass(frozen=True)
class DecoratedSlider:
    """A descriptor placed in its display category."""
    descriptor: SliderDescriptor
    category: str
    display_name: str

    @property
    def name(self) -> str:
        return self.descriptor.name

    @property
    def morph_key(self) -> str:
        return self.descriptor.morph_key

    @property
    def minimum(self) -> float:
        return self.descriptor.minimum

    @property
    def maximum(self) -> float:
        return self.descriptor.maximum

    @property
    def interval(self) -> float:
        return self.descriptor.interval

    @property
    def gender(self) -> int:
        return self.descriptor.gender


class SliderCatalog:
    """
    Per-gender index of slider descriptors.

    Use ``SliderCatalog.build`` rather than the constructor.

    Attributes:
        by_gender: {gender: (SliderDescriptor, ...)} in source order
        categorized: {gender: {category name: (DecoratedSlider, ...)}}
    """

    def __init__(
        self,
        by_gender: Mapping[int, Tuple[SliderDescriptor, ...]],
        categorized: Mapping[int, Mapping[str, Tuple[DecoratedSlider, ...]]],
    ):
        self.by_gender = MappingProxyType(dict(by_gender))
        self.categorized = MappingProxyType({
            g: MappingProxyType(dict(cats)) for g, cats in categorized.items()
        })

        # morph_key -> first descriptor, per gender
        index: Dict[int, Dict[str, SliderDescriptor]] = {}
        for gender, descriptors in self.by_gender.items():
            keyed: Dict[str, SliderDescriptor] = {}
            for descriptor in descriptors:
                if descriptor.morph_key in keyed:
                    logger.debug(
                        f"Duplicate morph key '{descriptor.morph_key}' for gender {gender} "
                        f"in {descriptor.source_path}; keeping first"
                    )
                    continue
                keyed[descriptor.morph_key] = descriptor
            index[gender] = keyed
        self._index = index

    @classmethod
    def build(
        cls,
        slider_sources: Iterable[SliderSource],
        category_sources: Iterable[SliderCategory] = (),
    ) -> "SliderCatalog":
        """
        Build a catalog from parsed slider and category sources.

        Every descriptor is filed under its source's gender and inherits the
        source path when it has none of its own. A descriptor is placed in the
        first category (in source order) whose entries contain its morph key;
        unmatched descriptors land in ``Uncategorized`` with the morph key as
        display name.

        Args:
            slider_sources: Descriptor groups, one per (file, gender)
            category_sources: Display categories

        Returns:
            Immutable SliderCatalog
        """
        by_gender: Dict[int, List[SliderDescriptor]] = {g: [] for g in GENDERS}
        for source in slider_sources:
            for descriptor in source.descriptors:
                by_gender[source.gender].append(replace(
                    descriptor,
                    gender=source.gender,
                    source_path=descriptor.source_path or source.source_path,
                ))

        # morph_key -> (category, display name); first category wins
        placement: Dict[str, Tuple[str, str]] = {}
        for category in category_sources:
            for entry in category.entries:
                placement.setdefault(entry.morph_key, (category.category_name, entry.display_name))

        categorized: Dict[int, Dict[str, List[DecoratedSlider]]] = {g: {} for g in GENDERS}
        for gender, descriptors in by_gender.items():
            for descriptor in descriptors:
                category, display_name = placement.get(
                    descriptor.morph_key, (UNCATEGORIZED, descriptor.morph_key)
                )
                categorized[gender].setdefault(category, []).append(
                    DecoratedSlider(descriptor, category, display_name)
                )

        catalog = cls(
            by_gender={g: tuple(d) for g, d in by_gender.items()},
            categorized={
                g: {name: tuple(items) for name, items in cats.items()}
                for g, cats in categorized.items()
            },
        )
        logger.debug(
            f"Built slider catalog: {len(catalog.by_gender[0])} gender-0 and "
            f"{len(catalog.by_gender[1])} gender-1 sliders, "
            f"{len(placement)} categorized keys"
        )
        return catalog

    def lookup(self, morph_key: str, gender: int) -> Optional[SliderDescriptor]:
        """O(1) lookup of a morph key within one gender."""
        return self._index.get(gender, {}).get(morph_key)

    def find(self, morph_key: str) -> Optional[Tuple[int, SliderDescriptor]]:
        """
        Look up a morph key across both genders, gender 0 first.

        Returns:
            (gender, descriptor) for the first match, or None
        """
        for gender in GENDERS:
            descriptor = self.lookup(morph_key, gender)
            if descriptor is not None:
                return gender, descriptor
        return None

    def __contains__(self, morph_key: str) -> bool:
        return self.find(morph_key) is not None

    def __len__(self) -> int:
        return sum(len(d) for d in self.by_gender.values())

    def sliders_by_source(self, gender: int) -> Dict[str, List[SliderDescriptor]]:
        """Group one gender's descriptors by source path, in first-seen order."""
        grouped: Dict[str, List[SliderDescriptor]] = {}
        for descriptor in self.by_gender.get(gender, ()):
            grouped.setdefault(descriptor.source_path or "unknown", []).append(descriptor)
        return grouped
