"""Pytest configuration and fixtures for bodymorph tests."""

import json
import struct

import pytest

from bodymorph.core.catalog import (
    CategoryEntry,
    SliderCatalog,
    SliderCategory,
    SliderDescriptor,
    SliderSource,
)


def build_tri_bytes(set_name, channels, magic=b"PIRT", version=1):
    """
    Assemble a TRI buffer field by field.

    Args:
        set_name: Set name string
        channels: [(name, scale, [(index, dx, dy, dz), ...]), ...]
    """
    out = bytearray(magic)
    out += struct.pack('<H', version)
    name = set_name.encode('utf-8')
    out += struct.pack('<B', len(name)) + name
    out += struct.pack('<H', len(channels))
    for channel_name, scale, entries in channels:
        encoded = channel_name.encode('utf-8')
        out += struct.pack('<B', len(encoded)) + encoded
        out += struct.pack('<fH', scale, len(entries))
        for index, dx, dy, dz in entries:
            out += struct.pack('<Hhhh', index, dx, dy, dz)
    return bytes(out)


@pytest.fixture
def tri_bytes():
    """The CBBE/BigButt buffer used throughout the examples."""
    return build_tri_bytes("CBBE", [
        ("BigButt", 0.01, [(10, 100, 0, -50), (20, -100, 50, 0)]),
    ])


def descriptor(name, morph, gender, minimum=-1.0, maximum=1.0, interval=0.01):
    return SliderDescriptor(
        name=name,
        morph_key=morph,
        minimum=minimum,
        maximum=maximum,
        interval=interval,
        gender=gender,
    )


@pytest.fixture
def catalog():
    """Small two-gender catalog with one shared key and one category file."""
    source_0 = SliderSource(
        gender=0,
        descriptors=(
            descriptor("Butt", "BigButt", 0),
            descriptor("Thighs", "Thighs", 0, minimum=0.0, maximum=2.0),
            descriptor("Breasts", "BreastsSH", 0),
        ),
        source_path="sliders/body0.json",
    )
    source_1 = SliderSource(
        gender=1,
        descriptors=(
            descriptor("Muscle", "Muscular", 1, minimum=-0.5, maximum=0.5),
            descriptor("Weight", "Weight", 1),
            descriptor("Shared Butt", "BigButt", 1, minimum=-2.0, maximum=2.0),
        ),
        source_path="sliders/body1.json",
    )
    categories = [
        SliderCategory("Torso", (
            CategoryEntry("BigButt", "Butt Size"),
            CategoryEntry("BreastsSH", "Breasts"),
        )),
        SliderCategory("Legs", (
            CategoryEntry("Thighs", "Thigh Width"),
            CategoryEntry("BigButt", "Ignored"),
        )),
    ]
    return SliderCatalog.build([source_0, source_1], categories)


@pytest.fixture
def slider_records():
    return [
        {"name": "Butt", "morph": "BigButt", "minimum": -1, "maximum": 1, "interval": 0.01, "gender": 0},
        {"name": "Thighs", "morph": "Thighs", "minimum": 0, "maximum": 2, "interval": 0.05, "gender": 0},
        {"name": "Muscle", "morph": "Muscular", "minimum": -0.5, "maximum": 0.5, "interval": 0.1, "gender": 1},
    ]


@pytest.fixture
def slider_file(tmp_path, slider_records):
    path = tmp_path / "sliders.json"
    path.write_text(json.dumps(slider_records), encoding='utf-8')
    return path


@pytest.fixture
def category_file(tmp_path):
    path = tmp_path / "categories.json"
    path.write_text(json.dumps([
        {"categoryName": "Torso", "entries": [{"morphKey": "BigButt", "displayName": "Butt Size"}]},
    ]), encoding='utf-8')
    return path


@pytest.fixture
def preset_file(tmp_path):
    path = tmp_path / "presets.json"
    path.write_text(json.dumps([
        {
            "name": "Curvy",
            "set": "CBBE Body",
            "groups": [{"name": "CBBE"}, {"name": "3BA"}],
            "sliders": [{"name": "BigButt", "value": 150}, {"name": "Thighs", "value": 50}],
        },
        {
            "name": "Broken",
            "set": "CBBE Body",
            "groups": {"name": "CBBE"},
            "sliders": [{"name": "Unknown", "value": 50}],
        },
    ]), encoding='utf-8')
    return path


@pytest.fixture
def tri_builder():
    return build_tri_bytes
