"""Tests for preset validation."""

from bodymorph.core.catalog import SliderCatalog, SliderDescriptor, SliderSource
from bodymorph.core.descriptor import Slider
from bodymorph.core.validator import GENDER_AMBIGUOUS, infer_gender, validate_preset


def single_slider_catalog():
    return SliderCatalog.build([SliderSource(gender=0, descriptors=(
        SliderDescriptor("Butt", "BigButt", -1.0, 1.0, 0.01, 0),
    ))])


class TestExamples:
    """The documented validation scenarios."""

    def test_clamp_above_maximum(self):
        result = validate_preset(single_slider_catalog(), [("BigButt", 1.5)])

        assert result.warnings == (
            'Slider "BigButt" value 1.5 is greater than maximum allowed. Corrected to 1.',
        )
        assert result.clean_sliders == (Slider("BigButt", 1.0),)
        assert result.gender == 0
        assert result.descriptor == "BigButt@1"
        assert result.valid

    def test_unsupported_slider(self):
        result = validate_preset(single_slider_catalog(), [("Unknown", 0.5)])

        assert result.errors == ('Slider "Unknown" is not supported. Removed.',)
        assert result.clean_sliders == ()
        assert result.descriptor == ""
        assert not result.valid


class TestClamping:
    """Tests for range clamping."""

    def test_boundaries_produce_no_warning(self):
        catalog = single_slider_catalog()

        for value in (-1.0, 1.0):
            result = validate_preset(catalog, [("BigButt", value)])
            assert result.warnings == ()
            assert result.clean_sliders == (Slider("BigButt", value),)

    def test_just_below_minimum(self):
        result = validate_preset(single_slider_catalog(), [("BigButt", -1.0 - 1e-9)])

        assert len(result.warnings) == 1
        assert "less than minimum allowed. Corrected to -1." in result.warnings[0]
        assert result.clean_sliders == (Slider("BigButt", -1.0),)

    def test_clamp_does_not_invalidate(self, catalog):
        result = validate_preset(catalog, [("Thighs", -0.5), ("BigButt", 3)])

        assert len(result.warnings) == 2
        assert result.valid
        assert result.descriptor == "Thighs@0,BigButt@1"


class TestGender:
    """Tests for gender inference."""

    def test_majority(self, catalog):
        result = validate_preset(catalog, [("Muscular", 0.1), ("Weight", 0.2), ("Thighs", 1)])

        assert result.gender == 1

    def test_shared_key_counts_for_gender_0(self, catalog):
        result = validate_preset(catalog, [("BigButt", 1.5)])

        # Gender 0 range wins: clamped to 1, not 2
        assert result.gender == 0
        assert result.clean_sliders == (Slider("BigButt", 1.0),)

    def test_tie_is_ambiguous(self, catalog):
        result = validate_preset(catalog, [("Thighs", 1), ("Weight", 0.5)])

        assert result.gender == GENDER_AMBIGUOUS

    def test_empty_input_is_ambiguous(self, catalog):
        result = validate_preset(catalog, [])

        assert result.gender == GENDER_AMBIGUOUS
        assert result.valid
        assert result.descriptor == ""

    def test_all_dropped_is_ambiguous(self, catalog):
        result = validate_preset(catalog, [("Nope", 1), ("Nada", 2)])

        assert result.gender == GENDER_AMBIGUOUS
        assert len(result.errors) == 2

    def test_infer_gender(self):
        assert infer_gender(2, 1) == 0
        assert infer_gender(1, 2) == 1
        assert infer_gender(3, 3) == -1


class TestResult:
    """Tests for the shape of ValidatedPreset."""

    def test_order_and_determinism(self, catalog):
        raw = [("Weight", 0.5), ("Unknown", 1), ("BigButt", -0.25), ("Thighs", 0.5)]

        first = validate_preset(catalog, raw, name="Mixed")
        second = validate_preset(catalog, raw, name="Mixed")

        assert first == second
        assert first.descriptor == "Weight@0.5,BigButt@-0.25,Thighs@0.5"
        assert first.raw_sliders == tuple(Slider(n, float(v)) for n, v in raw)

    def test_missing_slider_never_in_descriptor(self, catalog):
        result = validate_preset(catalog, [("Ghost", 0.3), ("Thighs", 0.3)])

        assert "Ghost" not in result.descriptor
        assert [s.name for s in result.clean_sliders] == ["Thighs"]
        assert result.errors == ('Slider "Ghost" is not supported. Removed.',)

    def test_bodygen_line(self, catalog):
        result = validate_preset(catalog, [("Thighs", 0.5)], name="Athletic")

        assert result.bodygen_line == "Athletic=Thighs@0.5"
