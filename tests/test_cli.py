"""Tests for the command-line interface."""

import json
import shutil

import numpy as np
import pytest
from click.testing import CliRunner

from bodymorph.cli.main import cli


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def templates_file(tmp_path):
    path = tmp_path / "my_templates.ini"
    path.write_text("#morphs=Mod.esm\nCurvy=BigButt@1\n", encoding='utf-8')
    return path


@pytest.fixture
def data_root(tmp_path):
    root = tmp_path / "BodyGenData"
    (root / "Mod.esm").mkdir(parents=True)
    return root


@pytest.fixture
def make_config(tmp_path, data_root, slider_file):
    def make(**overrides):
        data = {"data_folder": data_root.name, "slider_sources": [slider_file.name], "num_workers": 1}
        data.update(overrides)
        path = tmp_path / "bodymorph.json"
        path.write_text(json.dumps(data), encoding='utf-8')
        return path
    return make


class TestTriInfo:

    def test_lists_channels(self, runner, tmp_path, tri_bytes):
        path = tmp_path / "body.tri"
        path.write_bytes(tri_bytes)

        result = runner.invoke(cli, ['tri-info', str(path)])

        assert result.exit_code == 0
        assert "Set: CBBE" in result.output
        assert "BigButt  scale=0.01  entries=2" in result.output

    def test_bad_file(self, runner, tmp_path, tri_builder):
        path = tmp_path / "body.tri"
        path.write_bytes(tri_builder("CBBE", [], version=2))

        result = runner.invoke(cli, ['tri-info', str(path)])

        assert result.exit_code == 1


class TestValidate:

    def test_reports_and_fails_on_removed_sliders(self, runner, preset_file, slider_file):
        result = runner.invoke(cli, ['validate', str(preset_file), '-s', str(slider_file)])

        assert result.exit_code == 1
        assert "Curvy=BigButt@1,Thighs@0.5" in result.output
        assert 'Slider "Unknown" is not supported. Removed.' in result.output
        assert "greater than maximum allowed. Corrected to 1." in result.output

    def test_query_filters(self, runner, preset_file, slider_file):
        result = runner.invoke(cli, ['validate', str(preset_file), '-s', str(slider_file), '-q', 'curvy'])

        assert result.exit_code == 0
        assert "Broken" not in result.output

    def test_needs_sliders(self, runner, preset_file):
        result = runner.invoke(cli, ['validate', str(preset_file)])

        assert result.exit_code == 1

    def test_malformed_preset_file_is_reported(self, runner, tmp_path, preset_file, slider_file):
        bad = tmp_path / "bad.json"
        bad.write_text(json.dumps(["not a preset"]), encoding='utf-8')

        result = runner.invoke(cli, ['validate', str(bad), str(preset_file), '-s', str(slider_file)])

        assert isinstance(result.exception, SystemExit)
        assert result.exit_code == 1
        assert "expected an object" in result.output
        assert "Curvy=BigButt@1,Thighs@0.5" in result.output

    def test_malformed_slider_source_is_reported(self, runner, tmp_path, preset_file):
        sliders = tmp_path / "bad_sliders.json"
        sliders.write_text(json.dumps([5]), encoding='utf-8')

        result = runner.invoke(cli, ['validate', str(preset_file), '-s', str(sliders)])

        assert isinstance(result.exception, SystemExit)
        assert result.exit_code == 1

    def test_preset_folder(self, runner, tmp_path, preset_file, slider_file):
        folder = tmp_path / "presets"
        folder.mkdir()
        shutil.copy(preset_file, folder / "a.json")

        result = runner.invoke(cli, ['validate', str(folder), '-s', str(slider_file), '-q', 'curvy'])

        assert result.exit_code == 0
        assert "a.json" in result.output


class TestValidateWithConfig:

    def test_config_supplies_sliders(self, runner, preset_file, make_config):
        result = runner.invoke(cli, ['validate', str(preset_file), '-c', str(make_config())])

        assert result.exit_code == 1
        assert "Curvy=BigButt@1,Thighs@0.5" in result.output

    def test_fractions_flag_beats_config(self, runner, preset_file, make_config):
        config = make_config(percent_values=True)

        result = runner.invoke(cli, ['validate', str(preset_file), '-c', str(config), '--fractions'])

        assert 'value 150 is greater than maximum allowed' in result.output

    def test_sliders_flag_beats_config(self, runner, preset_file, slider_file, make_config):
        config = make_config(slider_sources=[])

        result = runner.invoke(cli, [
            'validate', str(preset_file), '-c', str(config), '-s', str(slider_file), '-q', 'curvy',
        ])

        assert result.exit_code == 0
        assert "Curvy=BigButt@1,Thighs@0.5" in result.output

    def test_invalid_config(self, runner, preset_file, make_config):
        config = make_config(data_folder="missing")

        result = runner.invoke(cli, ['validate', str(preset_file), '-c', str(config)])

        assert result.exit_code == 1


class TestTemplates:

    def test_format_prints_both(self, runner, templates_file):
        result = runner.invoke(cli, ['format', str(templates_file)])

        assert result.exit_code == 0
        assert "#morphs=Mod.esm" in result.output
        assert "Mod.esm=Curvy" in result.output

    def test_format_writes_files(self, runner, templates_file, tmp_path):
        morphs_out = tmp_path / "morphs.ini"

        result = runner.invoke(cli, ['format', str(templates_file), '--morphs-out', str(morphs_out)])

        assert result.exit_code == 0
        assert morphs_out.read_text(encoding='utf-8') == "Mod.esm=Curvy"

    def test_format_rejects_invalid(self, runner, tmp_path):
        path = tmp_path / "bad.ini"
        path.write_text("Curvy=BigButt@1", encoding='utf-8')

        result = runner.invoke(cli, ['format', str(path)])

        assert result.exit_code == 1

    def test_write_then_status(self, runner, data_root, templates_file):
        before = runner.invoke(cli, ['status', str(templates_file), str(data_root)])
        assert "will be created" in before.output

        written = runner.invoke(cli, ['write', str(templates_file), str(data_root)])
        assert written.exit_code == 0
        assert "Successfully written .ini files to 1 plugins" in written.output
        assert (data_root / "Mod.esm" / "morphs.ini").exists()

        after = runner.invoke(cli, ['status', str(templates_file), str(data_root)])
        assert "templates.ini: up-to-date" in after.output

    def test_write_to_config_data_folder(self, runner, data_root, templates_file, make_config):
        result = runner.invoke(cli, ['write', str(templates_file), '-c', str(make_config())])

        assert result.exit_code == 0
        assert (data_root / "Mod.esm" / "templates.ini").exists()

    def test_write_to_config_output_folder(self, runner, tmp_path, data_root, templates_file, make_config):
        out = tmp_path / "Out"
        (out / "Other.esm").mkdir(parents=True)

        result = runner.invoke(cli, ['write', str(templates_file), '-c', str(make_config(output_folder="Out"))])

        assert result.exit_code == 0
        assert (out / "Other.esm" / "morphs.ini").read_text(encoding='utf-8') == "Mod.esm=Curvy"
        assert not (data_root / "Mod.esm" / "morphs.ini").exists()

    def test_status_needs_a_root(self, runner, templates_file):
        result = runner.invoke(cli, ['status', str(templates_file)])

        assert result.exit_code == 2
        assert "FROM_PATH" in result.output


class TestPreview:

    def test_saves_morphed_vertices(self, runner, tmp_path, tri_builder):
        tri = tmp_path / "body.tri"
        tri.write_bytes(tri_builder("CBBE", [("BigButt", 0.01, [(0, 100, 0, -50)])]))
        base = tmp_path / "body.npy"
        np.save(base, np.zeros(6, dtype=np.float32))

        result = runner.invoke(cli, ['preview', str(base), str(tri), 'BigButt@2'])

        assert result.exit_code == 0
        morphed = np.load(tmp_path / "body_morphed.npy")
        np.testing.assert_allclose(morphed, [2.0, 0.0, -1.0, 0.0, 0.0, 0.0], atol=1e-6)

    def test_device_from_config(self, runner, tmp_path, tri_bytes, make_config):
        tri = tmp_path / "body.tri"
        tri.write_bytes(tri_bytes)
        base = tmp_path / "body.npy"
        np.save(base, np.zeros(63, dtype=np.float32))
        out = tmp_path / "out.npy"

        result = runner.invoke(cli, [
            'preview', str(base), str(tri), 'BigButt@1', '-o', str(out), '-c', str(make_config(device="cpu")),
        ])

        assert result.exit_code == 0
        assert "(cpu)" in result.output
        assert out.exists()


class TestRandomize:

    def test_seeded_output(self, runner, slider_file):
        args = ['randomize', '-s', str(slider_file), '--gender', '0', '--seed', '5']

        first = runner.invoke(cli, args)
        second = runner.invoke(cli, args)

        assert first.exit_code == 0
        assert first.output == second.output
        assert first.output.startswith("BigButt@")
        assert "Thighs@" in first.output
