"""Tests for the matterdeploy command line interface."""

import json
import logging

import pytest
import yaml

from matterdeploy.cli import EXIT_INVALID, EXIT_LOAD_ERROR, EXIT_OK, main

pytestmark = pytest.mark.usefixtures("restore_root_logging")


@pytest.fixture
def descriptor_file(tmp_path, descriptor_data):
    path = tmp_path / "matterai.yaml"
    path.write_text(yaml.safe_dump(descriptor_data, sort_keys=False))
    return path


@pytest.fixture
def invalid_descriptor_file(tmp_path, descriptor_data):
    descriptor_data["namespace"] = "Matter_AI"
    descriptor_data["services"][1]["ports"][0]["hostPort"] = 8080
    path = tmp_path / "invalid.yaml"
    path.write_text(yaml.safe_dump(descriptor_data, sort_keys=False))
    return path


def test_validate_ok(descriptor_file, capsys):
    assert main(["validate", str(descriptor_file)]) == EXIT_OK
    assert capsys.readouterr().out.strip() == f"{descriptor_file}: valid"


def test_validate_lists_every_problem(invalid_descriptor_file, capsys):
    assert main(["validate", str(invalid_descriptor_file)]) == EXIT_INVALID

    err = capsys.readouterr().err
    assert "problem(s):" in err
    assert "  - namespace [InvalidFormat]" in err
    assert "[DuplicateValue]" in err


def test_validate_single_target(tmp_path, descriptor_data, capsys):
    del descriptor_data["persistence"]
    path = tmp_path / "no-persistence.json"
    path.write_text(json.dumps(descriptor_data))

    assert main(["validate", str(path), "--target", "compose"]) == EXIT_OK
    assert main(["validate", str(path), "--target", "helm"]) == EXIT_INVALID
    assert "persistence.size [MissingField]" in capsys.readouterr().err


def test_render_to_stdout(descriptor_file, capsys):
    assert main(["render", str(descriptor_file), "--target", "compose"]) == EXIT_OK

    document = yaml.safe_load(capsys.readouterr().out)
    assert list(document["services"]) == ["matter-backend", "matter-frontend", "postgres"]


def test_render_to_file(descriptor_file, tmp_path, capsys):
    output = tmp_path / "out" / "values.yaml"

    assert main(["render", str(descriptor_file), "--target", "helm", "-o", str(output)]) == EXIT_OK

    assert capsys.readouterr().out == ""
    values = yaml.safe_load(output.read_text())
    assert values["components"]["matterBackend"]["service"]["port"] == 8080


def test_render_invalid_descriptor(invalid_descriptor_file, capsys):
    assert main(["render", str(invalid_descriptor_file), "--target", "compose"]) == EXIT_INVALID

    captured = capsys.readouterr()
    assert captured.out == ""
    assert "[DuplicateValue]" in captured.err


def test_render_requires_target(descriptor_file):
    with pytest.raises(SystemExit) as exc_info:
        main(["render", str(descriptor_file)])
    assert exc_info.value.code == 2


def test_bundle(descriptor_file, tmp_path, capsys):
    output_dir = tmp_path / "bundle"

    assert main(["bundle", str(descriptor_file), "-o", str(output_dir)]) == EXIT_OK

    out = capsys.readouterr().out
    assert f"compose: {output_dir / 'docker-compose.yml'}" in out
    assert f"helm: {output_dir / 'values.yaml'}" in out
    assert (output_dir / "docker-compose.yml").exists()
    assert (output_dir / "values.yaml").exists()


def test_bundle_uses_output_dir_env(descriptor_file, tmp_path, monkeypatch):
    monkeypatch.setenv("MATTERDEPLOY_OUTPUT_DIR", str(tmp_path / "generated"))

    assert main(["bundle", str(descriptor_file)]) == EXIT_OK
    assert (tmp_path / "generated" / "matterai" / "values.yaml").exists()


def test_missing_file(tmp_path, capsys):
    assert main(["validate", str(tmp_path / "missing.yaml")]) == EXIT_LOAD_ERROR
    assert "Error: Cannot read" in capsys.readouterr().err


def test_structural_error_exit_code(tmp_path, descriptor_data, capsys):
    descriptor_data["services"][0]["role"] = "cache"
    path = tmp_path / "cache.yaml"
    path.write_text(yaml.safe_dump(descriptor_data))

    assert main(["validate", str(path)]) == EXIT_INVALID
    assert "services[0].role [InvalidFormat]" in capsys.readouterr().err


def test_debug_flag_sets_root_level(descriptor_file):
    main(["--debug", "validate", str(descriptor_file)])
    assert logging.getLogger().level == logging.DEBUG


def test_log_file(descriptor_file, tmp_path):
    log_file = tmp_path / "logs" / "matterdeploy.log"

    main(["--log-file", str(log_file), "validate", str(descriptor_file)])

    assert "Loaded descriptor from" in log_file.read_text()
