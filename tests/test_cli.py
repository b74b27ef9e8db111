"""Tests for the command-line interface."""

import json
import os
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from bundlecop import config
from bundlecop.api import ApiError
from bundlecop.cli import cli


@pytest.fixture
def runner(build_dir, monkeypatch):
    monkeypatch.chdir(build_dir.parent)
    monkeypatch.setattr("bundlecop.submission.get_repo_info", lambda: None)
    return CliRunner()


@pytest.fixture
def api_client():
    with patch("bundlecop.submission.ReadingsApiClient") as client_class:
        yield client_class


class TestSubmitCommand:

    def test_dry_run(self, runner, api_client):
        result = runner.invoke(cli, ["submit", "dist", "--project-key", "key",
                                     "--bundleset", "web", "--dry-run"])

        assert result.exit_code == 0, result.output
        assert "Dry run" in result.output
        assert "app.js" in result.output
        api_client.assert_not_called()

    def test_submit(self, runner, api_client):
        result = runner.invoke(cli, ["--api-url", "https://api.example.com", "submit", "dist",
                                     "--project-key", "key", "--bundleset", "web",
                                     "--commit", "abc", "--parent-commits", "p1",
                                     "--parent-commits", "p2"])

        assert result.exit_code == 0, result.output
        assert "Submitted" in result.output
        api_client.assert_called_once_with("https://api.example.com", "key")

        reading = api_client.return_value.submit_reading.call_args[0][0]
        assert reading.commit == "abc"
        assert reading.parent_commits == ["p1", "p2"]
        assert sorted(f.name for f in reading.files) == sorted(["app.js", "app.js.map", "style.css", os.path.join("sub", "vendor.js")])

    def test_include_from_project_config(self, runner, api_client, build_dir):
        (build_dir.parent / "bundlecop.yml").write_text("bundleset: web\nproject_key: key\ninclude: .css\n")

        result = runner.invoke(cli, ["submit", "dist"])

        assert result.exit_code == 0, result.output
        reading = api_client.return_value.submit_reading.call_args[0][0]
        assert reading.bundleset == "web"
        assert [f.name for f in reading.files] == ["style.css"]

    def test_missing_files(self, runner, api_client):
        result = runner.invoke(cli, ["submit", "missing", "--project-key", "key", "--bundleset", "web"])

        assert result.exit_code == 1
        assert "No such file or directory" in result.output
        api_client.assert_not_called()

    def test_validation_error(self, runner, api_client):
        result = runner.invoke(cli, ["submit", "dist", "--project-key", "key"])

        assert result.exit_code == 1
        assert "bundleSet" in result.output

    def test_api_error(self, runner, api_client):
        api_client.return_value.submit_reading.side_effect = ApiError("API failed with status code: 403, nope")

        result = runner.invoke(cli, ["submit", "dist", "--project-key", "key", "--bundleset", "web"])

        assert result.exit_code == 1
        assert "403" in result.output

    def test_only_if_env(self, runner, api_client, monkeypatch):
        monkeypatch.delenv("DEPLOY_SIZES", raising=False)

        result = runner.invoke(cli, ["submit", "dist", "--only-if-env", "DEPLOY_SIZES"])

        assert result.exit_code == 0, result.output
        assert "Skipping submission" in result.output
        api_client.assert_not_called()

    def test_requires_files(self, runner):
        result = runner.invoke(cli, ["submit"])
        assert result.exit_code == 2


class TestConfigCommand:

    def test_set_and_show(self, runner):
        result = runner.invoke(cli, ["config", "--set", "bundleset", "web", "--set", "api_url", "https://x"])
        assert result.exit_code == 0, result.output

        with open(config.CONFIG_FILE) as f:
            assert json.load(f) == {"bundleset": "web", "api_url": "https://x"}

        result = runner.invoke(cli, ["config", "--show"])
        assert result.exit_code == 0, result.output
        assert "bundleset: web" in result.output

    def test_unknown_key(self, runner):
        result = runner.invoke(cli, ["config", "--set", "colour", "blue"])

        assert result.exit_code == 1
        assert "Unknown configuration key" in result.output


class TestOtherCommands:

    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "version" in result.output

    def test_get_repo_info_outside_repository(self, runner, monkeypatch):
        monkeypatch.setattr("bundlecop.cli.get_repo_info", lambda: None)

        result = runner.invoke(cli, ["get-repo-info"])

        assert result.exit_code == 0
        assert "Not in a git repository" in result.output
