"""Shared test fixtures."""

import os

import pytest

from bundlecop import config


# Variables that make us believe we run on a CI
CI_PRESENCE_VARS = [
    "CIRCLECI", "TRAVIS", "JENKINS_URL", "APPVEYOR", "DRONE", "CI_NAME", "GITLAB_CI",
]


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    """Keep tests away from the user's config and the real CI environment."""
    monkeypatch.setattr(config, "CONFIG_FILE", str(tmp_path / ".bundlecop" / "config.json"))

    for key in list(os.environ):
        if key.startswith(config.ENV_PREFIX):
            monkeypatch.delenv(key, raising=False)
    for key in CI_PRESENCE_VARS:
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def build_dir(tmp_path):
    """A typical bundler output directory."""
    dist = tmp_path / "dist"
    (dist / "sub").mkdir(parents=True)

    (dist / "app.a43ff0.js").write_text("console.log('hello');\n" * 50)
    (dist / "app.a43ff0.js.map").write_text('{"version": 3}')
    (dist / "style.0badf00d.css").write_text("body { margin: 0; }\n")
    (dist / "readme.txt").write_text("not an asset")
    (dist / "sub" / "vendor.12345.js").write_text("var x = 1;\n")
    return dist
