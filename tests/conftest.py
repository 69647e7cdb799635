import copy
import logging
import tempfile

import pytest

from imageinfo.info.manifest import manifest_from_dict
from imageinfo.options import GitOptions, PublishOptions

from helper import MANIFEST


@pytest.fixture
def manifest():
    return manifest_from_dict(copy.deepcopy(MANIFEST))


@pytest.fixture(autouse=True)
def scratch_root(tmp_path, monkeypatch):
    """Keep scratch clones under the test's own temp directory."""
    root = tmp_path / "tmp"
    root.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(root))
    return root


@pytest.fixture(autouse=True)
def info_logging(caplog):
    caplog.set_level(logging.INFO)
    return caplog


@pytest.fixture
def github_options(tmp_path):
    return PublishOptions(
        image_info_path=str(tmp_path / "build" / "image-info.json"),
        manifest_path=str(tmp_path / "manifest.json"),
        git=GitOptions(
            owner="dotnet",
            repo="versions",
            branch="main",
            path="build-info/docker/image-info.json",
            username="dotnet-bot",
            email="dotnet-bot@example.com",
            auth_token="gh-secret-token",
        ),
    )
