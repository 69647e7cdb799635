import json

import pytest
from click.testing import CliRunner

from imageinfo.cli import cli
from imageinfo.commands import publish as publish_command

from helper import (
    MANIFEST,
    FakeGitService,
    image,
    image_info,
    linux_platform,
    repo,
    to_content,
    windows_platform,
    write_file,
)

TARGET = "build-info/docker/image-info.json"
PUBLISHED = image_info(
    repo("repoA", image(linux_platform(digest="sha1"))),
    repo("repoB", image(linux_platform(digest="stale"))),
)
BUILD = image_info(repo("repoA", image(windows_platform(digest="sha3"))))
MERGED = image_info(
    repo(
        "repoA",
        image(linux_platform(digest="sha1")),
        image(windows_platform(digest="sha3")),
    )
)


@pytest.fixture
def files(tmp_path):
    manifest_path = tmp_path / "manifest.json"
    manifest_path.write_text(json.dumps(MANIFEST))
    source_path = tmp_path / "build" / "image-info.json"
    write_file(source_path, to_content(BUILD))
    target_path = tmp_path / "published" / "image-info.json"
    write_file(target_path, to_content(PUBLISHED))
    return {"manifest": str(manifest_path), "source": str(source_path), "target": str(target_path)}


@pytest.fixture
def git_service(monkeypatch):
    service = FakeGitService({TARGET: to_content(PUBLISHED)})
    monkeypatch.setattr(publish_command, "GitService", lambda: service)
    return service


def invoke(args, **kwargs):
    runner = CliRunner()
    result = runner.invoke(cli, args, catch_exceptions=False, **kwargs)
    if result.exit_code != 0:
        print(f"Exit Code: {result.exit_code}")
        print(f"Output: {result.output}")
    return result


def test_reconcile_writes_target(files):
    result = invoke(
        ["reconcile", "--manifest", files["manifest"], "--source", files["source"], "--target", files["target"]]
    )
    assert result.exit_code == 0
    with open(files["target"]) as f:
        assert f.read() == to_content(MERGED)


def test_reconcile_dry_run_prints_result(files):
    result = invoke(
        [
            "reconcile",
            "--manifest", files["manifest"],
            "--source", files["source"],
            "--target", files["target"],
            "--dry-run",
        ]
    )
    assert result.exit_code == 0
    assert result.output == to_content(MERGED)
    with open(files["target"]) as f:
        assert f.read() == to_content(PUBLISHED)


def test_reconcile_to_output(files, tmp_path):
    output = tmp_path / "out" / "image-info.json"
    result = invoke(
        [
            "reconcile",
            "--manifest", files["manifest"],
            "--source", files["source"],
            "--target", files["target"],
            "--output", str(output),
        ]
    )
    assert result.exit_code == 0
    assert output.read_text() == to_content(MERGED)


def test_reconcile_to_output_without_changes(files, tmp_path):
    write_file(files["target"], to_content(MERGED))
    output = tmp_path / "out" / "image-info.json"
    result = invoke(
        [
            "reconcile",
            "--manifest", files["manifest"],
            "--source", files["source"],
            "--target", files["target"],
            "--output", str(output),
        ]
    )
    assert result.exit_code == 0
    assert "No changes" in result.output
    assert output.read_text() == to_content(MERGED)


def test_reconcile_invalid_source(files):
    write_file(files["source"], "not json")
    result = CliRunner().invoke(
        cli,
        ["reconcile", "--manifest", files["manifest"], "--source", files["source"], "--target", files["target"]],
    )
    assert result.exit_code == 1
    assert "not valid JSON" in result.output


def test_publish(files, git_service):
    result = invoke(
        [
            "publish",
            "--manifest", files["manifest"],
            "--image-info", files["source"],
            "--git-owner", "dotnet",
            "--git-repo", "versions",
            "--git-branch", "main",
            "--git-path", TARGET,
            "--git-username", "dotnet-bot",
            "--git-email", "dotnet-bot@example.com",
        ],
        env={"IMAGEINFO_GIT_TOKEN": "gh-secret-token"},
    )
    assert result.exit_code == 0
    assert "Pushed https://github.com/dotnet/versions/commit/0123456789abcdef" in result.output
    assert git_service.remote_files[TARGET] == to_content(MERGED)
    assert git_service.calls[-1] == ("push", "main", "gh-secret-token")


def test_publish_dry_run(files, git_service):
    result = invoke(
        [
            "publish",
            "--manifest", files["manifest"],
            "--image-info", files["source"],
            "--git-owner", "dotnet",
            "--git-repo", "versions",
            "--git-branch", "main",
            "--git-path", TARGET,
            "--dry-run",
        ]
    )
    assert result.exit_code == 0
    assert git_service.call_names() == ["clone"]
    assert git_service.remote_files[TARGET] == to_content(PUBLISHED)


def test_publish_reads_config_file(files, git_service, tmp_path):
    config = tmp_path / "imageinfo.ini"
    config.write_text(
        "[azdo]\n"
        "organization = dnceng\n"
        "project = internal\n"
        "repo = dotnet-versions\n"
        f"path = {TARGET}\n"
    )
    result = invoke(
        [
            "publish",
            "--config", str(config),
            "--manifest", files["manifest"],
            "--image-info", files["source"],
            "--git-username", "dotnet-bot",
            "--git-email", "dotnet-bot@example.com",
        ],
        env={"IMAGEINFO_AZDO_PAT": "azdo-pat"},
    )
    assert result.exit_code == 0
    assert git_service.calls[0] == (
        "clone",
        "https://dev.azure.com/dnceng/internal/_git/dotnet-versions",
        "main",
        "azdo-pat",
    )
    assert "dev.azure.com/dnceng/internal/_git/dotnet-versions/commit/" in result.output


def test_publish_mismatched_paths(files, git_service):
    result = CliRunner().invoke(
        cli,
        [
            "publish",
            "--manifest", files["manifest"],
            "--image-info", files["source"],
            "--git-repo", "versions",
            "--git-path", TARGET,
            "--azdo-path", "other/image-info.json",
        ],
    )
    assert result.exit_code == 1
    assert "must be equal" in result.output
    assert git_service.calls == []
