import json
import os

from imageinfo.exceptions import CloneError, PushError

LINUX_DOCKERFILE = "src/repo-a/x/bookworm-slim/amd64"
WINDOWS_DOCKERFILE = "src/repo-a/y/nanoserver-ltsc2022/amd64"
ARM_DOCKERFILE = "src/repo-c/z/alpine3.19/arm32v7"

MANIFEST = {
    "registry": "mcr.microsoft.com",
    "repos": [
        {
            "name": "repoA",
            "images": [
                {
                    "platforms": [
                        {
                            "dockerfile": LINUX_DOCKERFILE,
                            "os": "linux",
                            "osVersion": "bookworm-slim",
                            "architecture": "amd64",
                            "tags": ["x-bookworm-slim-amd64"],
                        }
                    ]
                },
                {
                    "platforms": [
                        {
                            "dockerfile": WINDOWS_DOCKERFILE,
                            "os": "windows",
                            "osVersion": "nanoserver-ltsc2022",
                            "architecture": "amd64",
                            "tags": {"y-nanoserver-ltsc2022-amd64": {}},
                        }
                    ]
                },
            ],
        },
        {
            "name": "repoC",
            "images": [
                {
                    "platforms": [
                        {
                            "dockerfile": ARM_DOCKERFILE,
                            "os": "linux",
                            "osVersion": "alpine3.19",
                            "architecture": "arm",
                            "variant": "v7",
                            "tags": ["z-alpine3.19-arm32v7"],
                        }
                    ]
                }
            ],
        },
    ],
}


def linux_platform(**payload) -> dict:
    return {
        "dockerfile": f"{LINUX_DOCKERFILE}/Dockerfile",
        "osType": "Linux",
        "osVersion": "bookworm-slim",
        "architecture": "amd64",
        **payload,
    }


def windows_platform(**payload) -> dict:
    return {
        "dockerfile": f"{WINDOWS_DOCKERFILE}/Dockerfile",
        "osType": "Windows",
        "osVersion": "nanoserver-ltsc2022",
        "architecture": "amd64",
        **payload,
    }


def arm_platform(**payload) -> dict:
    return {
        "dockerfile": f"{ARM_DOCKERFILE}/Dockerfile",
        "osType": "Linux",
        "osVersion": "alpine3.19",
        "architecture": "arm",
        "variant": "v7",
        **payload,
    }


def image(*platforms, **attributes) -> dict:
    return {**attributes, "platforms": list(platforms)}


def repo(name: str, *images) -> dict:
    return {"repo": name, "images": list(images)}


def image_info(*repos) -> dict:
    return {"repos": list(repos)}


def to_content(data: dict) -> str:
    return json.dumps(data, indent=2) + "\n"


def write_file(path, content):
    os.makedirs(os.path.dirname(str(path)), exist_ok=True)
    if isinstance(content, bytes):
        with open(path, "wb") as f:
            f.write(content)
        return
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(content)


class FakeGitService:
    """
    In-memory stand-in for GitService. `remote_files` plays the role of the
    remote branch: clone materializes it, push replaces it with the clone's
    staged files.
    """

    def __init__(self, remote_files=None, fail_clone=False, fail_push=False):
        self.remote_files = dict(remote_files or {})
        self.fail_clone = fail_clone
        self.fail_push = fail_push
        self.calls = []
        self.staged = {}
        self.clone_path = None

    def clone(self, url, repo_path, branch, token=None):
        self.calls.append(("clone", url, branch, token))
        self.clone_path = repo_path
        if self.fail_clone:
            raise CloneError("git clone failed with exit code 128: repository not found")
        os.makedirs(repo_path)
        for rel_path, content in self.remote_files.items():
            write_file(os.path.join(repo_path, rel_path), content)
        return repo_path

    def stage(self, repo_path, file_path):
        rel_path = os.path.relpath(file_path, repo_path).replace(os.sep, "/")
        with open(file_path, "r", encoding="utf-8", newline="") as f:
            self.staged[rel_path] = f.read()
        self.calls.append(("stage", rel_path))

    def commit(self, repo_path, message, name, email):
        self.calls.append(("commit", message, name, email))
        return "0123456789abcdef"

    def push(self, repo_path, branch, token):
        self.calls.append(("push", branch, token))
        if self.fail_push:
            raise PushError("git push failed with exit code 1: rejected (non-fast-forward)")
        self.remote_files.update(self.staged)

    def call_names(self):
        return [call[0] for call in self.calls]
