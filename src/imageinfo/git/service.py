import base64
import logging
import os
import subprocess
from typing import Optional

from imageinfo.exceptions import CloneError, GitError, PushError

logger = logging.getLogger(__name__)


def basic_auth_header(token: str) -> str:
    """HTTP header authenticating with the token as username and an empty password."""
    credentials = base64.b64encode(f"{token}:".encode("utf-8")).decode("utf-8")
    return f"Authorization: Basic {credentials}"


def redact(text: str, token: Optional[str]) -> str:
    if token:
        text = text.replace(token, "***")
    return text


class GitService:
    """
    Thin wrapper around the git executable providing the few primitives the
    publish workflow needs. Credentials are passed per invocation as an extra
    HTTP header and are never written to the clone's configuration.
    """

    def __init__(self, git_executable: str = "git"):
        self.git_executable = git_executable

    def _run(
        self,
        args: list,
        error_type=GitError,
        cwd: Optional[str] = None,
        token: Optional[str] = None,
        env: Optional[dict] = None,
    ) -> str:
        cmd = [self.git_executable]
        if token:
            cmd += ["-c", f"http.extraHeader={basic_auth_header(token)}"]
        cmd += args

        process_env = dict(os.environ)
        process_env["GIT_TERMINAL_PROMPT"] = "0"
        if env:
            process_env.update(env)

        logger.debug(f"Running git {' '.join(args)}")
        try:
            result = subprocess.run(
                cmd,
                cwd=cwd,
                env=process_env,
                check=True,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
            )
        except subprocess.CalledProcessError as e:
            error_message = redact(e.stderr.decode("utf-8", errors="replace"), token)
            raise error_type(
                f"git {args[0]} failed with exit code {e.returncode}: {error_message.strip()}"
            ) from None
        except OSError as e:
            raise error_type(f"Unable to run {self.git_executable}: {e}") from e
        return result.stdout.decode("utf-8").strip()

    def clone(
        self, url: str, repo_path: str, branch: str, token: Optional[str] = None
    ) -> str:
        self._run(
            ["clone", "--branch", branch, "--single-branch", url, repo_path],
            error_type=CloneError,
            token=token,
        )
        return repo_path

    def stage(self, repo_path: str, file_path: str):
        rel_path = os.path.relpath(file_path, repo_path)
        self._run(["add", "--", rel_path], cwd=repo_path)

    def commit(self, repo_path: str, message: str, name: str, email: str) -> str:
        """Commit staged changes with one identity as author and committer, return the commit sha."""
        identity = {
            "GIT_AUTHOR_NAME": name,
            "GIT_AUTHOR_EMAIL": email,
            "GIT_COMMITTER_NAME": name,
            "GIT_COMMITTER_EMAIL": email,
        }
        self._run(["commit", "--message", message], cwd=repo_path, env=identity)
        return self._run(["rev-parse", "HEAD"], cwd=repo_path)

    def push(self, repo_path: str, branch: str, token: str):
        # no --force: a remote that moved on since the clone is a hard failure
        self._run(
            ["push", "origin", f"refs/heads/{branch}:refs/heads/{branch}"],
            error_type=PushError,
            cwd=repo_path,
            token=token,
        )
