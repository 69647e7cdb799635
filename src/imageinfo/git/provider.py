import logging
from abc import ABC, abstractmethod
from urllib.parse import quote, urlencode

from imageinfo.git.service import GitService
from imageinfo.options import PublishOptions, validate_publish_options

logger = logging.getLogger(__name__)


class GitRepoProvider(ABC):
    """Location of the published image info file and the way to clone and push it."""

    def __init__(self, git_service: GitService, options: PublishOptions):
        self.git_service = git_service
        self.options = options

    @property
    @abstractmethod
    def repo_name(self) -> str:
        pass

    @property
    @abstractmethod
    def image_info_path(self) -> str:
        pass

    @property
    @abstractmethod
    def branch(self) -> str:
        pass

    @property
    @abstractmethod
    def access_token(self) -> str:
        pass

    @abstractmethod
    def clone_repository(self, repo_path: str) -> str:
        pass

    @abstractmethod
    def get_file_url(self) -> str:
        pass

    @abstractmethod
    def get_commit_url(self, commit_sha: str) -> str:
        pass

    def push_changes(self, repo_path: str, commit_sha: str) -> str:
        """Push the branch of the local clone and return the url of the pushed commit."""
        logger.debug(f"Pushing {commit_sha} to branch {self.branch}")
        # credentials are resolved now, not reused from clone time
        self.git_service.push(repo_path, self.branch, self.access_token)
        return self.get_commit_url(commit_sha)


class GitHubRepoProvider(GitRepoProvider):
    @property
    def repo_name(self) -> str:
        return self.options.git.repo

    @property
    def image_info_path(self) -> str:
        return self.options.git.path

    @property
    def branch(self) -> str:
        return self.options.git.branch

    @property
    def access_token(self) -> str:
        return self.options.git.auth_token

    def clone_repository(self, repo_path: str) -> str:
        return self.git_service.clone(
            self.options.git.get_repo_url(), repo_path, self.branch
        )

    def get_file_url(self) -> str:
        return f"{self.options.git.get_repo_url()}/blob/{self.branch}/{quote(self.image_info_path)}"

    def get_commit_url(self, commit_sha: str) -> str:
        return f"{self.options.git.get_repo_url()}/commit/{commit_sha}"


class AzdoRepoProvider(GitRepoProvider):
    @property
    def repo_name(self) -> str:
        return self.options.azdo.repo or ""

    @property
    def image_info_path(self) -> str:
        return self.options.azdo.path or ""

    @property
    def branch(self) -> str:
        return self.options.azdo.branch or ""

    @property
    def access_token(self) -> str:
        return self.options.azdo.access_token

    def clone_repository(self, repo_path: str) -> str:
        # AzDO repos aren't publicly cloneable
        return self.git_service.clone(
            self.options.azdo.get_repo_url(),
            repo_path,
            self.branch,
            token=self.access_token,
        )

    def get_file_url(self) -> str:
        query = urlencode({"path": f"/{self.image_info_path.lstrip('/')}", "version": f"GB{self.branch}"})
        return f"{self.options.azdo.get_repo_url()}?{query}"

    def get_commit_url(self, commit_sha: str) -> str:
        return f"{self.options.azdo.get_repo_url()}/commit/{commit_sha}"


def create_repo_provider(git_service: GitService, options: PublishOptions) -> GitRepoProvider:
    validate_publish_options(options)
    if options.git.path:
        return GitHubRepoProvider(git_service, options)
    return AzdoRepoProvider(git_service, options)
