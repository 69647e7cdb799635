from dataclasses import dataclass, field
from typing import Optional

from imageinfo.exceptions import ConfigurationError


@dataclass
class GitOptions:
    owner: str = ""
    repo: str = ""
    branch: str = ""
    path: str = ""
    username: str = ""
    email: str = ""
    auth_token: str = field(default="", repr=False)

    def get_repo_url(self) -> str:
        return f"https://github.com/{self.owner}/{self.repo}"


@dataclass
class AzdoOptions:
    access_token: str = field(default="", repr=False)
    organization: str = ""
    project: str = ""
    repo: Optional[str] = None
    branch: Optional[str] = "main"
    path: Optional[str] = None

    def get_repo_url(self) -> str:
        return f"https://dev.azure.com/{self.organization}/{self.project}/_git/{self.repo}"


@dataclass
class PublishOptions:
    image_info_path: str
    manifest_path: str
    git: GitOptions = field(default_factory=GitOptions)
    azdo: AzdoOptions = field(default_factory=AzdoOptions)
    dry_run: bool = False


def validate_publish_options(options: PublishOptions):
    """Fail before any network activity if the target file is ambiguous or missing."""
    git_path = options.git.path
    azdo_path = options.azdo.path
    if git_path and azdo_path and git_path != azdo_path:
        raise ConfigurationError(
            f"The file path for GitHub '{git_path}' must be equal to the file path for AzDO '{azdo_path}'."
        )
    if not git_path and not azdo_path:
        raise ConfigurationError("Either GitHub or AzDO options must be specified.")
    # the commit identity is needed for both backends
    if not options.dry_run and not (options.git.username and options.git.email):
        raise ConfigurationError(
            "The git username and email to commit with must be specified unless running a dry run."
        )
