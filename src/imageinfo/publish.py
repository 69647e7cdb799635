import logging
import os
from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional

from imageinfo.exceptions import ConfigurationError, LoadError
from imageinfo.git.provider import GitRepoProvider, create_repo_provider
from imageinfo.git.service import GitService
from imageinfo.helper.log import write_heading, write_message, write_subheading
from imageinfo.helper.utils import get_scratch_path, scratch_directory
from imageinfo.info.helper import load_from_content, load_from_file, serialize
from imageinfo.info.manifest import Manifest
from imageinfo.info.merge import merge_image_artifact_details
from imageinfo.info.models import ImageArtifactDetails
from imageinfo.info.prune import remove_out_of_date_content
from imageinfo.options import PublishOptions

logger = logging.getLogger(__name__)

COMMIT_MESSAGE = "Merging Docker image info updates from build"


class PublishState(Enum):
    Idle = auto()
    Cloning = auto()
    Reconciling = auto()
    NoChange = auto()
    DryRunPreview = auto()
    Publishing = auto()
    Cleanup = auto()
    Done = auto()
    Failed = auto()


@dataclass
class PublishResult:
    outcome: PublishState
    file_url: str
    content: Optional[str] = None
    commit_url: Optional[str] = None


def reconcile(
    source: ImageArtifactDetails,
    target: Optional[ImageArtifactDetails],
    manifest: Manifest,
) -> ImageArtifactDetails:
    """Prune the target against the manifest and merge the source into it."""
    if target is None:
        # nothing published yet, the source is the whole document
        return source
    remove_out_of_date_content(target, manifest)
    return merge_image_artifact_details(source, target)


def read_text(path: str) -> Optional[str]:
    """Contents of path exactly as stored, or None if there is no such file."""
    if not os.path.exists(path):
        return None
    try:
        with open(path, "r", encoding="utf-8", newline="") as f:
            return f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise LoadError(f"Unable to read {path}: {e}") from e


def get_updated_image_info(
    source_path: str, target_path: str, manifest: Manifest
) -> Optional[str]:
    """
    Returns the new content of the target image info file, or None if the
    merge result is identical to what is already there.
    """
    source = load_from_file(source_path, manifest)

    original_content = read_text(target_path)
    target = None
    if original_content is None:
        logger.info(f"{target_path} does not exist yet, using source image info as is")
    else:
        target = load_from_content(original_content, manifest, skip_manifest_validation=True)

    new_content = serialize(reconcile(source, target, manifest))
    if new_content == original_content:
        return None
    return new_content


class ImageInfoPublisher:
    """
    Publishes the image info of a build: clones the repo holding the
    published image info file, merges the build's image info into it and
    pushes the result unless nothing changed or this is a dry run.
    """

    def __init__(
        self,
        options: PublishOptions,
        manifest: Manifest,
        git_service: Optional[GitService] = None,
    ):
        self.options = options
        self.manifest = manifest
        self.git_service = git_service or GitService()
        self.state = PublishState.Idle

    def _transition(self, state: PublishState):
        logger.debug(f"Publish state {self.state.name} -> {state.name}")
        self.state = state

    def publish(self) -> PublishResult:
        try:
            result = self._publish()
        except Exception:
            self._transition(PublishState.Failed)
            raise
        self._transition(PublishState.Done)
        return result

    def _publish(self) -> PublishResult:
        provider = create_repo_provider(self.git_service, self.options)
        if not provider.repo_name:
            raise ConfigurationError("The name of the repo holding the image info must be specified.")

        write_heading("PUBLISHING IMAGE INFO")

        repo_path = get_scratch_path(provider.repo_name)
        self._transition(PublishState.Cloning)
        with scratch_directory(repo_path):
            result = self._publish_from_clone(provider, repo_path)
            self._transition(PublishState.Cleanup)
        return result

    def _publish_from_clone(self, provider: GitRepoProvider, repo_path: str) -> PublishResult:
        write_subheading(f"Cloning {provider.repo_name} repo")
        provider.clone_repository(repo_path)
        file_url = provider.get_file_url()

        self._transition(PublishState.Reconciling)
        write_subheading("Calculating new image info content")
        target_path = os.path.join(repo_path, provider.image_info_path.lstrip("/"))
        content = get_updated_image_info(
            self.options.image_info_path, target_path, self.manifest
        )

        if content is None:
            self._transition(PublishState.NoChange)
            write_message(f"No changes to the '{file_url}' file were needed.")
            return PublishResult(PublishState.NoChange, file_url)

        write_message(
            f"The '{file_url}' file has been updated with the following content:\n{content}"
        )

        if self.options.dry_run:
            self._transition(PublishState.DryRunPreview)
            write_message("Dry run: the changes were not committed or pushed.")
            return PublishResult(PublishState.DryRunPreview, file_url, content)

        self._transition(PublishState.Publishing)
        commit_url = self._update_git_repo(provider, repo_path, target_path, content)
        return PublishResult(PublishState.Publishing, file_url, content, commit_url)

    def _update_git_repo(
        self, provider: GitRepoProvider, repo_path: str, target_path: str, content: str
    ) -> str:
        os.makedirs(os.path.dirname(target_path), exist_ok=True)
        with open(target_path, "w", encoding="utf-8", newline="") as f:
            f.write(content)
        self.git_service.stage(repo_path, target_path)

        commit_sha = self.git_service.commit(
            repo_path, COMMIT_MESSAGE, self.options.git.username, self.options.git.email
        )

        write_subheading("Pushing changes")
        commit_url = provider.push_changes(repo_path, commit_sha)
        write_message(f"The '{provider.image_info_path}' file was updated: {commit_url}")
        return commit_url
