import json
import logging

import jsonschema

from imageinfo.exceptions import LoadError
from imageinfo.info.manifest import Manifest, normalize_repo_name
from imageinfo.info.models import ImageArtifactDetails
from imageinfo.info.schemas import image_info as imageInfoSchema

logger = logging.getLogger(__name__)


def serialize(image_artifact_details: ImageArtifactDetails) -> str:
    """Canonical text form of an image-info document, used both for writing and for change detection."""
    return json.dumps(image_artifact_details.to_dict(), indent=2) + "\n"


def load_from_content(
    content: str, manifest: Manifest, skip_manifest_validation: bool = False
) -> ImageArtifactDetails:
    """
    Parse image-info content and resolve its entries against the manifest.

    With manifest validation, every repo, image and platform must have a
    counterpart in the manifest. Without it, entries that don't resolve are
    kept but left orphaned (no manifest image / platform attached) so they
    can be pruned afterwards.
    """
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise LoadError(f"Image info is not valid JSON: {e}") from e
    try:
        jsonschema.validate(data, schema=imageInfoSchema)
    except jsonschema.ValidationError as e:
        raise LoadError(f"Invalid image info: {e.message}") from e

    image_artifact_details = ImageArtifactDetails.from_dict(data)
    seen = set()
    for repo in image_artifact_details.repos:
        repo.repo = normalize_repo_name(repo.repo, manifest.registry)
        if repo.repo in seen:
            raise LoadError(f"Image info contains repo '{repo.repo}' more than once")
        seen.add(repo.repo)

    _resolve_manifest_entries(image_artifact_details, manifest, not skip_manifest_validation)
    return image_artifact_details


def load_from_file(
    path: str, manifest: Manifest, skip_manifest_validation: bool = False
) -> ImageArtifactDetails:
    try:
        with open(path, "r", encoding="utf-8") as f:
            content = f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise LoadError(f"Unable to read image info file {path}: {e}") from e
    return load_from_content(content, manifest, skip_manifest_validation)


def _resolve_manifest_entries(
    image_artifact_details: ImageArtifactDetails, manifest: Manifest, validate: bool
):
    for repo in image_artifact_details.repos:
        manifest_repo = manifest.get_repo(repo.repo)
        if manifest_repo is None:
            if validate:
                raise LoadError(f"Repo '{repo.repo}' does not exist in the manifest")
            logger.debug(f"Repo '{repo.repo}' not found in manifest")
            continue

        for image in repo.images:
            for platform in image.platforms:
                manifest_image, manifest_platform = manifest_repo.find_platform(
                    platform.dockerfile,
                    platform.os_type,
                    platform.os_version,
                    platform.architecture,
                    platform.variant,
                )
                if manifest_platform is None:
                    if validate:
                        raise LoadError(
                            f"Platform {platform} of repo '{repo.repo}' does not exist in the manifest"
                        )
                    logger.debug(f"Platform {platform} not found in manifest")
                    continue
                platform.manifest_platform = manifest_platform
                if image.manifest_image is None:
                    image.manifest_image = manifest_image

            if image.manifest_image is None and validate:
                raise LoadError(
                    f"Image of repo '{repo.repo}' has no platform matching the manifest"
                )
