import copy
import logging

from imageinfo.info.models import ImageArtifactDetails, ImageData, RepoData

logger = logging.getLogger(__name__)


def merge_image_artifact_details(
    source: ImageArtifactDetails, target: ImageArtifactDetails
) -> ImageArtifactDetails:
    """
    Merge source into target with publish semantics.

    Whatever the source mentions wins: matching platforms get the source
    payload (replaced as a whole), unknown repos, images and platforms are
    appended. Nothing is ever removed from the target; out-of-date content
    has to be pruned beforehand. The target is updated in place and returned.
    """
    for src_repo in source.repos:
        target_repo = target.get_repo(src_repo.repo)
        if target_repo is None:
            logger.debug(f"Adding repo '{src_repo.repo}'")
            target.repos.append(copy.deepcopy(src_repo))
            continue
        _merge_repo(src_repo, target_repo)
    return target


def _merge_repo(src_repo: RepoData, target_repo: RepoData):
    for src_image in src_repo.images:
        target_image = target_repo.get_image(src_image.identity)
        if target_image is None:
            logger.debug(f"Adding image to repo '{target_repo.repo}'")
            target_repo.images.append(copy.deepcopy(src_image))
            continue
        _merge_image(src_image, target_image)


def _merge_image(src_image: ImageData, target_image: ImageData):
    target_image.attributes.update(copy.deepcopy(src_image.attributes))

    for src_platform in src_image.platforms:
        target_platform = target_image.get_platform(src_platform.identity)
        if target_platform is None:
            logger.debug(f"Adding platform {src_platform}")
            target_image.platforms.append(copy.deepcopy(src_platform))
            continue
        logger.debug(f"Updating platform {target_platform}")
        target_platform.payload = copy.deepcopy(src_platform.payload)
