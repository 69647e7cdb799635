import logging

from imageinfo.exceptions import ConsistencyError
from imageinfo.info.manifest import Manifest
from imageinfo.info.models import ImageArtifactDetails

logger = logging.getLogger(__name__)


def remove_out_of_date_content(
    image_artifact_details: ImageArtifactDetails, manifest: Manifest
) -> ImageArtifactDetails:
    """
    Drop every repo, image and platform entry that no longer exists in the manifest.

    The tree is updated in place (and returned). Raises ConsistencyError if
    nothing is left, which always points to a bug in the matching logic and
    must never be written out.
    """
    repos = []
    for repo in image_artifact_details.repos:
        # the image info stores unqualified repo names, as does the manifest
        if manifest.get_repo(repo.repo) is None:
            logger.info(f"Removing repo '{repo.repo}': not defined in manifest")
            continue

        images = []
        for image in repo.images:
            manifest_image = image.manifest_image
            if manifest_image is None:
                logger.info(f"Removing orphaned image from repo '{repo.repo}'")
                continue

            platforms = []
            for platform in image.platforms:
                if platform.manifest_platform not in manifest_image.platforms:
                    logger.info(f"Removing platform {platform} from repo '{repo.repo}'")
                    continue
                platforms.append(platform)
            image.platforms = platforms
            images.append(image)

        repo.images = images
        repos.append(repo)

    image_artifact_details.repos = repos

    if not image_artifact_details.repos:
        raise ConsistencyError(
            "Removal of out-of-date content resulted in there being no content remaining "
            "in the target image info file. Something is probably wrong with the logic."
        )
    return image_artifact_details
