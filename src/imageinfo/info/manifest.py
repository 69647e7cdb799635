import logging
import posixpath
from dataclasses import dataclass
from typing import Optional, Tuple

import jsonschema
import yaml
from oras.container import Container as OrasContainer

from imageinfo.exceptions import LoadError
from imageinfo.info.schemas import manifest as manifestSchema

logger = logging.getLogger(__name__)

DOCKERFILE_NAME = "Dockerfile"


def normalize_repo_name(name: str, registry: str = "") -> str:
    """
    Strip the registry (and any tag or digest) from a repository name.

        mcr.microsoft.com/dotnet/runtime  -> dotnet/runtime
        localhost/dotnet/runtime          -> dotnet/runtime
        dotnet/runtime:8.0                -> dotnet/runtime
        runtime                           -> runtime

    A known registry (the manifest's) is stripped even when it doesn't look
    like a host name.
    """
    registry = registry.rstrip("/")
    if registry and name.startswith(f"{registry}/"):
        name = name[len(registry) + 1 :]
    elif name.startswith("localhost/"):
        name = name[len("localhost/") :]
    try:
        return OrasContainer(name).api_prefix
    except ValueError as e:
        raise LoadError(f"Invalid repository name '{name}': {e}") from e


def normalize_dockerfile_path(path: str) -> str:
    path = posixpath.normpath(path.replace("\\", "/"))
    if not posixpath.basename(path).startswith(DOCKERFILE_NAME):
        path = posixpath.join(path, DOCKERFILE_NAME)
    return path


@dataclass(frozen=True)
class ManifestPlatform:
    dockerfile: str
    os: str
    os_version: str
    architecture: str
    variant: str = ""
    tags: Tuple[str, ...] = ()

    def matches(
        self,
        dockerfile: str,
        os_type: str,
        os_version: str,
        architecture: str,
        variant: str = "",
    ) -> bool:
        return (
            self.dockerfile == normalize_dockerfile_path(dockerfile)
            and self.os == os_type.lower()
            and self.os_version == os_version
            and self.architecture == architecture
            and self.variant == (variant or "")
        )


@dataclass(frozen=True)
class ManifestImage:
    repo: str
    platforms: Tuple[ManifestPlatform, ...]


@dataclass(frozen=True)
class ManifestRepo:
    name: str
    images: Tuple[ManifestImage, ...]

    def find_platform(
        self,
        dockerfile: str,
        os_type: str,
        os_version: str,
        architecture: str,
        variant: str = "",
    ) -> Tuple[Optional[ManifestImage], Optional[ManifestPlatform]]:
        for image in self.images:
            for platform in image.platforms:
                if platform.matches(
                    dockerfile, os_type, os_version, architecture, variant
                ):
                    return image, platform
        return None, None


@dataclass(frozen=True)
class Manifest:
    repos: Tuple[ManifestRepo, ...]
    registry: str = ""

    def get_repo(self, name: str) -> Optional[ManifestRepo]:
        for repo in self.repos:
            if repo.name == name:
                return repo
        return None

    @property
    def repo_names(self) -> set:
        return {repo.name for repo in self.repos}


def _parse_tags(tags) -> Tuple[str, ...]:
    if not tags:
        return ()
    # tags may be declared as a mapping of tag name to tag metadata
    return tuple(tags.keys() if isinstance(tags, dict) else tags)


def _parse_platform(data: dict) -> ManifestPlatform:
    return ManifestPlatform(
        dockerfile=normalize_dockerfile_path(data["dockerfile"]),
        os=data["os"].lower(),
        os_version=data.get("osVersion", ""),
        architecture=data.get("architecture", "amd64"),
        variant=data.get("variant") or "",
        tags=_parse_tags(data.get("tags")),
    )


def manifest_from_dict(data: dict) -> Manifest:
    try:
        jsonschema.validate(data, schema=manifestSchema)
    except jsonschema.ValidationError as e:
        raise LoadError(f"Invalid manifest: {e.message}") from e

    registry = data.get("registry", "")
    repos = []
    for repo_data in data["repos"]:
        name = normalize_repo_name(repo_data["name"], registry)
        images = tuple(
            ManifestImage(
                repo=name,
                platforms=tuple(_parse_platform(p) for p in image["platforms"]),
            )
            for image in repo_data["images"]
        )
        repos.append(ManifestRepo(name=name, images=images))
    return Manifest(repos=tuple(repos), registry=registry)


def load_manifest(path: str) -> Manifest:
    logger.debug(f"Loading manifest {path}")
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, UnicodeDecodeError) as e:
        raise LoadError(f"Unable to read manifest {path}: {e}") from e
    except yaml.YAMLError as e:
        raise LoadError(f"Unable to parse manifest {path}: {e}") from e
    if not isinstance(data, dict):
        raise LoadError(f"Manifest {path} does not contain a mapping")
    return manifest_from_dict(data)
