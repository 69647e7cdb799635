import copy
from dataclasses import dataclass, field
from typing import Optional

from imageinfo.info.manifest import (
    ManifestImage,
    ManifestPlatform,
    normalize_dockerfile_path,
)

# Keys that locate a platform entry. Every other key of a platform entry is
# part of its artifact payload.
PLATFORM_LOCATOR_KEYS = ("dockerfile", "osType", "osVersion", "architecture", "variant")


@dataclass
class PlatformData:
    dockerfile: str
    os_type: str
    os_version: str
    architecture: str
    variant: str = ""
    payload: dict = field(default_factory=dict)
    manifest_platform: Optional[ManifestPlatform] = field(default=None, compare=False)

    @property
    def identity(self):
        if self.manifest_platform is not None:
            return self.manifest_platform
        return (
            normalize_dockerfile_path(self.dockerfile),
            self.os_type.lower(),
            self.os_version,
            self.architecture,
            self.variant,
        )

    @classmethod
    def from_dict(cls, data: dict) -> "PlatformData":
        payload = {k: copy.deepcopy(v) for k, v in data.items() if k not in PLATFORM_LOCATOR_KEYS}
        return cls(
            dockerfile=data["dockerfile"],
            os_type=data["osType"],
            os_version=data["osVersion"],
            architecture=data["architecture"],
            variant=data.get("variant", ""),
            payload=payload,
        )

    def to_dict(self) -> dict:
        d = {
            "dockerfile": self.dockerfile,
            "osType": self.os_type,
            "osVersion": self.os_version,
            "architecture": self.architecture,
        }
        if self.variant:
            d["variant"] = self.variant
        d.update(copy.deepcopy(self.payload))
        return d

    def __str__(self):
        arch = f"{self.architecture}/{self.variant}" if self.variant else self.architecture
        return f"{self.dockerfile} ({self.os_type}/{self.os_version}/{arch})"


@dataclass
class ImageData:
    platforms: list = field(default_factory=list)
    attributes: dict = field(default_factory=dict)
    manifest_image: Optional[ManifestImage] = field(default=None, compare=False)

    @property
    def identity(self):
        if self.manifest_image is not None:
            return self.manifest_image
        return tuple(platform.identity for platform in self.platforms)

    def get_platform(self, identity) -> Optional[PlatformData]:
        for platform in self.platforms:
            if platform.identity == identity:
                return platform
        return None

    @classmethod
    def from_dict(cls, data: dict) -> "ImageData":
        attributes = {k: copy.deepcopy(v) for k, v in data.items() if k != "platforms"}
        platforms = [PlatformData.from_dict(p) for p in data.get("platforms", [])]
        return cls(platforms=platforms, attributes=attributes)

    def to_dict(self) -> dict:
        d = copy.deepcopy(self.attributes)
        d["platforms"] = [platform.to_dict() for platform in self.platforms]
        return d


@dataclass
class RepoData:
    repo: str
    images: list = field(default_factory=list)

    def get_image(self, identity) -> Optional[ImageData]:
        for image in self.images:
            if image.identity == identity:
                return image
        return None

    @classmethod
    def from_dict(cls, data: dict) -> "RepoData":
        return cls(
            repo=data["repo"],
            images=[ImageData.from_dict(i) for i in data.get("images", [])],
        )

    def to_dict(self) -> dict:
        return {"repo": self.repo, "images": [image.to_dict() for image in self.images]}


@dataclass
class ImageArtifactDetails:
    """In-memory form of an image-info document: repos -> images -> platforms."""

    repos: list = field(default_factory=list)

    def get_repo(self, name: str) -> Optional[RepoData]:
        for repo in self.repos:
            if repo.repo == name:
                return repo
        return None

    @classmethod
    def from_dict(cls, data: dict) -> "ImageArtifactDetails":
        return cls(repos=[RepoData.from_dict(r) for r in data.get("repos", [])])

    def to_dict(self) -> dict:
        return {"repos": [repo.to_dict() for repo in self.repos]}
