class ImageInfoError(Exception):
    """Base class for all errors raised while publishing image info."""


class ConfigurationError(ImageInfoError):
    pass


class LoadError(ImageInfoError):
    pass


class ConsistencyError(ImageInfoError):
    pass


class GitError(ImageInfoError):
    pass


class CloneError(GitError):
    pass


class PushError(GitError):
    pass


class ScratchDirectoryError(ImageInfoError):
    pass
