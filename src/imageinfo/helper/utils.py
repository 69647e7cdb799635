import configparser
import logging
import os
import shutil
import stat
import sys
import tempfile
from contextlib import contextmanager

from imageinfo.exceptions import ScratchDirectoryError

logger = logging.getLogger(__name__)

CONFIG_FILE = "imageinfo.ini"
SCRATCH_ROOT = "imagebuilder-repos"


def get_config(config_file: str = CONFIG_FILE) -> configparser.ConfigParser:
    config = configparser.ConfigParser()
    if os.path.exists(config_file):
        config.read(config_file)
    return config


def get_scratch_path(repo_name: str) -> str:
    return os.path.join(tempfile.gettempdir(), SCRATCH_ROOT, repo_name)


def _make_writable_and_retry(func, path, _exc):
    # git marks object files read-only
    os.chmod(path, stat.S_IWRITE | stat.S_IREAD)
    func(path)


def force_delete_directory(path: str):
    if not os.path.isdir(path):
        return
    logger.debug(f"Deleting directory {path}")
    try:
        if sys.version_info >= (3, 12):
            shutil.rmtree(path, onexc=_make_writable_and_retry)
        else:
            shutil.rmtree(path, onerror=_make_writable_and_retry)
    except OSError as e:
        raise ScratchDirectoryError(f"Unable to delete directory {path}: {e}") from e


@contextmanager
def scratch_directory(path: str):
    """Guarantee an empty directory path for the duration of the block and remove it afterwards."""
    force_delete_directory(path)
    try:
        yield path
    finally:
        force_delete_directory(path)
