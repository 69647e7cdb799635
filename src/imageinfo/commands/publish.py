import configparser
from typing import Optional

import click

from imageinfo.exceptions import ImageInfoError
from imageinfo.git.service import GitService
from imageinfo.helper.utils import CONFIG_FILE, get_config
from imageinfo.info.manifest import load_manifest
from imageinfo.options import AzdoOptions, GitOptions, PublishOptions
from imageinfo.publish import ImageInfoPublisher


def _value(
    value: Optional[str],
    config: configparser.ConfigParser,
    section: str,
    key: str,
    default: Optional[str] = "",
) -> Optional[str]:
    if value is not None:
        return value
    if config.has_option(section, key):
        return config.get(section, key)
    return default


def setup_publish_options(
    config: configparser.ConfigParser,
    manifest_path: str,
    image_info_path: str,
    dry_run: bool,
    git: dict,
    azdo: dict,
) -> PublishOptions:
    git_options = GitOptions(
        **{key: _value(value, config, "git", key) for key, value in git.items()}
    )
    azdo_options = AzdoOptions(
        access_token=_value(azdo["access_token"], config, "azdo", "access_token"),
        organization=_value(azdo["organization"], config, "azdo", "organization"),
        project=_value(azdo["project"], config, "azdo", "project"),
        repo=_value(azdo["repo"], config, "azdo", "repo", None),
        branch=_value(azdo["branch"], config, "azdo", "branch", "main"),
        path=_value(azdo["path"], config, "azdo", "path", None),
    )
    return PublishOptions(
        image_info_path=image_info_path,
        manifest_path=manifest_path,
        git=git_options,
        azdo=azdo_options,
        dry_run=dry_run,
    )


@click.command()
@click.option(
    "--manifest",
    "manifest_path",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="Manifest defining the repos, images and platforms",
)
@click.option(
    "--image-info",
    "image_info_path",
    required=True,
    type=click.Path(dir_okay=False),
    help="Image info file produced by the build",
)
@click.option(
    "--dry-run", is_flag=True, help="Calculate the new content without committing or pushing it"
)
@click.option(
    "--config",
    "config_file",
    type=click.Path(dir_okay=False),
    default=CONFIG_FILE,
    show_default=True,
    help="ini file with [git] and [azdo] defaults",
)
@click.option("--git-owner", help="Owner of the GitHub repo to access")
@click.option("--git-repo", help="Name of the GitHub repo to access")
@click.option("--git-branch", help="Name of GitHub branch to access")
@click.option("--git-path", help="Path of the image info file in the GitHub repo")
@click.option("--git-username", help="Username to use for GitHub connection and commits")
@click.option("--git-email", help="Email to use for GitHub connection and commits")
@click.option(
    "--git-token", envvar="IMAGEINFO_GIT_TOKEN", help="Auth token to use to connect to GitHub"
)
@click.option("--azdo-org", help="Azure DevOps organization")
@click.option("--azdo-project", help="Azure DevOps project")
@click.option("--azdo-repo", help="Azure DevOps repo")
@click.option("--azdo-branch", help="Azure DevOps branch  [default: main]")
@click.option("--azdo-path", help="Path of the image info file in the Azure DevOps repo")
@click.option("--azdo-pat", envvar="IMAGEINFO_AZDO_PAT", help="Azure DevOps access token")
def publish(
    manifest_path,
    image_info_path,
    dry_run,
    config_file,
    git_owner,
    git_repo,
    git_branch,
    git_path,
    git_username,
    git_email,
    git_token,
    azdo_org,
    azdo_project,
    azdo_repo,
    azdo_branch,
    azdo_path,
    azdo_pat,
):
    """Publishes a build's merged image info."""
    options = setup_publish_options(
        get_config(config_file),
        manifest_path,
        image_info_path,
        dry_run,
        git={
            "owner": git_owner,
            "repo": git_repo,
            "branch": git_branch,
            "path": git_path,
            "username": git_username,
            "email": git_email,
            "auth_token": git_token,
        },
        azdo={
            "access_token": azdo_pat,
            "organization": azdo_org,
            "project": azdo_project,
            "repo": azdo_repo,
            "branch": azdo_branch,
            "path": azdo_path,
        },
    )
    try:
        manifest = load_manifest(options.manifest_path)
        result = ImageInfoPublisher(options, manifest, GitService()).publish()
    except ImageInfoError as e:
        raise click.ClickException(str(e))

    if result.commit_url:
        click.echo(f"Pushed {result.commit_url}")
