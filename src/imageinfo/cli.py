#!/bin/env python3

import logging
import sys

import click

from imageinfo.commands import publish, reconcile


@click.group()
@click.option("--verbose", is_flag=True, help="Enable debug logging")
def cli(verbose):
    """Image info publishing command line interface"""
    logging.basicConfig(
        stream=sys.stdout,
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
    )


cli.add_command(publish.publish)
cli.add_command(reconcile.reconcile)


if __name__ == "__main__":
    cli()
