"""CLI module for grace."""

import click


@click.group()
@click.version_option(package_name="aiohttp-grace")
def main() -> None:
    """grace - health probes and graceful shutdown for aiohttp servers."""


# Defer import to avoid circular dependency
def _register_commands():
    from grace.cli.serve import serve_command

    main.add_command(serve_command)


_register_commands()
