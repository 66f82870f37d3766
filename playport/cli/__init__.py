"""CLI package bootstrap.

Defines root group (`cli`) in helpers and imports submodules so their
decorators register commands.
"""
from playport.cli.helpers import cli  # root group
from playport.cli import core  # noqa: F401
from playport.cli import oauth_cmds  # noqa: F401

__all__ = ["cli"]
