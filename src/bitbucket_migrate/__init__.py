"""Bitbucket Migration Tool

Moves every repository of a Bitbucket workspace to GitHub: full history,
visibility and description, `main` as default branch name, team access,
branch protection and archiving, then deletes the Bitbucket original.
"""

__version__ = '0.1.0'

from .cli.main import main

__all__ = ['main']
