"""Shared helpers."""

from .dates import calc_difference_in_days
from .logging import setup_logging
from .text import (
    mask_credentials,
    slug_suffix,
    strip_control_characters,
    with_git_suffix,
)

__all__ = [
    'calc_difference_in_days',
    'setup_logging',
    'mask_credentials',
    'slug_suffix',
    'strip_control_characters',
    'with_git_suffix',
]
