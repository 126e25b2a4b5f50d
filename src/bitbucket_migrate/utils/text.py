"""String helpers."""

import re

_CRLF_RUN = re.compile(r'(?:\r\n)+')
_LINE_BREAK = re.compile(r'[\r\n]')
_SUFFIX = re.compile(r'^[a-z0-9%]+$', re.IGNORECASE)
_URL_CREDENTIALS = re.compile(
    r'(?P<scheme>[a-z][a-z0-9+.-]*://)[^/@\s]+@', re.IGNORECASE
)


def strip_control_characters(s: str) -> str:
    """Make free text safe for single-line metadata fields.

    Runs of CRLF collapse to a single space, lone CR or LF become a space,
    and everything outside printable ASCII is dropped.
    """
    s = _CRLF_RUN.sub(' ', s)
    s = _LINE_BREAK.sub(' ', s)
    return ''.join(c for c in s if 31 < ord(c) < 127)


def slug_suffix(slug: str) -> str:
    """Return the file-extension-like suffix of a slug, or an empty string."""
    _, dot, suffix = slug.rpartition('.')
    if not dot or not _SUFFIX.match(suffix):
        return ''
    return suffix


def with_git_suffix(path: str, suffix: str = '') -> str:
    """Point a repository path at its ``.git`` endpoint.

    The path's own suffix is replaced by ``<suffix>.git`` (or plain ``git``
    when ``suffix`` is empty), so dotted slugs keep their extension.
    """
    replacement = '.'.join([suffix, 'git']) if suffix else 'git'
    current = slug_suffix(path.rsplit('/', 1)[-1])
    if current:
        path = path[: -len(current) - 1]
    return f'{path}.{replacement}'


def mask_credentials(text: str) -> str:
    """Hide the userinfo part of any URL in ``text``."""
    return _URL_CREDENTIALS.sub(r'\g<scheme>***@', text)
