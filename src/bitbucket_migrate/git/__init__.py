"""Git operations module for repository migration."""

from .exceptions import GitCommandError
from .transport import GitTransport, RepositoryTransport

__all__ = ['GitCommandError', 'GitTransport', 'RepositoryTransport']
