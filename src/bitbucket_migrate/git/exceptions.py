"""Git operation exceptions."""

from typing import List, Optional


class GitCommandError(Exception):
    """An external git invocation failed or timed out."""

    def __init__(
        self,
        command: List[str],
        returncode: Optional[int] = None,
        stderr: str = '',
    ):
        """Initialize git command error.

        Args:
            command: Masked command line that failed
            returncode: Process exit status, None on timeout
            stderr: Captured standard error
        """
        self.command = command
        self.returncode = returncode
        self.stderr = stderr

        if returncode is None:
            message = f'Command timed out: {" ".join(command)}'
        else:
            message = (
                f'Command failed with exit code {returncode}: {" ".join(command)}'
            )
        if stderr:
            message = f'{message}\n{stderr.strip()}'
        super().__init__(message)
