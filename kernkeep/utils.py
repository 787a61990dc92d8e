"""
Utility functions.

Shared helper functions used across kernkeep modules.
"""

import subprocess
from typing import List, Tuple


def run_command(cmd: List[str], check: bool = True, merge_stderr: bool = False) -> Tuple[int, str, str]:
    """
    Run a command and capture output.

    Args:
        cmd: Command as list of arguments
        check: If True, raise exception on non-zero exit code
        merge_stderr: If True, stderr is folded into stdout (like 2>&1)

    Returns:
        Tuple[int, str, str]: (exit_code, stdout, stderr)

    Raises:
        subprocess.CalledProcessError: If check=True and command fails
    """
    try:
        if merge_stderr:
            result = subprocess.run(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                check=check,
            )
        else:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                check=check,
            )
        return result.returncode, result.stdout or "", result.stderr or ""
    except subprocess.CalledProcessError as e:
        if check:
            raise
        return e.returncode, e.stdout or "", e.stderr or ""
