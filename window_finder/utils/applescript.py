"""AppleScript execution utilities."""

import re
import subprocess
from typing import Optional, Tuple

from ..exceptions import AppleScriptTimeoutError

# osascript reports errors as "... (-1743)"
_ERROR_CODE = re.compile(r"\((-?\d+)\)\s*$")

# Common AppleScript error codes
ERR_PERMISSION_DENIED = -1743
ERR_APP_NOT_RUNNING = -600
ERR_APP_NOT_FOUND = -2700
ERR_CANT_GET_OBJECT = -1728
ERR_NOT_UNDERSTOOD = -1708


def escape_applescript_string(text: str) -> str:
    """
    Escape special characters for AppleScript string literals.

    Args:
        text: String to escape

    Returns:
        Escaped string safe for use in AppleScript
    """
    # Escape backslashes first (must be first)
    text = text.replace("\\", "\\\\")
    text = text.replace('"', '\\"')
    text = text.replace("\n", "\\n")
    text = text.replace("\r", "\\r")
    text = text.replace("\t", "\\t")
    return text


def parse_error_code(stderr: Optional[str]) -> Optional[int]:
    """
    Extract the numeric AppleScript error code from osascript's stderr.

    Args:
        stderr: Error output, e.g. "execution error: Not authorized ... (-1743)"

    Returns:
        Error code or None if absent
    """
    if not stderr:
        return None
    match = _ERROR_CODE.search(stderr.strip())
    return int(match.group(1)) if match else None


class AppleScriptExecutor:
    """Centralized AppleScript execution with standardized error handling."""

    def __init__(self, timeout: Optional[float] = 10.0):
        """
        Initialize the AppleScript executor.

        Args:
            timeout: Default seconds before a script is killed (None = wait forever)
        """
        self.timeout = timeout

    def execute(self, script: str, timeout: Optional[float] = None) -> Tuple[bool, Optional[str], Optional[str]]:
        """
        Execute an AppleScript command.

        Args:
            script: AppleScript code to execute
            timeout: Seconds before the script is killed (defaults to self.timeout)

        Returns:
            Tuple of (success, stdout, stderr)
            - success: True if return code is 0, False otherwise
            - stdout: Standard output (None if empty)
            - stderr: Standard error (None if empty)

        Raises:
            AppleScriptTimeoutError: If the script did not finish in time
        """
        limit = self.timeout if timeout is None else timeout
        try:
            result = subprocess.run(
                ["osascript", "-e", script],
                capture_output=True,
                text=True,
                timeout=limit
            )
        except subprocess.TimeoutExpired:
            raise AppleScriptTimeoutError(f"AppleScript timed out after {limit}s")
        except OSError as e:
            return False, None, str(e)

        success = result.returncode == 0
        stdout = result.stdout.strip() if result.stdout.strip() else None
        stderr = result.stderr.strip() if result.stderr.strip() else None

        return success, stdout, stderr

    def execute_safe(self, script: str) -> Tuple[bool, Optional[str]]:
        """
        Execute an AppleScript command, returning only success and output.

        Timeouts are reported as failures instead of raising.

        Args:
            script: AppleScript code to execute

        Returns:
            Tuple of (success, output)
        """
        try:
            success, stdout, _ = self.execute(script)
        except AppleScriptTimeoutError:
            return False, None
        return success, stdout
