"""
Shell command execution for SQL Ops.
"""

import logging
import re
import subprocess
from typing import Optional

from .models import CommandOutcome

PASSWORD_PATTERN = re.compile(r"""(--password=)(?:'[^']*'|"[^"]*"|[^\s'"])+""")

SHELL = '/bin/bash'
# A pipeline fails when any stage fails, not only the last one.
SHELL_PREAMBLE = 'set -o pipefail; '


def mask_passwords(command: str) -> str:
    """Hide ``--password=...`` values for logging."""
    return PASSWORD_PATTERN.sub(r"\1******", command)


class ShellRunner:
    """Runs commands through the shell and waits for them to exit."""

    def __init__(self, simulate: bool = False, timeout: Optional[float] = None):
        self.simulate = simulate
        self.timeout = timeout

    def run(self, command: str, capture: bool = False) -> CommandOutcome:
        """Execute ``command``; stdout is inherited unless ``capture`` is set."""
        logging.debug(f"Executing: {mask_passwords(command)}")

        if self.simulate:
            logging.info(f"[simulate] {mask_passwords(command)}")
            return CommandOutcome(command=command, returncode=0)

        try:
            completed = subprocess.run(
                SHELL_PREAMBLE + command,
                shell=True,
                executable=SHELL,
                capture_output=capture,
                text=True,
                timeout=self.timeout,
                check=False
            )
        except subprocess.TimeoutExpired as e:
            logging.error(f"Command timed out after {e.timeout}s")
            return CommandOutcome(command=command, returncode=-1, stderr=str(e))

        outcome = CommandOutcome(
            command=command,
            returncode=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or ""
        )
        if not outcome.success:
            logging.debug(f"Command exited with status {outcome.returncode}")
        return outcome
