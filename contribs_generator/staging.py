"""
Optional version-control staging of generated files.
"""

import logging
import subprocess
from typing import Optional, Sequence

logger = logging.getLogger("contribs-generator.staging")


def stage_files(paths: Sequence[str], cwd: Optional[str] = None) -> None:
    """Run ``git add`` on the given paths; failures are logged and ignored."""
    if not paths:
        return
    try:
        subprocess.run(
            ["git", "add", "--", *paths],
            cwd=cwd,
            check=True,
            capture_output=True,
            text=True,
        )
        logger.debug("Staged %d file(s)", len(paths))
    except (OSError, subprocess.CalledProcessError) as e:
        logger.debug("git add failed: %s", e)
