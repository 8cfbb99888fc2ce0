"""
README marker splicing.

Replaces the region between ``<!-- CONTRIBUTIONS:START -->`` and
``<!-- CONTRIBUTIONS:END -->`` with freshly generated markup.
"""

import logging
import os

from .errors import MarkerNotFoundWarning

logger = logging.getLogger("contribs-generator.splicer")

START_MARKER = "<!-- CONTRIBUTIONS:START -->"
END_MARKER = "<!-- CONTRIBUTIONS:END -->"


def splice_between_markers(text: str, fragment: str,
                           start: str = START_MARKER, end: str = END_MARKER) -> str:
    """
    Replace the text strictly between the first start and end markers.

    The fragment is padded with exactly one blank line on each side, so
    splicing the same fragment twice yields the same document.

    Args:
        text: Full README content
        fragment: Markup to place between the markers
        start: Start marker
        end: End marker

    Returns:
        The new README content

    Raises:
        MarkerNotFoundWarning: If a marker is missing or the end marker does
                               not follow the start marker
    """
    start_index = text.find(start)
    end_index = text.find(end)
    if start_index == -1 or end_index == -1:
        raise MarkerNotFoundWarning(f"Markers {start} / {end} not found")

    region_start = start_index + len(start)
    if end_index < region_start:
        raise MarkerNotFoundWarning(f"{end} appears before {start}")

    body = fragment.strip("\n")
    return f"{text[:region_start]}\n\n{body}\n\n{text[end_index:]}"


class ReadmeSplicer:
    """
    Rewrite the contributions region of a README file.

    Args:
        path: README file to rewrite.
    """

    def __init__(self, path: str) -> None:
        self.path = path

    def inject(self, fragment: str) -> bool:
        """
        Splice ``fragment`` into the README and overwrite the file.

        Line endings and non-ASCII characters outside the region are kept
        as they are.

        Returns:
            True if the file was rewritten, False if nothing changed
        """
        if not os.path.exists(self.path):
            logger.warning("%s not found, skipping injection", self.path)
            return False

        with open(self.path, "r", encoding="utf-8", newline="") as f:
            content = f.read()

        try:
            new_content = splice_between_markers(content, fragment)
        except MarkerNotFoundWarning as e:
            logger.warning("Markers not found in %s: %s", self.path, e)
            return False

        if new_content == content:
            logger.info("%s already up to date", self.path)
            return False

        with open(self.path, "w", encoding="utf-8", newline="") as f:
            f.write(new_content)
        logger.info("Injected contributions gallery into %s", self.path)
        return True
