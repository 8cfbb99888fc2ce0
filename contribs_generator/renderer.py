"""
Avatar gallery rendering module.

This module contains the renderer strategies that turn a list of contributed
repositories into README markup: inline anchors around remote avatars, one
combined SVG sprite, or one SVG file per repository.
"""

import logging
import math
import os
import re
from typing import Dict, List, Sequence, Tuple
from urllib.parse import quote

from .config import Settings
from .models import RenderedArtifact, RenderMode, RepositoryContribution

logger = logging.getLogger("contribs-generator.renderer")

PLACEHOLDER_AVATAR = "https://avatars.githubusercontent.com/u/9919?s=64&v=4"

_ESCAPES = {"&": "&amp;", "<": "&lt;", ">": "&gt;", "'": "&apos;", '"': "&quot;"}
_ESCAPE_RE = re.compile(r"[&<>'\"]")
_UNSAFE_FILENAME_RE = re.compile(r"[^A-Za-z0-9_-]")

ANCHOR_ATTRS = 'target="_blank" rel="noopener noreferrer"'
BORDER_COLOR = "#d0d7de"


def escape_markup(text: str) -> str:
    """Entity-escape the five XML/HTML-significant characters."""
    return _ESCAPE_RE.sub(lambda m: _ESCAPES[m.group(0)], text or "")


def repository_title(contribution: RepositoryContribution) -> str:
    """Return ``owner/repo``, suffixed with the description when there is one."""
    title = contribution.full_name
    if contribution.description:
        title += " — " + contribution.description
    return title


def avatar_url(contribution: RepositoryContribution) -> str:
    return contribution.owner.avatar_url or PLACEHOLDER_AVATAR


def with_size(url: str, size: int) -> str:
    """Append an ``s=<size>`` query parameter to an avatar URL."""
    separator = "&" if "?" in url else "?"
    return f"{url}{separator}s={size}"


def safe_filename(name: str) -> str:
    """Replace every character outside ``[A-Za-z0-9_-]`` with ``_``."""
    return _UNSAFE_FILENAME_RE.sub("_", name)


def write_artifacts(artifacts: Sequence[RenderedArtifact]) -> List[str]:
    """
    Write rendered files to disk, creating parent directories as needed.

    Returns:
        Paths that were written, in order
    """
    written: List[str] = []
    for artifact in artifacts:
        parent = os.path.dirname(artifact.path)
        if parent:
            os.makedirs(parent, exist_ok=True)
        with open(artifact.path, "w", encoding="utf-8") as f:
            f.write(artifact.content)
        logger.debug("Wrote %s", artifact.path)
        written.append(artifact.path)
    return written


class Renderer:
    """
    Base renderer strategy.

    ``artifacts`` returns files to write before splicing; ``fragment`` returns
    the markup that goes between the README markers.
    """

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    def artifacts(self, contributions: Sequence[RepositoryContribution]) -> List[RenderedArtifact]:
        return []

    def fragment(self, contributions: Sequence[RepositoryContribution]) -> str:
        raise NotImplementedError


class InlineAnchorRenderer(Renderer):
    """Anchor-wrapped ``<img>`` tags pointing at remote avatars."""

    AVATAR_SIZE = 64

    def pulls_url(self, contribution: RepositoryContribution) -> str:
        author = quote(self.settings.username, safe="")
        return f"{contribution.url}/pulls?q=is:pr+author:{author}"

    def anchor(self, contribution: RepositoryContribution) -> str:
        title = escape_markup(repository_title(contribution))
        src = escape_markup(with_size(avatar_url(contribution), self.AVATAR_SIZE))
        href = escape_markup(self.pulls_url(contribution))
        size = self.AVATAR_SIZE
        return (
            f'<a href="{href}" {ANCHOR_ATTRS}>\n'
            f'  <img src="{src}" alt="{title}" title="{title}" width="{size}" height="{size}" style="margin:4px;" />\n'
            f"</a>"
        )

    def fragment(self, contributions: Sequence[RepositoryContribution]) -> str:
        lines = ['<p align="center">']
        lines.extend(self.anchor(c) for c in contributions)
        lines.append("</p>")
        return "\n".join(lines)


def _svg_tile(contribution: RepositoryContribution, clip_id: str, x: int, y: int,
              size: int, radius: int, avatar_size: int) -> str:
    title = escape_markup(repository_title(contribution))
    href = escape_markup(with_size(avatar_url(contribution), avatar_size))
    return (
        f'<clipPath id="{clip_id}"><rect x="{x}" y="{y}" width="{size}" height="{size}" rx="{radius}" ry="{radius}" /></clipPath>\n'
        f"<title>{title}</title>\n"
        f'<image href="{href}" x="{x}" y="{y}" width="{size}" height="{size}" '
        f'preserveAspectRatio="xMidYMid slice" clip-path="url(#{clip_id})" />\n'
        f'<rect x="{x + 0.5}" y="{y + 0.5}" width="{size - 1}" height="{size - 1}" rx="{radius}" ry="{radius}" '
        f'fill="none" stroke="{BORDER_COLOR}" stroke-width="1" />'
    )


class SpriteRenderer(Renderer):
    """One SVG sprite sheet with every avatar laid out on a grid."""

    TILE = 64
    PADDING = 12
    GAP = 16
    MAX_COLUMNS = 8
    RADIUS = 12
    AVATAR_SIZE = 128

    @classmethod
    def grid_layout(cls, count: int) -> Dict[str, int]:
        """
        Compute the grid for ``count`` tiles.

        Returns:
            Dictionary with ``columns``, ``rows``, ``width`` and ``height``
        """
        if count < 1:
            return {"columns": 0, "rows": 0, "width": 2 * cls.PADDING, "height": 2 * cls.PADDING}
        columns = min(cls.MAX_COLUMNS, count)
        rows = math.ceil(count / columns)
        return {
            "columns": columns,
            "rows": rows,
            "width": 2 * cls.PADDING + columns * cls.TILE + (columns - 1) * cls.GAP,
            "height": 2 * cls.PADDING + rows * cls.TILE + (rows - 1) * cls.GAP,
        }

    @classmethod
    def tile_position(cls, index: int, columns: int) -> Tuple[int, int]:
        col, row = index % columns, index // columns
        step = cls.TILE + cls.GAP
        return cls.PADDING + col * step, cls.PADDING + row * step

    def render_svg(self, contributions: Sequence[RepositoryContribution]) -> str:
        layout = self.grid_layout(len(contributions))
        width, height = layout["width"], layout["height"]
        parts = [
            '<?xml version="1.0" encoding="UTF-8"?>',
            f'<svg xmlns="http://www.w3.org/2000/svg" xmlns:xlink="http://www.w3.org/1999/xlink" '
            f'width="{width}" height="{height}" viewBox="0 0 {width} {height}" role="img">',
        ]
        for i, c in enumerate(contributions):
            x, y = self.tile_position(i, layout["columns"])
            tile = _svg_tile(c, f"clip-{i}", x, y, self.TILE, self.RADIUS, self.AVATAR_SIZE)
            parts.append(f'<a href="{escape_markup(c.url)}" target="_blank"><g>\n{tile}\n</g></a>')
        parts.append("</svg>")
        return "\n".join(parts) + "\n"

    def artifacts(self, contributions: Sequence[RepositoryContribution]) -> List[RenderedArtifact]:
        return [RenderedArtifact(self.settings.sprite_path, self.render_svg(contributions))]

    def fragment(self, contributions: Sequence[RepositoryContribution]) -> str:
        src = escape_markup(self.image_src())
        return "\n".join([
            '<p align="center">',
            f'<img src="{src}" alt="Contributed repositories" />',
            "</p>",
        ])

    def image_src(self) -> str:
        """Path of the sprite relative to the README's directory."""
        readme_dir = os.path.dirname(os.path.abspath(self.settings.readme_path))
        relative = os.path.relpath(os.path.abspath(self.settings.sprite_path), readme_dir)
        return relative.replace(os.sep, "/")


class PerRepositoryRenderer(Renderer):
    """One standalone SVG per repository, inlined into the README."""

    SIZE = 128
    PADDING = 16
    RADIUS = 16
    AVATAR_SIZE = 128

    def path_for(self, contribution: RepositoryContribution) -> str:
        return os.path.join(self.settings.output_dir, safe_filename(contribution.name) + ".svg")

    def placed(self, contributions: Sequence[RepositoryContribution]) -> List[Tuple[RepositoryContribution, str]]:
        """
        Pair each contribution with its file path.

        Names that map to the same file (``a.b`` and ``a_b``, or one name
        under two owners) keep the first contribution; later ones are skipped
        with a warning.
        """
        owners: Dict[str, RepositoryContribution] = {}
        result = []
        for c in contributions:
            path = self.path_for(c)
            if path in owners:
                logger.warning("Skipping %s, %s is already used by %s", c.full_name, path, owners[path].full_name)
                continue
            owners[path] = c
            result.append((c, path))
        return result

    def render_svg(self, contribution: RepositoryContribution) -> str:
        canvas = self.SIZE + 2 * self.PADDING
        clip_id = f"clip-{safe_filename(contribution.owner.login)}-{safe_filename(contribution.name)}"
        tile = _svg_tile(
            contribution, clip_id,
            self.PADDING, self.PADDING, self.SIZE, self.RADIUS, self.AVATAR_SIZE,
        )
        return (
            f'<svg xmlns="http://www.w3.org/2000/svg" xmlns:xlink="http://www.w3.org/1999/xlink" '
            f'width="{canvas}" height="{canvas}" viewBox="0 0 {canvas} {canvas}" role="img">\n'
            f"{tile}\n"
            f"</svg>\n"
        )

    def artifacts(self, contributions: Sequence[RepositoryContribution]) -> List[RenderedArtifact]:
        return [RenderedArtifact(path, self.render_svg(c)) for c, path in self.placed(contributions)]

    def fragment(self, contributions: Sequence[RepositoryContribution]) -> str:
        """Inline every per-repository SVG that exists on disk."""
        lines = ['<p align="center">']
        for c, path in self.placed(contributions):
            if not os.path.exists(path):
                logger.debug("Skipping %s, %s does not exist", c.full_name, path)
                continue
            with open(path, "r", encoding="utf-8") as f:
                svg = f.read().strip()
            lines.append(f'<a href="{escape_markup(c.url)}" {ANCHOR_ATTRS}>\n{svg}\n</a>')
        lines.append("</p>")
        return "\n".join(lines)


_RENDERERS = {
    RenderMode.INLINE: InlineAnchorRenderer,
    RenderMode.SPRITE: SpriteRenderer,
    RenderMode.PER_REPOSITORY: PerRepositoryRenderer,
}


def get_renderer(settings: Settings) -> Renderer:
    """Return the renderer strategy selected by ``settings.mode``."""
    return _RENDERERS[settings.mode](settings)
