"""
Contributions Generator - render the repositories a GitHub user has contributed
to as an avatar gallery inside a README.
"""

from .models import RenderedArtifact, RenderMode, RepositoryContribution, RepositoryOwner
from .errors import ConfigurationError, GraphQLError, MarkerNotFoundWarning, TransportError
from .config import Settings, load_settings
from .fetcher import ContributionFetcher
from .renderer import InlineAnchorRenderer, PerRepositoryRenderer, SpriteRenderer, get_renderer
from .splicer import ReadmeSplicer, splice_between_markers
from .main import main

__all__ = [
    'RenderedArtifact',
    'RenderMode',
    'RepositoryContribution',
    'RepositoryOwner',
    'ConfigurationError',
    'GraphQLError',
    'MarkerNotFoundWarning',
    'TransportError',
    'Settings',
    'load_settings',
    'ContributionFetcher',
    'InlineAnchorRenderer',
    'PerRepositoryRenderer',
    'SpriteRenderer',
    'get_renderer',
    'ReadmeSplicer',
    'splice_between_markers',
    'main'
]
