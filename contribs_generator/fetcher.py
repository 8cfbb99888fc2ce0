"""
GitHub data fetching module.

This module handles the single GraphQL request that lists the repositories a
user has contributed to, using requests.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence

import requests

from .errors import GraphQLError, TransportError
from .models import RepositoryContribution

# Set up logging
logger = logging.getLogger("contribs-generator.fetcher")

GITHUB_GRAPHQL = "https://api.github.com/graphql"
USER_AGENT = "github-actions/contribs-generator"

CONTRIBUTIONS_QUERY = """
query($login: String!, $limit: Int!, $types: [RepositoryContributionType]) {
  user(login: $login) {
    repositoriesContributedTo(first: $limit, contributionTypes: $types) {
      nodes {
        name
        url
        description
        owner {
          login
          avatarUrl
        }
      }
    }
  }
}
"""


class ContributionFetcher:
    """
    Fetch contributed repositories from the GitHub GraphQL API.

    Args:
        token: Personal access token sent as a bearer credential.
        endpoint: GraphQL endpoint URL.
        session: Optional pre-built requests session.
    """

    def __init__(
        self,
        token: str,
        endpoint: str = GITHUB_GRAPHQL,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.endpoint = endpoint
        self._session = session if session is not None else requests.Session()
        self._session.headers.update({
            "Authorization": f"bearer {token}",
            "Content-Type": "application/json",
            "User-Agent": USER_AGENT,
        })
        logger.debug("GraphQL client initialized for %s", endpoint)

    def query(self, query: str, variables: Dict[str, Any]) -> Dict[str, Any]:
        """
        Execute one GraphQL request and return its ``data`` member.

        Raises:
            TransportError: If the HTTP status is not successful
            GraphQLError: If the payload carries an ``errors`` field
        """
        logger.debug("GraphQL request with variables: %s", variables)
        resp = self._session.post(self.endpoint, json={"query": query, "variables": variables})
        # redirects and 304s carry no GraphQL payload
        if not 200 <= resp.status_code < 300:
            raise TransportError(resp.status_code, resp.reason or "", resp.text)

        payload = resp.json()
        if payload.get("errors") is not None:
            raise GraphQLError(payload["errors"])
        return payload.get("data") or {}

    def fetch_contributions(
        self,
        username: str,
        limit: int,
        contribution_types: Sequence[str] = ("PULL_REQUEST",),
        exclude_own: bool = True,
    ) -> List[RepositoryContribution]:
        """
        Fetch the repositories ``username`` has contributed to.

        Results keep the order returned by the API. Duplicate repositories
        are dropped, keeping the first occurrence.

        Args:
            username: GitHub login to query
            limit: Maximum number of repositories to request (positive)
            contribution_types: RepositoryContributionType values to include
            exclude_own: Drop repositories owned by ``username``

        Returns:
            List of RepositoryContribution objects

        Raises:
            ValueError: If limit is not a positive integer
            TransportError: If the request fails at the HTTP level
            GraphQLError: If the API reports errors
        """
        if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
            raise ValueError(f"limit must be a positive integer, got {limit!r}")

        logger.info(
            "Fetching up to %d repositories contributed to by %s via %s",
            limit, username, ", ".join(contribution_types),
        )
        data = self.query(CONTRIBUTIONS_QUERY, {
            "login": username,
            "limit": limit,
            "types": list(contribution_types),
        })

        user = data.get("user")
        if not user:
            logger.warning("User %s not found", username)
            return []

        nodes = (user.get("repositoriesContributedTo") or {}).get("nodes") or []
        result = list(_unique(RepositoryContribution.from_node(n) for n in nodes if n))

        if exclude_own:
            result = [r for r in result if r.owner.login != username]

        logger.info("Fetched %d contributed repositories", len(result))
        return result


def _unique(contributions: Iterable[RepositoryContribution]) -> Iterable[RepositoryContribution]:
    seen = set()
    for c in contributions:
        if c.identity in seen:
            continue
        seen.add(c.identity)
        yield c
