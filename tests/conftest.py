import json

import pytest

from contribs_generator.config import Settings
from contribs_generator.fetcher import ContributionFetcher
from contribs_generator.models import RepositoryContribution, RepositoryOwner


class FakeResponse:
    def __init__(self, status_code=200, payload=None, reason="OK", text=None):
        self.status_code = status_code
        self.reason = reason
        self._payload = payload
        self.text = text if text is not None else json.dumps(payload)

    @property
    def ok(self):
        return 200 <= self.status_code < 300

    def json(self):
        return self._payload


class FakeSession:
    """Records POSTs and answers with a canned response."""

    def __init__(self, response):
        self.headers = {}
        self.response = response
        self.calls = []

    def post(self, url, json=None, **kwargs):
        self.calls.append({"url": url, "json": json, "kwargs": kwargs})
        return self.response


def node(name, owner, description=None, avatar="https://avatars.githubusercontent.com/u/1?v=4"):
    return {
        "name": name,
        "url": f"https://github.com/{owner}/{name}",
        "description": description,
        "owner": {"login": owner, "avatarUrl": avatar},
    }


def graphql_payload(nodes):
    return {"data": {"user": {"repositoriesContributedTo": {"nodes": nodes}}}}


def contribution(name, owner, description=None, avatar="https://avatars.githubusercontent.com/u/1?v=4"):
    return RepositoryContribution(
        name=name,
        url=f"https://github.com/{owner}/{name}",
        description=description,
        owner=RepositoryOwner(login=owner, avatar_url=avatar),
    )


@pytest.fixture
def make_fetcher():
    def _make(response):
        session = FakeSession(response)
        return ContributionFetcher(token="t0ken", session=session), session
    return _make


@pytest.fixture
def settings(tmp_path):
    return Settings(
        token="t0ken",
        username="octocat",
        readme_path=str(tmp_path / "README.md"),
        sprite_path=str(tmp_path / "assets" / "contribs.svg"),
        output_dir=str(tmp_path / "assets" / "contribs"),
    )
