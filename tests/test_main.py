import importlib
import json

import pytest

from conftest import FakeResponse, FakeSession, graphql_payload, node
from contribs_generator.fetcher import ContributionFetcher
from contribs_generator.splicer import END_MARKER, START_MARKER

main_module = importlib.import_module("contribs_generator.main")

ENV_VARS = [
    "GITHUB_TOKEN", "TARGET_USER", "GITHUB_ACTOR", "MAX_REPOS", "RENDER_MODE",
    "CONTRIBUTION_TYPES", "INCLUDE_OWN_REPOS", "README_PATH", "SPRITE_PATH",
    "OUTPUT_DIR", "GIT_STAGE", "LOG_LEVEL",
]

README = f"# Me\n\n{START_MARKER}\n{END_MARKER}\n\nBye — ✌\n"


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    (tmp_path / "README.md").write_text(README, encoding="utf-8")
    return tmp_path


@pytest.fixture
def api(monkeypatch):
    """Route the CLI's fetcher through a FakeSession answering with ``payload``."""
    sessions = []

    def install(response):
        def factory(token):
            session = FakeSession(response)
            sessions.append(session)
            return ContributionFetcher(token=token, session=session)
        monkeypatch.setattr(main_module, "ContributionFetcher", factory)
        return sessions
    return install


def test_missing_token_exits_without_network_call(workspace, api, monkeypatch, caplog):
    sessions = api(FakeResponse(payload=graphql_payload([])))
    monkeypatch.setenv("TARGET_USER", "octocat")

    assert main_module.main([]) == 1
    assert sessions == []
    assert "GITHUB_TOKEN is required" in caplog.text


def test_missing_username_exits_without_network_call(workspace, api, monkeypatch):
    sessions = api(FakeResponse(payload=graphql_payload([])))
    monkeypatch.setenv("GITHUB_TOKEN", "t0ken")

    assert main_module.main([]) == 1
    assert sessions == []


def test_graphql_errors_exit_non_zero_and_log_errors(workspace, api, monkeypatch, caplog):
    errors = [{"message": "rate limited", "type": "RATE_LIMITED"}]
    api(FakeResponse(payload={"errors": errors}))
    monkeypatch.setenv("GITHUB_TOKEN", "t0ken")
    monkeypatch.setenv("TARGET_USER", "octocat")

    assert main_module.main([]) == 1
    assert json.dumps(errors, indent=2) in caplog.text
    assert (workspace / "README.md").read_text(encoding="utf-8") == README


def test_transport_error_exits_non_zero(workspace, api, monkeypatch, caplog):
    api(FakeResponse(status_code=401, payload=None, reason="Unauthorized", text='{"message": "Bad credentials"}'))
    monkeypatch.setenv("GITHUB_TOKEN", "t0ken")
    monkeypatch.setenv("TARGET_USER", "octocat")

    assert main_module.main([]) == 1
    assert "401 Unauthorized" in caplog.text
    assert "Bad credentials" in caplog.text


@pytest.mark.parametrize("mode", ["inline", "sprite", "per-repo"])
def test_zero_contributions_writes_nothing(workspace, api, monkeypatch, mode):
    api(FakeResponse(payload=graphql_payload([node("mine", "octocat")])))
    monkeypatch.setenv("GITHUB_TOKEN", "t0ken")
    monkeypatch.setenv("TARGET_USER", "octocat")
    before = (workspace / "README.md").read_bytes()

    assert main_module.main(["--mode", mode]) == 0
    assert (workspace / "README.md").read_bytes() == before
    assert not (workspace / "assets").exists()


def test_inline_mode_end_to_end(workspace, api, monkeypatch):
    sessions = api(FakeResponse(payload=graphql_payload([
        node("mine", "octocat"),
        node("lib", "acme", "A <lib>"),
    ])))
    monkeypatch.setenv("GITHUB_TOKEN", "t0ken")
    monkeypatch.setenv("GITHUB_ACTOR", "octocat")
    monkeypatch.setenv("MAX_REPOS", "5")

    assert main_module.main([]) == 0

    assert sessions[0].calls[0]["json"]["variables"]["limit"] == 5
    content = (workspace / "README.md").read_text(encoding="utf-8")
    assert "https://github.com/acme/lib/pulls?q=is:pr+author:octocat" in content
    assert "acme/lib — A &lt;lib&gt;" in content
    assert "octocat/mine" not in content
    assert content.startswith(f"# Me\n\n{START_MARKER}\n\n<p align=\"center\">")
    assert content.endswith(f"</p>\n\n{END_MARKER}\n\nBye — ✌\n")


def test_sprite_mode_end_to_end(workspace, api, monkeypatch):
    api(FakeResponse(payload=graphql_payload([node(f"r{i}", "acme") for i in range(9)])))
    monkeypatch.setenv("GITHUB_TOKEN", "t0ken")
    monkeypatch.setenv("TARGET_USER", "octocat")

    assert main_module.main(["--mode", "sprite"]) == 0

    svg = (workspace / "assets" / "contribs.svg").read_text(encoding="utf-8")
    assert 'width="648" height="168"' in svg
    content = (workspace / "README.md").read_text(encoding="utf-8")
    assert '<img src="assets/contribs.svg" alt="Contributed repositories" />' in content


def test_per_repo_mode_end_to_end(workspace, api, monkeypatch):
    api(FakeResponse(payload=graphql_payload([node("my.lib", "acme"), node("tool", "other")])))
    monkeypatch.setenv("GITHUB_TOKEN", "t0ken")
    monkeypatch.setenv("TARGET_USER", "octocat")
    monkeypatch.setenv("RENDER_MODE", "per-repo")

    assert main_module.main([]) == 0

    assert (workspace / "assets" / "contribs" / "my_lib.svg").exists()
    assert (workspace / "assets" / "contribs" / "tool.svg").exists()
    content = (workspace / "README.md").read_text(encoding="utf-8")
    assert content.count("<svg") == 2
    assert '<a href="https://github.com/acme/my.lib"' in content


def test_stage_flag_stages_written_files(workspace, api, monkeypatch):
    api(FakeResponse(payload=graphql_payload([node("lib", "acme")])))
    monkeypatch.setenv("GITHUB_TOKEN", "t0ken")
    monkeypatch.setenv("TARGET_USER", "octocat")
    staged = []
    monkeypatch.setattr(main_module, "stage_files", lambda paths: staged.extend(paths))

    assert main_module.main(["--mode", "sprite", "--stage"]) == 0
    assert staged == ["assets/contribs.svg", "README.md"]


def test_missing_markers_is_not_fatal(workspace, api, monkeypatch):
    (workspace / "README.md").write_text("# No markers\n", encoding="utf-8")
    api(FakeResponse(payload=graphql_payload([node("lib", "acme")])))
    monkeypatch.setenv("GITHUB_TOKEN", "t0ken")
    monkeypatch.setenv("TARGET_USER", "octocat")

    assert main_module.main([]) == 0
    assert (workspace / "README.md").read_text(encoding="utf-8") == "# No markers\n"


def test_non_numeric_cli_limit_falls_back_to_default(workspace, api, monkeypatch):
    sessions = api(FakeResponse(payload=graphql_payload([])))
    monkeypatch.setenv("GITHUB_TOKEN", "t0ken")
    monkeypatch.setenv("TARGET_USER", "octocat")

    assert main_module.main(["--limit", "abc"]) == 0
    assert sessions[0].calls[0]["json"]["variables"]["limit"] == 24


def test_sprite_reference_is_relative_to_nested_readme(workspace, api, monkeypatch):
    (workspace / "docs").mkdir()
    (workspace / "docs" / "README.md").write_text(README, encoding="utf-8")
    api(FakeResponse(payload=graphql_payload([node("lib", "acme")])))
    monkeypatch.setenv("GITHUB_TOKEN", "t0ken")
    monkeypatch.setenv("TARGET_USER", "octocat")

    assert main_module.main(["--mode", "sprite", "--readme", "docs/README.md"]) == 0

    assert (workspace / "assets" / "contribs.svg").exists()
    content = (workspace / "docs" / "README.md").read_text(encoding="utf-8")
    assert '<img src="../assets/contribs.svg"' in content


def test_redirect_response_exits_non_zero(workspace, api, monkeypatch, caplog):
    api(FakeResponse(status_code=302, payload=None, reason="Found", text=""))
    monkeypatch.setenv("GITHUB_TOKEN", "t0ken")
    monkeypatch.setenv("TARGET_USER", "octocat")

    assert main_module.main([]) == 1
    assert "302 Found" in caplog.text
    assert (workspace / "README.md").read_text(encoding="utf-8") == README
