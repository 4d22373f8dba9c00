import json
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from conventional_pr_check.cli import main
from conventional_pr_check.config import Config
from conventional_pr_check.exceptions import GitHubError
from conventional_pr_check.github import PullRequest


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Keep the host's Actions env and config file out of the tests."""
    for name in ("GITHUB_EVENT_PATH", "GITHUB_ACTOR", "GITHUB_STEP_SUMMARY", "GITHUB_TOKEN", "RUNNER_DEBUG"):
        monkeypatch.delenv(name, raising=False)
    for name in ("TITLE-CHECK-ENABLED", "TITLE-MAX-LEN", "DESCRIPTION-CHECK-ENABLED",
                 "DESCRIPTION-REQUIRED", "DESCRIPTION-MAX-LEN", "IGNORED-CONTRIBUTORS"):
        monkeypatch.delenv(f"INPUT_{name}", raising=False)
    config_dir = tmp_path / "config"
    monkeypatch.setattr("conventional_pr_check.cli.Config", lambda: Config(config_dir=config_dir))
    return config_dir


@pytest.fixture
def event_file(tmp_path):
    def _write(title, body="", login="octocat"):
        path = tmp_path / "event.json"
        path.write_text(json.dumps({
            "pull_request": {"number": 1, "title": title, "body": body, "user": {"login": login}},
        }))
        return str(path)
    return _write


def _inputs(**overrides):
    env = {
        "INPUT_TITLE-CHECK-ENABLED": "true",
        "INPUT_TITLE-MAX-LEN": "-1",
        "INPUT_DESCRIPTION-CHECK-ENABLED": "true",
        "INPUT_DESCRIPTION-REQUIRED": "false",
        "INPUT_DESCRIPTION-MAX-LEN": "-1",
    }
    env.update(overrides)
    return env


class TestActionMode:
    def test_valid_pull_request(self, runner, event_file):
        env = _inputs(GITHUB_EVENT_PATH=event_file(
            "feat(scope): add new feature",
            "This is a valid PR description.\n\nFooter: Some footer info",
        ))
        result = runner.invoke(main, [], env=env)
        assert result.exit_code == 0
        assert "follows conventional commits" in result.output

    def test_invalid_title_fails_with_extended_message(self, runner, event_file):
        env = _inputs(GITHUB_EVENT_PATH=event_file("add new feature"))
        result = runner.invoke(main, ["--format", "github"], env=env)
        assert result.exit_code == 1
        assert result.output.startswith("::error::Pull request title does not follow conventional commits format, e.g.")
        assert "conventionalcommits.org" in result.output

    def test_invalid_footer(self, runner, event_file):
        env = _inputs(GITHUB_EVENT_PATH=event_file("fix: x", "Body\n\nNotAFooterLine"))
        result = runner.invoke(main, ["--format", "json"], env=env)
        assert result.exit_code == 1
        assert json.loads(result.output)["error"] == "INVALID_FOOTER_FORMAT"

    def test_ignored_contributor(self, runner, event_file):
        env = _inputs(
            GITHUB_EVENT_PATH=event_file("Bump lodash"),
            GITHUB_ACTOR="dependabot[bot]",
            **{"INPUT_IGNORED-CONTRIBUTORS": "renovate[bot], dependabot[bot]"},
        )
        result = runner.invoke(main, ["--format", "json"], env=env)
        assert result.exit_code == 0
        assert json.loads(result.output)["status"] == "skipped"

    def test_event_option_overrides_env(self, runner, event_file):
        result = runner.invoke(main, ["--event", event_file("docs: update readme")], env=_inputs())
        assert result.exit_code == 0

    def test_missing_event_path(self, runner):
        result = runner.invoke(main, [], env=_inputs())
        assert result.exit_code == 1
        assert "GITHUB_EVENT_PATH" in result.output

    def test_invalid_max_len_input(self, runner, event_file):
        env = _inputs(GITHUB_EVENT_PATH=event_file("fix: x"), **{"INPUT_TITLE-MAX-LEN": "abc"})
        result = runner.invoke(main, [], env=env)
        assert result.exit_code == 1
        assert "title-max-len" in result.output

    def test_writes_step_summary(self, runner, event_file, tmp_path):
        summary = tmp_path / "summary.md"
        env = _inputs(GITHUB_EVENT_PATH=event_file("nope"), GITHUB_STEP_SUMMARY=str(summary))
        result = runner.invoke(main, [], env=env)
        assert result.exit_code == 1
        assert "**Status:** failed" in summary.read_text()

    def test_uses_toml_config(self, runner, event_file, isolated_env):
        Config(config_dir=isolated_env).set("check", "title-max-len", "5")
        result = runner.invoke(
            main, ["--format", "json"],
            env={"GITHUB_EVENT_PATH": event_file("feat: add new feature")},
        )
        assert result.exit_code == 1
        assert json.loads(result.output)["error"] == "TITLE_TOO_LONG"

    @patch("conventional_pr_check.cli._enable_debug_logging")
    def test_verbose_enables_debug_logging(self, mock_debug, runner, event_file):
        env = _inputs(GITHUB_EVENT_PATH=event_file("feat: add new feature"))
        result = runner.invoke(main, ["-v"], env=env)
        assert result.exit_code == 0
        mock_debug.assert_called_once()

    @patch("conventional_pr_check.cli._enable_debug_logging")
    def test_runner_debug_enables_debug_logging(self, mock_debug, runner, event_file):
        env = _inputs(GITHUB_EVENT_PATH=event_file("feat: add new feature"), RUNNER_DEBUG="1")
        runner.invoke(main, [], env=env)
        mock_debug.assert_called_once()


class TestRemotePullRequest:
    @patch("conventional_pr_check.cli.fetch_pull_request")
    def test_fetches_from_api(self, mock_fetch, runner):
        mock_fetch.return_value = PullRequest(number=5, title="perf: faster", body="", author="octocat")
        result = runner.invoke(main, ["--repo", "octo/repo", "--pr", "5"], env={"GITHUB_TOKEN": "t"})
        assert result.exit_code == 0
        mock_fetch.assert_called_once_with("octo/repo", 5, token="t")

    @patch("conventional_pr_check.cli.fetch_pull_request")
    def test_api_error(self, mock_fetch, runner):
        mock_fetch.side_effect = GitHubError("GitHub API returned 404 for octo/repo#5 [x]")
        result = runner.invoke(main, ["--repo", "octo/repo", "--pr", "5"])
        assert result.exit_code == 1
        assert "returned 404" in result.output

    def test_repo_requires_pr(self, runner):
        result = runner.invoke(main, ["--repo", "octo/repo"])
        assert result.exit_code == 1
        assert "--repo and --pr" in result.output


class TestTitleCommand:
    def test_valid(self, runner):
        result = runner.invoke(main, ["title", "feat(api)!: drop v1"])
        assert result.exit_code == 0

    def test_invalid(self, runner):
        result = runner.invoke(main, ["title", "feat(): nope"])
        assert result.exit_code == 1
        assert "title check failed" in result.output

    def test_max_len(self, runner):
        result = runner.invoke(main, ["--format", "json", "title", "--max-len", "3", "fix: x"])
        assert result.exit_code == 1
        assert json.loads(result.output)["error"] == "TITLE_TOO_LONG"


class TestDescriptionCommand:
    def test_reads_stdin(self, runner):
        result = runner.invoke(main, ["description"], input="Body text.\n\nBREAKING CHANGE: info")
        assert result.exit_code == 0

    def test_reads_file(self, runner, tmp_path):
        path = tmp_path / "body.md"
        path.write_text("Body text.\n\nNotAFooterLine")
        result = runner.invoke(main, ["description", str(path)])
        assert result.exit_code == 1

    def test_required(self, runner):
        result = runner.invoke(main, ["--format", "json", "description", "--required"], input="")
        assert result.exit_code == 1
        assert json.loads(result.output)["error"] == "DESCRIPTION_MISSING"


class TestConfigCommands:
    def test_set_and_get(self, runner):
        result = runner.invoke(main, ["config", "set", "title-max-len", "72"])
        assert result.exit_code == 0
        result = runner.invoke(main, ["config", "get", "title-max-len"])
        assert result.output.strip() == "72"

    def test_get_unset(self, runner):
        result = runner.invoke(main, ["config", "get", "description-max-len"])
        assert "not set" in result.output

    def test_rejects_unknown_option(self, runner):
        result = runner.invoke(main, ["config", "set", "colour", "blue"])
        assert result.exit_code != 0

    def test_show_effective_config(self, runner):
        runner.invoke(main, ["config", "set", "ignored-contributors", "a,b"])
        result = runner.invoke(main, ["config", "show"])
        assert result.exit_code == 0
        assert "ignored_contributors = a, b" in result.output
        assert "title_max_len = -1" in result.output


class TestLineEndings:
    def test_description_file_keeps_crlf(self, runner, tmp_path):
        path = tmp_path / "body.md"
        path.write_bytes(b"Body\r\n\r\nRefs: 1")
        result = runner.invoke(main, ["--format", "json", "description", "--required", str(path)])
        assert result.exit_code == 1
        assert json.loads(result.output)["error"] == "DESCRIPTION_MISSING"

    def test_description_matches_action_mode(self, runner, event_file):
        env = _inputs(
            GITHUB_EVENT_PATH=event_file("fix: x", "Body\r\n\r\nRefs: 1"),
            **{"INPUT_DESCRIPTION-REQUIRED": "true"},
        )
        result = runner.invoke(main, ["--format", "json"], env=env)
        assert json.loads(result.output)["error"] == "DESCRIPTION_MISSING"


class TestBrokenInputs:
    def test_event_path_is_directory(self, runner, tmp_path):
        result = runner.invoke(main, ["--event", str(tmp_path)], env=_inputs())
        assert result.exit_code == 1
        assert "Cannot read event payload" in result.output

    def test_malformed_config_file(self, runner, event_file, isolated_env):
        isolated_env.mkdir()
        (isolated_env / "config.toml").write_text("[check\n")
        result = runner.invoke(main, ["--event", event_file("fix: x")], env=_inputs())
        assert result.exit_code == 1
        assert "Invalid config file" in result.output

    def test_config_get_with_malformed_file(self, runner, isolated_env):
        isolated_env.mkdir()
        (isolated_env / "config.toml").write_text("[check\n")
        result = runner.invoke(main, ["config", "get", "title-max-len"])
        assert result.exit_code == 1
        assert "Invalid config file" in result.output
