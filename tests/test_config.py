"""Tests for configuration loading and default inheritance."""

from __future__ import annotations

import pytest

from devdashboard.core.config import (
    TEMPLATE,
    generate_template,
    load_config,
    parse_config,
)
from devdashboard.exceptions import ConfigError


def _write(tmp_path, text: str):
    path = tmp_path / "repos.yaml"
    path.write_text(text)
    return path


class TestLoadConfig:
    def test_defaults_inherited(self, tmp_path, monkeypatch):
        monkeypatch.delenv("GITHUB_TOKEN", raising=False)
        path = _write(
            tmp_path,
            """\
providers:
  github:
    default:
      token: ghp_default
      owner: acme
      ref: main
      analyzer: poetry
      packages: [django, requests]
    repositories:
      - repository: api
      - repository: worker
        analyzer: uvlock
        ref: release
        packages: [celery]
        paths: [services/worker/uv.lock]
""",
        )
        repos = load_config(path).all_repos()

        api, worker = repos
        assert (api.owner, api.repository, api.ref, api.analyzer) == ("acme", "api", "main", "poetry")
        assert api.packages == ["django", "requests"]
        assert api.token == "ghp_default"
        assert worker.analyzer == "uvlock"
        assert worker.ref == "release"
        assert worker.packages == ["celery"]
        assert worker.paths == ["services/worker/uv.lock"]

    def test_file_order_across_providers(self, tmp_path):
        path = _write(
            tmp_path,
            """\
providers:
  gitlab:
    default: {owner: grp, analyzer: pipfile}
    repositories:
      - repository: one
  github:
    default: {owner: acme, analyzer: poetry}
    repositories:
      - repository: two
      - repository: three
""",
        )
        repos = load_config(path).all_repos()
        assert [(r.provider, r.repository) for r in repos] == [
            ("gitlab", "one"),
            ("github", "two"),
            ("github", "three"),
        ]

    def test_token_from_environment(self, tmp_path, monkeypatch):
        monkeypatch.setenv("GITLAB_TOKEN", "glpat-env")
        path = _write(
            tmp_path,
            "providers:\n  gitlab:\n    repositories:\n"
            "      - {owner: grp, repository: app, analyzer: uvlock}\n",
        )
        (repo,) = load_config(path).all_repos()
        assert repo.token == "glpat-env"

    def test_token_not_in_repr(self, tmp_path):
        path = _write(
            tmp_path,
            "providers:\n  github:\n    repositories:\n"
            "      - {owner: a, repository: b, analyzer: poetry, token: s3cret}\n",
        )
        (repo,) = load_config(path).all_repos()
        assert "s3cret" not in repr(repo)

    def test_unknown_provider_accepted_at_load(self, tmp_path):
        path = _write(
            tmp_path,
            "providers:\n  invalid-provider:\n    repositories:\n"
            "      - {owner: a, repository: b, analyzer: poetry}\n",
        )
        (repo,) = load_config(path).all_repos()
        assert repo.provider == "invalid-provider"
        assert repo.token is None

    def test_missing_required_field(self, tmp_path):
        path = _write(
            tmp_path,
            "providers:\n  github:\n    default: {owner: acme}\n    repositories:\n"
            "      - repository: api\n",
        )
        with pytest.raises(ConfigError, match="index 0 missing required field 'analyzer'"):
            load_config(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            load_config(tmp_path / "nope.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = _write(tmp_path, "providers: [unclosed\n")
        with pytest.raises(ConfigError, match="failed to parse"):
            load_config(path)

    def test_unknown_field_rejected(self, tmp_path):
        path = _write(
            tmp_path,
            "providers:\n  github:\n    repositories:\n"
            "      - {owner: a, repository: b, analyzer: poetry, branch: x}\n",
        )
        with pytest.raises(ConfigError, match="invalid configuration"):
            load_config(path)

    def test_empty_file(self, tmp_path):
        assert load_config(_write(tmp_path, "")).all_repos() == []

    def test_top_level_must_be_mapping(self):
        with pytest.raises(ConfigError):
            parse_config(["a", "b"])


class TestTemplate:
    def test_template_is_loadable(self, tmp_path):
        out = tmp_path / "devdashboard.yaml"
        generate_template(out)
        assert out.read_text() == TEMPLATE
        repos = load_config(out).all_repos()
        assert [r.repository for r in repos] == ["api", "worker", "legacy-app"]

    def test_refuses_overwrite(self, tmp_path):
        out = tmp_path / "devdashboard.yaml"
        out.write_text("keep me")
        with pytest.raises(ConfigError, match="already exists"):
            generate_template(out)
        assert out.read_text() == "keep me"
