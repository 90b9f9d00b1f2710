"""Configuration loading, default inheritance and validation.

Usage:
    config = load_config("repos.yaml")       # raises ConfigError on bad config
    repos  = config.all_repos()              # ordered list[RepoConfig]
    generate_template("repos.yaml")          # writes example file to disk
"""

from __future__ import annotations

import os
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from devdashboard.exceptions import ConfigError

# Provider name -> environment variable consulted when no token is configured.
_TOKEN_ENV_VARS = {
    "github": "GITHUB_TOKEN",
    "gitlab": "GITLAB_TOKEN",
}


# ── models ───────────────────────────────────────────────────────────────


class RepoDefaults(BaseModel):
    """Values inherited by every repository of a provider."""

    model_config = ConfigDict(extra="forbid")

    token: str | None = Field(default=None, repr=False)
    base_url: str | None = None
    owner: str = ""
    repository: str = ""
    ref: str = ""
    paths: list[str] = Field(default_factory=list)
    packages: list[str] = Field(default_factory=list)
    analyzer: str = ""


class RepoEntry(RepoDefaults):
    """A repository entry as written in the file, before inheritance."""


class ProviderSection(BaseModel):
    model_config = ConfigDict(extra="forbid")

    default: RepoDefaults = Field(default_factory=RepoDefaults)
    repositories: list[RepoEntry] = Field(default_factory=list)


class RepoConfig(BaseModel):
    """One fully-resolved repository to analyze."""

    model_config = ConfigDict(frozen=True)

    provider: str
    owner: str
    repository: str
    ref: str = ""
    analyzer: str
    packages: list[str] = Field(default_factory=list)
    paths: list[str] = Field(default_factory=list)
    token: str | None = Field(default=None, repr=False)
    base_url: str | None = None

    @property
    def identifier(self) -> str:
        return f"{self.owner}/{self.repository}"


class DashboardConfig(BaseModel):
    providers: dict[str, ProviderSection] = Field(default_factory=dict)

    def all_repos(self) -> list[RepoConfig]:
        """Flatten every provider's repositories, in file order, with defaults applied."""
        repos: list[RepoConfig] = []
        for provider_name, section in self.providers.items():
            for index, entry in enumerate(section.repositories):
                repos.append(_resolve(provider_name, index, section.default, entry))
        return repos


# ── loader ───────────────────────────────────────────────────────────────


def load_config(config_path: str | Path) -> DashboardConfig:
    """Load and validate a configuration file.

    Raises:
        ConfigError: if the file is missing, malformed, or a repository lacks
                     ``owner``, ``repository`` or ``analyzer`` after defaults
                     are applied.
    """
    path = Path(config_path)
    if not path.exists():
        raise ConfigError(
            f"config file not found: '{path}'\n"
            "Run `devdashboard init` to generate a template."
        )

    try:
        with path.open(encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        raise ConfigError(f"failed to parse '{path}': {exc}") from exc

    return parse_config(raw, source=str(path))


def parse_config(raw: object, source: str = "<config>") -> DashboardConfig:
    """Validate an already-decoded mapping (used by :func:`load_config`)."""
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigError(f"'{source}' must be a YAML mapping at the top level")

    try:
        config = DashboardConfig.model_validate(raw)
    except ValidationError as exc:
        raise ConfigError(f"invalid configuration in '{source}':\n{exc}") from exc

    # Resolving surfaces missing required fields early, at load time.
    config.all_repos()
    return config


def _resolve(
    provider: str, index: int, defaults: RepoDefaults, entry: RepoEntry
) -> RepoConfig:
    owner = entry.owner or defaults.owner
    repository = entry.repository or defaults.repository
    analyzer = entry.analyzer or defaults.analyzer

    for field_name, value in (
        ("owner", owner),
        ("repository", repository),
        ("analyzer", analyzer),
    ):
        if not value:
            raise ConfigError(
                f"provider {provider}: repository at index {index} "
                f"missing required field '{field_name}'"
            )

    token = entry.token or defaults.token
    if not token and provider in _TOKEN_ENV_VARS:
        token = os.environ.get(_TOKEN_ENV_VARS[provider]) or None

    return RepoConfig(
        provider=provider,
        owner=owner,
        repository=repository,
        ref=entry.ref or defaults.ref,
        analyzer=analyzer,
        packages=list(entry.packages or defaults.packages),
        paths=list(entry.paths or defaults.paths),
        token=token,
        base_url=entry.base_url or defaults.base_url,
    )


# ── template generator (used by `init` command) ─────────────────────────

TEMPLATE = """\
providers:
  github:
    default:
      # token: "ghp_xxxxxxxxxxxx"   # or set GITHUB_TOKEN
      owner: "my-org"
      ref: "main"
      analyzer: "poetry"          # poetry | pipfile | uvlock
      packages:
        - django
        - requests
    repositories:
      - repository: "api"
      - repository: "worker"
        analyzer: "uvlock"
        paths:
          - "services/worker/uv.lock"

  gitlab:
    default:
      # token: "glpat-xxxxxxxxxxxx"  # or set GITLAB_TOKEN
      # base_url: "https://gitlab.example.com/api/v4"
      owner: "my-group"
      analyzer: "pipfile"
      packages:
        - django
    repositories:
      - repository: "legacy-app"
"""


def generate_template(output_path: str | Path = "devdashboard.yaml") -> None:
    """Write a template configuration file to *output_path*.

    Raises:
        ConfigError: if the file already exists (to avoid overwriting tokens).
    """
    path = Path(output_path)
    if path.exists():
        raise ConfigError(
            f"'{path}' already exists. Remove it first or choose a different path."
        )
    path.write_text(TEMPLATE, encoding="utf-8")
