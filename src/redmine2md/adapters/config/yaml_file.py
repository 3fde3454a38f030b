"""
YAML Config Provider - Load configuration from a YAML file.

Supports:
- redmine.config.yaml (or any path given with --config)
- Environment variables (REDMINE_BASE_URL, REDMINE_API_KEY, REDMINE_OUTPUT_DIR)
- .env files next to the config file or in the working directory
- Command line argument overrides
"""

import os
from pathlib import Path
from typing import Any, Optional

import yaml

from ...core.domain.enums import IncludeOption, TrackBy
from ...core.ports.config_provider import (
    AnchorsConfig,
    AppConfig,
    CommentsConfig,
    ConfigError,
    ConfigProviderPort,
    DefaultsConfig,
    FilenameConfig,
    ProjectConfig,
    RetryConfig,
    SlugConfig,
)


DEFAULT_CONFIG_FILENAME = "redmine.config.yaml"
EXAMPLE_CONFIG_FILENAME = "redmine.config.example.yaml"

EXAMPLE_CONFIG = """\
# Example configuration for redmine2md
# Copy this file to redmine.config.yaml and update with your settings

baseUrl: https://redmine.example.com
apiAccessToken: YOUR_API_TOKEN_HERE
project:
  id: 123
  identifier: my-project
outputDir: .redmine/issues
defaults:
  include: [journals, relations, attachments]
  status: '*'
  pageSize: 100
  concurrency: 4
  retry:
    retries: 3
    baseMs: 300
filename:
  pattern: '{issueId}-{slug}.md'
  slug:
    maxLength: 80
    dedupe: true
    lowercase: true
  renameOnTitleChange: false
comments:
  anchors:
    start: '<!-- redmine:comments:start -->'
    end: '<!-- redmine:comments:end -->'
  trackBy: journalId
"""


class YamlConfigProvider(ConfigProviderPort):
    """
    Configuration provider that loads a YAML file, then applies
    .env values, environment variables and CLI overrides on top.
    """

    ENV_MAPPING = {
        "REDMINE_BASE_URL": "baseUrl",
        "REDMINE_API_KEY": "apiAccessToken",
        "REDMINE_OUTPUT_DIR": "outputDir",
    }

    def __init__(
        self,
        config_path: Optional[Path] = None,
        env_file: Optional[Path] = None,
        cli_overrides: Optional[dict[str, Any]] = None,
    ):
        """
        Initialize the config provider.

        Args:
            config_path: Path to the YAML file (defaults to ./redmine.config.yaml)
            env_file: Path to .env file (auto-detected if not specified)
            cli_overrides: Command line argument overrides
        """
        self.config_path = Path(config_path or Path.cwd() / DEFAULT_CONFIG_FILENAME)
        self._env_file = env_file
        self._cli_overrides = cli_overrides or {}
        self._values: dict[str, Any] = {}
        self._loaded = False

    # -------------------------------------------------------------------------
    # ConfigProviderPort Implementation
    # -------------------------------------------------------------------------

    @property
    def name(self) -> str:
        return "YAML"

    def load(self) -> AppConfig:
        """Load complete configuration; raises ConfigError when invalid."""
        config, errors = self._build()
        if errors:
            raise ConfigError(
                "Configuration validation failed:\n  - " + "\n  - ".join(errors),
                errors=errors,
            )
        return config

    def validate(self) -> list[str]:
        """Validate configuration."""
        try:
            _, errors = self._build()
        except ConfigError as e:
            return e.errors or [str(e)]
        return errors

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    def _ensure_loaded(self) -> None:
        if self._loaded:
            return
        self._load_file()
        self._load_env_file()
        self._load_environment()
        self._loaded = True

    def _load_file(self) -> None:
        """Load values from the YAML file."""
        try:
            text = self.config_path.read_text(encoding="utf-8")
        except FileNotFoundError as e:
            raise ConfigError(f"Configuration file not found: {self.config_path}") from e
        except OSError as e:
            raise ConfigError(f"Failed to read configuration: {e}") from e

        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {self.config_path}: {e}") from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError(f"{self.config_path} must contain a YAML mapping")

        self._values = data

    def _load_env_file(self) -> None:
        """Load values from .env file."""
        env_file = self._find_env_file()
        if not env_file:
            return

        for line in env_file.read_text(encoding="utf-8").splitlines():
            line = line.strip()

            # Skip empty lines and comments
            if not line or line.startswith("#"):
                continue

            if "=" not in line:
                continue

            key, value = line.split("=", 1)
            key = key.strip()
            value = value.strip().strip('"').strip("'")

            if key in self.ENV_MAPPING:
                self._values[self.ENV_MAPPING[key]] = value

    def _find_env_file(self) -> Optional[Path]:
        """Find .env file."""
        if self._env_file:
            return self._env_file if self._env_file.exists() else None

        beside_config = self.config_path.parent / ".env"
        if beside_config.exists():
            return beside_config

        cwd_env = Path.cwd() / ".env"
        if cwd_env.exists():
            return cwd_env

        return None

    def _load_environment(self) -> None:
        """Load values from environment variables."""
        for env_key, config_key in self.ENV_MAPPING.items():
            raw_value = os.environ.get(env_key)
            if raw_value:
                self._values[config_key] = raw_value

    # -------------------------------------------------------------------------
    # Building
    # -------------------------------------------------------------------------

    def _build(self) -> tuple[AppConfig, list[str]]:
        """Map raw values onto AppConfig, collecting every problem found."""
        self._ensure_loaded()
        reader = _Reader()
        data = self._values

        project = reader.section(data, "project")
        defaults = reader.section(data, "defaults")
        retry = reader.section(defaults, "retry", "defaults.")
        filename = reader.section(data, "filename")
        slug = reader.section(filename, "slug", "filename.")
        comments = reader.section(data, "comments")
        anchors = reader.section(comments, "anchors", "comments.")

        base = AppConfig()
        config = AppConfig(
            base_url=reader.text(data, "baseUrl", base.base_url),
            api_access_token=reader.text(data, "apiAccessToken", base.api_access_token),
            project=ProjectConfig(
                id=reader.integer(project, "project.id", 0),
                identifier=reader.text(project, "project.identifier", ""),
            ),
            output_dir=reader.text(data, "outputDir", base.output_dir),
            defaults=DefaultsConfig(
                include=reader.include(defaults, "defaults.include"),
                status=reader.text(defaults, "defaults.status", "*"),
                page_size=reader.integer(defaults, "defaults.pageSize", 100),
                concurrency=reader.integer(defaults, "defaults.concurrency", 4),
                retry=RetryConfig(
                    retries=reader.integer(retry, "defaults.retry.retries", 3),
                    base_ms=reader.integer(retry, "defaults.retry.baseMs", 300),
                ),
            ),
            filename=FilenameConfig(
                pattern=reader.text(filename, "filename.pattern", "{issueId}-{slug}.md"),
                slug=SlugConfig(
                    max_length=reader.integer(slug, "filename.slug.maxLength", 80),
                    dedupe=reader.boolean(slug, "filename.slug.dedupe", True),
                    lowercase=reader.boolean(slug, "filename.slug.lowercase", True),
                ),
                rename_on_title_change=reader.boolean(
                    filename, "filename.renameOnTitleChange", False
                ),
            ),
            comments=CommentsConfig(
                anchors=AnchorsConfig(
                    start=reader.text(anchors, "comments.anchors.start", AnchorsConfig.start),
                    end=reader.text(anchors, "comments.anchors.end", AnchorsConfig.end),
                ),
                track_by=reader.track_by(comments, "comments.trackBy"),
            ),
        )

        self._apply_cli_overrides(config, reader)
        return config, reader.errors + config.validate()

    def _apply_cli_overrides(self, config: AppConfig, reader: "_Reader") -> None:
        """Apply CLI argument overrides."""
        overrides = {k: v for k, v in self._cli_overrides.items() if v is not None}

        if "output_dir" in overrides:
            config.output_dir = str(overrides["output_dir"])
        if "concurrency" in overrides:
            config.defaults.concurrency = reader.integer(
                overrides, "concurrency", config.defaults.concurrency
            )
        if "page_size" in overrides:
            config.defaults.page_size = reader.integer(
                overrides, "page_size", config.defaults.page_size
            )


class _Reader:
    """Typed lookups over raw YAML values that record errors instead of raising."""

    def __init__(self):
        self.errors: list[str] = []

    @staticmethod
    def _key(path: str) -> str:
        return path.rsplit(".", 1)[-1]

    def section(self, data: dict[str, Any], key: str, prefix: str = "") -> dict[str, Any]:
        value = data.get(key)
        if value is None:
            return {}
        if not isinstance(value, dict):
            self.errors.append(f"{prefix}{key} must be a mapping")
            return {}
        return value

    def text(self, data: dict[str, Any], path: str, default: str) -> str:
        value = data.get(self._key(path))
        if value is None:
            return default
        if isinstance(value, (dict, list)):
            self.errors.append(f"{path} must be a string")
            return default
        return str(value)

    def integer(self, data: dict[str, Any], path: str, default: int) -> int:
        value = data.get(self._key(path))
        if value is None:
            return default
        if isinstance(value, bool):
            self.errors.append(f"{path} must be an integer")
            return default
        if isinstance(value, int):
            return value
        if isinstance(value, str) and value.strip().lstrip("-").isdigit():
            return int(value)
        self.errors.append(f"{path} must be an integer, got '{value}'")
        return default

    def boolean(self, data: dict[str, Any], path: str, default: bool) -> bool:
        value = data.get(self._key(path))
        if value is None:
            return default
        if isinstance(value, bool):
            return value
        if isinstance(value, str) and value.lower() in ("true", "1", "yes"):
            return True
        if isinstance(value, str) and value.lower() in ("false", "0", "no"):
            return False
        self.errors.append(f"{path} must be a boolean, got '{value}'")
        return default

    def include(self, data: dict[str, Any], path: str) -> list[IncludeOption]:
        value = data.get(self._key(path))
        if value is None:
            return [IncludeOption.JOURNALS]
        if isinstance(value, str):
            value = [part for part in value.split(",") if part.strip()]
        if not isinstance(value, list):
            self.errors.append(f"{path} must be a list")
            return [IncludeOption.JOURNALS]

        options = []
        for item in value:
            try:
                option = IncludeOption.from_string(str(item))
            except ValueError as e:
                self.errors.append(f"{path}: {e}")
                continue
            if option not in options:
                options.append(option)
        return options

    def track_by(self, data: dict[str, Any], path: str) -> TrackBy:
        value = data.get(self._key(path))
        if value is None:
            return TrackBy.JOURNAL_ID
        try:
            return TrackBy.from_string(str(value))
        except ValueError as e:
            self.errors.append(f"{path}: {e}")
            return TrackBy.JOURNAL_ID


def write_example_config(directory: Path) -> Path:
    """
    Write the example configuration file into ``directory``.

    Raises:
        FileExistsError: If the example file is already there
    """
    target = Path(directory) / EXAMPLE_CONFIG_FILENAME
    with open(target, "x", encoding="utf-8") as handle:
        handle.write(EXAMPLE_CONFIG)
    return target
