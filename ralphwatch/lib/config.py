"""
Observer configuration.

Loads .ralph/observer.yaml from the project directory. If no config file
exists, returns defaults matching the ralph project layout:

    <project>/
      prd.json               working-directory copy of the ledger
      agent_logs/*.log       one append-only log per agent iteration
      .ralph/repo.git        shared bare repository agents push to
      .ralph/stop_requested  non-empty when a graceful stop was requested
"""

import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Optional

import yaml

logger = logging.getLogger(__name__)

CONFIG_RELPATH = ".ralph/observer.yaml"


class ConfigError(Exception):
    """Configuration or project input is unusable."""
    pass


@dataclass
class ObserverConfig:
    """Settings from observer.yaml."""
    repo_subdir: str = ".ralph/repo.git"
    ledger_file: str = "prd.json"
    logs_dir: str = "agent_logs"
    log_suffix: str = ".log"
    worker_prefix: str = "ralph-"
    worker_runtime: str = "docker"
    stop_file: str = ".ralph/stop_requested"
    max_log_summaries: int = 5
    log_tail_lines: int = 10
    git_timeout: int = 30
    process_timeout: int = 10


@dataclass
class Project:
    """A project directory bound to its observer config."""
    dir: Path
    config: ObserverConfig = field(default_factory=ObserverConfig)

    @property
    def bare_repo(self) -> Path:
        return self.dir / self.config.repo_subdir

    @property
    def ledger_path(self) -> Path:
        return self.dir / self.config.ledger_file

    @property
    def logs_dir(self) -> Path:
        return self.dir / self.config.logs_dir

    @property
    def stop_file(self) -> Path:
        return self.dir / self.config.stop_file


def load_observer_config(project_dir: Optional[Path], config_path: Optional[Path] = None) -> ObserverConfig:
    """Load observer.yaml and return ObserverConfig.

    If the file doesn't exist or can't be parsed, returns defaults.
    Unknown keys and values of the wrong type are ignored with a warning.

    Raises:
        ConfigError: If an explicitly given config_path does not exist
    """
    if config_path is not None and not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    if config_path is None:
        if project_dir is None:
            return ObserverConfig()
        config_path = project_dir / CONFIG_RELPATH

    if not config_path.exists():
        return ObserverConfig()

    try:
        data = yaml.safe_load(config_path.read_text())
    except (yaml.YAMLError, OSError) as e:
        logger.warning(f"Failed to parse {config_path}: {e}")
        return ObserverConfig()

    if not data:
        return ObserverConfig()
    if not isinstance(data, dict):
        logger.warning(f"Ignoring {config_path}: expected a mapping")
        return ObserverConfig()

    defaults = ObserverConfig()
    known = {f.name: type(getattr(defaults, f.name)) for f in fields(ObserverConfig)}
    values = {}
    for key, value in data.items():
        if key not in known:
            logger.warning(f"Unknown key '{key}' in {config_path}")
            continue
        expected = known[key]
        if not isinstance(value, expected) or isinstance(value, bool) != (expected is bool):
            logger.warning(f"Ignoring '{key}' in {config_path}: expected {expected.__name__}")
            continue
        values[key] = value

    return ObserverConfig(**values)


def load_project(project_dir: Path, config_path: Optional[Path] = None) -> Project:
    """Resolve a project directory and its config."""
    project_dir = Path(project_dir).expanduser()
    if not project_dir.is_absolute():
        project_dir = project_dir.resolve()
    return Project(dir=project_dir, config=load_observer_config(project_dir, config_path))
