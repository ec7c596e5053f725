"""
Configuration management for wintweaks.

Supports:
- TOML config files, found through WINTWEAKS_CONFIG or the search paths
- Command-line overrides
- Sensible defaults

Priority (highest to lowest):
1. Command-line arguments
2. Config file
3. Defaults
"""

import os
import tomllib
from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional, Dict, Any

from .logging import DEFAULT_LOG_DIR, LEVELS
from .protocol.errors import ConfigurationError


CONFIG_ENV_VAR = "WINTWEAKS_CONFIG"

# Default config file locations (searched in order)
CONFIG_SEARCH_PATHS = [
    Path.cwd() / "wintweaks.toml",
    Path.home() / ".wintweaks" / "config.toml",
    Path.home() / ".config" / "wintweaks" / "config.toml",
]


@dataclass
class EngineSettings:
    """Apply/restore policy."""
    keep_existing_customization: bool = True
    max_workers: int = 1


@dataclass
class TweaksSettings:
    """Where the tweak document lives."""
    path: str = ""


@dataclass
class LoggingSettings:
    """Diagnostic logging."""
    level: str = "INFO"
    dir: str = str(DEFAULT_LOG_DIR)
    file_logging: bool = True


@dataclass
class OutputSettings:
    """Console output."""
    quiet: bool = False


@dataclass
class Config:
    """Main configuration container."""
    engine: EngineSettings = field(default_factory=EngineSettings)
    tweaks: TweaksSettings = field(default_factory=TweaksSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)
    output: OutputSettings = field(default_factory=OutputSettings)

    # Source tracking
    _config_file: Optional[Path] = None

    @classmethod
    def load(cls, config_path: Optional[str] = None) -> "Config":
        """
        Load configuration from file.

        Args:
            config_path: Explicit path to config file. If None, checks
                WINTWEAKS_CONFIG and then the default locations.

        Returns:
            Config instance with loaded values
        """
        config = cls()

        config_path = config_path or os.environ.get(CONFIG_ENV_VAR)
        if config_path:
            path = Path(config_path)
            if not path.exists():
                raise FileNotFoundError(f"Config file not found: {config_path}")
        else:
            path = cls._find_config_file()

        if path:
            config = cls._load_from_file(path)
            config._config_file = path

        return config

    @classmethod
    def _find_config_file(cls) -> Optional[Path]:
        """Find config file in default locations."""
        for path in CONFIG_SEARCH_PATHS:
            if path.exists():
                return path
        return None

    @classmethod
    def _load_from_file(cls, path: Path) -> "Config":
        """Load config from TOML file."""
        with open(path, "rb") as f:
            try:
                data = tomllib.load(f)
            except tomllib.TOMLDecodeError as e:
                raise ConfigurationError(f"Invalid config {path}: {e}") from e

        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: Dict[str, Any]) -> "Config":
        """Create Config from dictionary."""
        config = cls()

        if "engine" in data:
            eng = data["engine"]
            config.engine = EngineSettings(
                keep_existing_customization=eng.get(
                    "keep_existing_customization", config.engine.keep_existing_customization
                ),
                max_workers=eng.get("max_workers", config.engine.max_workers),
            )

        if "tweaks" in data:
            tw = data["tweaks"]
            config.tweaks = TweaksSettings(
                path=tw.get("path", config.tweaks.path),
            )

        if "logging" in data:
            lg = data["logging"]
            config.logging = LoggingSettings(
                level=str(lg.get("level", config.logging.level)).upper(),
                dir=lg.get("dir", config.logging.dir),
                file_logging=lg.get("file_logging", config.logging.file_logging),
            )

        if "output" in data:
            out = data["output"]
            config.output = OutputSettings(
                quiet=out.get("quiet", config.output.quiet),
            )

        return config

    def override_from_args(self, args) -> "Config":
        """
        Override config values from argparse namespace.

        Args with value None are ignored (keeping config file values).
        """
        if getattr(args, "tweaks", None):
            self.tweaks.path = args.tweaks
        if getattr(args, "no_keep_customization", None):
            self.engine.keep_existing_customization = False
        if getattr(args, "workers", None) is not None:
            self.engine.max_workers = args.workers

        if getattr(args, "debug", None):
            self.logging.level = "DEBUG"
        if getattr(args, "log_dir", None):
            self.logging.dir = args.log_dir
        if getattr(args, "no_log_file", None):
            self.logging.file_logging = False

        if getattr(args, "quiet", None):
            self.output.quiet = args.quiet

        return self

    def validate(self) -> list:
        """
        Validate configuration.

        Returns:
            List of validation error messages (empty if valid)
        """
        errors = []

        if self.engine.max_workers < 1:
            errors.append("engine.max_workers must be at least 1")

        if self.logging.level.upper() not in LEVELS:
            errors.append(f"Unknown log level: {self.logging.level}")

        if self.tweaks.path and not Path(self.tweaks.path).exists():
            errors.append(f"Tweak document not found: {self.tweaks.path}")

        return errors

    def summary(self, include_config_path: bool = True) -> str:
        """Generate human-readable config summary."""
        lines = []

        if include_config_path:
            if self._config_file:
                lines.append(f"Config: {self._config_file}")
            else:
                lines.append("Config: (defaults)")

        lines.append(f"Tweaks: {self.tweaks.path or '(search)'}")
        keep = "keep" if self.engine.keep_existing_customization else "overwrite"
        lines.append(f"Engine: {keep} user customizations, {self.engine.max_workers} worker(s)")
        file_note = self.logging.dir if self.logging.file_logging else "no file"
        lines.append(f"Logging: {self.logging.level} ({file_note})")

        return "\n".join(lines)


EXAMPLE_CONFIG = """# wintweaks Configuration

[engine]
# Leave resources alone when their current state differs from the
# OriginalType/OriginalState/OriginalValue declared in the tweak document
keep_existing_customization = true
max_workers = 1

[tweaks]
path = "config/tweaks.json"

[logging]
level = "INFO"
file_logging = true

[output]
quiet = false
"""


def create_example_config(path: str = "wintweaks.toml") -> Path:
    """Create example config file."""
    target = Path(path)

    if target.exists():
        raise FileExistsError(f"Config file already exists: {path}")

    target.write_text(EXAMPLE_CONFIG)
    return target
