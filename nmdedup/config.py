"""Configuration management using Pydantic BaseSettings.

Values come from environment variables (or a ``.env`` file) and are validated
once at load time.
"""
from pathlib import Path
from typing import List, Tuple

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

VALID_LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']


class Config(BaseSettings):
    """Main configuration class combining all settings."""

    # Deduplication
    dedup_root_path: str = Field(".", description="Project root containing node_modules")
    dedup_cache_dir: str = Field(".dedup_cache", description="Directory for cached duplicate groups")
    dedup_groups_file: str = Field("", description="YAML/JSON file with duplicate groups (skips discovery)")
    dedup_install_marker: str = Field("node_modules", description="Path segment marking installed dependencies")
    dedup_loader_prefix: str = Field("!", description="Requests with this prefix are never rewritten")
    dedup_browser_field: str = Field("module", description="package.json field used as browser entry")
    dedup_strict_groups: bool = Field(False, description="Reject overlapping duplicate groups")
    dedup_force_rebuild: bool = Field(False, description="Ignore cached duplicate groups")

    # Resolution
    resolve_extensions: str = Field(".js,.json", description="Comma-separated extensions tried by the resolver")
    resolve_cache_max_size: int = Field(0, ge=0, description="Max memoized resolutions (0=unbounded)")

    # Logging
    log_level: str = Field("INFO", description="Logging level")
    log_format: str = Field("%(asctime)s - %(name)s - %(levelname)s - %(message)s", description="Log format")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore"
    }

    @field_validator('dedup_install_marker', 'dedup_loader_prefix')
    @classmethod
    def validate_not_empty(cls, v: str) -> str:
        if not v:
            raise ValueError('must not be empty')
        return v

    @field_validator('log_level')
    @classmethod
    def validate_level(cls, v: str) -> str:
        if v.upper() not in VALID_LOG_LEVELS:
            raise ValueError(f'Invalid log level: {v}. Valid options: {VALID_LOG_LEVELS}')
        return v.upper()

    @field_validator('resolve_extensions')
    @classmethod
    def validate_extensions(cls, v: str) -> str:
        for ext in (e.strip() for e in v.split(',')):
            if ext and not ext.startswith('.'):
                raise ValueError(f'Invalid extension "{ext}": must start with "."')
        return v

    def get_extensions(self) -> Tuple[str, ...]:
        """Parse ``resolve_extensions`` into a tuple."""
        return tuple(e.strip() for e in self.resolve_extensions.split(',') if e.strip())

    def validate_configuration(self) -> List[str]:
        """Validate the complete configuration and return any issues."""
        issues = []

        root = Path(self.dedup_root_path)
        if not root.is_dir():
            issues.append(f"DEDUP_ROOT_PATH does not exist: {self.dedup_root_path}")
        elif not self.dedup_groups_file and not (root / self.dedup_install_marker).is_dir():
            issues.append(f"No {self.dedup_install_marker} directory under DEDUP_ROOT_PATH")

        if self.dedup_groups_file and not Path(self.dedup_groups_file).is_file():
            issues.append(f"DEDUP_GROUPS_FILE does not exist: {self.dedup_groups_file}")

        if not self.get_extensions():
            issues.append("RESOLVE_EXTENSIONS is empty, only exact file names will resolve")

        return issues

    def log_configuration(self) -> None:
        """Log the current configuration."""
        from nmdedup.utils.logger import log_info

        log_info("Configuration loaded",
                root_path=self.dedup_root_path,
                cache_dir=self.dedup_cache_dir,
                groups_file=self.dedup_groups_file or None,
                install_marker=self.dedup_install_marker,
                browser_field=self.dedup_browser_field,
                strict_groups=self.dedup_strict_groups,
                extensions=list(self.get_extensions()),
                log_level=self.log_level)


# Global configuration instance (lazy loading)
_config = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def reload_config() -> Config:
    """Reload configuration from environment variables."""
    global _config
    _config = Config()
    return _config
