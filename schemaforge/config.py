"""Configuration for schemaforge with validation."""

from pathlib import Path
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
import structlog
import toml

from schemaforge.core.errors import ConfigError
from schemaforge.diagrams import DiagramFormat, LayoutOptions

log = structlog.get_logger()

CONFIG_FILENAME = "schemaforge.toml"
USER_CONFIG_PATH = Path("~/.schemaforge/config.toml")


class DiagramConfig(BaseModel):
    """Diagram output defaults."""
    format: DiagramFormat = DiagramFormat.MERMAID
    show_types: bool = True
    title: Optional[str] = None

    @field_validator('title')
    @classmethod
    def title_not_blank(cls, v):
        if v is not None and not v.strip():
            return None
        return v


class LayoutConfig(BaseModel):
    """Grid placement constants (pixels)."""
    columns: int = Field(gt=0, le=12, default=3)
    x_spacing: int = Field(gt=0, default=300)
    y_spacing: int = Field(gt=0, default=250)
    margin: int = Field(ge=0, default=50)
    box_width: int = Field(gt=0, default=220)
    header_height: int = Field(gt=0, default=40)
    row_height: int = Field(gt=0, default=28)
    bend: int = Field(ge=0, default=50)

    def to_options(self) -> LayoutOptions:
        return LayoutOptions(**self.model_dump())


class SchemaForgeConfig(BaseModel):
    """Main configuration for schemaforge."""

    model_config = ConfigDict(validate_assignment=True)

    diagram: DiagramConfig = Field(default_factory=DiagramConfig)
    layout: LayoutConfig = Field(default_factory=LayoutConfig)

    # Tool names whose "sql" argument carries generated DDL
    sql_tool_names: list[str] = Field(default_factory=lambda: ["execute_sql"])

    # Logging
    log_level: str = Field(default="WARNING", pattern="^(DEBUG|INFO|WARNING|ERROR)$")
    log_file: Optional[Path] = None
    json_logs: bool = False

    @field_validator('log_level', mode='before')
    @classmethod
    def upper_log_level(cls, v):
        return v.upper() if isinstance(v, str) else v

    @classmethod
    def load(cls, path: Optional[str] = None) -> 'SchemaForgeConfig':
        """Load configuration from a TOML file.

        Search order if path not provided:
        1. ./schemaforge.toml (project-specific)
        2. ~/.schemaforge/config.toml (user default)

        An explicit path that cannot be loaded raises ConfigError; a
        discovered file that cannot be loaded falls back to defaults.

        Args:
            path: Optional explicit config file path

        Returns:
            SchemaForgeConfig instance
        """
        if path is not None:
            return cls._load_file(Path(path))

        for candidate in (Path(CONFIG_FILENAME), USER_CONFIG_PATH.expanduser()):
            if candidate.exists():
                log.info("config_found", path=str(candidate))
                try:
                    return cls._load_file(candidate)
                except ConfigError as e:
                    log.error("config_load_failed", path=str(candidate), error=str(e))
                    return cls()

        log.info("config_using_defaults")
        return cls()

    @classmethod
    def _load_file(cls, path: Path) -> 'SchemaForgeConfig':
        if not path.exists():
            raise ConfigError(f"Config file not found: {path}")
        try:
            data = toml.load(path)
            config = cls(**data)
        except (OSError, ValueError) as e:
            # TomlDecodeError and ValidationError are both ValueErrors
            raise ConfigError(f"Failed to load config {path}: {e}") from e
        log.info("config_loaded", path=str(path))
        return config

    def save(self, path: str):
        """Save configuration to a TOML file.

        Args:
            path: File path to save to
        """
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        data = self.model_dump(mode='json', exclude_none=True)
        with open(target, 'w') as f:
            toml.dump(data, f)
        log.info("config_saved", path=str(target))


def validate_config(config: SchemaForgeConfig) -> list[str]:
    """Validate configuration and return warnings.

    Args:
        config: Config to validate

    Returns:
        List of warning messages
    """
    warnings = []

    layout = config.layout
    if layout.x_spacing < layout.box_width:
        warnings.append(
            f"layout.x_spacing ({layout.x_spacing}) is smaller than "
            f"layout.box_width ({layout.box_width}); tables will overlap"
        )

    if layout.y_spacing < layout.header_height + layout.row_height:
        warnings.append(
            f"layout.y_spacing ({layout.y_spacing}) leaves no room for columns"
        )

    if not config.sql_tool_names:
        warnings.append("sql_tool_names is empty; tool calls in model responses will be ignored")

    if config.log_file is not None:
        parent = Path(config.log_file).expanduser().parent
        if parent.exists() and not parent.is_dir():
            warnings.append(f"Log file directory is not a directory: {parent}")

    return warnings
