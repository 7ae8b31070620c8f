"""Configuration management for Budgetboard.

Reads configuration from ~/.config/budgetboard.toml and creates default config if needed.
The BUDGETBOARD_CONFIG environment variable points at an alternative file.
"""

import os
import secrets
from pathlib import Path
from dataclasses import dataclass
import tomllib
import tomli_w


@dataclass
class Config:
    """Application configuration."""

    base_dir: Path
    db_data_dir: Path
    db_filename: str
    log_level: str
    log_dir: Path
    web_host: str = "127.0.0.1"
    web_port: int = 5000
    secret_key: str = ""
    auth_provider: str = "local"
    validate_amounts: bool = True
    currency_symbol: str = "$"
    default_category_color: str = "#6366F1"
    enable_reset: bool = False

    @property
    def db_path(self) -> Path:
        """Get the full database path (data_dir/filename)."""
        return self.db_data_dir / self.db_filename

    @classmethod
    def default(cls) -> "Config":
        """Create a Config with default values."""
        home = Path.home()
        base_dir = home / "data" / "budgetboard"
        return cls(
            base_dir=base_dir,
            db_data_dir=base_dir / "db",
            db_filename="budgetboard.db",
            log_level="INFO",
            log_dir=base_dir / "logs",
            secret_key=secrets.token_hex(32),
        )


def get_config_path() -> Path:
    """Get the path to the config file."""
    override = os.environ.get("BUDGETBOARD_CONFIG")
    if override:
        return Path(override)
    return Path.home() / ".config" / "budgetboard.toml"


def get_migrations_dir() -> Path:
    """Get the path to the migrations directory.

    This is always relative to the code location, not configurable.
    """
    return Path(__file__).parent / "db" / "migrations"


def get_seed_dir() -> Path:
    """Get the path to the seed data directory."""
    return Path(__file__).parent / "db" / "seed"


def load_config() -> Config:
    """Load configuration from file, creating default if it doesn't exist.

    Returns:
        Config object with loaded or default values.
    """
    config_path = get_config_path()

    # If config doesn't exist, create it with defaults
    if not config_path.exists():
        config = Config.default()
        _write_config(config)
        return config

    # Load existing config
    with open(config_path, "rb") as f:
        data = tomllib.load(f)

    defaults = Config.default()

    # Parse with defaults for any missing values
    base_dir = Path(data.get("base_dir", defaults.base_dir))

    db_config = data.get("database", {})
    db_data_dir = Path(db_config.get("data_dir", base_dir / "db"))
    db_filename = db_config.get("filename", defaults.db_filename)

    log_config = data.get("logging", {})
    log_level = log_config.get("level", defaults.log_level)
    log_dir = Path(log_config.get("log_dir", base_dir / "logs"))

    web_config = data.get("web", {})
    auth_config = data.get("auth", {})
    expense_config = data.get("expenses", {})
    display_config = data.get("display", {})

    return Config(
        base_dir=base_dir,
        db_data_dir=db_data_dir,
        db_filename=db_filename,
        log_level=log_level,
        log_dir=log_dir,
        web_host=web_config.get("host", defaults.web_host),
        web_port=int(web_config.get("port", defaults.web_port)),
        secret_key=web_config.get("secret_key", defaults.secret_key),
        auth_provider=auth_config.get("provider", defaults.auth_provider),
        validate_amounts=expense_config.get(
            "validate_amounts", defaults.validate_amounts
        ),
        currency_symbol=display_config.get(
            "currency_symbol", defaults.currency_symbol
        ),
        default_category_color=display_config.get(
            "default_category_color", defaults.default_category_color
        ),
        enable_reset=data.get("enable_reset", defaults.enable_reset),
    )


def _write_config(config: Config) -> None:
    """Write config to the config file.

    Args:
        config: Config object to write.
    """
    config_path = get_config_path()

    # Ensure config directory exists
    config_path.parent.mkdir(parents=True, exist_ok=True)

    # Convert config to TOML structure
    data = {
        "base_dir": str(config.base_dir),
        "enable_reset": config.enable_reset,
        "database": {
            "data_dir": str(config.db_data_dir),
            "filename": config.db_filename,
        },
        "logging": {
            "level": config.log_level,
            "log_dir": str(config.log_dir),
        },
        "web": {
            "host": config.web_host,
            "port": config.web_port,
            "secret_key": config.secret_key,
        },
        "auth": {
            "provider": config.auth_provider,
        },
        "expenses": {
            "validate_amounts": config.validate_amounts,
        },
        "display": {
            "currency_symbol": config.currency_symbol,
            "default_category_color": config.default_category_color,
        },
    }

    # Write TOML file
    with open(config_path, "wb") as f:
        tomli_w.dump(data, f)
