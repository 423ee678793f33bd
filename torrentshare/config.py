"""
Configuration management for torrentshare.

Handles loading and saving user configuration from:
- XDG config directory: ~/.config/torrentshare/config.json
- Fallback: ~/.torrentshare/config.json
"""

import json
import logging
from pathlib import Path
from typing import Dict, Any, Optional
from dataclasses import dataclass, asdict, field

logger = logging.getLogger(__name__)


@dataclass
class CacheConfig:
    """Search cache store settings."""
    path: str = "cache.json"


@dataclass
class TransferConfig:
    """qBittorrent Web API connection and streaming settings."""
    url: str = "http://localhost:8080"
    username: str = "admin"
    password: str = ""
    staging_dir: str = "./dls/"
    poll_interval: float = 0.5
    stall_timeout: float = 30.0
    chunk_size: int = 64 * 1024


@dataclass
class ScraperConfig:
    """Remote search index settings."""
    search_url: str = "https://snowfl.com/"
    user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/107.0.0.0 Safari/537.36 Edg/107.0.1418.42"
    )
    timeout: float = 20.0


@dataclass
class BrowseConfig:
    """Tree presentation settings."""
    max_results: int = 20


@dataclass
class CLIConfig:
    """CLI default options."""
    verbose: bool = False
    color: bool = True


@dataclass
class ShareConfig:
    """Main torrentshare configuration."""
    cache: CacheConfig = field(default_factory=CacheConfig)
    transfer: TransferConfig = field(default_factory=TransferConfig)
    scraper: ScraperConfig = field(default_factory=ScraperConfig)
    browse: BrowseConfig = field(default_factory=BrowseConfig)
    cli: CLIConfig = field(default_factory=CLIConfig)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "cache": asdict(self.cache),
            "transfer": asdict(self.transfer),
            "scraper": asdict(self.scraper),
            "browse": asdict(self.browse),
            "cli": asdict(self.cli),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ShareConfig':
        """Create from dictionary."""
        return cls(
            cache=CacheConfig(**data.get("cache", {})),
            transfer=TransferConfig(**data.get("transfer", {})),
            scraper=ScraperConfig(**data.get("scraper", {})),
            browse=BrowseConfig(**data.get("browse", {})),
            cli=CLIConfig(**data.get("cli", {})),
        )


def get_config_path() -> Path:
    """
    Get configuration file path.

    Follows XDG Base Directory specification:
    1. ~/.config/torrentshare/config.json
    2. Fallback: ~/.torrentshare/config.json

    Returns:
        Path to config file
    """
    xdg_config_home = Path.home() / ".config"
    if xdg_config_home.exists():
        config_dir = xdg_config_home / "torrentshare"
    else:
        config_dir = Path.home() / ".torrentshare"

    return config_dir / "config.json"


def load_config(config_path: Optional[Path] = None) -> ShareConfig:
    """
    Load configuration from file.

    Args:
        config_path: Explicit config file (default: get_config_path())

    Returns:
        ShareConfig instance with loaded values or defaults
    """
    config_path = config_path or get_config_path()

    if not config_path.exists():
        return ShareConfig()

    try:
        with open(config_path, 'r') as f:
            data = json.load(f)
        return ShareConfig.from_dict(data)
    except (json.JSONDecodeError, TypeError, OSError) as e:
        logger.warning(f"Failed to load config from {config_path}: {e}; using defaults")
        return ShareConfig()


def save_config(config: ShareConfig, config_path: Optional[Path] = None) -> Path:
    """
    Save configuration to file.

    Args:
        config: Configuration to save
        config_path: Explicit config file (default: get_config_path())

    Returns:
        Path the configuration was written to
    """
    config_path = config_path or get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, 'w') as f:
        json.dump(config.to_dict(), f, indent=2)

    logger.debug(f"Configuration saved to {config_path}")
    return config_path


def update_config(
    config_path: Optional[Path] = None,
    # Cache settings
    cache_path: Optional[str] = None,
    # Transfer settings
    transfer_url: Optional[str] = None,
    transfer_username: Optional[str] = None,
    transfer_password: Optional[str] = None,
    transfer_staging_dir: Optional[str] = None,
    # Scraper settings
    scraper_search_url: Optional[str] = None,
    scraper_timeout: Optional[float] = None,
    # Browse settings
    browse_max_results: Optional[int] = None,
    # CLI settings
    cli_verbose: Optional[bool] = None,
) -> ShareConfig:
    """
    Update configuration.

    Only updates provided values, leaving others unchanged.
    """
    config = load_config(config_path)

    if cache_path is not None:
        config.cache.path = cache_path

    if transfer_url is not None:
        config.transfer.url = transfer_url
    if transfer_username is not None:
        config.transfer.username = transfer_username
    if transfer_password is not None:
        config.transfer.password = transfer_password
    if transfer_staging_dir is not None:
        config.transfer.staging_dir = transfer_staging_dir

    if scraper_search_url is not None:
        config.scraper.search_url = scraper_search_url
    if scraper_timeout is not None:
        config.scraper.timeout = scraper_timeout

    if browse_max_results is not None:
        config.browse.max_results = browse_max_results

    if cli_verbose is not None:
        config.cli.verbose = cli_verbose

    save_config(config, config_path)
    return config
