"""
Blackhole Configuration
=======================

This module handles configuration loading for the block pipeline.

Configuration Sources (in order of precedence):
    1. Environment variables (highest priority)
    2. config.yaml file
    3. Default values (lowest priority)

Environment Variable Mapping:
    BLACKHOLE_STORE_URL            -> store.url
    BLACKHOLE_BATCH_SIZE           -> store.batch_size
    BLACKHOLE_TIMEOUT              -> store.timeout_seconds
    BLACKHOLE_STORE_ENABLED        -> store.enabled
    BLACKHOLE_INPUT_DIR            -> processing.input_dir
    BLACKHOLE_PADDING              -> processing.padding
    BLACKHOLE_MAX_CONCURRENT_FILES -> processing.max_concurrent_files
    BLACKHOLE_OUTPUT_DIR           -> processing.output_dir
    BLACKHOLE_STORE_PORT           -> server.port
    PORT                           -> server.port (takes precedence)
    BLACKHOLE_LOG_LEVEL            -> logging.level

Example:
    from blackhole.config import settings
    
    print(settings.store.url)
    print(settings.processing.padding)
"""

import os
import logging
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field

from blackhole.models.block import PaddingPolicy


logger = logging.getLogger(__name__)


# =============================================================================
# Configuration Models
# =============================================================================

class StoreConfig(BaseModel):
    """Remote block store connection configuration."""
    
    url: str = Field(
        default="http://localhost:8081/api/v1/blocks",
        description="Prefix of the block check/upload endpoints",
    )
    batch_size: int = Field(
        default=1000,
        ge=1,
        description="Maximum blocks per upload request",
    )
    timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Per-request timeout",
    )
    enabled: bool = Field(
        default=True,
        description="Synchronise unique blocks with the store",
    )


class ProcessingConfig(BaseModel):
    """Image processing configuration."""
    
    input_dir: str = Field(
        default="img",
        description="Directory processed when none is given on the command line",
    )
    extensions: List[str] = Field(
        default_factory=lambda: [".jpg", ".jpeg"],
        description="File suffixes (case-insensitive) picked up from the directory",
    )
    padding: PaddingPolicy = Field(
        default=PaddingPolicy.EDGE,
        description="Fill policy for the padded border: 'edge' or 'zero'",
    )
    max_concurrent_files: int = Field(
        default=2,
        ge=1,
        description="Images processed at the same time",
    )
    output_dir: Optional[str] = Field(
        default=None,
        description="Directory for .blho files (default: next to each image)",
    )


class ServerConfig(BaseModel):
    """Reference block store server configuration."""
    
    host: str = Field(default="0.0.0.0", description="Bind host")
    port: int = Field(default=8081, ge=1, le=65535, description="Bind port")


class LoggingConfig(BaseModel):
    """Logging configuration."""
    
    level: str = Field(default="INFO", description="Log level")
    format: str = Field(default="text", description="Log format: json or text")


class Settings(BaseModel):
    """
    Main settings class for the block pipeline.
    
    Loads configuration from YAML file and environment variables.
    Environment variables take precedence over file values.
    """
    
    store: StoreConfig = Field(default_factory=StoreConfig)
    processing: ProcessingConfig = Field(default_factory=ProcessingConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


# =============================================================================
# Configuration Loading
# =============================================================================

def load_config(config_path: Optional[str] = None) -> Settings:
    """
    Load configuration from YAML file and environment variables.
    
    Priority (highest to lowest):
        1. Environment variables
        2. YAML config file
        3. Default values
        
    Args:
        config_path: Path to config.yaml. If None, searches common locations.
        
    Returns:
        Settings: Loaded configuration
    """
    # Find config file
    if config_path is None:
        search_paths = [
            Path("config.yaml"),
            Path("config.yml"),
        ]
        for path in search_paths:
            if path.exists():
                config_path = str(path)
                break
    
    # Load from YAML if exists
    config_data = {}
    if config_path and Path(config_path).exists():
        logger.info(f"Loading config from: {config_path}")
        with open(config_path, "r") as f:
            config_data = yaml.safe_load(f) or {}
    else:
        logger.debug("No config file found, using defaults and environment variables")
    
    # Apply environment variable overrides
    _apply_env_overrides(config_data)
    
    return Settings.model_validate(config_data)


def _apply_env_overrides(config_data: dict) -> None:
    """Apply environment variable overrides to config data."""
    
    # Store settings
    if env_url := os.environ.get("BLACKHOLE_STORE_URL"):
        config_data.setdefault("store", {})["url"] = env_url
    if env_batch := os.environ.get("BLACKHOLE_BATCH_SIZE"):
        config_data.setdefault("store", {})["batch_size"] = int(env_batch)
    if env_timeout := os.environ.get("BLACKHOLE_TIMEOUT"):
        config_data.setdefault("store", {})["timeout_seconds"] = float(env_timeout)
    if env_enabled := os.environ.get("BLACKHOLE_STORE_ENABLED"):
        config_data.setdefault("store", {})["enabled"] = env_enabled.lower() in ("1", "true", "yes")
    
    # Processing settings
    if env_dir := os.environ.get("BLACKHOLE_INPUT_DIR"):
        config_data.setdefault("processing", {})["input_dir"] = env_dir
    if env_padding := os.environ.get("BLACKHOLE_PADDING"):
        config_data.setdefault("processing", {})["padding"] = env_padding
    if env_workers := os.environ.get("BLACKHOLE_MAX_CONCURRENT_FILES"):
        config_data.setdefault("processing", {})["max_concurrent_files"] = int(env_workers)
    if env_out := os.environ.get("BLACKHOLE_OUTPUT_DIR"):
        config_data.setdefault("processing", {})["output_dir"] = env_out
    
    # Server settings
    if env_port := os.environ.get("PORT"):
        config_data.setdefault("server", {})["port"] = int(env_port)
    elif env_port := os.environ.get("BLACKHOLE_STORE_PORT"):
        config_data.setdefault("server", {})["port"] = int(env_port)
    
    # Logging settings
    if env_log := os.environ.get("BLACKHOLE_LOG_LEVEL"):
        config_data.setdefault("logging", {})["level"] = env_log


def setup_logging(settings: Settings) -> None:
    """Configure logging based on settings."""
    log_level = getattr(logging, settings.logging.level.upper(), logging.INFO)
    
    if settings.logging.format == "json":
        log_format = '{"time": "%(asctime)s", "level": "%(levelname)s", "module": "%(name)s", "message": "%(message)s"}'
    else:
        log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    
    logging.basicConfig(
        level=log_level,
        format=log_format,
        datefmt="%Y-%m-%dT%H:%M:%S",
    )


# =============================================================================
# Global Settings Instance
# =============================================================================

# Global settings instance - loaded on import
settings = load_config()
