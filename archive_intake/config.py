"""
Configuration handling for the archive intake tool.
"""

import json
import os
import re
from dataclasses import dataclass, field, asdict
from typing import Optional, Dict, Any, Union

from .logging_setup import get_logger

logger = get_logger(__name__)


@dataclass
class AiProviderConfig:
    """Base class for AI provider configurations."""
    provider_type: str


@dataclass
class ClaudeConfig(AiProviderConfig):
    """Claude API configuration."""
    provider_type: str = "claude"
    api_key: str = ""
    api_url: str = "https://api.anthropic.com/v1/messages"
    model: str = "claude-3-5-sonnet-latest"
    max_tokens: int = 2048


@dataclass
class OllamaConfig(AiProviderConfig):
    """Ollama API configuration."""
    provider_type: str = "ollama"
    api_url: str = "http://localhost:11434/api/generate"
    model: str = ""


@dataclass
class AppConfig:
    """Main application configuration."""
    provider: Union[ClaudeConfig, OllamaConfig] = field(default_factory=ClaudeConfig)
    store_path: str = "archive_intake.db"
    autosave_delay_ms: int = 500
    viewport_buffer: int = 5
    default_row_height: int = 24
    default_col_width: int = 100
    min_rows: int = 10
    min_cols: int = 10
    csv_delimiter: str = ","
    csv_quote: str = '"'
    sort_order: str = "desc"  # "asc" or "desc" by filename
    max_retries: int = 3
    max_workers: int = 4
    preview_max_resolution: int = 1024
    request_timeout: int = 60
    log_level: str = "INFO"
    log_file: Optional[str] = None
    debug_mode: bool = False


_PROVIDER_KEYS = {
    'claude': {
        'claude_api_key': 'api_key',
        'claude_api_url': 'api_url',
        'claude_model': 'model',
        'claude_max_tokens': 'max_tokens',
    },
    'ollama': {
        'ollama_api_url': 'api_url',
        'ollama_model': 'model',
    },
}


def _substitute_env_vars(value: Any) -> Any:
    """
    Substitute ${ENV_VAR} references in string values.

    Args:
        value: Value to process for environment variables

    Returns:
        Value with environment variables substituted
    """
    if not isinstance(value, str):
        return value

    def replace_env_var(match):
        env_var = match.group(1)
        env_value = os.environ.get(env_var)
        if env_value is None:
            logger.warning(f"Environment variable {env_var} not found")
            return ""
        return env_value

    return re.sub(r'\${([^}]+)}', replace_env_var, value)


def _process_config_dict(config_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively substitute environment variables in a configuration dict."""
    result = {}

    for key, value in config_dict.items():
        if isinstance(value, dict):
            result[key] = _process_config_dict(value)
        elif isinstance(value, list):
            result[key] = [
                _process_config_dict(item) if isinstance(item, dict) else _substitute_env_vars(item)
                for item in value
            ]
        else:
            result[key] = _substitute_env_vars(value)

    return result


def config_from_dict(config_dict: Dict[str, Any]) -> AppConfig:
    """
    Build an AppConfig from a flat configuration dictionary.

    Args:
        config_dict: Dictionary as stored in the JSON configuration file

    Returns:
        AppConfig object

    Raises:
        ValueError: If the configuration is invalid
    """
    config_dict = _process_config_dict(dict(config_dict))

    provider_type = config_dict.pop('provider', 'claude')

    if provider_type == 'claude':
        if not config_dict.get('claude_api_key'):
            raise ValueError("Missing Claude API key in configuration")
        provider_config = ClaudeConfig()
    elif provider_type == 'ollama':
        if not config_dict.get('ollama_model'):
            raise ValueError("Missing Ollama model in configuration")
        provider_config = OllamaConfig()
    else:
        raise ValueError(f"Unsupported AI provider: {provider_type}")

    for source_key, attr in _PROVIDER_KEYS[provider_type].items():
        if source_key in config_dict:
            setattr(provider_config, attr, config_dict.pop(source_key))

    known = set(AppConfig.__dataclass_fields__) - {'provider'}
    unknown = sorted(set(config_dict) - known)
    if unknown:
        raise ValueError(f"Unknown configuration fields: {', '.join(unknown)}")

    return AppConfig(provider=provider_config, **config_dict)


def load_config(config_path: str) -> AppConfig:
    """
    Load and validate configuration from JSON file.

    Args:
        config_path: Path to the configuration JSON file

    Returns:
        AppConfig object

    Raises:
        ValueError: If the configuration is invalid
        RuntimeError: If the configuration file cannot be loaded
    """
    config_path = os.path.abspath(os.path.expanduser(config_path))

    try:
        with open(config_path, 'r') as cfg:
            config_dict = json.load(cfg)
    except (json.JSONDecodeError, IOError) as e:
        raise RuntimeError(f"Failed to load configuration from {config_path}: {str(e)}")

    return config_from_dict(config_dict)


def save_config(config: AppConfig, config_path: str) -> None:
    """
    Save configuration to JSON file.

    Args:
        config: AppConfig object
        config_path: Path to save the configuration

    Raises:
        RuntimeError: If the configuration cannot be saved
    """
    try:
        config_dict = asdict(config)

        provider_config = config_dict.pop('provider', {})
        provider_type = provider_config.pop('provider_type', 'claude')
        config_dict['provider'] = provider_type

        for source_key, attr in _PROVIDER_KEYS.get(provider_type, {}).items():
            config_dict[source_key] = provider_config.get(attr, '')

        with open(config_path, 'w') as f:
            json.dump(config_dict, f, indent=2)
    except (IOError, TypeError) as e:
        raise RuntimeError(f"Failed to save configuration: {str(e)}")
