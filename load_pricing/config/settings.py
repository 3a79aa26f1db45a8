"""Central settings for load pricing (environment first, saved JSON second)."""

import os
import json
import logging
from pathlib import Path
from typing import Dict, Optional

from .profile_manager import get_profile

logger = logging.getLogger(__name__)

DEFAULT_API_TIMEOUT = 15


def get_app_name() -> str:
    """Get application name."""
    return "Load Pricing"


def get_app_version() -> str:
    """Get application version from pyproject.toml."""
    try:
        import tomli
        pyproject_path = Path(__file__).resolve().parent.parent.parent / "pyproject.toml"
        with open(pyproject_path, "rb") as f:
            pyproject = tomli.load(f)
            return pyproject.get("project", {}).get("version", "0.1.0")
    except Exception:
        # Fallback version if pyproject.toml cannot be read
        return "0.1.0"


def get_api_config_path() -> Path:
    """Get path to API configuration file.

    Returns:
        Path to API config file (default: configs/api_config.json)
    """
    env_path = os.getenv('LOAD_PRICING_API_CONFIG')
    if env_path:
        return Path(env_path)
    return Path(__file__).resolve().parent.parent.parent / "configs" / "api_config.json"


def load_api_config() -> dict:
    """Load API configuration from file.

    Returns:
        Dict with API configuration (endpoint, api_key, timeout)
    """
    config_path = get_api_config_path()
    if config_path.exists():
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Failed to load API config: {e}")

    return {}


def save_api_config(config: dict) -> None:
    """Save API configuration to file.

    Args:
        config: Dict with API configuration (endpoint, api_key, timeout)
    """
    config_path = get_api_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    try:
        with open(config_path, 'w', encoding='utf-8') as f:
            json.dump(config, f, indent=2, ensure_ascii=False)
    except OSError as e:
        logger.error(f"Failed to save API config: {e}")
        raise


def set_api_config(
    endpoint: str,
    api_key: Optional[str] = None,
    timeout: Optional[int] = None
) -> None:
    """Set API configuration and save to file.

    Args:
        endpoint: Base URL of the quote/load API
        api_key: Optional API key (if None, keeps existing key)
        timeout: Optional request timeout in seconds
    """
    config = load_api_config()
    config['endpoint'] = endpoint

    # Only update key/timeout if provided
    if api_key is not None:
        config['api_key'] = api_key
    if timeout is not None:
        config['timeout'] = timeout

    save_api_config(config)


def clear_api_config() -> None:
    """Remove all saved API configuration."""
    save_api_config({})


def get_api_endpoint() -> Optional[str]:
    """Get API base URL.

    Returns:
        URL from LOAD_PRICING_API_ENDPOINT, or from saved config, or None
    """
    endpoint = os.getenv('LOAD_PRICING_API_ENDPOINT')
    if endpoint:
        return endpoint
    return load_api_config().get('endpoint')


def get_api_key() -> Optional[str]:
    """Get API key.

    Returns:
        Key from LOAD_PRICING_API_KEY, or from saved config, or None
    """
    key = os.getenv('LOAD_PRICING_API_KEY')
    if key:
        return key
    return load_api_config().get('api_key')


def get_api_timeout() -> int:
    """Get request timeout in seconds (default 15)."""
    raw = os.getenv('LOAD_PRICING_API_TIMEOUT')
    if raw is None:
        raw = load_api_config().get('timeout', DEFAULT_API_TIMEOUT)
    try:
        timeout = int(raw)
    except (TypeError, ValueError):
        logger.warning(f"Invalid API timeout: {raw!r}, using {DEFAULT_API_TIMEOUT}")
        return DEFAULT_API_TIMEOUT
    if timeout <= 0:
        logger.warning(f"Invalid API timeout: {timeout}, using {DEFAULT_API_TIMEOUT}")
        return DEFAULT_API_TIMEOUT
    return timeout


def get_base_currency() -> str:
    """Get base currency code.

    Returns:
        LOAD_PRICING_BASE_CURRENCY if set, else the active profile's base currency
    """
    code = os.getenv('LOAD_PRICING_BASE_CURRENCY')
    if code and code.strip():
        return code.strip().upper()
    return get_profile().base_currency


def get_fx_rates_table() -> Dict[str, float]:
    """Get offline exchange rates from LOAD_PRICING_FX_RATES.

    Example:
        LOAD_PRICING_FX_RATES='{"USD": 30.5, "EUR": 33.1}'

    Returns:
        Mapping currency code -> rate to base currency (empty if unset/invalid)
    """
    blob = os.getenv('LOAD_PRICING_FX_RATES', '{}')
    try:
        table = json.loads(blob)
    except json.JSONDecodeError:
        logger.warning("Invalid LOAD_PRICING_FX_RATES JSON; falling back to empty table")
        return {}
    if not isinstance(table, dict):
        logger.warning("LOAD_PRICING_FX_RATES must be a JSON object; falling back to empty table")
        return {}
    return {str(code).upper(): rate for code, rate in table.items()}
