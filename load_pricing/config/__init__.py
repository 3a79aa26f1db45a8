"""Configuration package."""

from .settings import (
    get_app_name,
    get_app_version,
    get_api_endpoint,
    get_api_key,
    get_api_timeout,
    get_base_currency,
    get_fx_rates_table,
    load_api_config,
    save_api_config,
    set_api_config,
    clear_api_config,
)
from .profile_loader import PricingProfile, load_profile, list_available_profiles
from .profile_manager import get_profile, set_profile, reset_profile

__all__ = [
    'get_app_name',
    'get_app_version',
    'get_api_endpoint',
    'get_api_key',
    'get_api_timeout',
    'get_base_currency',
    'get_fx_rates_table',
    'load_api_config',
    'save_api_config',
    'set_api_config',
    'clear_api_config',
    'PricingProfile',
    'load_profile',
    'list_available_profiles',
    'get_profile',
    'set_profile',
    'reset_profile',
]
