"""Process-wide active pricing profile.

Ledgers read their default unit, and the display layer its currency symbols,
from the active profile. Until set_profile() picks one, the shipped
``default`` profile (or the built-in defaults when it is missing) is used.
"""

from typing import Optional
from .profile_loader import PricingProfile, load_profile, get_default_profile

_active: Optional[PricingProfile] = None


def set_profile(profile_name: str = "default") -> PricingProfile:
    """Activate the named profile from configs/profiles and return it.

    A profile that fails to load raises (FileNotFoundError or ValueError)
    and leaves the previously active one in place.
    """
    global _active
    _active = load_profile(profile_name)
    return _active


def get_profile() -> PricingProfile:
    global _active
    if _active is None:
        _active = get_default_profile()
    return _active


def reset_profile():
    """Forget the active profile; the next get_profile() loads the default again."""
    global _active
    _active = None
