"""Profile loader for configurable pricing defaults."""

import yaml
from pathlib import Path
from typing import Dict, Any
from dataclasses import dataclass, field


@dataclass
class PricingProfile:
    """Pricing defaults for one deployment.

    Attributes:
        name: Profile name (file stem under configs/profiles)
        description: Free text description
        base_currency: Currency that totals are expressed in
        default_unit: Unit code of newly added lines
        currency_symbols: Display symbols overriding the built-in table
        product_search_limit: Maximum candidates per product search
    """
    name: str
    description: str = ""
    base_currency: str = "TRY"
    default_unit: str = "SET"
    currency_symbols: Dict[str, str] = field(default_factory=dict)
    product_search_limit: int = 20

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PricingProfile':
        """Create PricingProfile from dictionary."""
        defaults = cls(name=data.get('name', 'default'))
        symbols = data.get('currency_symbols') or {}
        if not isinstance(symbols, dict):
            raise ValueError(f"currency_symbols must be a mapping, got {type(symbols).__name__}")
        return cls(
            name=defaults.name,
            description=data.get('description', ''),
            base_currency=str(data.get('base_currency', defaults.base_currency)).upper(),
            default_unit=str(data.get('default_unit', defaults.default_unit)),
            currency_symbols={str(code).upper(): str(symbol) for code, symbol in symbols.items()},
            product_search_limit=int(data.get('product_search_limit', defaults.product_search_limit)),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            'name': self.name,
            'description': self.description,
            'base_currency': self.base_currency,
            'default_unit': self.default_unit,
            'currency_symbols': self.currency_symbols,
            'product_search_limit': self.product_search_limit,
        }


def get_profiles_dir() -> Path:
    """Get directory containing profile YAML files.

    Returns:
        Path to profiles directory
    """
    # load_pricing/config/profile_loader.py -> load_pricing/config -> load_pricing -> root
    project_root = Path(__file__).resolve().parent.parent.parent
    return project_root / "configs" / "profiles"


def load_profile(profile_name: str = "default") -> PricingProfile:
    """Load a pricing profile.

    Args:
        profile_name: Name of profile to load (without .yaml extension)

    Returns:
        PricingProfile object

    Raises:
        FileNotFoundError: If profile file doesn't exist
        ValueError: If profile file is invalid
    """
    profiles_dir = get_profiles_dir()
    profile_path = profiles_dir / f"{profile_name}.yaml"

    if not profile_path.exists():
        raise FileNotFoundError(f"Profile not found: {profile_name} (expected at {profile_path})")

    try:
        with open(profile_path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in profile {profile_name}: {e}")

    if not data:
        raise ValueError(f"Profile file is empty: {profile_path}")

    try:
        return PricingProfile.from_dict(data)
    except (TypeError, ValueError, ArithmeticError) as e:
        raise ValueError(f"Error loading profile {profile_name}: {e}")


def list_available_profiles() -> list[str]:
    """List all available profile names.

    Returns:
        List of profile names (without .yaml extension)
    """
    profiles_dir = get_profiles_dir()

    if not profiles_dir.exists():
        return ["default"]

    profiles = [profile_file.stem for profile_file in profiles_dir.glob("*.yaml")]
    return sorted(profiles) if profiles else ["default"]


def get_default_profile() -> PricingProfile:
    """Get default profile (always available).

    Returns:
        Default PricingProfile
    """
    try:
        return load_profile("default")
    except FileNotFoundError:
        # Fallback: built-in defaults
        return PricingProfile(name="default", description="Default pricing configuration")
