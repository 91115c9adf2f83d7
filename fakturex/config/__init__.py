"""Configuration package."""

from .profile_loader import (
    ExtractionProfile,
    get_default_profile,
    get_profiles_dir,
    list_available_profiles,
    load_profile,
)
from .profile_manager import get_profile, reset_profile, set_profile

__all__ = [
    "ExtractionProfile",
    "get_default_profile",
    "get_profiles_dir",
    "list_available_profiles",
    "load_profile",
    "get_profile",
    "reset_profile",
    "set_profile",
]
