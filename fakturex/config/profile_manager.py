"""Global profile manager for extraction configuration."""

from typing import Optional

from .profile_loader import ExtractionProfile, get_default_profile, load_profile

# Global profile instance
_current_profile: Optional[ExtractionProfile] = None


def set_profile(profile_name: str = "default") -> ExtractionProfile:
    """Set the active profile for the pipeline.

    Raises:
        FileNotFoundError: If profile doesn't exist
        ValueError: If profile is invalid
    """
    global _current_profile
    _current_profile = load_profile(profile_name)
    return _current_profile


def get_profile() -> ExtractionProfile:
    """Get the current active profile (default if none set)."""
    global _current_profile
    if _current_profile is None:
        _current_profile = get_default_profile()
    return _current_profile


def reset_profile():
    """Reset to default profile."""
    global _current_profile
    _current_profile = None
