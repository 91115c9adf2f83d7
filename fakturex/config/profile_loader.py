"""Profile loader for configurable extraction thresholds and weights."""

import copy
import os
from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

DEFAULT_ZONES: Dict[str, float] = {
    "header_zone": 0.4,  # fraction of page height scanned first for header fields
}

DEFAULT_TOLERANCES: Dict[str, float] = {
    "amount": 0.01,  # gross vs net + vat per VAT bucket, in currency units
}

DEFAULT_LAYOUT: Dict[str, float] = {
    "line_overlap_ratio": 0.5,  # of the shorter token's height
    "min_column_gap": 15.0,  # points between table column left edges
    "word_gap": 5.0,  # tokens closer than this form one table cell phrase
    "kmeans_max_iterations": 20,
}

DEFAULT_RULE_FACTORS: Dict[str, float] = {
    "label": 1.0,
    "positional": 0.7,
}

DEFAULT_WEIGHTS: Dict[str, float] = {
    "header": 0.3,
    "issuer_identifier": 0.25,
    "summary_totals": 0.35,
    "receiver": 0.1,
}

DEFAULT_PENALTIES: Dict[str, float] = {
    "inconsistent_bucket": 0.8,
    "invalid_identifier": 0.5,
}

DEFAULT_BATCH: Dict[str, Any] = {
    "max_workers": None,
    "continue_on_error": True,
}

MAX_WORKERS_ENV = "FAKTUREX_MAX_WORKERS"


def _merged(defaults: Dict[str, Any], overrides: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    merged = copy.deepcopy(defaults)
    merged.update(overrides or {})
    return merged


@dataclass(frozen=True)
class ExtractionProfile:
    """Configuration profile for extraction behavior.

    Shared read-only by every worker of a batch; never mutate a loaded
    profile, build a new one with from_dict instead.
    """

    name: str
    description: str = ""
    zones: Dict[str, float] = field(default_factory=lambda: dict(DEFAULT_ZONES))
    tolerances: Dict[str, float] = field(default_factory=lambda: dict(DEFAULT_TOLERANCES))
    layout: Dict[str, float] = field(default_factory=lambda: dict(DEFAULT_LAYOUT))
    rule_factors: Dict[str, float] = field(default_factory=lambda: dict(DEFAULT_RULE_FACTORS))
    weights: Dict[str, float] = field(default_factory=lambda: dict(DEFAULT_WEIGHTS))
    penalties: Dict[str, float] = field(default_factory=lambda: dict(DEFAULT_PENALTIES))
    batch: Dict[str, Any] = field(default_factory=lambda: dict(DEFAULT_BATCH))

    def __post_init__(self):
        """Validate weights and factors."""
        for key, value in self.weights.items():
            if value < 0:
                raise ValueError(f"weight '{key}' must be >= 0, got {value}")

        if sum(self.weights.values()) <= 0:
            raise ValueError("At least one aggregator weight must be positive")

        for key, value in {**self.rule_factors, **self.penalties}.items():
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"factor '{key}' must be between 0.0 and 1.0, got {value}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExtractionProfile":
        """Create ExtractionProfile from dictionary; missing keys keep defaults."""
        return cls(
            name=data.get("name", "default"),
            description=data.get("description", ""),
            zones=_merged(DEFAULT_ZONES, data.get("zones")),
            tolerances=_merged(DEFAULT_TOLERANCES, data.get("tolerances")),
            layout=_merged(DEFAULT_LAYOUT, data.get("layout")),
            rule_factors=_merged(DEFAULT_RULE_FACTORS, data.get("rule_factors")),
            weights=_merged(DEFAULT_WEIGHTS, data.get("weights")),
            penalties=_merged(DEFAULT_PENALTIES, data.get("penalties")),
            batch=_merged(DEFAULT_BATCH, data.get("batch")),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "name": self.name,
            "description": self.description,
            "zones": dict(self.zones),
            "tolerances": dict(self.tolerances),
            "layout": dict(self.layout),
            "rule_factors": dict(self.rule_factors),
            "weights": dict(self.weights),
            "penalties": dict(self.penalties),
            "batch": dict(self.batch),
        }

    @property
    def amount_tolerance(self) -> Decimal:
        return Decimal(str(self.tolerances["amount"]))

    @property
    def label_factor(self) -> float:
        return float(self.rule_factors["label"])

    @property
    def positional_factor(self) -> float:
        return float(self.rule_factors["positional"])

    def max_workers(self) -> int:
        """Worker pool size: env override, then profile, then CPU count."""
        env_value = os.getenv(MAX_WORKERS_ENV)
        if env_value:
            try:
                return max(1, int(env_value))
            except ValueError:
                raise ValueError(f"{MAX_WORKERS_ENV} must be an integer, got {env_value!r}")
        configured = self.batch.get("max_workers")
        if configured:
            return max(1, int(configured))
        return os.cpu_count() or 1


def get_profiles_dir() -> Path:
    """Get directory containing profile YAML files.

    Returns:
        Path to profiles directory
    """
    # fakturex/config/profile_loader.py -> fakturex/config -> fakturex -> root
    project_root = Path(__file__).resolve().parent.parent.parent
    return project_root / "configs" / "profiles"


def load_profile(profile_name: str = "default") -> ExtractionProfile:
    """Load a configuration profile by name or by path to a YAML file.

    Args:
        profile_name: Name of profile (without .yaml extension) or a file path

    Returns:
        ExtractionProfile object

    Raises:
        FileNotFoundError: If profile file doesn't exist
        ValueError: If profile file is invalid
    """
    candidate = Path(profile_name)
    if candidate.suffix in (".yaml", ".yml"):
        profile_path = candidate
    else:
        profile_path = get_profiles_dir() / f"{profile_name}.yaml"

    if not profile_path.exists():
        raise FileNotFoundError(f"Profile not found: {profile_name} (expected at {profile_path})")

    try:
        with open(profile_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in profile {profile_name}: {e}") from e

    if not data:
        raise ValueError(f"Profile file is empty: {profile_path}")

    if not isinstance(data, dict):
        raise ValueError(f"Profile {profile_name} must be a mapping, got {type(data).__name__}")

    return ExtractionProfile.from_dict(data)


def list_available_profiles() -> list:
    """List all available profile names (without .yaml extension)."""
    profiles_dir = get_profiles_dir()

    if not profiles_dir.exists():
        return ["default"]

    profiles = [profile_file.stem for profile_file in profiles_dir.glob("*.yaml")]
    return sorted(profiles) if profiles else ["default"]


def get_default_profile() -> ExtractionProfile:
    """Get default profile (always available)."""
    try:
        return load_profile("default")
    except FileNotFoundError:
        return ExtractionProfile(name="default", description="Built-in defaults")
