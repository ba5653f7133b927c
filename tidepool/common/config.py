"""
Configuration Loader for Tidepool

Loads YAML configuration files shipped in tidepool/config/ and validates them.
Provides the single source of truth for the interest vocabulary, synonym
table, source reliability weights, presence timings and heat palette.

The directory can be overridden with TIDEPOOL_CONFIG_DIR.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Literal

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from tidepool.utils import constants as c
from tidepool.utils.env import env_str
from tidepool.utils.error_handling import ConfigError

logger = logging.getLogger(__name__)

CONFIG_DIR = Path(__file__).resolve().parent.parent / "config"

INTEREST_RULEBOOK_FILE = "interest_rulebook.yml"
REPORTING_FILE = "reporting.yml"


class InterestRulebook(BaseModel):
    """
    Interest rulebook: closed vocabulary plus the data tables that feed it.

    Attributes:
        version: Rulebook version (bump when the vocabulary changes)
        vocabulary: Ordered closed vocabulary; index order is the vector layout
        synonyms: Raw tag -> canonical tag
        source_weights: Source name -> reliability scale
        default_source_weight: Scale for sources missing from source_weights
        categories: Place category -> interest tags
        age_brackets: Age bracket -> signed tag weights
        genres: Normalised music genre -> interest tags
    """
    version: str = "unknown"
    vocabulary: List[str] = Field(..., min_length=1)
    synonyms: Dict[str, str] = Field(default_factory=dict)
    source_weights: Dict[str, float] = Field(default_factory=dict)
    default_source_weight: float = Field(default=c.DEFAULT_SOURCE_WEIGHT, ge=0.0)
    categories: Dict[str, List[str]] = Field(default_factory=dict)
    age_brackets: Dict[str, Dict[str, float]] = Field(default_factory=dict)
    genres: Dict[str, List[str]] = Field(default_factory=dict)

    @field_validator('vocabulary')
    @classmethod
    def validate_vocabulary(cls, v: List[str]) -> List[str]:
        """Vocabulary terms must be lowercase and unique."""
        seen = set()
        for term in v:
            if term != term.strip().lower():
                raise ValueError(f"vocabulary term '{term}' must be lowercase without padding")
            if term in seen:
                raise ValueError(f"duplicate vocabulary term '{term}'")
            seen.add(term)
        return v

    @field_validator('source_weights')
    @classmethod
    def validate_source_weights(cls, v: Dict[str, float]) -> Dict[str, float]:
        """Reliability scales are non-negative; signed weights belong to the tags."""
        for name, weight in v.items():
            if weight < 0:
                raise ValueError(f"source weight for '{name}' must be >= 0, got {weight}")
        return v


class TilingSettings(BaseModel):
    meters_per_tile: int = Field(default=c.DEFAULT_METERS_PER_TILE, gt=0)


class HomeGateSettings(BaseModel):
    inner_radius_m: float = Field(default=c.DEFAULT_HOME_INNER_RADIUS_M, gt=0)
    outer_radius_m: float = Field(default=c.DEFAULT_HOME_OUTER_RADIUS_M, gt=0)

    @model_validator(mode='after')
    def validate_band(self) -> "HomeGateSettings":
        if self.inner_radius_m >= self.outer_radius_m:
            raise ValueError("home_gate.inner_radius_m must be smaller than outer_radius_m")
        return self


class ReporterSettings(BaseModel):
    min_interval_s: float = Field(default=c.DEFAULT_MIN_INTERVAL_SECONDS, gt=0)
    max_interval_s: float = Field(default=c.DEFAULT_MAX_INTERVAL_SECONDS, gt=0)
    per_tile_min_interval_s: float = Field(default=c.DEFAULT_PER_TILE_MIN_INTERVAL_SECONDS, ge=0)
    throttle_ttl_s: float = Field(default=c.DEFAULT_THROTTLE_TTL_SECONDS, gt=0)
    max_tracked_tiles: int = Field(default=c.DEFAULT_MAX_TRACKED_TILES, gt=0)

    @model_validator(mode='after')
    def validate_intervals(self) -> "ReporterSettings":
        if self.min_interval_s > self.max_interval_s:
            raise ValueError("reporter.min_interval_s must not exceed max_interval_s")
        if self.throttle_ttl_s < self.per_tile_min_interval_s:
            raise ValueError("reporter.throttle_ttl_s must cover per_tile_min_interval_s")
        return self


class HeatWeightSettings(BaseModel):
    mode: Literal["linear", "sigmoid"] = "linear"
    slope: float = c.DEFAULT_HEAT_WEIGHT_SLOPE
    intercept: float = c.DEFAULT_HEAT_WEIGHT_INTERCEPT
    floor: float = Field(default=c.DEFAULT_HEAT_WEIGHT_FLOOR, ge=0.0, le=1.0)
    steepness: float = Field(default=c.DEFAULT_SIGMOID_STEEPNESS, gt=0)
    midpoint: float = c.DEFAULT_SIGMOID_MIDPOINT


class AlphaRamp(BaseModel):
    base: float = Field(..., ge=0.0)
    per_intensity: float = Field(..., ge=0.0)


class HeatRenderingSettings(BaseModel):
    """Palette and alpha stops for heat blob gradients."""
    inner_color: str = "#9CE3A3"
    outer_color: str = "#A6E4F8"
    gradient_stops: List[float] = Field(default_factory=lambda: list(c.GRADIENT_STOPS))
    inner_alpha: AlphaRamp = AlphaRamp(base=0.24, per_intensity=0.45)
    mid_alpha: AlphaRamp = AlphaRamp(base=0.12, per_intensity=0.22)
    outer_alpha: float = Field(default=0.05, ge=0.0, le=1.0)
    light_mode_boost: float = Field(default=0.12, ge=0.0)
    light_mode_outer_alpha: float = Field(default=0.10, ge=0.0, le=1.0)
    high_contrast_boost: float = Field(default=0.22, ge=0.0)
    high_contrast_outer_boost: float = Field(default=0.05, ge=0.0)
    alpha_ceiling: float = Field(default=c.DEFAULT_ALPHA_CEILING, gt=0.0, le=1.0)

    @field_validator('inner_color', 'outer_color')
    @classmethod
    def validate_color(cls, v: str) -> str:
        body = v[1:] if v.startswith("#") else v
        if len(body) != 6:
            raise ValueError(f"color '{v}' must be a 6-digit hex string")
        int(body, 16)
        return "#" + body.upper()

    @field_validator('gradient_stops')
    @classmethod
    def validate_stops(cls, v: List[float]) -> List[float]:
        if len(v) != 3 or v != sorted(v) or v[0] != 0.0 or v[-1] != 1.0:
            raise ValueError("gradient_stops must be three ascending stops from 0.0 to 1.0")
        return v


class SyntheticVenue(BaseModel):
    name: str
    lat: float = Field(..., ge=-90.0, le=90.0)
    lon: float = Field(..., ge=-180.0, le=180.0)
    base_intensity: float = Field(default=0.7, ge=0.0, le=1.0)


class SyntheticVenueSettings(BaseModel):
    per_point_radius_m: float = Field(default=c.DEFAULT_PER_POINT_RADIUS_M, gt=0)
    venues: List[SyntheticVenue] = Field(default_factory=list)


class ReportingConfig(BaseModel):
    """Presence reporting and heat rendering configuration."""
    version: str = "unknown"
    tiling: TilingSettings = TilingSettings()
    home_gate: HomeGateSettings = HomeGateSettings()
    reporter: ReporterSettings = ReporterSettings()
    heat_weight: HeatWeightSettings = HeatWeightSettings()
    heat_rendering: HeatRenderingSettings = HeatRenderingSettings()
    synthetic_venues: SyntheticVenueSettings = SyntheticVenueSettings()


def get_config_dir() -> Path:
    """Resolve the configuration directory (TIDEPOOL_CONFIG_DIR wins)."""
    override = env_str("TIDEPOOL_CONFIG_DIR")
    return Path(override) if override else CONFIG_DIR


def _load_yaml(filename: str) -> Dict[str, Any]:
    path = get_config_dir() / filename
    logger.debug(f"Loading configuration from: {path.absolute()}")

    if not path.exists():
        logger.error(f"{filename} not found at {path.absolute()}")
        raise FileNotFoundError(
            f"{filename} not found at {path}. "
            f"Ensure the config directory contains the required YAML files."
        )

    with path.open("r", encoding="utf-8") as f:
        document = yaml.safe_load(f)

    if not isinstance(document, dict):
        raise ConfigError(f"{filename} must contain a mapping at the top level")
    return document


def load_interest_rulebook() -> InterestRulebook:
    """
    Load interest_rulebook.yml.

    Returns:
        InterestRulebook with vocabulary, synonyms, source weights,
        categories, age brackets and genre mappings

    Raises:
        FileNotFoundError: If interest_rulebook.yml not found
        yaml.YAMLError: If YAML parsing fails
        ConfigError: If the document fails validation

    Example:
        >>> rulebook = load_interest_rulebook()
        >>> assert "cafe" in rulebook.vocabulary
    """
    document = _load_yaml(INTEREST_RULEBOOK_FILE)
    try:
        rulebook = InterestRulebook.model_validate(document)
    except ValidationError as e:
        raise ConfigError(f"Invalid {INTEREST_RULEBOOK_FILE}: {e}") from e

    unknown = sorted(
        target for target in set(rulebook.synonyms.values())
        if target not in set(rulebook.vocabulary)
    )
    if unknown:
        logger.warning(f"Synonyms map to terms outside the vocabulary: {unknown}")

    logger.info(
        f"Loaded interest rulebook version {rulebook.version} "
        f"({len(rulebook.vocabulary)} terms, {len(rulebook.synonyms)} synonyms)"
    )
    return rulebook


def load_reporting() -> ReportingConfig:
    """
    Load reporting.yml (presence timings and heat presentation).

    Returns:
        ReportingConfig with tiling, home gate, reporter, heat weight,
        heat rendering and synthetic venue sections

    Raises:
        FileNotFoundError: If reporting.yml not found
        yaml.YAMLError: If YAML parsing fails
        ConfigError: If the document fails validation

    Example:
        >>> reporting = load_reporting()
        >>> assert reporting.heat_rendering.inner_color.startswith("#")
    """
    document = _load_yaml(REPORTING_FILE)
    try:
        config = ReportingConfig.model_validate(document)
    except ValidationError as e:
        raise ConfigError(f"Invalid {REPORTING_FILE}: {e}") from e

    logger.info(f"Loaded reporting config version {config.version}")
    return config
