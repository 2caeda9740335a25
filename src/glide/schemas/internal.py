"""InternalConfig: Authoritative runtime configuration.

This is the ONLY config schema that runtime code sees. It is fully validated,
normalized, and contains NO optional fields that processing code depends on.

All .get() calls, fallback defaults, and validation logic are FORBIDDEN in
runtime code - everything is explicit here.
"""

from typing import Literal, Optional
from pydantic import ConfigDict, Field, model_validator
from glide.schemas.base import GlideBaseModel


class FrozenModel(GlideBaseModel):
    """Runtime sections are immutable once resolved."""

    model_config = ConfigDict(
        extra='forbid',
        use_enum_values=True,
        str_strip_whitespace=True,
        frozen=True,
    )


# =============================================================================
# Nested Configuration Models (Runtime)
# =============================================================================

class InternalInputConfig(FrozenModel):
    """Runtime input configuration.
    
    Note: input_dir may be None while merging; the CLI validates it before
    the pipeline starts. Callers that supply their own VolumeSource never
    need it.
    """
    input_dir: Optional[str]
    file_filter: str


class InternalRectifierConfig(FrozenModel):
    """Runtime rectifier configuration."""
    threshold_fraction: float = Field(gt=0, lt=1.0)


class InternalCropperConfig(FrozenModel):
    """Runtime cropper configuration."""
    variance_threshold: float = Field(ge=0)


class InternalDetectionConfig(FrozenModel):
    """Runtime detection configuration."""
    sigma_x: float
    sigma_y: float
    offset_lateral: int
    offset_top: int
    offset_bottom: int
    plateau_rule: Literal["strict", "center"]


class InternalBackgroundConfig(FrozenModel):
    """Runtime background removal configuration."""
    template_xmin: int
    template_xmax: int
    x_offset: int

    @model_validator(mode="after")
    def check_template_window(self):
        """Background windows need a positive width."""
        if self.template_xmin >= self.template_xmax:
            raise ValueError(
                f"template_xmin ({self.template_xmin}) must be < template_xmax ({self.template_xmax})"
            )
        return self


class InternalCorrespondenceConfig(FrozenModel):
    """Runtime correspondence configuration."""
    gap_policy: Literal["stop-at-first-gap", "skip-gaps"]
    alignment_tolerance: float = Field(gt=0)


class InternalSegmentationConfig(FrozenModel):
    """Runtime pass-through settings for the segmentation collaborator."""
    sigma_x: float
    sigma_y: float
    min_cell_length: int
    min_gap_contrast: float


class InternalStageConfig(FrozenModel):
    """Runtime stage toggles."""
    rectify: bool
    crop: bool
    subtract_background: bool
    normalize_frames: bool


class InternalOutputConfig(FrozenModel):
    """Runtime output configuration."""
    base_dir: Optional[str]
    run_name: str


class InternalLoggingConfig(FrozenModel):
    """Runtime logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


# =============================================================================
# Main InternalConfig
# =============================================================================

class InternalConfig(FrozenModel):
    """Authoritative runtime configuration.
    
    This is the ONLY configuration schema that processing code sees.
    It is fully validated, immutable, and contains explicit values for
    all parameters.
    
    Usage
    -----
    Runtime modules receive InternalConfig and access fields directly:
    
        def __init__(self, config: InternalConfig):
            self.sigma_x = config.detection.sigma_x  # NOT .get()
            self.gap_policy = config.correspondence.gap_policy
    
    Rules
    -----
    - NO .get() calls
    - NO fallback defaults
    - NO type checking
    - NO validation
    
    All of that happens during config resolution, not in runtime code.
    """
    
    input: InternalInputConfig
    rectifier: InternalRectifierConfig
    cropper: InternalCropperConfig
    detection: InternalDetectionConfig
    background: InternalBackgroundConfig
    correspondence: InternalCorrespondenceConfig
    segmentation: InternalSegmentationConfig
    pipeline: InternalStageConfig
    output: InternalOutputConfig
    logging: InternalLoggingConfig
    
    model_config = ConfigDict(
        extra='forbid',
        validate_assignment=True,
        use_enum_values=True,
        str_strip_whitespace=True,
        frozen=True,  # Immutable after construction
    )
