"""ParamConfig: Expert defaults for GLIDE pipeline.

This module defines the complete default configuration. ALL pipeline
parameters must have defaults here. No runtime code should define fallback
values - this is the single source of truth for defaults.

Runtime code NEVER reads from ParamConfig directly - it only receives InternalConfig.
"""

from typing import Literal, Optional
from pydantic import Field, field_validator, model_validator
from glide.schemas.base import GlideBaseModel


# =============================================================================
# Nested Configuration Models
# =============================================================================

class InputConfig(GlideBaseModel):
    """Image sequence input configuration."""
    input_dir: Optional[str] = None
    file_filter: str = Field("*.tif", description="Glob pattern selecting frames")


class RectifierConfig(GlideBaseModel):
    """Skew estimation on the first frame."""
    threshold_fraction: float = Field(
        0.33, gt=0, lt=1.0,
        description="Fraction of the frame's intensity range a channel top must exceed",
    )


class CropperConfig(GlideBaseModel):
    """Region-of-interest cropping."""
    variance_threshold: float = Field(0.005, ge=0, description="Row variance threshold")


class DetectionConfig(GlideBaseModel):
    """Growth line center detection."""
    sigma_x: float = Field(15.0, ge=0, description="Blur sigma across channels (px)")
    sigma_y: float = Field(3.0, ge=0, description="Blur sigma along channels (px)")
    offset_lateral: int = Field(5, ge=0, description="Maxima closer to left/right border are dropped")
    offset_top: int = Field(40, ge=0, description="Rows cut off at the top")
    offset_bottom: int = Field(10, ge=0, description="Rows cut off at the bottom")
    plateau_rule: Literal["strict", "center"] = "strict"

    @field_validator("sigma_x", "sigma_y", mode="before")
    @classmethod
    def coerce_sigma_to_float(cls, v):
        """Allow int or float for sigmas."""
        return float(v)


class BackgroundConfig(GlideBaseModel):
    """Background removal around detected growth lines."""
    template_xmin: int = Field(20, ge=0, description="Inner offset of background windows")
    template_xmax: int = Field(35, ge=1, description="Outer offset of background windows")
    x_offset: int = Field(35, ge=0, description="Half width of the zone background is removed from")

    @model_validator(mode="after")
    def check_template_window(self):
        """Background windows need a positive width."""
        if self.template_xmin >= self.template_xmax:
            raise ValueError(
                f"template_xmin ({self.template_xmin}) must be < template_xmax ({self.template_xmax})"
            )
        return self


class CorrespondenceConfig(GlideBaseModel):
    """Per-frame and cross-frame growth line stitching."""
    gap_policy: Literal["stop-at-first-gap", "skip-gaps"] = "stop-at-first-gap"
    alignment_tolerance: float = Field(
        10.0, gt=0,
        description="Max x distance (px) of matched centers before a diagnostic is raised",
    )


class SegmentationConfig(GlideBaseModel):
    """Settings consumed by the segmentation collaborator (passed through)."""
    sigma_x: float = Field(0.0, ge=0, description="Pre-segmentation blur sigma in x")
    sigma_y: float = Field(0.0, ge=0, description="Pre-segmentation blur sigma in y")
    min_cell_length: int = Field(18, ge=1, description="Minimal length of detected cells (px)")
    min_gap_contrast: float = Field(0.02, ge=0, description="Minimal contrast of a gap")


class StageConfig(GlideBaseModel):
    """Stage toggles."""
    rectify: bool = True
    crop: bool = True
    subtract_background: bool = False
    normalize_frames: bool = True


class OutputConfig(GlideBaseModel):
    """Output location configuration."""
    base_dir: Optional[str] = None
    run_name: str = "glide"


class LoggingConfig(GlideBaseModel):
    """Logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"


# =============================================================================
# Main ParamConfig
# =============================================================================

class ParamConfig(GlideBaseModel):
    """Complete expert configuration with all defaults.
    
    This is the single source of truth for all pipeline parameters.
    Every tunable parameter MUST have a default here.
    
    Usage
    -----
    This config is NOT used directly by runtime code. It serves as the
    base layer in config resolution:
    
        internal_cfg = resolve_config(param_cfg, user_cfg, cli_cfg)
    
    Runtime code only sees InternalConfig.
    """
    
    input: InputConfig = Field(default_factory=InputConfig)
    rectifier: RectifierConfig = Field(default_factory=RectifierConfig)
    cropper: CropperConfig = Field(default_factory=CropperConfig)
    detection: DetectionConfig = Field(default_factory=DetectionConfig)
    background: BackgroundConfig = Field(default_factory=BackgroundConfig)
    correspondence: CorrespondenceConfig = Field(default_factory=CorrespondenceConfig)
    segmentation: SegmentationConfig = Field(default_factory=SegmentationConfig)
    pipeline: StageConfig = Field(default_factory=StageConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
