"""UserConfig: Forgiving, minimal user-facing configuration.

This schema accepts user inputs in a variety of formats, with aliases
for the historical property names (e.g., SIGMA_GL_DETECTION_X → sigma_gl_detection_x,
GL_OFFSET_TOP → gl_offset_top).

UserConfig is intentionally minimal - users only specify what they want
to override from the expert defaults. Validation is lenient to accept
both uppercase and lowercase keys, integers where floats are expected, etc.
"""

from typing import Literal, Optional
from pydantic import Field, field_validator
from glide.schemas.base import GlideBaseModel


class UserRectifierConfig(GlideBaseModel):
    """User-facing rectifier config."""
    threshold_fraction: Optional[float] = None


class UserCropperConfig(GlideBaseModel):
    """User-facing cropper config."""
    variance_threshold: Optional[float] = None


class UserDetectionConfig(GlideBaseModel):
    """User-facing detection config."""
    sigma_x: Optional[float] = None
    sigma_y: Optional[float] = None
    offset_lateral: Optional[int] = None
    offset_top: Optional[int] = None
    offset_bottom: Optional[int] = None
    plateau_rule: Optional[str] = None

    @field_validator("plateau_rule", mode="before")
    @classmethod
    def normalize_rule(cls, v):
        """Normalize rule names to lowercase."""
        if isinstance(v, str):
            return v.lower().strip()
        return v


class UserBackgroundConfig(GlideBaseModel):
    """User-facing background removal config."""
    template_xmin: Optional[int] = None
    template_xmax: Optional[int] = None
    x_offset: Optional[int] = None


class UserCorrespondenceConfig(GlideBaseModel):
    """User-facing correspondence config."""
    gap_policy: Optional[str] = None
    alignment_tolerance: Optional[float] = None

    @field_validator("gap_policy", mode="before")
    @classmethod
    def normalize_policy(cls, v):
        """Accept 'skip_gaps' and 'SKIP-GAPS' style spellings."""
        if isinstance(v, str):
            return v.lower().strip().replace("_", "-")
        return v


class UserSegmentationConfig(GlideBaseModel):
    """User-facing segmentation pass-through config."""
    sigma_x: Optional[float] = None
    sigma_y: Optional[float] = None
    min_cell_length: Optional[int] = None
    min_gap_contrast: Optional[float] = None


class UserStageConfig(GlideBaseModel):
    """User-facing stage toggles."""
    rectify: Optional[bool] = None
    crop: Optional[bool] = None
    subtract_background: Optional[bool] = None
    normalize_frames: Optional[bool] = None


class UserConfig(GlideBaseModel):
    """User-facing configuration schema.
    
    Minimal, forgiving, and uses the historical property names as aliases.
    Users only specify what they want to override from ParamConfig defaults.
    
    This config is converted to internal overrides during resolution.
    
    Usage
    -----
        user_cfg = UserConfig(
            INPUT_DIR="/data/mm/exp01",
            SIGMA_GL_DETECTION_X=12,
            GL_OFFSET_TOP=30,
        )
        
        internal = resolve_config(param_cfg, user_cfg, cli_cfg)
    """
    
    # Input / output
    input_dir: Optional[str] = Field(None, alias="INPUT_DIR")
    file_filter: Optional[str] = Field(None, alias="FILE_FILTER")
    base_dir: Optional[str] = Field(None, alias="BASE_DIR")
    run_name: Optional[str] = Field(None, alias="RUN_NAME")
    
    # Line detection (flat aliases)
    sigma_gl_detection_x: Optional[float] = Field(None, alias="SIGMA_GL_DETECTION_X")
    sigma_gl_detection_y: Optional[float] = Field(None, alias="SIGMA_GL_DETECTION_Y")
    gl_offset_lateral: Optional[int] = Field(None, alias="GL_OFFSET_LATERAL")
    gl_offset_top: Optional[int] = Field(None, alias="GL_OFFSET_TOP")
    gl_offset_bottom: Optional[int] = Field(None, alias="GL_OFFSET_BOTTOM")
    
    # Background removal (flat aliases)
    bgrem_template_xmin: Optional[int] = Field(None, alias="BGREM_TEMPLATE_XMIN")
    bgrem_template_xmax: Optional[int] = Field(None, alias="BGREM_TEMPLATE_XMAX")
    bgrem_x_offset: Optional[int] = Field(None, alias="BGREM_X_OFFSET")
    
    # Segmentation pass-through (flat aliases)
    sigma_pre_segmentation_x: Optional[float] = Field(None, alias="SIGMA_PRE_SEGMENTATION_X")
    sigma_pre_segmentation_y: Optional[float] = Field(None, alias="SIGMA_PRE_SEGMENTATION_Y")
    min_cell_length: Optional[int] = Field(None, alias="MIN_CELL_LENGTH")
    min_gap_contrast: Optional[float] = Field(None, alias="MIN_GAP_CONTRAST")
    
    # Correspondence
    gap_policy: Optional[str] = Field(None, alias="GAP_POLICY")
    
    log_level: Optional[Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]] = Field(
        None, alias="LOG_LEVEL"
    )
    
    # Nested overrides (advanced users)
    rectifier: Optional[UserRectifierConfig] = None
    cropper: Optional[UserCropperConfig] = None
    detection: Optional[UserDetectionConfig] = None
    background: Optional[UserBackgroundConfig] = None
    correspondence: Optional[UserCorrespondenceConfig] = None
    segmentation: Optional[UserSegmentationConfig] = None
    pipeline: Optional[UserStageConfig] = None
    
    model_config = GlideBaseModel.model_config.copy()
    # Allow forgiving input dictionaries (ignore unknown legacy keys such as GUI_POS_X)
    model_config.update({"populate_by_name": True, "extra": "ignore"})

    @field_validator(
        "sigma_gl_detection_x", "sigma_gl_detection_y",
        "sigma_pre_segmentation_x", "sigma_pre_segmentation_y",
        "min_gap_contrast",
        mode="before",
    )
    @classmethod
    def coerce_numeric_fields(cls, v):
        """Accept int or float for numeric fields."""
        if v is not None:
            return float(v)
        return v

    @field_validator("gap_policy", mode="before")
    @classmethod
    def normalize_policy(cls, v):
        """Accept 'skip_gaps' and 'SKIP-GAPS' style spellings."""
        if isinstance(v, str):
            return v.lower().strip().replace("_", "-")
        return v
    
    def to_internal_overrides(self) -> dict:
        """Convert flat UserConfig to nested InternalConfig structure.
        
        Returns
        -------
        dict
            Nested dictionary matching InternalConfig structure
        """
        overrides = {}
        
        input_cfg = {}
        if self.input_dir is not None:
            input_cfg["input_dir"] = str(self.input_dir)
        if self.file_filter is not None:
            input_cfg["file_filter"] = self.file_filter
        if input_cfg:
            overrides["input"] = input_cfg
        
        output = {}
        if self.base_dir is not None:
            output["base_dir"] = str(self.base_dir)
        if self.run_name is not None:
            output["run_name"] = self.run_name
        if output:
            overrides["output"] = output
        
        if self.rectifier is not None:
            rectifier = self.rectifier.model_dump(exclude_none=True)
            if rectifier:
                overrides["rectifier"] = rectifier
        
        if self.cropper is not None:
            cropper = self.cropper.model_dump(exclude_none=True)
            if cropper:
                overrides["cropper"] = cropper
        
        # Detection section
        detection = {}
        if self.sigma_gl_detection_x is not None:
            detection["sigma_x"] = self.sigma_gl_detection_x
        if self.sigma_gl_detection_y is not None:
            detection["sigma_y"] = self.sigma_gl_detection_y
        if self.gl_offset_lateral is not None:
            detection["offset_lateral"] = self.gl_offset_lateral
        if self.gl_offset_top is not None:
            detection["offset_top"] = self.gl_offset_top
        if self.gl_offset_bottom is not None:
            detection["offset_bottom"] = self.gl_offset_bottom
        
        # Merge with explicit detection config
        if self.detection is not None:
            detection.update(self.detection.model_dump(exclude_none=True))
        
        if detection:
            overrides["detection"] = detection
        
        # Background section
        background = {}
        if self.bgrem_template_xmin is not None:
            background["template_xmin"] = self.bgrem_template_xmin
        if self.bgrem_template_xmax is not None:
            background["template_xmax"] = self.bgrem_template_xmax
        if self.bgrem_x_offset is not None:
            background["x_offset"] = self.bgrem_x_offset
        
        if self.background is not None:
            background.update(self.background.model_dump(exclude_none=True))
        
        if background:
            overrides["background"] = background
        
        # Segmentation section
        segmentation = {}
        if self.sigma_pre_segmentation_x is not None:
            segmentation["sigma_x"] = self.sigma_pre_segmentation_x
        if self.sigma_pre_segmentation_y is not None:
            segmentation["sigma_y"] = self.sigma_pre_segmentation_y
        if self.min_cell_length is not None:
            segmentation["min_cell_length"] = self.min_cell_length
        if self.min_gap_contrast is not None:
            segmentation["min_gap_contrast"] = self.min_gap_contrast
        
        if self.segmentation is not None:
            segmentation.update(self.segmentation.model_dump(exclude_none=True))
        
        if segmentation:
            overrides["segmentation"] = segmentation
        
        # Correspondence section
        correspondence = {}
        if self.gap_policy is not None:
            correspondence["gap_policy"] = self.gap_policy
        
        if self.correspondence is not None:
            correspondence.update(self.correspondence.model_dump(exclude_none=True))
        
        if correspondence:
            overrides["correspondence"] = correspondence
        
        if self.pipeline is not None:
            stages = self.pipeline.model_dump(exclude_none=True)
            if stages:
                overrides["pipeline"] = stages
        
        if self.log_level is not None:
            overrides["logging"] = {"level": self.log_level}
        
        return overrides
