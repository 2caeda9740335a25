"""CLIConfig: Command-line operational overrides.

Minimal configuration for operational parameters that commonly change
between runs: input folder, file filter, output path, stage toggles, verbosity.

This schema handles command-line arguments parsed by argparse.
"""

from typing import Literal, Optional
from glide.schemas.base import GlideBaseModel


class CLIConfig(GlideBaseModel):
    """Command-line configuration overrides.
    
    Operational-only settings that override user and param configs.
    Highest priority in config resolution.
    
    Usage
    -----
        cli_cfg = CLIConfig(
            input_dir="/data/mm/exp01",
            base_dir="/scratch/glide_output",
            file_filter="*_c1.tif",
        )
        
        internal = resolve_config(param_cfg, user_cfg, cli_cfg)
    """
    
    input_dir: Optional[str] = None
    base_dir: Optional[str] = None
    file_filter: Optional[str] = None
    rectify: Optional[bool] = None
    crop: Optional[bool] = None
    subtract_background: Optional[bool] = None
    log_level: Optional[Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]] = None
    
    def to_internal_overrides(self) -> dict:
        """Convert CLI config to internal config structure.
        
        Returns
        -------
        dict
            Nested dictionary matching InternalConfig structure
        """
        overrides = {}
        
        input_overrides = {}
        if self.input_dir is not None:
            input_overrides["input_dir"] = str(self.input_dir)
        if self.file_filter is not None:
            input_overrides["file_filter"] = self.file_filter
        if input_overrides:
            overrides["input"] = input_overrides
        
        if self.base_dir is not None:
            overrides["output"] = {"base_dir": str(self.base_dir)}
        
        stages = {}
        if self.rectify is not None:
            stages["rectify"] = self.rectify
        if self.crop is not None:
            stages["crop"] = self.crop
        if self.subtract_background is not None:
            stages["subtract_background"] = self.subtract_background
        if stages:
            overrides["pipeline"] = stages
        
        if self.log_level is not None:
            overrides["logging"] = {"level": self.log_level}
        
        return overrides
