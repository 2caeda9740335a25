"""Core growth line pipeline execution logic.

This module contains the actual pipeline runner and its argument parser.
Scripts are thin wrappers; this is the real implementation.
"""

import sys
import json
import argparse
import importlib
import importlib.util
import logging
from pathlib import Path
from typing import Optional, Dict, Any

from glide.setup_directories import check_input_folder, setup_output_directories
from glide.pipeline.orchestrator import PipelineOrchestrator, PipelineResult
from glide.schemas import resolve_config, ParamConfig, UserConfig, CLIConfig


logger = logging.getLogger(__name__)


def load_user_config_dict(config_path: str) -> dict:
    """Load user config dict from Python file.
    
    Returns the raw dict before Pydantic validation.
    
    Parameters
    ----------
    config_path : str
        Path to user config Python file containing CONFIG dict.
        
    Returns
    -------
    dict
        Raw user configuration dictionary.
        
    Raises
    ------
    FileNotFoundError
        If config file does not exist.
    ValueError
        If no CONFIG dict found in file.
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config not found: {path}")
    
    spec = importlib.util.spec_from_file_location("glide_user_config", path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    
    config = getattr(module, "CONFIG", None)
    if isinstance(config, dict):
        return config
    
    raise ValueError(f"No CONFIG dict found in {path}")


def load_collaborator(target: str, *args):
    """Instantiate a collaborator from a ``"package.module:ClassName"`` string.

    Extra positional arguments are passed to the class constructor.
    """
    module_name, sep, class_name = target.partition(":")
    if not sep or not module_name or not class_name:
        raise ValueError(f"Collaborator must look like 'module:ClassName', got {target!r}")
    cls = getattr(importlib.import_module(module_name), class_name)
    return cls(*args)


def run_glide_pipeline(
    user_config_path: str,
    cli_args: Optional[Dict[str, Any]] = None,
    segmenter: Optional[str] = None,
    tracker: Optional[str] = None,
    verbose: bool = False
) -> PipelineResult:
    """Execute the growth line pipeline.
    
    This is the core pipeline execution function. It:
    1. Loads and resolves configuration (Param < User < CLI)
    2. Checks the input folder and sets up output directories
    3. Instantiates the optional collaborators
    4. Runs the pipeline orchestrator once
    
    Parameters
    ----------
    user_config_path : str
        Path to user config file (Python file with CONFIG dict).
        
    cli_args : dict, optional
        CLI argument overrides. Keys: input_dir, base_dir, file_filter,
        rectify, crop, subtract_background, log_level. All optional.
        
    segmenter, tracker : str, optional
        Collaborators as ``"module:ClassName"``. The segmenter class is
        constructed with ``config.segmentation``, the tracker without
        arguments.
        
    verbose : bool, optional
        If True, enable DEBUG logging and print full resolved config.
        
    Returns
    -------
    PipelineResult
        
    Raises
    ------
    FileNotFoundError
        If user_config_path does not exist.
    ValueError
        If configuration validation fails or no input folder is configured.
    NotADirectoryError
        If the input folder is not a directory.
    PermissionError
        If the output folder is not writable.
        
    Examples
    --------
    Run with user config only::
    
        run_glide_pipeline("config/my_config.py")
        
    Run with CLI overrides::
    
        run_glide_pipeline(
            "config/my_config.py",
            cli_args={"input_dir": "/data/exp01", "rectify": False},
        )
    """
    param_cfg = ParamConfig()  # Expert defaults
    
    user_cfg_dict = load_user_config_dict(user_config_path)
    user_cfg = UserConfig.model_validate(user_cfg_dict)
    
    cli_args = dict(cli_args or {})
    if verbose and cli_args.get("log_level") is None:
        cli_args["log_level"] = "DEBUG"
    
    # Filter None values
    cli_dict = {k: v for k, v in cli_args.items() if v is not None}
    cli_cfg = CLIConfig.model_validate(cli_dict) if cli_dict else CLIConfig()
    
    # Resolve to internal config (Param < User < CLI)
    config = resolve_config(param_cfg, user_cfg, cli_cfg)
    
    if config.input.input_dir is None:
        raise ValueError("No input folder: set INPUT_DIR in the config or pass --input-dir")
    input_dir = check_input_folder(config.input.input_dir)
    output_dirs = setup_output_directories(config.output.base_dir)
    
    # Resolved paths become part of the frozen config
    config = config.model_copy(update={
        "input": config.input.model_copy(update={"input_dir": str(input_dir)}),
        "output": config.output.model_copy(update={"base_dir": str(output_dirs["base"])}),
    })
    
    print(f"\n{'='*60}")
    print("glide growth line pipeline")
    print('='*60)
    print(f"Config: {user_config_path}")
    print(f"Input:  {config.input.input_dir} ({config.input.file_filter})")
    print(f"Output: {config.output.base_dir}")
    print('='*60)

    if verbose:
        print("\nFull Internal Configuration:")
        print(json.dumps(config.model_dump(), indent=2))
        print('='*60)
    
    seg = load_collaborator(segmenter, config.segmentation) if segmenter else None
    trk = load_collaborator(tracker) if tracker else None
    
    orchestrator = PipelineOrchestrator(config, segmenter=seg, tracker=trk)
    return orchestrator.run()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run the glide growth line pipeline")
    parser.add_argument("config", help="Path to user config file")
    parser.add_argument("--input-dir", help="Folder with the TIFF image sequence")
    parser.add_argument("--output-dir", dest="base_dir", help="Output directory")
    parser.add_argument("--filter", dest="file_filter", help="Glob pattern selecting the images")
    parser.add_argument("--no-rectify", dest="rectify", action="store_false", default=None,
                        help="Skip skew correction")
    parser.add_argument("--no-crop", dest="crop", action="store_false", default=None,
                        help="Skip ROI cropping")
    parser.add_argument("--subtract-background", action="store_true", default=None,
                        help="Remove per-channel background")
    parser.add_argument("--segmenter", help="Segmentation collaborator as module:ClassName")
    parser.add_argument("--tracker", help="Tracking collaborator as module:ClassName")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose (DEBUG) output")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    cli_args = {
        "input_dir": args.input_dir,
        "base_dir": args.base_dir,
        "file_filter": args.file_filter,
        "rectify": args.rectify,
        "crop": args.crop,
        "subtract_background": args.subtract_background,
    }

    try:
        result = run_glide_pipeline(
            args.config,
            cli_args=cli_args,
            segmenter=args.segmenter,
            tracker=args.tracker,
            verbose=args.verbose,
        )
    except (FileNotFoundError, NotADirectoryError) as e:
        print(f"Input error: {e}", file=sys.stderr)
        return 1
    except PermissionError as e:
        print(f"Output error: {e}", file=sys.stderr)
        return 2
    except KeyboardInterrupt:
        print("\nInterrupted by user")
        return 130

    print(f"\nGrowth lines: {len(result.growth_lines)}")
    print(result.summary.groupby("line")["detected"].sum().to_string())
    return 0


if __name__ == "__main__":
    sys.exit(main())
