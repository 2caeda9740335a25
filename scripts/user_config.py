"""glide User Configuration.

This is the user-facing configuration file. Modify settings here to customize
the pipeline behavior. Expert defaults live in glide.schemas.param.

Usage:
    python scripts/run_glide_pipeline.py scripts/user_config.py
    python scripts/run_glide_pipeline.py scripts/user_config.py --input-dir /data/exp02
"""

CONFIG = {
    # ========================================================================
    # INPUT & OUTPUT
    # ========================================================================
    "INPUT_DIR": None,        # Folder with one TIFF per time point
    "FILE_FILTER": "*.tif",   # Glob selecting the frames
    "BASE_DIR": None,         # All outputs go here (default ./output)
    "RUN_NAME": "glide",

    # ========================================================================
    # RECTIFICATION & CROPPING
    # ========================================================================
    "rectifier": {"threshold_fraction": 0.33},  # Channel tops exceed this share of the range
    "cropper": {"variance_threshold": 0.005},   # Raise for raw 16-bit stacks

    # ========================================================================
    # GROWTH LINE DETECTION
    # ========================================================================
    "SIGMA_GL_DETECTION_X": 15.0,
    "SIGMA_GL_DETECTION_Y": 3.0,
    "GL_OFFSET_LATERAL": 5,   # Ignore maxima this close to the left/right border
    "GL_OFFSET_TOP": 40,      # Rows skipped at the top
    "GL_OFFSET_BOTTOM": 10,   # Rows skipped at the bottom
    "GAP_POLICY": "stop-at-first-gap",  # or "skip-gaps"

    # ========================================================================
    # BACKGROUND REMOVAL
    # ========================================================================
    "BGREM_TEMPLATE_XMIN": 20,
    "BGREM_TEMPLATE_XMAX": 35,
    "BGREM_X_OFFSET": 35,

    # ========================================================================
    # SEGMENTATION (passed to the segmentation collaborator)
    # ========================================================================
    "SIGMA_PRE_SEGMENTATION_X": 0.0,
    "SIGMA_PRE_SEGMENTATION_Y": 0.0,
    "MIN_CELL_LENGTH": 18,
    "MIN_GAP_CONTRAST": 0.02,

    # ========================================================================
    # STAGES
    # ========================================================================
    "pipeline": {
        "rectify": True,
        "crop": True,
        "subtract_background": False,
        "normalize_frames": True,
    },

    "LOG_LEVEL": "INFO",
}
