"""Formal pipeline invariants.

This file documents what each stage MUST produce. This is architecture, not code.
Use this file as a reviewer anchor and system reference.
"""

PIPELINE_INVARIANTS = {
    "load": [
        "Volume is a float64 DataArray with dims (t, y, x)",
        "All frames share identical width and height",
        "Frame order follows the sorted file names",
    ],

    "rectify": [
        "Output is a new volume, never smaller than the input in x or y",
        "attrs['skew_slope'] holds the fitted channel-top slope",
        "Background outside the original frame is 0.0",
    ],

    "crop": [
        "Output is a new volume restricted to [left, right) x [top, bottom)",
        "attrs['crop_box'] holds (left, top, right, bottom) in rectified coordinates",
    ],

    "detection": [
        "One FrameMaxima per frame, one (possibly empty) row list per image row",
        "Maxima per row strictly increasing in x",
        "Rows outside the top/bottom offsets are empty",
        "Anchor row has the largest surviving maxima count",
    ],

    "correspondence": [
        "Every GrowthLine has exactly one LineFrame per frame, in frame order",
        "LineFrame points sorted by y",
        "Non-empty LineFrames of one frame are ordered left to right, or a crossing diagnostic is recorded",
    ],

    "normalization": [
        "Every processed zone/frame lies in [0, 1]",
        "Constant zones/frames are mapped to 0",
    ],
}

# Which stages are optional vs required
STAGE_REQUIREMENTS = {
    "load": "REQUIRED",
    "rectify": "OPTIONAL",         # pipeline.rectify
    "crop": "OPTIONAL",            # pipeline.crop
    "detection": "REQUIRED",
    "correspondence": "REQUIRED",
    "background": "OPTIONAL",      # pipeline.subtract_background
    "normalization": "OPTIONAL",   # pipeline.normalize_frames
    "segmentation": "OPTIONAL",    # only with a HypothesisGenerator
    "tracking": "OPTIONAL",        # only with a GrowthLineTracker
}
