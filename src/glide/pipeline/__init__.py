"""Pipeline modules.

- collaborators: input, segmentation and tracking interfaces
- processor: extraction stages with contract checks
- orchestrator: main pipeline controller
"""

from glide.pipeline.collaborators import VolumeSource, HypothesisGenerator, GrowthLineTracker
from glide.pipeline.processor import GrowthLineProcessor
from glide.pipeline.orchestrator import PipelineOrchestrator, PipelineResult, summarize_tracks

__all__ = [
    "VolumeSource",
    "HypothesisGenerator",
    "GrowthLineTracker",
    "GrowthLineProcessor",
    "PipelineOrchestrator",
    "PipelineResult",
    "summarize_tracks",
]
