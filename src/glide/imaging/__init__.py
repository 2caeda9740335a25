"""Image processing stages of the growth line extraction."""

from glide.imaging.rectifier import GeometricRectifier
from glide.imaging.cropper import ROICropper
from glide.imaging.line_detector import FrameMaxima, LineDetector, find_local_maxima
from glide.imaging.correspondence import AlignmentDiagnostic, CorrespondenceBuilder
from glide.imaging.background import BackgroundNormalizer
from glide.imaging.annotation import make_annotation_buffer, annotate_line_centers
from glide.imaging.loader import TiffSequenceLoader

__all__ = [
    "GeometricRectifier",
    "ROICropper",
    "FrameMaxima",
    "LineDetector",
    "find_local_maxima",
    "AlignmentDiagnostic",
    "CorrespondenceBuilder",
    "BackgroundNormalizer",
    "make_annotation_buffer",
    "annotate_line_centers",
    "TiffSequenceLoader",
]
