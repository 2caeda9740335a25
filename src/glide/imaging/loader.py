"""TIFF sequence loading.

The default input source: a folder of single-frame TIFF images, one per
time point, ordered by file name.
"""

import logging
from pathlib import Path
from typing import List, TYPE_CHECKING

import numpy as np
import tifffile
import xarray as xr

from glide.core.volume import make_volume
from glide.pipeline.collaborators import VolumeSource

if TYPE_CHECKING:
    from glide.schemas import InternalConfig

__all__ = ['TiffSequenceLoader']

logger = logging.getLogger(__name__)


class TiffSequenceLoader(VolumeSource):
    """Loads a sorted sequence of same-sized 2-D TIFF images as one volume.

    Parameters
    ----------
    folder : str or Path
        Directory holding the images.
    pattern : str
        Glob pattern selecting the images, e.g. ``"*.tif"``.
    """

    def __init__(self, folder, pattern: str = "*.tif"):
        self.folder = Path(folder)
        self.pattern = pattern

    @classmethod
    def from_config(cls, config: "InternalConfig") -> "TiffSequenceLoader":
        return cls(config.input.input_dir, config.input.file_filter)

    def list_files(self) -> List[Path]:
        return sorted(p for p in self.folder.glob(self.pattern) if p.is_file())

    def load(self) -> xr.DataArray:
        """Read all matching images.

        Raises
        ------
        FileNotFoundError
            If no file matches the pattern.
        ValueError
            If an image is not 2-D or the images differ in size.
        """
        files = self.list_files()
        if not files:
            raise FileNotFoundError(f"No files matching '{self.pattern}' in {self.folder}")

        frames = []
        for path in files:
            image = np.squeeze(tifffile.imread(path))
            if image.ndim != 2:
                raise ValueError(f"{path.name}: expected a 2-D image, got shape {image.shape}")
            if frames and image.shape != frames[0].shape:
                raise ValueError(
                    f"{path.name}: size {image.shape} differs from first frame {frames[0].shape}"
                )
            frames.append(image)

        logger.info("Loaded %d frames of %dx%d from %s",
                    len(frames), frames[0].shape[1], frames[0].shape[0], self.folder)
        return make_volume(np.stack(frames), attrs={"source": str(self.folder)})
