"""
Directory setup and folder checks for the growth line pipeline.

The input folder must exist and be a directory; the output folder is
created if needed and must be writable. Both are checked before the
pipeline starts so that a long run does not fail at the end.
"""

import os
from pathlib import Path


def check_input_folder(input_dir):
    """
    Validate the input image folder.

    Parameters
    ----------
    input_dir : str or Path
        Folder holding the image sequence.

    Returns
    -------
    Path
        Resolved folder path.

    Raises
    ------
    NotADirectoryError
        If the path does not exist or is not a directory.
    """
    path = Path(input_dir).expanduser().resolve()
    if not path.is_dir():
        raise NotADirectoryError(f"Input folder is not a directory: {path}")
    return path


def setup_output_directories(base_output_dir=None):
    """
    Set up the output directory structure.

    Parameters
    ----------
    base_output_dir : str or Path, optional
        Base output directory. If None, ``./output`` in the current
        working directory is used.

    Returns
    -------
    dict
        Dictionary with paths: 'base', 'logs'

    Raises
    ------
    PermissionError
        If the base directory is not writable.
    """
    if base_output_dir is None:
        base_output_dir = Path.cwd() / "output"

    base_output_dir = Path(base_output_dir).expanduser().resolve()

    directories = {
        "base": base_output_dir,
        "logs": base_output_dir / "logs",
    }

    for key, path in directories.items():
        path.mkdir(parents=True, exist_ok=True)

    if not os.access(base_output_dir, os.W_OK):
        raise PermissionError(f"Output folder is not writable: {base_output_dir}")

    return directories
