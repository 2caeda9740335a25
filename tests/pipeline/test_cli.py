"""Tests for the command line runner."""

import numpy as np
import pytest
import tifffile

from glide.cli.run_pipeline import (
    build_parser,
    load_collaborator,
    load_user_config_dict,
    main,
    run_glide_pipeline,
)
from glide.schemas.internal import InternalSegmentationConfig
from tests.helpers.fake_collaborators import RecordingSegmenter
from tests.helpers.synthetic import make_channel_stack

pytestmark = pytest.mark.pipeline


@pytest.fixture(autouse=True)
def restore_root_logging():
    import logging
    root = logging.getLogger()
    saved = root.handlers[:], root.level
    yield
    for handler in root.handlers[:]:
        if handler not in saved[0]:
            handler.close()
            root.removeHandler(handler)
    for handler in saved[0]:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(saved[1])


def _write_config(path, body):
    path.write_text(body)
    return str(path)


@pytest.fixture
def input_folder(temp_dir):
    folder = temp_dir / "frames"
    folder.mkdir()
    for t, frame in enumerate(make_channel_stack(intensity=500.0).astype(np.uint16)):
        tifffile.imwrite(folder / f"f{t}.tif", frame)
    return folder


def test_load_user_config_dict(temp_dir):
    path = _write_config(temp_dir / "cfg.py", 'CONFIG = {"GL_OFFSET_TOP": 12}\n')
    assert load_user_config_dict(path) == {"GL_OFFSET_TOP": 12}


def test_load_user_config_missing(temp_dir):
    with pytest.raises(FileNotFoundError):
        load_user_config_dict(str(temp_dir / "nope.py"))


def test_load_user_config_without_dict(temp_dir):
    path = _write_config(temp_dir / "cfg.py", "OTHER = 1\n")
    with pytest.raises(ValueError, match="No CONFIG"):
        load_user_config_dict(path)


def test_load_collaborator_passes_arguments():
    seg = load_collaborator("tests.helpers.fake_collaborators:RecordingSegmenter", "settings")
    assert isinstance(seg, RecordingSegmenter)
    assert seg.settings == "settings"


def test_load_collaborator_bad_target():
    with pytest.raises(ValueError, match="module:ClassName"):
        load_collaborator("tests.helpers.fake_collaborators")


def test_parser_stage_flags_default_to_none():
    args = build_parser().parse_args(["cfg.py"])
    assert args.rectify is None
    assert args.crop is None
    assert args.subtract_background is None

    args = build_parser().parse_args(["cfg.py", "--no-rectify", "--subtract-background"])
    assert args.rectify is False
    assert args.subtract_background is True


def test_run_pipeline_with_segmenter(temp_dir, input_folder):
    cfg = _write_config(temp_dir / "cfg.py", 'CONFIG = {"MIN_CELL_LENGTH": 22}\n')

    result = run_glide_pipeline(
        cfg,
        cli_args={"input_dir": str(input_folder), "base_dir": str(temp_dir / "out")},
        segmenter="tests.helpers.fake_collaborators:RecordingSegmenter",
    )

    assert len(result.growth_lines) == 2
    assert len(result.hypotheses) == 6
    assert (temp_dir / "out" / "logs" / "glide_glide.log").exists()


def test_segmenter_receives_segmentation_settings(temp_dir, input_folder, monkeypatch):
    created = []

    def fake_load(target, *args):
        seg = RecordingSegmenter(*args)
        created.append(seg)
        return seg

    monkeypatch.setattr("glide.cli.run_pipeline.load_collaborator", fake_load)
    cfg = _write_config(temp_dir / "cfg.py", 'CONFIG = {"MIN_CELL_LENGTH": 22}\n')

    run_glide_pipeline(cfg, cli_args={"input_dir": str(input_folder),
                                      "base_dir": str(temp_dir / "out")},
                       segmenter="any:Thing")

    settings = created[0].settings
    assert isinstance(settings, InternalSegmentationConfig)
    assert settings.min_cell_length == 22


def test_main_missing_input_folder_exits_1(temp_dir):
    cfg = _write_config(temp_dir / "cfg.py", "CONFIG = {}\n")
    code = main([cfg, "--input-dir", str(temp_dir / "missing"), "--output-dir", str(temp_dir)])
    assert code == 1


def test_main_success(temp_dir, input_folder):
    cfg = _write_config(temp_dir / "cfg.py", "CONFIG = {}\n")
    code = main([cfg, "--input-dir", str(input_folder), "--output-dir", str(temp_dir / "out")])
    assert code == 0


def test_missing_input_setting(temp_dir):
    cfg = _write_config(temp_dir / "cfg.py", "CONFIG = {}\n")
    with pytest.raises(ValueError, match="No input folder"):
        run_glide_pipeline(cfg, cli_args={"base_dir": str(temp_dir)})
