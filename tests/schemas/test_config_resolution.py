"""Test config resolution and validation with Pydantic."""

import pytest
from pydantic import ValidationError

from glide.schemas import ParamConfig, UserConfig, CLIConfig, InternalConfig
from glide.schemas.resolve import resolve_config, deep_merge

pytestmark = pytest.mark.unit


class TestConfigResolution:
    """Test resolve_config() precedence and merging."""

    def test_resolve_config_all_defaults(self):
        """Resolving with no user/CLI overrides uses all ParamConfig defaults."""
        config = resolve_config(ParamConfig(), None, None)

        assert isinstance(config, InternalConfig)
        assert config.detection.sigma_x == 15.0
        assert config.detection.sigma_y == 3.0
        assert config.detection.offset_lateral == 5
        assert config.detection.offset_top == 40
        assert config.detection.offset_bottom == 10
        assert config.background.template_xmin == 20
        assert config.background.template_xmax == 35
        assert config.background.x_offset == 35
        assert config.segmentation.min_cell_length == 18
        assert config.segmentation.min_gap_contrast == 0.02
        assert config.correspondence.gap_policy == "stop-at-first-gap"
        assert config.rectifier.threshold_fraction == 0.33
        assert config.cropper.variance_threshold == 0.005
        assert config.input.input_dir is None

    def test_user_aliases_override_param_config(self):
        """Historical property names map to nested sections."""
        user = UserConfig(
            SIGMA_GL_DETECTION_X=12,
            GL_OFFSET_TOP=30,
            BGREM_X_OFFSET=20,
            MIN_CELL_LENGTH=25,
        )
        config = resolve_config(ParamConfig(), user, None)

        assert config.detection.sigma_x == 12.0
        assert config.detection.offset_top == 30
        assert config.background.x_offset == 20
        assert config.segmentation.min_cell_length == 25

    def test_nested_user_override(self):
        user = UserConfig(pipeline={"rectify": False}, detection={"plateau_rule": "CENTER"})
        config = resolve_config(ParamConfig(), user, None)

        assert config.pipeline.rectify is False
        assert config.pipeline.crop is True
        assert config.detection.plateau_rule == "center"

    def test_nested_rectifier_and_cropper_override(self):
        """Geometric stage thresholds are tunable from a user CONFIG dict."""
        user = UserConfig.model_validate({
            "cropper": {"variance_threshold": 50.0},
            "rectifier": {"threshold_fraction": 0.5},
        })
        config = resolve_config(ParamConfig(), user, None)

        assert config.cropper.variance_threshold == 50.0
        assert config.rectifier.threshold_fraction == 0.5

    def test_out_of_range_rectifier_threshold_rejected(self):
        user = UserConfig(rectifier={"threshold_fraction": 1.5})
        with pytest.raises(ValidationError):
            resolve_config(ParamConfig(), user, None)

    def test_gap_policy_spelling_is_normalized(self):
        config = resolve_config(ParamConfig(), UserConfig(GAP_POLICY="SKIP_GAPS"), None)
        assert config.correspondence.gap_policy == "skip-gaps"

    def test_unknown_gap_policy_rejected(self):
        with pytest.raises(ValidationError):
            resolve_config(ParamConfig(), UserConfig(GAP_POLICY="guess"), None)

    def test_unknown_user_keys_are_ignored(self):
        user = UserConfig.model_validate({"GUI_POS_X": 100, "GL_OFFSET_LATERAL": 7})
        config = resolve_config(ParamConfig(), user, None)
        assert config.detection.offset_lateral == 7

    def test_cli_wins_over_user(self):
        user = UserConfig(INPUT_DIR="/data/a", LOG_LEVEL="WARNING")
        cli = CLIConfig(input_dir="/data/b", rectify=False)
        config = resolve_config(ParamConfig(), user, cli)

        assert config.input.input_dir == "/data/b"
        assert config.pipeline.rectify is False
        assert config.logging.level == "WARNING"

    def test_resolve_from_plain_dicts(self):
        config = resolve_config({}, {"GL_OFFSET_BOTTOM": 3}, {"crop": False})
        assert config.detection.offset_bottom == 3
        assert config.pipeline.crop is False


class TestValidation:

    def test_background_window_must_be_ordered(self):
        with pytest.raises(ValidationError, match="template_xmin"):
            resolve_config(ParamConfig(), UserConfig(BGREM_TEMPLATE_XMIN=40), None)

    def test_internal_config_is_frozen(self):
        config = resolve_config(ParamConfig(), None, None)
        with pytest.raises(ValidationError):
            config.detection.sigma_x = 1.0

    def test_param_config_forbids_unknown_fields(self):
        with pytest.raises(ValidationError):
            ParamConfig(unknown_section={})


def test_deep_merge_nested():
    base = {"a": 1, "b": {"c": 2, "d": 3}}
    override = {"b": {"d": 4, "e": 5}, "f": 6}
    assert deep_merge(base, override) == {"a": 1, "b": {"c": 2, "d": 4, "e": 5}, "f": 6}
    assert base == {"a": 1, "b": {"c": 2, "d": 3}}
