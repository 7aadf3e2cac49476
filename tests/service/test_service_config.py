"""
Unit tests for service, render and merge configuration.
"""

from pathlib import Path

import pytest

from pattern_toolkit.merger import MergeConfig
from pattern_toolkit.renderer import RenderConfig
from pattern_toolkit.service import ServiceConfig


def test_service_config_when_default_then_sixty_second_budget():
    config = ServiceConfig()
    assert config.request_budget_seconds == 60.0
    assert config.cleanup_token is None
    assert config.merge.default_overlap_pixels == 3
    assert config.render.dpi == pytest.approx(240.0)


def test_service_config_when_string_root_then_path():
    assert ServiceConfig(storage_root="/tmp/x").storage_root == Path("/tmp/x")


@pytest.mark.parametrize("kwargs,match", [
    ({"request_budget_seconds": 0}, "request_budget_seconds must be positive"),
    ({"write_workers": 0}, "write_workers must be >= 1"),
])
def test_service_config_when_invalid_then_raises_error(kwargs, match):
    with pytest.raises(ValueError, match=match):
        ServiceConfig(**kwargs)


def test_from_env_when_variables_set_then_overrides_defaults():
    env = {
        "PATTERN_TOOLKIT_STORAGE_ROOT": "/srv/patterns",
        "PATTERN_TOOLKIT_BUDGET_SECONDS": "30",
        "PATTERN_TOOLKIT_CLEANUP_TOKEN": "tok",
        "PATTERN_TOOLKIT_WRITE_WORKERS": "2",
        "PATTERN_TOOLKIT_RENDER_SCALE": "3",
        "PATTERN_TOOLKIT_OVERLAP_PIXELS": "0",
        "PATTERN_TOOLKIT_MAX_CANVAS_PIXELS": "1000000",
    }

    config = ServiceConfig.from_env(env)

    assert config.storage_root == Path("/srv/patterns")
    assert config.request_budget_seconds == 30.0
    assert config.cleanup_token == "tok"
    assert config.write_workers == 2
    assert config.render.render_scale == 3.0
    assert config.merge.default_overlap_pixels == 0
    assert config.merge.max_canvas_pixels == 1_000_000


def test_from_env_when_empty_then_defaults():
    assert ServiceConfig.from_env({}) == ServiceConfig()


def test_from_env_when_scale_too_low_then_raises_error():
    with pytest.raises(ValueError, match="render_scale"):
        ServiceConfig.from_env({"PATTERN_TOOLKIT_RENDER_SCALE": "1"})


def test_merge_config_when_negative_overlap_then_raises_error():
    with pytest.raises(ValueError, match="default_overlap_pixels"):
        MergeConfig(default_overlap_pixels=-1)


def test_render_config_when_thumbnail_quality_out_of_range_then_raises_error():
    with pytest.raises(ValueError, match="thumbnail_quality"):
        RenderConfig(thumbnail_quality=100)


def test_merge_config_when_canvas_limit_not_positive_then_raises_error():
    with pytest.raises(ValueError, match="max_canvas_pixels"):
        MergeConfig(max_canvas_pixels=0)
