import json

import pytest

from fractal_engine.core.fractal_types import FractalShape
from fractal_engine.errors import FractalEngineError, InvalidConfigurationError
from fractal_engine.io.config import PRESETS, ConfigManager, RenderJob, list_presets


def test_shape_defaults_apply(config_manager):
    job = config_manager.create_job({"shape": "julia"})
    assert isinstance(job, RenderJob)
    assert job.shape is FractalShape.JULIA
    assert job.config.iterations == 50
    assert (job.width, job.height) == (800, 600)


def test_config_section_overrides_defaults(config_manager):
    job = config_manager.create_job({
        "shape": "koch",
        "width": 320,
        "height": 200,
        "config": {"iterations": 5, "color": "#ffffff"},
    })
    assert job.config.iterations == 5
    assert job.config.color == "#ffffff"
    assert job.config.zoom == 1.0
    assert (job.width, job.height) == (320, 200)


def test_environment_overrides_file_values():
    manager = ConfigManager(environ={
        "FRACTAL_ENGINE_ZOOM": "2.5",
        "FRACTAL_ENGINE_ITERATIONS": "70",
        "FRACTAL_ENGINE_JULIA_C": "-0.8, 0.156",
        "UNRELATED": "1",
    })
    job = manager.create_job({"shape": "julia", "config": {"zoom": 1.1}})
    assert job.config.zoom == 2.5
    assert job.config.iterations == 70
    assert job.config.julia_c == (-0.8, 0.156)


def test_bad_environment_value():
    manager = ConfigManager(environ={"FRACTAL_ENGINE_ITERATIONS": "many"})
    with pytest.raises(InvalidConfigurationError, match="FRACTAL_ENGINE_ITERATIONS"):
        manager.create_job({"shape": "tree"})


@pytest.mark.parametrize("data", [
    {},
    {"shape": "spiral"},
    {"shape": "koch", "config": {"iterations": -1}},
    {"shape": "koch", "config": {"iterations": 30}},
    {"shape": "koch", "config": {"bogus": 1}},
    {"shape": "koch", "config": []},
    {"shape": "mandelbrot", "width": 0},
    {"shape": "mandelbrot", "height": "600"},
])
def test_invalid_jobs(config_manager, data):
    with pytest.raises(InvalidConfigurationError):
        config_manager.create_job(data)


def test_validate_config_reports_errors(config_manager):
    assert config_manager.validate_config({"shape": "tree"}) == []
    assert config_manager.validate_config({"config": {}}) == ["Missing required key 'shape'"]

    errors = config_manager.validate_config({"shape": "koch", "extra": 1, "config": {"zoom": 0}})
    assert errors[0] == "Unknown top-level keys: extra"
    assert "zoom" in errors[1]


def test_save_and_load(config_manager, tmp_path):
    job = config_manager.create_job({"shape": "julia", "config": {"julia_c": [-0.4, 0.6]}})
    path = config_manager.save_config(job, tmp_path / "jobs" / "julia.json")

    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    assert data["shape"] == "julia"
    assert data["config"]["julia_c"] == [-0.4, 0.6]

    loaded = config_manager.load_job(path)
    assert loaded.shape is FractalShape.JULIA
    assert loaded.config == job.config


def test_load_rejects_bad_files(config_manager, tmp_path):
    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    with pytest.raises(FractalEngineError, match="Invalid JSON"):
        config_manager.load_config(broken)

    listing = tmp_path / "list.json"
    listing.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(FractalEngineError):
        config_manager.load_config(listing)


@pytest.mark.parametrize("name", sorted(PRESETS))
def test_every_preset_is_valid(config_manager, name):
    job = config_manager.preset_job(name)
    job.config.validate(job.shape)


def test_preset_names(config_manager):
    assert {"snowflake", "gasket", "tree", "wide-tree", "classic-mandelbrot",
            "seahorse-valley", "julia-default", "julia-san-marco"} <= set(PRESETS)
    assert config_manager.preset_job("julia-dendrite").config.julia_c == (-0.235125, 0.827215)
    assert list(list_presets()) == sorted(PRESETS)
    with pytest.raises(InvalidConfigurationError, match="unknown preset"):
        config_manager.preset_job("nebula")
