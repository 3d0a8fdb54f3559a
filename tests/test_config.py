import json

import pytest
import yaml

from fractal_render.api import RenderConfig
from fractal_render.io.config import DEFAULT_CONFIG, ConfigManager, to_complex


def test_defaults_without_file():
    assert ConfigManager().load_config() == DEFAULT_CONFIG


def test_load_json(tmp_path):
    path = tmp_path / "render.json"
    path.write_text(json.dumps({'width': 320, 'palette': 'hot', 'upper_left': [-1.5, 1.0]}))
    config = ConfigManager().load_config(path)
    assert config['width'] == 320
    assert config['palette'] == 'hot'
    assert config['height'] == DEFAULT_CONFIG['height']


def test_load_yaml(tmp_path):
    path = tmp_path / "render.yaml"
    path.write_text(yaml.safe_dump({'fractal': 'julia', 'seed': '-0.8,0.156', 'num_processes': 2}))
    manager = ConfigManager()
    render_config = manager.create_render_config(manager.load_config(path))
    assert isinstance(render_config, RenderConfig)
    assert render_config.fractal == 'julia'
    assert render_config.seed == complex(-0.8, 0.156)
    assert render_config.num_processes == 2


def test_empty_yaml_gives_defaults(tmp_path):
    path = tmp_path / "empty.yml"
    path.write_text("")
    assert ConfigManager().load_config(path) == DEFAULT_CONFIG


def test_unknown_key_rejected(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text(json.dumps({'colour': 'hot'}))
    with pytest.raises(ValueError, match="unknown key 'colour'"):
        ConfigManager().load_config(path)


def test_top_level_must_be_mapping(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- 1\n- 2\n")
    with pytest.raises(ValueError, match="mapping"):
        ConfigManager().load_config(path)


def test_unsupported_suffix(tmp_path):
    path = tmp_path / "render.toml"
    path.write_text("")
    with pytest.raises(ValueError, match="Unsupported config format"):
        ConfigManager().load_config(path)


def test_validate_config():
    manager = ConfigManager()
    assert manager.validate_config({'width': 10, 'seed': [0.1, 0.2]}) == []
    errors = manager.validate_config({'width': 0, 'num_processes': 'many', 'lower_right': '1,'})
    assert len(errors) == 3


@pytest.mark.parametrize("key", ["width", "height", "rows_per_band", "num_processes"])
def test_booleans_are_not_sizes(key):
    errors = ConfigManager().validate_config({key: True})
    assert len(errors) == 1
    assert key in errors[0]


def test_boolean_size_in_file_rejected(tmp_path):
    path = tmp_path / "bool.yaml"
    path.write_text("width: true\n")
    with pytest.raises(ValueError, match="width"):
        ConfigManager().load_config(path)


def test_overrides_take_precedence():
    manager = ConfigManager()
    config = dict(DEFAULT_CONFIG, palette='ocean', width=50)
    render_config = manager.create_render_config(config, width=80, palette=None)
    assert render_config.width == 80
    assert render_config.palette == 'ocean'
    assert render_config.upper_left == complex(-2.0, 2.0)


@pytest.mark.parametrize("value,expected", [
    ("1,2", complex(1, 2)),
    ([1, 2], complex(1, 2)),
    (3, complex(3, 0)),
    (complex(0, 1), complex(0, 1)),
])
def test_to_complex(value, expected):
    assert to_complex(value) == expected


def test_to_complex_rejects():
    with pytest.raises(ValueError):
        to_complex([1, 2, 3])
    with pytest.raises(ValueError):
        to_complex({'re': 1})
