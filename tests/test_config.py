from __future__ import annotations

import pytest

from core.options import CalculationOptions, EnhancedIRCParameters, Reflectances
from utils.config_loader import DEFAULT_CONFIG, get_config_value, load_config


def test_missing_file_gives_defaults(tmp_path) -> None:
    config = load_config(str(tmp_path / "missing.yaml"))
    assert config == DEFAULT_CONFIG
    assert config is not DEFAULT_CONFIG

    # Callers may mutate their copy freely
    config['calculation']['daylight']['grid_spacing'] = 1.0
    assert DEFAULT_CONFIG['calculation']['daylight']['grid_spacing'] == 0.5


def test_malformed_file_gives_defaults(tmp_path) -> None:
    broken = tmp_path / "broken.yaml"
    broken.write_text("calculation: [unclosed\n", encoding="utf-8")
    assert load_config(str(broken)) == DEFAULT_CONFIG

    scalar = tmp_path / "scalar.yaml"
    scalar.write_text("just a string\n", encoding="utf-8")
    assert load_config(str(scalar)) == DEFAULT_CONFIG


def test_file_values_merge_over_defaults(tmp_path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text(
        "calculation:\n"
        "  daylight:\n"
        "    grid_spacing: 0.25\n"
        "    reflectances:\n"
        "      walls: 0.6\n"
        "logging:\n"
        "  level: DEBUG\n",
        encoding="utf-8",
    )
    config = load_config(str(path))
    daylight = config['calculation']['daylight']
    assert daylight['grid_spacing'] == 0.25
    assert daylight['work_plane_height'] == 0.85
    assert daylight['reflectances'] == {'floor': 0.2, 'walls': 0.6, 'ceiling': 0.8}
    assert config['logging'] == {'level': 'DEBUG', 'file': None}


def test_get_config_value() -> None:
    assert get_config_value(DEFAULT_CONFIG, 'calculation.daylight.grid_spacing') == 0.5
    assert get_config_value(DEFAULT_CONFIG, 'calculation.daylight.missing', 7) == 7
    assert get_config_value(DEFAULT_CONFIG, 'calculation.daylight.grid_spacing.deeper') is None
    assert get_config_value({}, 'logging.level', 'INFO') == 'INFO'


def test_options_from_default_config_match_defaults() -> None:
    assert CalculationOptions.from_config(DEFAULT_CONFIG) == CalculationOptions()
    assert CalculationOptions.from_config({}) == CalculationOptions()


def test_options_from_config_overrides() -> None:
    config = {
        'calculation': {
            'daylight': {
                'enhanced': True,
                'sample_count': '400',
                'random_seed': 42,
                'stratified': False,
                'reflectances': {'floor': 0.3},
                'enhanced_irc': {'proximity_boost': 0.1, 'not_a_parameter': 1},
            },
        },
    }
    options = CalculationOptions.from_config(config)
    assert options.mode == 'enhanced'
    assert options.sample_count == 400
    assert options.random_seed == 42
    assert not options.stratified
    assert options.reflectances == Reflectances(floor=0.3, walls=0.5, ceiling=0.8)
    assert options.irc_parameters.proximity_boost == 0.1


@pytest.mark.parametrize("overrides", [
    {'grid_spacing': 0.0},
    {'grid_spacing': -0.5},
    {'work_plane_height': -0.1},
    {'wall_offset': -1.0},
    {'sample_count': 0},
    {'maintenance_factor': 0.0},
    {'maintenance_factor': 1.2},
    {'default_reveal_depth': -0.2},
])
def test_invalid_options_rejected(overrides) -> None:
    with pytest.raises(ValueError):
        CalculationOptions(**overrides)


def test_unknown_standard_is_accepted() -> None:
    assert CalculationOptions(compliance_standard='CIBSE').compliance_standard == 'CIBSE'


@pytest.mark.parametrize("name", ['floor', 'walls', 'ceiling'])
def test_reflectance_range(name) -> None:
    with pytest.raises(ValueError):
        Reflectances(**{name: 1.0})
    with pytest.raises(ValueError):
        Reflectances(**{name: -0.1})
    assert getattr(Reflectances(**{name: 0.0}), name) == 0.0


def test_first_bounce_fractions_must_sum_to_one() -> None:
    with pytest.raises(ValueError):
        EnhancedIRCParameters(ceiling_fraction=0.5)
    params = EnhancedIRCParameters(ceiling_fraction=0.2, floor_fraction=0.4, wall_fraction=0.4)
    assert params.ceiling_fraction == 0.2
