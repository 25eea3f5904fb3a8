import dataclasses

import pytest

from mend.config import DEFAULT_SEARCH_RADIUS, MendConfig


def test_defaults():
    cfg = MendConfig()
    assert cfg.search_radius == DEFAULT_SEARCH_RADIUS == 50
    assert cfg.threshold == 0.7
    assert cfg.whitespace_credit == 0.9
    assert cfg.anchor_only_confidence == 0.5
    assert cfg.length_slack == 2
    assert cfg.reindent is True


@pytest.mark.parametrize("kwargs", [
    {"threshold": 1.5},
    {"threshold": -0.1},
    {"whitespace_credit": 2.0},
    {"anchor_only_confidence": -1.0},
    {"search_radius": -1},
    {"length_slack": -1},
])
def test_invalid_values_raise(kwargs):
    with pytest.raises(ValueError):
        MendConfig(**kwargs)


def test_fuzziness_presets():
    exact = MendConfig.for_fuzziness(0)
    assert (exact.threshold, exact.whitespace_credit, exact.length_slack) == (1.0, 0.0, 0)
    ws = MendConfig.for_fuzziness(1)
    assert (ws.threshold, ws.length_slack) == (0.9, 0)
    assert MendConfig.for_fuzziness(2) == MendConfig()
    assert MendConfig.for_fuzziness(1, search_radius=5).search_radius == 5
    with pytest.raises(ValueError, match="fuzziness"):
        MendConfig.for_fuzziness(3)


def test_with_overrides_ignores_none():
    cfg = MendConfig().with_overrides(threshold=None, search_radius=10)
    assert cfg.threshold == 0.7
    assert cfg.search_radius == 10
    assert MendConfig().with_overrides() == MendConfig()


def test_unbounded_radius_via_replace():
    assert dataclasses.replace(MendConfig(), search_radius=None).search_radius is None


def test_config_is_frozen():
    with pytest.raises(dataclasses.FrozenInstanceError):
        MendConfig().threshold = 0.1
