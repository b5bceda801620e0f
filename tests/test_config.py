import pytest

from kmeans_engine import InitMode, KMeans, KMeansConfig


def test_defaults():
    config = KMeansConfig()
    assert config.init_mode is InitMode.RANDOM
    assert config.max_iterations == 100
    assert config.end_error == 0.001
    assert config.consecutive_stability is False


@pytest.mark.parametrize("value, expected", [
    ("random", InitMode.RANDOM),
    ("Manual", InitMode.MANUAL),
    ("UNIFORM", InitMode.UNIFORM),
    (InitMode.UNIFORM, InitMode.UNIFORM),
])
def test_init_mode_from_string(value, expected):
    assert KMeansConfig(init_mode=value).init_mode is expected


@pytest.mark.parametrize("kwargs", [
    {"init_mode": "k-means++"},
    {"max_iterations": 0},
    {"end_error": -0.1},
])
def test_invalid_values(kwargs):
    with pytest.raises(ValueError):
        KMeansConfig(**kwargs)


def test_engine_setter_validates():
    engine = KMeans(dim_num=2, cluster_num=2)
    with pytest.raises(ValueError):
        engine.set_init_mode("bogus")
    assert engine.get_init_mode() is InitMode.RANDOM
