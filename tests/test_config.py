import pytest

from cartpole_ppo.config import PPO_DEFAULTS, load_config, merge_config


def test_merge_defaults():
    cfg = merge_config()
    assert cfg["ppo"] == PPO_DEFAULTS
    assert cfg["physics"]["tau"] == 0.02
    assert cfg["train"]["max_steps"] == 700


def test_merge_overrides():
    cfg = merge_config({"ppo": {"batch_size": 32}})
    assert cfg["ppo"]["batch_size"] == 32
    assert cfg["ppo"]["gamma"] == PPO_DEFAULTS["gamma"]


def test_unknown_keys_rejected():
    with pytest.raises(ValueError):
        merge_config({"ppo": {"batchsize": 32}})
    with pytest.raises(ValueError):
        merge_config({"optim": {}})


def test_load_yaml(tmp_path):
    path = tmp_path / "exp.yaml"
    path.write_text("ppo:\n  batch_size: 64\n  entropy_coef: 0.02\ntrain:\n  seed: 3\n")
    cfg = load_config(path)
    assert cfg["ppo"]["batch_size"] == 64
    assert cfg["ppo"]["entropy_coef"] == 0.02
    assert cfg["train"]["seed"] == 3
    assert cfg["physics"]["force_mag"] == 7.0


def test_load_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "missing.yaml")
