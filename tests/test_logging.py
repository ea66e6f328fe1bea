import logging

import pytest

from cartpole_ppo.utils.logging import UPDATE_LOGGER, configure_logging, get_logger


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    ppo_log = get_logger(UPDATE_LOGGER)
    saved = (root.level, root.handlers[:], ppo_log.level)
    yield
    root.handlers[:] = saved[1]
    root.setLevel(saved[0])
    ppo_log.setLevel(saved[2])


def test_per_logger_levels(restore_logging):
    configure_logging(level="WARNING", levels={UPDATE_LOGGER: "DEBUG"})
    assert logging.getLogger().level == logging.WARNING
    assert get_logger(UPDATE_LOGGER).isEnabledFor(logging.DEBUG)
    assert not get_logger("cartpole_ppo.rl.trainer").isEnabledFor(logging.INFO)


def test_unknown_level_falls_back_to_info(restore_logging):
    configure_logging(level="chatty")
    assert logging.getLogger().level == logging.INFO
