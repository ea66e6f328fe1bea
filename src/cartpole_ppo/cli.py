# src/cartpole_ppo/cli.py
"""
Train a PPO swing-up policy, then evaluate it greedily.

Usage:
    cartpole-ppo --episodes 200
    cartpole-ppo --episodes 50 --config experiments/small.yaml --seed 3
"""

import argparse

from .config import load_config, merge_config
from .eval.metrics import run_episode, summarize_rewards
from .rl.agent import GreedyPolicy
from .rl.trainer import TrainingSession
from .utils.logging import UPDATE_LOGGER, configure_logging, get_logger

log = get_logger(__name__)

def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Online PPO training for cart-pole swing-up")
    parser.add_argument("--episodes", type=int, default=100, help="Training episodes to run")
    parser.add_argument("--eval-episodes", type=int, default=5, help="Greedy evaluation episodes after training")
    parser.add_argument("--seed", type=int, default=None, help="Seed for physics noise, sampling and init")
    parser.add_argument("--config", type=str, default=None, help="YAML file with per-section overrides")
    parser.add_argument("--log-level", type=str, default="INFO")
    parser.add_argument("--debug-updates", action="store_true", help="Log per-update PPO stats")
    parser.add_argument("--no-progress", action="store_true", help="Disable the progress bar")
    return parser.parse_args(argv)

def main(argv=None) -> int:
    args = parse_args(argv)
    levels = {UPDATE_LOGGER: "DEBUG"} if args.debug_updates else None
    configure_logging(level=args.log_level, levels=levels)
    config = load_config(args.config) if args.config else merge_config()

    session = TrainingSession(config, seed=args.seed)
    log.info("Training for %d episodes (batch_size=%d, k_epochs=%d)",
             args.episodes, session.agent.batch_size, session.agent.k_epochs)
    history = session.train(args.episodes, progress=not args.no_progress)
    summary = summarize_rewards(history)
    log.info("Training done: episodes=%d mean=%.2f best=%.2f last=%.2f rolling=%.2f updates=%d",
             summary["episodes"], summary["mean"], summary["best"], summary["last"],
             summary["rolling_mean"], session.agent.update_count)

    policy = GreedyPolicy(session.agent)
    for i in range(args.eval_episodes):
        result = run_episode(session.env, policy)
        log.info("Eval episode %d: reward=%.2f steps=%d upright=%.1f%%",
                 i + 1, result["total_reward"], result["steps"], 100.0 * result["upright_fraction"])
    return 0

if __name__ == "__main__":
    raise SystemExit(main())
