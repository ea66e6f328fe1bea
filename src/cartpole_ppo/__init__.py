"""Online PPO training for a cart-pole swing-up task, with hand-written networks and gradients."""

__version__ = "0.1.0"
