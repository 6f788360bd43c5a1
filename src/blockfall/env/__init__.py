"""Gymnasium environments for blockfall."""

from __future__ import annotations

from gymnasium.envs.registration import register

from .blockfall_env import AgentAction, BlockFallEnv

register(
    id="BlockFall-20x10-v0",
    entry_point="blockfall.env.blockfall_env:BlockFallEnv",
)

__all__ = ["AgentAction", "BlockFallEnv"]
