"""Agents that drive the blockfall Gymnasium environment."""
