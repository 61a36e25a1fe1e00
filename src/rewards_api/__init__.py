"""Rewards API: lucky-draw spins, discount codes and monthly cards."""
