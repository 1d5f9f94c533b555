"""Packaged data files: balance defaults and the enemy roster."""
