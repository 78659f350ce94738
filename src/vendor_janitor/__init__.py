"""Post-install cleanup of superfluous files in Composer vendor trees."""

__version__ = "0.3.0"
