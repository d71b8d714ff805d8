"""repokeeper: bulk git branch maintenance (branch sync and hard reset)."""

__version__ = "0.1.0"
