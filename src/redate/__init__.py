"""redate package.

Copies a git history into a fresh repository, giving every commit a random
timestamp inside a chosen date window while keeping order and content.
"""

__all__ = [
    "cli",
    "config",
    "driver",
    "errors",
    "git",
    "temporal",
]
