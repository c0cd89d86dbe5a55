"""
Export found lanes: list paths, make symlinks, build archives, write stats.
"""
