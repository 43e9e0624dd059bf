"""
bitbench - synthetic query and bulk-import load for bitmap-index stores.
"""

__version__ = "0.1.0"
