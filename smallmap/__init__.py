"""A hash map with a small inline table that spills into a dict when full."""

__version__ = "0.1.3"
__all__ = ["group", "inline", "smallmap"]