"""diskprobe - bounded filesystem investigation for endpoint agents."""

__version__ = "0.1.0"
