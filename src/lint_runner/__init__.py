"""Shell and C/C++ lint runner."""

__version__ = "0.3.0"
