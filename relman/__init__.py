"""Interactive release automation for Gradle library projects."""

__version__ = "0.1.0"
