"""Fleet-wide language, framework, database and tool statistics for cloned repositories."""

__version__ = "0.1.0"
