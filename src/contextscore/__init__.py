"""contextscore — type-aware completeness scoring for project context files."""

__version__ = "0.1.0"
