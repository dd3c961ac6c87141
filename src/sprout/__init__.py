"""sprout - scaffold projects from template directories."""

__version__ = "0.3.0"
