"""recruitflow: bulk import and export tooling for the staffing admin API."""

__version__ = "0.1.0"
