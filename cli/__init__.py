"""Command line views of the water monitoring dashboard."""
