"""Command line interface for funnel documents."""
