"""Domain services used by the dashboard blueprints."""
