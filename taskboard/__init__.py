"""Task board backend: users, roles, workflow statuses and tasks."""

__version__ = "0.1.0"
