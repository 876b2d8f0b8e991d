"""NGO CRM core: role-based permissions and feedback task lifecycle."""

__version__ = "0.1.0"
