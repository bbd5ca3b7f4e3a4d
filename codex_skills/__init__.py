"""codex-skills: route tasks to the right skill playbook."""

__version__ = "0.3.0"
