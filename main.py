"""Entry: route a task description to a skill playbook from the command line."""
from codex_skills.cli import run


if __name__ == "__main__":
    run()
