"""CLI: Typer app to list, pick and show skills from the skills directory."""
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import typer

from codex_skills import commands
from codex_skills.config import LOG_LEVEL, Config, load_config
from codex_skills.logging_utils import (
    configure_logging,
    get_logger,
    log_no_match,
    log_pick_end,
    log_pick_start,
    set_run_id,
)
from codex_skills.skills.errors import CorpusError, SkillNotFoundError
from codex_skills.skills.loader import (
    Skill,
    find_skill_or_raise,
    load_skills_with_fallback,
    materialize_skills,
)
from codex_skills.skills.matcher import closest_skill_names, rank_skills

logger = get_logger(__name__)

app = typer.Typer(help="Route tasks to the right skill playbook.", no_args_is_help=True)


@dataclass
class CliState:
    config: Config
    skills_dir: Path


@app.callback()
def main(
    ctx: typer.Context,
    skills_dir: Optional[Path] = typer.Option(
        None,
        "--skills-dir",
        help="Directory containing skill folders (each with SKILL.md). Default: config, then ./skills.",
    ),
) -> None:
    """Route tasks to the right skill playbook."""
    set_run_id()
    config = load_config()
    ctx.obj = CliState(config=config, skills_dir=skills_dir or config.get_skills_dir())


def _state(ctx: typer.Context) -> CliState:
    return ctx.obj


def _load(state: CliState) -> list[Skill]:
    """Load the corpus or exit: 2 when it cannot be read, 0 with a hint when it is empty."""
    try:
        skills = load_skills_with_fallback(state.skills_dir)
    except CorpusError as e:
        logger.error("skills_load_failed", path=str(state.skills_dir), error=str(e))
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=2)
    if not skills:
        typer.echo(f"No skills found in {state.skills_dir}. Add SKILL.md files to get started.")
        raise typer.Exit(code=0)
    return skills


@app.command("list")
def list_skills(
    ctx: typer.Context,
    brief: bool = typer.Option(False, "--brief", help="Output only names."),
    verbose: bool = typer.Option(False, "--verbose", help="Output full summaries (no clipping)."),
    json_output: bool = typer.Option(False, "--json", help="Output JSON array of skill names."),
    clip: Optional[int] = typer.Option(
        None, "--clip", min=1, metavar="N", help="Maximum characters for clipped summaries."
    ),
) -> None:
    """List all available skills with a short summary."""
    state = _state(ctx)
    skills = _load(state)
    if json_output:
        fmt = commands.ListFormat.JSON
    elif brief:
        fmt = commands.ListFormat.BRIEF
    elif verbose:
        fmt = commands.ListFormat.VERBOSE
    else:
        fmt = commands.ListFormat.CLIPPED
    clip_length = clip if clip is not None else state.config.get_clip_length()
    typer.echo(commands.render_list(skills, fmt, clip_length))


@app.command()
def pick(
    ctx: typer.Context,
    query: str = typer.Argument(..., help="Free-form task description to match against skills."),
    top: Optional[int] = typer.Option(None, "--top", "-t", min=0, help="Number of candidates to show."),
    show: bool = typer.Option(False, "--show", help="Print the full playbook for the top result."),
) -> None:
    """Suggest the best matching skills for a task description."""
    state = _state(ctx)
    skills = _load(state)
    top_n = top if top is not None else state.config.get_default_top()
    log_pick_start(logger, query=query, top=top_n, corpus_size=len(skills))

    ranked = rank_skills(query, skills, len(skills))
    if ranked and ranked[0].score <= 0:
        shortlist = closest_skill_names(skills, query, commands.NO_MATCH_SHORTLIST)
        log_no_match(logger, query=query, closest=shortlist)
        typer.echo(commands.render_no_match(query, shortlist))
        return

    shown = ranked[:top_n]
    log_pick_end(
        logger,
        result_names=[r.skill.name for r in shown],
        best_score=shown[0].score if shown else None,
    )
    output = commands.render_pick(shown, show)
    if output:
        typer.echo(output)


@app.command()
def show(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Skill name (case-insensitive)."),
) -> None:
    """Open a specific skill by name."""
    skills = _load(_state(ctx))
    try:
        skill = find_skill_or_raise(skills, name)
    except SkillNotFoundError:
        typer.echo(
            f"Skill '{name}' not found. Use `codex-skills list` to see available entries.",
            err=True,
        )
        raise typer.Exit(code=1)
    typer.echo(commands.render_skill_documents(skill))


@app.command()
def instructions(ctx: typer.Context) -> None:
    """Print strict agent instructions and the allowed skill list."""
    state = _state(ctx)
    skills = _load(state)
    typer.echo(commands.render_instructions(skills, state.skills_dir))


@app.command()
def init(
    ctx: typer.Context,
    force: bool = typer.Option(False, "--force", help="Overwrite existing files."),
) -> None:
    """Write bundled example skills into the skills directory."""
    state = _state(ctx)
    try:
        written = materialize_skills(state.skills_dir, force=force)
    except OSError as e:
        logger.error("skills_materialize_failed", path=str(state.skills_dir), error=str(e))
        typer.echo(f"Error: cannot write skills to {state.skills_dir}: {e}", err=True)
        raise typer.Exit(code=2)
    typer.echo(f"Bundled skills written to {state.skills_dir} ({len(written)} files)")


@app.command()
def validate(
    ctx: typer.Context,
    strict: bool = typer.Option(False, "--strict", help="Fail on warnings (stricter validation)."),
) -> None:
    """Validate skill files for correctness."""
    skills = _load(_state(ctx))
    report = commands.validate_skills(skills)
    typer.echo(commands.render_validation(report))
    if report.failed(strict):
        raise typer.Exit(code=1)


@app.command()
def stats(ctx: typer.Context) -> None:
    """Show statistics about loaded skills."""
    skills = _load(_state(ctx))
    typer.echo(commands.render_stats(skills))


@app.command()
def search(
    ctx: typer.Context,
    query: str = typer.Argument(..., help="Text to search for in skill bodies."),
    context: int = typer.Option(2, "--context", "-c", min=0, help="Lines of context around matches."),
) -> None:
    """Search within skill content."""
    skills = _load(_state(ctx))
    typer.echo(commands.render_search(skills, query, context))


def run() -> None:
    """Console entry point."""
    configure_logging(LOG_LEVEL)
    app()
