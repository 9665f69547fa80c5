from __future__ import annotations

import json
import random
import time
from dataclasses import asdict, dataclass, replace
from pathlib import Path

import click

from commit_lens.accessors import NameSanitizer
from commit_lens.aggregations.periods import COMMIT_PAGE_SIZE
from commit_lens.config import Config, load_config
from commit_lens.dataset import DatasetStore
from commit_lens.errors import CommitLensError
from commit_lens.filters import (
    active_filter_count,
    clear_filters,
    filter_commits,
    filters_from_query,
    filters_to_query,
    with_dates,
    with_dimension,
)
from commit_lens.logging_config import setup_logging
from commit_lens.models import FILTER_DIMENSIONS, FILTER_MODES, INCLUDE, Dataset, DetailTarget
from commit_lens.output import serialize
from commit_lens.report import build_report, commit_row
from commit_lens.selection import DETAIL_KINDS, select_detail
from commit_lens.state import SessionState, load_state, save_state
from commit_lens.views import VIEW_LEVELS, resolve_view


@dataclass
class Context:
    config: Config
    state_file: Path

    def load_state(self) -> SessionState:
        return load_state(self.state_file, self.config.session_defaults())

    def save_state(self, state: SessionState) -> None:
        save_state(state, self.state_file)


def _load_dataset(ctx: Context, files: tuple[str, ...], progress: bool = True) -> Dataset:
    paths = list(files) or ctx.config.data.files
    if not paths:
        raise click.UsageError("No dataset files given. Pass FILES or set data.files in the config.")
    t0 = time.monotonic()
    if progress:
        click.echo(f"Loading {len(paths)} dataset file(s)...")
    dataset = DatasetStore().load_files(paths)
    if progress:
        click.echo(f"  {len(dataset.commits)} commits loaded [{time.monotonic() - t0:.2f}s]")
    return dataset


def _apply_overrides(
    state: SessionState,
    view: str | None,
    utc: bool | None,
    work_start: int | None,
    work_end: int | None,
) -> SessionState:
    changes = {}
    if view is not None:
        changes["view_level"] = view
    if utc is not None:
        changes["use_utc"] = utc
    if work_start is not None:
        changes["work_hour_start"] = work_start
    if work_end is not None:
        changes["work_hour_end"] = work_end
    return replace(state, **changes)


def session_options(f):
    f = click.option("--work-end", type=click.IntRange(1, 24), default=None, help="End of the work day (hour)")(f)
    f = click.option("--work-start", type=click.IntRange(0, 23), default=None, help="Start of the work day (hour)")(f)
    f = click.option("--utc/--local", "utc", default=None, help="Read commit times in UTC or local time")(f)
    f = click.option("--view", type=click.Choice(sorted(VIEW_LEVELS)), default=None, help="View level")(f)
    return f


@click.group()
@click.option("--config", "config_path", default=None, help="Path to commit-lens.yaml")
@click.option("--state-file", default=None, help="Session state file (overrides the config)")
@click.option("-v", "--verbose", is_flag=True, help="Log debug output")
@click.option("-q", "--quiet", is_flag=True, help="Only log errors")
@click.pass_context
def main(ctx: click.Context, config_path: str | None, state_file: str | None, verbose: bool, quiet: bool) -> None:
    """commit-lens: Analytics over AI-tagged commit datasets."""
    setup_logging(verbose=verbose, quiet=quiet)
    try:
        config = load_config(config_path)
    except CommitLensError as e:
        raise click.ClickException(str(e)) from e
    ctx.obj = Context(config=config, state_file=Path(state_file or config.state_file))


@main.command()
@click.argument("files", nargs=-1, type=click.Path(exists=True, dir_okay=False))
@click.option("--output", "output_path", default="report.json", help="Output JSON path")
@session_options
@click.option("--sanitize/--no-sanitize", default=None, help="Replace author names with pseudonyms")
@click.option("--seed", type=int, default=None, help="Seed for the discover card picks")
@click.option("--limit", type=int, default=None, help="Commits to list in the developer view")
@click.pass_obj
def report(
    ctx: Context,
    files: tuple[str, ...],
    output_path: str,
    view: str | None,
    utc: bool | None,
    work_start: int | None,
    work_end: int | None,
    sanitize: bool | None,
    seed: int | None,
    limit: int | None,
) -> None:
    """Build a JSON report of every view over the filtered commits."""
    total_start = time.monotonic()
    try:
        dataset = _load_dataset(ctx, files)
        state = _apply_overrides(ctx.load_state(), view, utc, work_start, work_end)
        privacy = ctx.config.sanitize if sanitize is None else sanitize
        settings = state.settings(sanitize=privacy)
        view_config = resolve_view(state.view_level)

        t0 = time.monotonic()
        click.echo(f"Applying {active_filter_count(state.filters)} active filter(s)...")
        commits = filter_commits(dataset.commits, state.filters)
        click.echo(f"  {len(commits)} of {len(dataset.commits)} commits selected [{time.monotonic() - t0:.2f}s]")

        t0 = time.monotonic()
        click.echo(f"Building {view_config.label.lower()} report...")
        result = build_report(
            commits,
            view_config,
            settings,
            metadata=dataset.metadata,
            filters=state.filters.to_dict(),
            sanitizer=NameSanitizer.for_commits(dataset.commits, enabled=privacy),
            is_holiday=ctx.config.holiday_calendar(),
            rng=random.Random(seed),
            visible=COMMIT_PAGE_SIZE if limit is None else limit,
        )
        click.echo(
            f"  {result.statistics.unique_authors} authors, "
            f"{result.statistics.commits_per_week} commits/week [{time.monotonic() - t0:.2f}s]"
        )
    except CommitLensError as e:
        raise click.ClickException(str(e)) from e

    t0 = time.monotonic()
    output = Path(output_path)
    serialize(result, output)
    click.echo(f"Report written to {output} [{time.monotonic() - t0:.2f}s]")
    click.echo(f"Total elapsed: {time.monotonic() - total_start:.2f}s")


@main.command()
@click.argument("kind", type=click.Choice(DETAIL_KINDS))
@click.argument("value", required=False, default="")
@click.option("--data", "files", multiple=True, type=click.Path(exists=True, dir_okay=False), help="Dataset file")
@session_options
@click.option("--sanitize/--no-sanitize", default=None, help="Replace author names with pseudonyms")
@click.option("--json", "as_json", is_flag=True, help="Print the selection as JSON")
@click.pass_obj
def detail(
    ctx: Context,
    kind: str,
    value: str,
    files: tuple[str, ...],
    view: str | None,
    utc: bool | None,
    work_start: int | None,
    work_end: int | None,
    sanitize: bool | None,
    as_json: bool,
) -> None:
    """List the commits behind one aggregate element (KIND VALUE, e.g. tag bugfix)."""
    try:
        dataset = _load_dataset(ctx, files, progress=not as_json)
        state = _apply_overrides(ctx.load_state(), view, utc, work_start, work_end)
        privacy = ctx.config.sanitize if sanitize is None else sanitize
        settings = state.settings(sanitize=privacy)
        view_config = resolve_view(state.view_level)
        sanitizer = NameSanitizer.for_commits(dataset.commits, enabled=privacy)
        commits = filter_commits(dataset.commits, state.filters)
        selection = select_detail(
            commits,
            DetailTarget(kind, value),
            view_config,
            settings,
            sanitizer=sanitizer,
            is_holiday=ctx.config.holiday_calendar(),
        )
    except CommitLensError as e:
        raise click.ClickException(str(e)) from e

    summary = selection.summary(view_config)
    rows = [commit_row(c, view_config, settings, sanitizer) for c in selection.commits]
    if as_json:
        payload = {"title": selection.title, "subtitle": selection.subtitle}
        if summary is not None:
            payload["summary"] = asdict(summary)
        else:
            payload["commits"] = [asdict(r) for r in rows]
        click.echo(json.dumps(payload, indent=2))
        return

    click.echo(f"{selection.title} ({selection.subtitle})")
    if summary is not None:
        click.echo(f"  Contributors: {summary.contributor_count}")
        click.echo(f"  Repositories: {summary.repo_count}")
        click.echo(f"  Date range: {summary.earliest} .. {summary.latest}")
        for tag, count in sorted(summary.tag_breakdown.items(), key=lambda kv: kv[1], reverse=True):
            click.echo(f"  {tag}: {count}")
        return
    for row in rows:
        author = f" {row.author}" if row.author else ""
        click.echo(f"  {row.sha[:8]} {row.timestamp[:10]}{author}: {row.subject}")


@main.group()
def filters() -> None:
    """Show or change the persisted filters."""


@filters.command("show")
@click.pass_obj
def filters_show(ctx: Context) -> None:
    state = ctx.load_state()
    click.echo(json.dumps(state.filters.to_dict(), indent=2))
    query = filters_to_query(state.filters)
    if query:
        click.echo(f"Link: ?{query}")


@filters.command("set")
@click.argument("dimension", type=click.Choice(FILTER_DIMENSIONS))
@click.argument("values", nargs=-1)
@click.option("--mode", type=click.Choice(FILTER_MODES), default=INCLUDE, help="Keep or drop matching commits")
@click.pass_obj
def filters_set(ctx: Context, dimension: str, values: tuple[str, ...], mode: str) -> None:
    """Set DIMENSION to VALUES; no values turns the dimension off."""
    state = ctx.load_state()
    try:
        spec = with_dimension(state.filters, dimension, values, mode)
    except CommitLensError as e:
        raise click.ClickException(str(e)) from e
    ctx.save_state(replace(state, filters=spec))
    click.echo(f"{dimension}: {mode} {', '.join(values) or '(off)'}")


@filters.command("dates")
@click.option("--from", "date_from", default=None, help="First day, YYYY-MM-DD (empty to clear)")
@click.option("--to", "date_to", default=None, help="Last day, YYYY-MM-DD (empty to clear)")
@click.pass_obj
def filters_dates(ctx: Context, date_from: str | None, date_to: str | None) -> None:
    state = ctx.load_state()
    try:
        spec = with_dates(state.filters, date_from, date_to)
    except CommitLensError as e:
        raise click.ClickException(str(e)) from e
    ctx.save_state(replace(state, filters=spec))
    click.echo(f"Dates: {spec.date_from or '...'} to {spec.date_to or '...'}")


@filters.command("link")
@click.argument("query")
@click.pass_obj
def filters_link(ctx: Context, query: str) -> None:
    """Replace the filters with those from a shared link's query string."""
    state = ctx.load_state()
    try:
        spec = filters_from_query(query.split("?", 1)[-1])
    except CommitLensError as e:
        raise click.ClickException(str(e)) from e
    ctx.save_state(replace(state, filters=spec))
    click.echo(f"{active_filter_count(spec)} active filter(s)")


@filters.command("clear")
@click.pass_obj
def filters_clear(ctx: Context) -> None:
    state = ctx.load_state()
    ctx.save_state(replace(state, filters=clear_filters()))
    click.echo("Filters reset to defaults")


@main.command()
@session_options
@click.pass_obj
def settings(ctx: Context, view: str | None, utc: bool | None, work_start: int | None, work_end: int | None) -> None:
    """Show the view and timing settings, persisting any that are passed."""
    state = _apply_overrides(ctx.load_state(), view, utc, work_start, work_end)
    if state.work_hour_start >= state.work_hour_end:
        raise click.BadParameter("work start must be before work end")
    if any(v is not None for v in (view, utc, work_start, work_end)):
        ctx.save_state(state)
    click.echo(f"View: {state.view_level}")
    click.echo(f"Timezone: {'UTC' if state.use_utc else 'local'}")
    click.echo(f"Work hours: {state.work_hour_start}:00-{state.work_hour_end}:00")


if __name__ == "__main__":
    main()
