"""
LeadSync CLI - command line interface.
"""

import sys
from pathlib import Path
from typing import NoReturn

import click
from dotenv import load_dotenv
from pydantic import ValidationError

from .logger import ProgressLogger
from .models import LEAD_STATUSES, Group, PlatformConnection, Profile, ProfileInput
from .platforms import ALL_PLATFORMS, parse_platform
from .search import GroundedSearch
from .store import JsonFileBlobStore, NotFoundError, Workspace, get_store_path

# Load environment variables
load_dotenv()


def _workspace(ctx: click.Context) -> Workspace:
    logger = ProgressLogger(verbose=ctx.obj.get("verbose", False))
    return Workspace(JsonFileBlobStore(ctx.obj["store_path"], logger=logger), logger=logger)


def _fail(msg: str) -> NoReturn:
    click.echo(f"Error: {msg}", err=True)
    sys.exit(1)


def _validation_message(e: ValidationError) -> str:
    return "; ".join(f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors())


def _get_profile(ws: Workspace, ref: str) -> Profile:
    try:
        return ws.get_profile(ref)
    except NotFoundError:
        _fail(f"Profile not found: {ref}")


def _get_search() -> GroundedSearch:
    from . import search

    try:
        return search.get_search()
    except ValueError as e:
        _fail(f"{e}. Set OPENAI_API_KEY in .env")


@click.group()
@click.version_option(version="0.1.0", prog_name="leadsync")
@click.option(
    "--store",
    type=click.Path(path_type=Path),
    default=None,
    help="Store file (default: $LEADSYNC_STORE or ~/.leadsync/store.json)",
)
@click.option("--verbose", "-v", is_flag=True, help="Show prompts and skipped duplicate leads")
@click.pass_context
def main(ctx: click.Context, store: Path | None, verbose: bool) -> None:
    """LeadSync - organic social leads from keyword profiles"""
    ctx.ensure_object(dict)
    ctx.obj["store_path"] = store or get_store_path()
    ctx.obj["verbose"] = verbose


@main.command()
@click.pass_context
def check(ctx: click.Context) -> None:
    """Check configuration."""
    import os

    from .prompts import LOOKBACK_DAYS
    from .search import DEFAULT_TIMEOUT, OpenAIGroundedSearch

    click.echo("Checking configuration...\n")

    openai_key = os.getenv("OPENAI_API_KEY")
    if openai_key:
        click.echo(f"  OPENAI_API_KEY: {openai_key[:8]}...{openai_key[-4:]}")
    else:
        click.echo("  OPENAI_API_KEY: NOT SET (required for scans)")

    click.echo(f"  Model:          {os.getenv('LEADSYNC_MODEL', OpenAIGroundedSearch.DEFAULT_MODEL)}")
    click.echo(f"  Timeout:        {os.getenv('LEADSYNC_TIMEOUT', str(DEFAULT_TIMEOUT))}s")
    click.echo(f"  Lookback:       {LOOKBACK_DAYS} days")
    click.echo(f"  Store:          {ctx.obj['store_path']}")

    if not openai_key:
        click.echo("\nMissing keys. Copy env.example to .env and fill in your values.")
        sys.exit(1)
    click.echo("\nReady to scan!")


# =============================================================================
# PROFILES
# =============================================================================


@main.group()
def profile() -> None:
    """Manage keyword profiles."""
    pass


def _profile_input(
    name: str, keywords: str, exclude: str, niche: str, location: str
) -> ProfileInput:
    from .profiles import split_phrases

    try:
        return ProfileInput(
            name=name,
            keywords=split_phrases(keywords),
            exclude_keywords=split_phrases(exclude),
            niche=niche,
            location=location,
        )
    except ValidationError as e:
        _fail(f"Invalid profile: {_validation_message(e)}")


@profile.command("create")
@click.option("--name", "-n", required=True, help="Profile name")
@click.option("--keywords", "-k", required=True, help="Comma-separated keywords")
@click.option("--exclude", "-x", default="", help="Comma-separated keywords to exclude")
@click.option("--niche", default="Business", help="Business niche")
@click.option("--location", "-l", default="Global", help="Target location")
@click.pass_context
def profile_create(
    ctx: click.Context, name: str, keywords: str, exclude: str, niche: str, location: str
) -> None:
    """Create a profile."""
    data = _profile_input(name, keywords, exclude, niche, location)
    p = _workspace(ctx).create_profile(data)
    click.echo(f"Created profile {p.name} ({p.id})")


@profile.command("list")
@click.pass_context
def profile_list(ctx: click.Context) -> None:
    """List saved profiles."""
    ws = _workspace(ctx)
    profiles = sorted(ws.load_profiles(), key=lambda p: p.created_at)
    if not profiles:
        click.echo("No profiles found. Create one with: leadsync profile create")
        return

    leads = ws.load_leads()
    click.echo(f"\nProfiles ({len(profiles)})\n")
    click.echo(f"{'Name':<25} {'Leads':<7} {'Location':<20} {'Keywords'}")
    click.echo("-" * 75)
    for p in profiles:
        count = sum(1 for lead in leads if lead.file_id == p.id)
        keywords = ", ".join(p.keywords)
        preview = keywords[:30] + "..." if len(keywords) > 30 else keywords
        click.echo(f"{p.name:<25} {count:<7} {p.location:<20} {preview}")


@profile.command("show")
@click.argument("ref")
@click.pass_context
def profile_show(ctx: click.Context, ref: str) -> None:
    """Show a profile (by id or name)."""
    p = _get_profile(_workspace(ctx), ref)
    click.echo(f"\nProfile: {p.name}")
    click.echo("-" * 40)
    click.echo(f"ID:         {p.id}")
    click.echo(f"Niche:      {p.niche}")
    click.echo(f"Location:   {p.location}")
    click.echo(f"Keywords:   {', '.join(p.keywords)}")
    click.echo(f"Excluded:   {', '.join(p.exclude_keywords) or '-'}")
    click.echo(f"Created:    {p.created_at.isoformat(timespec='seconds')}")


@profile.command("edit")
@click.argument("ref")
@click.option("--name", "-n", default=None)
@click.option("--keywords", "-k", default=None, help="Comma-separated keywords")
@click.option("--exclude", "-x", default=None, help="Comma-separated keywords to exclude")
@click.option("--niche", default=None)
@click.option("--location", "-l", default=None)
@click.pass_context
def profile_edit(
    ctx: click.Context,
    ref: str,
    name: str | None,
    keywords: str | None,
    exclude: str | None,
    niche: str | None,
    location: str | None,
) -> None:
    """Edit a profile. Omitted options keep their current value."""
    ws = _workspace(ctx)
    p = _get_profile(ws, ref)
    data = _profile_input(
        name if name is not None else p.name,
        keywords if keywords is not None else ", ".join(p.keywords),
        exclude if exclude is not None else ", ".join(p.exclude_keywords),
        niche if niche is not None else p.niche,
        location if location is not None else p.location,
    )
    updated = ws.update_profile(p.id, data)
    click.echo(f"Updated profile {updated.name}")


@profile.command("delete")
@click.argument("ref")
@click.confirmation_option(prompt="Delete this profile and all of its leads?")
@click.pass_context
def profile_delete(ctx: click.Context, ref: str) -> None:
    """Delete a profile and its leads."""
    ws = _workspace(ctx)
    p = _get_profile(ws, ref)
    removed = ws.delete_profile(p.id)
    click.echo(f"Deleted profile {p.name} ({removed} leads removed)")


@profile.command("import")
@click.argument("path", type=click.Path(exists=True, path_type=Path))
@click.pass_context
def profile_import(ctx: click.Context, path: Path) -> None:
    """Create a profile from a YAML file."""
    from .profiles import load_profile_file

    try:
        data = load_profile_file(path)
    except ValidationError as e:
        _fail(f"Invalid profile file: {_validation_message(e)}")
    except ValueError as e:
        _fail(str(e))
    p = _workspace(ctx).create_profile(data)
    click.echo(f"Imported profile {p.name} ({p.id})")


@profile.command("export")
@click.argument("ref")
@click.argument("path", type=click.Path(path_type=Path))
@click.pass_context
def profile_export(ctx: click.Context, ref: str, path: Path) -> None:
    """Write a profile to a YAML file."""
    from .profiles import dump_profile

    p = _get_profile(_workspace(ctx), ref)
    click.echo(f"Saved {dump_profile(p, path)}")


# =============================================================================
# SCANNING
# =============================================================================


@main.command()
@click.argument("refs", nargs=-1)
@click.option("--all", "scan_all", is_flag=True, help="Scan every profile")
@click.option(
    "--platform",
    "-p",
    type=click.Choice([p for p in ALL_PLATFORMS if p != "Web"], case_sensitive=False),
    default=None,
    help="Restrict the scan to one platform",
)
@click.option("--group", "group_urls", multiple=True, help="Restrict to a community URL")
@click.option("--saved-groups", is_flag=True, help="Restrict to groups saved for the niche")
@click.option("--seed", type=int, default=None, help="Seed for relevance scores")
@click.option("--workers", type=int, default=4, help="Concurrent scans when scanning several")
@click.pass_context
def scan(
    ctx: click.Context,
    refs: tuple[str, ...],
    scan_all: bool,
    platform: str | None,
    group_urls: tuple[str, ...],
    saved_groups: bool,
    seed: int | None,
    workers: int,
) -> None:
    """Scan profiles for new leads."""
    from .assembler import RelevanceScorer, new_id
    from .pipeline import Scanner

    ws = _workspace(ctx)
    if scan_all:
        profiles = ws.load_profiles()
    elif refs:
        profiles = [_get_profile(ws, ref) for ref in refs]
    else:
        _fail("Give at least one profile (id or name) or --all")
    if not profiles:
        click.echo("No profiles to scan.")
        return

    chosen = parse_platform(platform) if platform else None
    scanner = Scanner(_get_search(), scorer=RelevanceScorer(seed), logger=ws.logger)
    ws.logger.phase("Scanning", f"{len(profiles)} profile(s)")

    targets = [Group(id=new_id("group"), name=url, url=url) for url in group_urls]
    if chosen == "Nextdoor" and not targets:
        for conn in ws.load_connections():
            if conn.platform == "Nextdoor" and conn.neighborhood_url:
                name = conn.account_name or "Nextdoor neighborhood"
                targets.append(Group(id=new_id("group"), name=name, url=conn.neighborhood_url))

    if targets or saved_groups:
        results = []
        for i, p in enumerate(profiles, 1):
            scope = targets or [g for g in ws.load_groups() if g.niche == p.niche]
            if not scope:
                ws.logger.warning(f"No saved groups for niche {p.niche}; skipping {p.name}")
                continue
            ws.logger.scan(p.name, i, len(profiles), f"{len(scope)} groups")
            results.append(scanner.scan(p, chosen, scope))
    else:
        results = scanner.scan_many(profiles, chosen, max_workers=workers)

    total_added = 0
    errors = 0
    for result in results:
        if not result.ok:
            errors += 1
            click.echo(f"  - {result.error}", err=True)
            continue
        total_added += len(ws.add_leads(result.leads))

    ws.logger.finish(total_added, errors)
    click.echo(f"\nAdded {total_added} new leads")


@main.command()
@click.argument("ref")
@click.option(
    "--platform",
    "-p",
    type=click.Choice(["Facebook", "Reddit", "Nextdoor", "Telegram"], case_sensitive=False),
    default="Facebook",
)
@click.option("--save/--no-save", default=True, help="Keep discovered groups for --saved-groups")
@click.pass_context
def groups(ctx: click.Context, ref: str, platform: str, save: bool) -> None:
    """Discover communities for a profile's niche and location."""
    from .pipeline import Scanner

    ws = _workspace(ctx)
    p = _get_profile(ws, ref)
    result = Scanner(_get_search(), logger=ws.logger).discover_groups(p, parse_platform(platform))
    if not result.ok:
        _fail(result.error or "Group search failed")

    if not result.groups:
        click.echo("No groups found.")
        return
    click.echo(f"\nFound {len(result.groups)} groups:\n")
    for g in result.groups:
        click.echo(f"  {g.name}")
        click.echo(f"    {g.url}")
    if save:
        added = ws.save_groups(result.groups)
        click.echo(f"\nSaved {len(added)} new groups")


@main.command()
@click.option("--name", "-n", required=True, help="Neighborhood name")
@click.option("--url", "-u", required=True, help="Neighborhood URL")
@click.pass_context
def connect(ctx: click.Context, name: str, url: str) -> None:
    """Link a Nextdoor neighborhood feed for --platform Nextdoor scans."""
    conn = _workspace(ctx).connect_platform(
        PlatformConnection(platform="Nextdoor", account_name=name, neighborhood_url=url)
    )
    click.echo(f"Connected Nextdoor: {conn.account_name} ({conn.neighborhood_url})")


# =============================================================================
# LEADS
# =============================================================================


@main.group()
def leads() -> None:
    """Browse and update leads."""
    pass


@leads.command("list")
@click.option("--profile", "profile_ref", default=None, help="Only leads for this profile")
@click.option("--status", type=click.Choice(LEAD_STATUSES), default=None)
@click.option("--sort", type=click.Choice(["recent", "relevance"]), default="recent")
@click.option("--limit", type=int, default=50)
@click.pass_context
def leads_list(
    ctx: click.Context, profile_ref: str | None, status: str | None, sort: str, limit: int
) -> None:
    """List stored leads."""
    from .dedupe import sort_leads

    ws = _workspace(ctx)
    items = ws.load_leads()
    if profile_ref:
        profile_id = _get_profile(ws, profile_ref).id
        items = [lead for lead in items if lead.file_id == profile_id]
    if status:
        items = [lead for lead in items if lead.status == status]
    items = sort_leads(items, by=sort)  # type: ignore[arg-type]

    if not items:
        click.echo("No leads found.")
        return
    click.echo(f"\nLeads ({len(items)})\n")
    for lead in items[:limit]:
        click.echo(f"  [{lead.relevance_score}] {lead.platform:<10} {lead.title[:60]}")
        click.echo(f"    {lead.url}")
        click.echo(f"    {lead.id}  {lead.status}  {lead.detected_at.date().isoformat()}")
    if len(items) > limit:
        click.echo(f"\n  ... and {len(items) - limit} more")


@leads.command("status")
@click.argument("lead_id")
@click.argument("status", type=click.Choice(LEAD_STATUSES))
@click.pass_context
def leads_status(ctx: click.Context, lead_id: str, status: str) -> None:
    """Set a lead's outreach status."""
    try:
        lead = _workspace(ctx).set_lead_status(lead_id, status)  # type: ignore[arg-type]
    except NotFoundError:
        _fail(f"Lead not found: {lead_id}")
    click.echo(f"{lead.id} -> {lead.status}")


@leads.command("analyze")
@click.argument("lead_id")
@click.pass_context
def leads_analyze(ctx: click.Context, lead_id: str) -> None:
    """Suggest an outreach strategy for a lead."""
    from .pipeline import Scanner

    ws = _workspace(ctx)
    lead = next((lead for lead in ws.load_leads() if lead.id == lead_id), None)
    if lead is None:
        _fail(f"Lead not found: {lead_id}")
    click.echo(Scanner(_get_search(), logger=ws.logger).analyze_lead(lead))


# =============================================================================
# EXPORT
# =============================================================================


@main.command()
@click.option("--output", "-o", type=click.Path(path_type=Path), required=True)
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["csv", "xlsx", "json", "report"]),
    default=None,
    help="Output format (default: from file extension)",
)
@click.option("--profile", "profile_ref", default=None, help="Only leads for this profile")
@click.pass_context
def export(ctx: click.Context, output: Path, fmt: str | None, profile_ref: str | None) -> None:
    """Export leads to CSV, Excel, JSON or a markdown report."""
    from .dedupe import sort_leads
    from .exporter import export_csv, export_excel, export_json, generate_report

    ws = _workspace(ctx)
    items = ws.load_leads()
    if profile_ref:
        profile_id = _get_profile(ws, profile_ref).id
        items = [lead for lead in items if lead.file_id == profile_id]
    items = sort_leads(items)

    fmt = fmt or {".xlsx": "xlsx", ".json": "json", ".md": "report"}.get(output.suffix, "csv")
    if fmt == "xlsx":
        count = export_excel(items, output)
    elif fmt == "json":
        count = export_json(items, output)
    elif fmt == "report":
        generate_report(items, ws.load_profiles(), output)
        count = len(items)
    else:
        count = export_csv(items, output)
    click.echo(f"Exported {count} leads to {output}")


if __name__ == "__main__":
    main()
