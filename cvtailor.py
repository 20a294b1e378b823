#!/usr/bin/env python3
"""CV Tailor - profile builder for tailored resumes."""

import asyncio
import logging
from datetime import date, datetime

import click
import httpx
import pydantic
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from api_client import ApiClient, RequestError
from config_loader import get_api_base_url, get_api_timeout, load_config
from search_selector import SearchSelector
from services import (
    AuthService,
    BuilderService,
    CatalogService,
    CertificationForm,
    CvTailorError,
    ProfileService,
    ProjectForm,
    SessionStore,
    SkillForm,
    WorkExperienceForm,
)
from services.catalog_service import RESOURCES, SEARCHABLE
from services.models import CandidateCreate, CandidateUpdate, SignUpForm
from theme_store import THEMES, ThemeState

console = Console()
logger = logging.getLogger(__name__)


HELP_TEXT = """
CV Tailor - build your professional profile for tailored resumes

WORKFLOW:
  1. Create an account    -> cvtailor signup
  2. Sign in              -> cvtailor signin
  3. Add experience       -> cvtailor experience add --company ... --role ...
  4. Add skills           -> cvtailor skill add -q python --level 4
  5. Review your profile  -> cvtailor builder

ACCOUNT:
  signup / signin / signout / whoami
  profile          View, update or delete your profile
  create-profile   Create a candidate profile without an account
  candidate        View a candidate by ID

PROFILE BUILDER:
  builder          Overview of experience, skills, certifications, projects
  experience       add | update | delete work experience
  skill            add | remove skills (search-as-you-type picker)
  cert             add | remove certifications
  project          add | remove projects

CATALOG:
  catalog          List skills, certifications, projects, job-descriptions, resumes
  search           Search skills, certifications or projects by name

SETTINGS:
  theme            Show or switch the light/dark console theme

EXAMPLES:
  cvtailor signin --email you@example.com
  cvtailor skill add -q jav --pick JavaScript --level 4
  cvtailor cert add -q aws --credential-id ABC123 --issued 2024-01-15
  cvtailor experience add --company Acme --role "Staff Engineer" --start 2021-03-01
  cvtailor search skills pyth
  cvtailor theme toggle
"""


def _default_client_factory(config: dict):
    def factory() -> ApiClient:
        return ApiClient(get_api_base_url(config), timeout=get_api_timeout(config))

    return factory


def _create_services(ctx, client: ApiClient) -> dict:
    """Create all service instances sharing one client and session store."""
    kwargs = {
        "config": ctx.obj["config"],
        "client": client,
        "sessions": ctx.obj["sessions"],
    }
    return {
        "auth": AuthService(**kwargs),
        "profile": ProfileService(**kwargs),
        "catalog": CatalogService(**kwargs),
        "builder": BuilderService(**kwargs),
    }


def _run(ctx, action):
    """Run an async action against fresh services.

    Known failures are printed inline and exit with status 1.
    """

    async def runner():
        async with ctx.obj["client_factory"]() as client:
            return await action(_create_services(ctx, client))

    try:
        return asyncio.run(runner())
    except (CvTailorError, RequestError) as e:
        console.print(f"[error]{escape(str(e))}[/error]")
    except httpx.TransportError as e:
        console.print(f"[error]Could not reach the backend: {escape(str(e))}[/error]")
    except (ValueError, pydantic.ValidationError) as e:
        logger.debug("Undecodable backend response", exc_info=True)
        console.print(f"[error]Unexpected response from the backend: {escape(str(e))}[/error]")
    ctx.exit(1)


def _format_month(value: str | None) -> str:
    """Format an ISO date as "Mar 2021"; missing dates read as "Present"."""
    if not value:
        return "Present"
    try:
        parsed = datetime.fromisoformat(value).date()
    except ValueError:
        try:
            parsed = date.fromisoformat(value[:10])
        except ValueError:
            return value
    return parsed.strftime("%b %Y")


@click.group(help=HELP_TEXT)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.pass_context
def cli(ctx, verbose: bool):
    """CV Tailor - profile builder for tailored resumes."""
    ctx.ensure_object(dict)
    if "config" not in ctx.obj:
        ctx.obj["config"] = load_config()
    if "sessions" not in ctx.obj:
        ctx.obj["sessions"] = SessionStore()
    if "client_factory" not in ctx.obj:
        ctx.obj["client_factory"] = _default_client_factory(ctx.obj["config"])
    if "themes" not in ctx.obj:
        ctx.obj["themes"] = ThemeState()

    themes = ctx.obj["themes"]
    themes.init()
    console.push_theme(themes.rich_theme())
    ctx.call_on_close(console.pop_theme)
    ctx.call_on_close(themes.close)

    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=console, show_path=False)],
        )


# ============================================================================
# Account Commands
# ============================================================================


@cli.command()
@click.option("--email", prompt=True, help="Account email.")
@click.option("--password", prompt=True, hide_input=True, help="Account password.")
@click.pass_context
def signin(ctx, email: str, password: str):
    """Sign in with email and password."""
    session = _run(ctx, lambda svc: svc["auth"].sign_in(email, password))
    console.print(f"[success]Signed in as {session.name or session.email}[/success]")


@cli.command()
@click.option("--full-name", prompt="Full name", help="Your full name.")
@click.option("--email", prompt=True, help="Account email.")
@click.option("--password", prompt=True, hide_input=True, help="At least 8 characters.")
@click.option("--confirm-password", prompt="Confirm password", hide_input=True)
@click.option("--phone", default="", help="Phone number.")
@click.option("--linkedin", default="", help="LinkedIn profile URL.")
@click.option("--github", default="", help="GitHub profile URL.")
@click.pass_context
def signup(ctx, full_name, email, password, confirm_password, phone, linkedin, github):
    """Create an account and sign in."""
    form = SignUpForm(
        full_name=full_name,
        email=email,
        password=password,
        confirm_password=confirm_password,
        phone=phone,
        linkedin=linkedin,
        github=github,
    )
    session = _run(ctx, lambda svc: svc["auth"].sign_up(form))
    console.print(f"[success]Welcome, {session.name or session.email}! You are signed in.[/success]")


@cli.command()
@click.pass_context
def signout(ctx):
    """End the current session."""
    ctx.obj["sessions"].clear()
    console.print("[success]Signed out[/success]")


@cli.command()
@click.pass_context
def whoami(ctx):
    """Show the signed-in account."""
    session = ctx.obj["sessions"].current()
    if not session:
        console.print("[warning]Not signed in. Run 'cvtailor signin'.[/warning]")
        ctx.exit(1)
    expires = datetime.fromtimestamp(session.expires_at).strftime("%H:%M")
    console.print(f"{session.name or '-'} <{session.email}> [muted](expires {expires})[/muted]")


@cli.command()
@click.option("--full-name", help="New full name.")
@click.option("--email", help="New email.")
@click.option("--phone", help="New phone number.")
@click.option("--linkedin", help="New LinkedIn URL.")
@click.option("--github", help="New GitHub URL.")
@click.option("--delete", "delete_account", is_flag=True, help="Delete your account.")
@click.pass_context
def profile(ctx, full_name, email, phone, linkedin, github, delete_account: bool):
    """View, update or delete your candidate profile."""
    if delete_account:
        if not click.confirm("Are you sure you want to delete your account?"):
            return
        _run(ctx, lambda svc: svc["profile"].delete_me())
        console.print("[success]Account deleted[/success]")
        return

    fields = {
        "full_name": full_name,
        "email": email,
        "phone": phone,
        "linkedin": linkedin,
        "github": github,
    }
    if any(value is not None for value in fields.values()):
        update = CandidateUpdate(**fields)
        candidate = _run(ctx, lambda svc: svc["profile"].update_me(update))
        console.print("[success]Profile updated[/success]")
    else:
        candidate = _run(ctx, lambda svc: svc["profile"].get_me())

    _print_candidate(candidate)


@cli.command("create-profile")
@click.option("--full-name", prompt="Full name")
@click.option("--email", prompt=True)
@click.option("--phone", default="")
@click.option("--linkedin", default="")
@click.option("--github", default="")
@click.pass_context
def create_profile(ctx, full_name, email, phone, linkedin, github):
    """Create a candidate profile without an account."""
    data = CandidateCreate(
        full_name=full_name, email=email, phone=phone, linkedin=linkedin, github=github
    )
    candidate = _run(ctx, lambda svc: svc["profile"].create_candidate(data))
    console.print(f"[success]Profile created:[/success] {candidate.id}")
    _print_candidate(candidate)


@cli.command()
@click.argument("candidate_id")
@click.pass_context
def candidate(ctx, candidate_id: str):
    """View a candidate by ID."""
    result = _run(ctx, lambda svc: svc["profile"].get_candidate(candidate_id))
    _print_candidate(result)


def _print_candidate(candidate):
    lines = [f"[bold]{candidate.full_name}[/bold]", f"[muted]{candidate.email}[/muted]"]
    for label, value in (
        ("Phone", candidate.phone),
        ("LinkedIn", candidate.linkedin),
        ("GitHub", candidate.github),
    ):
        if value:
            lines.append(f"{label}: {value}")
    console.print(Panel("\n".join(lines), title="Candidate Profile"))


# ============================================================================
# Profile Builder
# ============================================================================


@cli.command()
@click.pass_context
def builder(ctx):
    """Overview of your work experience, skills, certifications and projects."""
    snapshot = _run(ctx, lambda svc: svc["builder"].load_profile())

    console.print("\n[heading]Profile Builder[/heading]\n")

    table = Table(title=f"Work Experience ({len(snapshot.work_experience)})")
    table.add_column("ID", style="muted")
    table.add_column("Role")
    table.add_column("Company", style="info")
    table.add_column("Location")
    table.add_column("Period")
    for exp in snapshot.work_experience:
        table.add_row(
            exp.work_exp_id,
            exp.role,
            exp.company,
            exp.location or "",
            f"{_format_month(exp.start_date)} - {_format_month(exp.end_date)}",
        )
    _print_tab(table, snapshot.work_experience, "work experience", "experience add")

    table = Table(title=f"Skills ({len(snapshot.skills)})")
    table.add_column("ID", style="muted")
    table.add_column("Skill", style="info")
    table.add_column("Level", justify="right")
    table.add_column("Years", justify="right")
    for skill in snapshot.skills:
        table.add_row(
            skill.skill_id,
            skill.skill_name or "?",
            f"{skill.level}/5" if skill.level else "",
            f"{skill.years_experience:g}" if skill.years_experience else "",
        )
    _print_tab(table, snapshot.skills, "skills", "skill add")

    table = Table(title=f"Certifications ({len(snapshot.certifications)})")
    table.add_column("ID", style="muted")
    table.add_column("Certification", style="info")
    table.add_column("Credential ID")
    table.add_column("Issued")
    table.add_column("Expires")
    for cert in snapshot.certifications:
        table.add_row(
            cert.cert_id,
            cert.cert_name or "?",
            cert.credential_id or "",
            _format_month(cert.issue_date) if cert.issue_date else "",
            _format_month(cert.expiry_date) if cert.expiry_date else "",
        )
    _print_tab(table, snapshot.certifications, "certifications", "cert add")

    table = Table(title=f"Projects ({len(snapshot.projects)})")
    table.add_column("ID", style="muted")
    table.add_column("Project", style="info")
    table.add_column("URL")
    table.add_column("Period")
    for proj in snapshot.projects:
        period = ""
        if proj.start_date or proj.end_date:
            period = f"{_format_month(proj.start_date)} - {_format_month(proj.end_date)}"
        table.add_row(proj.project_id, proj.project_name or "?", proj.project_url or "", period)
    _print_tab(table, snapshot.projects, "projects", "project add")


def _print_tab(table, rows, label: str, add_command: str):
    if rows:
        console.print(table)
    else:
        console.print(
            f"[muted]No {label} added yet. Run 'cvtailor {add_command}' to get started.[/muted]"
        )
    console.print()


@cli.group()
def experience():
    """Add, update or delete work experience."""


@experience.command("add")
@click.option("--company", prompt=True)
@click.option("--role", prompt="Role/Title")
@click.option("--location", default=None)
@click.option("--details", default=None, help="Responsibilities and achievements.")
@click.option("--start", "start_date", default=None, help="Start date (YYYY-MM-DD).")
@click.option("--end", "end_date", default=None, help="End date (YYYY-MM-DD); omit if current.")
@click.pass_context
def experience_add(ctx, company, role, location, details, start_date, end_date):
    """Add a work experience entry."""

    async def action(svc):
        form = WorkExperienceForm(
            svc["builder"],
            company=company,
            role=role,
            location=location,
            details=details,
            start_date=start_date,
            end_date=end_date,
        )
        return await form.submit()

    exp = _run(ctx, action)
    console.print(f"[success]Added:[/success] {exp.role} at {exp.company} [muted]({exp.work_exp_id})[/muted]")


@experience.command("update")
@click.argument("work_exp_id")
@click.option("--company", default=None)
@click.option("--role", default=None)
@click.option("--location", default=None)
@click.option("--details", default=None)
@click.option("--start", "start_date", default=None)
@click.option("--end", "end_date", default=None)
@click.pass_context
def experience_update(ctx, work_exp_id, **changes):
    """Update a work experience entry; unspecified fields are kept."""

    async def action(svc):
        entries = await svc["builder"].list_work_experience()
        current = next((e for e in entries if e.work_exp_id == work_exp_id), None)
        if current is None:
            raise CvTailorError(f"Work experience not found: {work_exp_id}")
        fields = {key: value for key, value in changes.items() if value is not None}
        form = WorkExperienceForm(svc["builder"], editing=current, **fields)
        return await form.submit()

    exp = _run(ctx, action)
    console.print(f"[success]Updated:[/success] {exp.role} at {exp.company}")


@experience.command("delete")
@click.argument("work_exp_id")
@click.option("--yes", is_flag=True, help="Skip confirmation.")
@click.pass_context
def experience_delete(ctx, work_exp_id: str, yes: bool):
    """Delete a work experience entry."""
    if not yes and not click.confirm("Are you sure you want to delete this work experience?"):
        return
    _run(ctx, lambda svc: svc["builder"].delete_work_experience(work_exp_id))
    console.print(f"[success]Deleted work experience {work_exp_id}[/success]")


async def _pick(selector: SearchSelector, label: str, query: str | None, pick: str | None) -> None:
    """Drive the search selector from the terminal.

    Each prompt answer is one edit of the query text. With --pick the first
    result whose name matches (case-insensitive) is selected and no prompts
    are shown.
    """
    text = query
    while True:
        if text is None:
            if pick:
                return
            text = click.prompt(f"Search {label}s")

        selector.set_query(text)
        await selector.wait_settled()

        if selector.error:
            console.print(f"[error]{selector.error}[/error]")
        elif selector.no_results:
            console.print(f"[warning]No {label}s found for '{selector.query}'[/warning]")
        elif not selector.is_open:
            console.print(
                f"[muted]Type at least {selector.min_query_length} characters to search[/muted]"
            )
        elif pick:
            match = next(
                (r for r in selector.results if r.display_name.lower() == pick.lower()), None
            )
            if match is None:
                console.print(f"[warning]No {label} named '{pick}' in the results[/warning]")
                return
            selector.select(match)
            return
        else:
            for i, item in enumerate(selector.results, 1):
                console.print(f"  [info]{i:>2}[/info]  {item.display_name}")
            choice = click.prompt(
                "Pick a number, or press Enter to search again",
                default="",
                show_default=False,
            )
            if choice.isdigit() and 1 <= int(choice) <= len(selector.results):
                item = selector.select(selector.results[int(choice) - 1])
                console.print(f"Selected [info]{item.display_name}[/info]")
                return
            selector.dismiss()

        text = None


async def _submit_picker_form(form, label: str, query: str | None, pick: str | None):
    try:
        await _pick(form.selector, label, query, pick)
        return await form.submit()
    finally:
        await form.aclose()


@cli.group()
def skill():
    """Add or remove skills."""


@skill.command("add")
@click.option("--query", "-q", help="Initial search text.")
@click.option("--pick", help="Select the result with this exact name (no prompts).")
@click.option("--level", type=click.IntRange(1, 5), help="Proficiency 1 (beginner) - 5 (expert).")
@click.option("--years", type=click.FloatRange(min=0), help="Years of experience.")
@click.pass_context
def skill_add(ctx, query, pick, level, years):
    """Search the skill catalog and add one to your profile."""

    async def action(svc):
        form = SkillForm(svc["catalog"], svc["builder"], level=level, years_experience=years)
        return await _submit_picker_form(form, "skill", query, pick)

    added = _run(ctx, action)
    console.print(f"[success]Added skill {added.skill_name or added.skill_id}[/success]")


@skill.command("remove")
@click.argument("skill_id")
@click.option("--yes", is_flag=True, help="Skip confirmation.")
@click.pass_context
def skill_remove(ctx, skill_id: str, yes: bool):
    """Remove a skill from your profile."""
    if not yes and not click.confirm("Are you sure you want to remove this skill?"):
        return
    _run(ctx, lambda svc: svc["builder"].remove_skill(skill_id))
    console.print(f"[success]Removed skill {skill_id}[/success]")


@cli.group()
def cert():
    """Add or remove certifications."""


@cert.command("add")
@click.option("--query", "-q", help="Initial search text.")
@click.option("--pick", help="Select the result with this exact name (no prompts).")
@click.option("--credential-id", default=None)
@click.option("--issued", "issue_date", default=None, help="Issue date (YYYY-MM-DD).")
@click.option("--expires", "expiry_date", default=None, help="Expiry date (YYYY-MM-DD).")
@click.pass_context
def cert_add(ctx, query, pick, credential_id, issue_date, expiry_date):
    """Search the certification catalog and add one to your profile."""

    async def action(svc):
        form = CertificationForm(
            svc["catalog"],
            svc["builder"],
            credential_id=credential_id,
            issue_date=issue_date,
            expiry_date=expiry_date,
        )
        return await _submit_picker_form(form, "certification", query, pick)

    added = _run(ctx, action)
    console.print(f"[success]Added certification {added.cert_name or added.cert_id}[/success]")


@cert.command("remove")
@click.argument("cert_id")
@click.option("--yes", is_flag=True, help="Skip confirmation.")
@click.pass_context
def cert_remove(ctx, cert_id: str, yes: bool):
    """Remove a certification from your profile."""
    if not yes and not click.confirm("Are you sure you want to remove this certification?"):
        return
    _run(ctx, lambda svc: svc["builder"].remove_certification(cert_id))
    console.print(f"[success]Removed certification {cert_id}[/success]")


@cli.group()
def project():
    """Add or remove projects."""


@project.command("add")
@click.option("--query", "-q", help="Initial search text.")
@click.option("--pick", help="Select the result with this exact name (no prompts).")
@click.option("--start", "start_date", default=None, help="Start date (YYYY-MM-DD).")
@click.option("--end", "end_date", default=None, help="End date (YYYY-MM-DD).")
@click.pass_context
def project_add(ctx, query, pick, start_date, end_date):
    """Search the project catalog and add one to your profile."""

    async def action(svc):
        form = ProjectForm(
            svc["catalog"], svc["builder"], start_date=start_date, end_date=end_date
        )
        return await _submit_picker_form(form, "project", query, pick)

    added = _run(ctx, action)
    console.print(f"[success]Added project {added.project_name or added.project_id}[/success]")


@project.command("remove")
@click.argument("project_id")
@click.option("--yes", is_flag=True, help="Skip confirmation.")
@click.pass_context
def project_remove(ctx, project_id: str, yes: bool):
    """Remove a project from your profile."""
    if not yes and not click.confirm("Are you sure you want to remove this project?"):
        return
    _run(ctx, lambda svc: svc["builder"].remove_project(project_id))
    console.print(f"[success]Removed project {project_id}[/success]")


# ============================================================================
# Catalog Commands
# ============================================================================


@cli.command()
@click.argument("resource", type=click.Choice(list(RESOURCES)))
@click.option("--skip", default=0, show_default=True)
@click.option("--limit", default=100, show_default=True)
@click.pass_context
def catalog(ctx, resource: str, skip: int, limit: int):
    """List catalog entries."""
    items = _run(ctx, lambda svc: svc["catalog"].list_items(resource, skip, limit))

    if not items:
        console.print(f"[warning]No {resource} found.[/warning]")
        return

    rows = [item.model_dump() for item in items]
    columns = [key for key in rows[0] if any(row.get(key) is not None for row in rows)]
    table = Table(title=f"{resource.replace('-', ' ').title()} ({len(items)})")
    for column in columns:
        table.add_column(column)
    for row in rows:
        table.add_row(*("" if row.get(c) is None else str(row[c]) for c in columns))
    console.print(table)


@cli.command()
@click.argument("resource", type=click.Choice(list(SEARCHABLE)))
@click.argument("text")
@click.option("--limit", default=10, show_default=True)
@click.pass_context
def search(ctx, resource: str, text: str, limit: int):
    """Search a catalog by partial name."""
    results = _run(ctx, lambda svc: svc["catalog"].search_items(resource, text, limit))

    if not results:
        console.print(f"[warning]No {resource} found for '{text}'[/warning]")
        return
    for item in results:
        console.print(f"  [muted]{item.id}[/muted]  {item.display_name}")


# ============================================================================
# Settings
# ============================================================================


@cli.command()
@click.argument("choice", required=False, type=click.Choice([*THEMES, "toggle"]))
@click.pass_context
def theme(ctx, choice: str | None):
    """Show or change the console theme."""
    themes = ctx.obj["themes"]
    if choice == "toggle":
        themes.toggle_theme()
    elif choice:
        themes.set_theme(choice)
    console.push_theme(themes.rich_theme())
    ctx.call_on_close(console.pop_theme)
    console.print(f"Theme: [heading]{themes.get_theme()}[/heading]")


if __name__ == "__main__":
    cli()
