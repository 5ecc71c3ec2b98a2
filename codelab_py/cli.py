"""Command-line interface for codelab_py."""

from pathlib import Path
from typing import Optional

import click
from rich.table import Table
from rich.text import Text

from . import __version__
from .client import (
    ApiClient,
    ApiError,
    AuthSession,
    Challenge,
    JudgeClient,
    Lesson,
    LessonClient,
    SubmissionResult,
)
from .config import GlobalConfig, LocalConfig
from .config.global_config import DEFAULT_PATH
from .logging_conf import setup_logging
from .utils.terminal import console, create_table, format_verdict_color, print_output
from .workspace import WorkspaceController
from .workspace.renderer import case_views


class AppContext:
    """Per-invocation wiring of config, auth session and API client."""

    def __init__(
        self,
        config_path: Optional[Path] = None,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
    ):
        self.config_path = config_path or DEFAULT_PATH
        self.config = GlobalConfig.load(self.config_path)
        # Overrides only reach the session and client; save() writes the file values
        self.session = AuthSession(token or self.config.token)
        self.session.subscribe(self._forget_token)
        self.api = ApiClient(
            base_url or self.config.base_url,
            session=self.session,
            timeout=self.config.timeout,
        )

    def _forget_token(self):
        self.config.token = ""
        self.config.save(self.config_path)
        console.print("[yellow]Session expired. Please login again.[/yellow]")

    def save(self):
        self.config.save(self.config_path)


def fail(message: str):
    """Print an error and exit with a non-zero status."""
    console.print(f"[red]{message}[/red]")
    raise click.exceptions.Exit(1)


def require_login(app: AppContext):
    if not app.session.is_authenticated:
        fail("Not logged in. Please run 'codelab login' first.")


def resolve_lesson_id(lesson_id: Optional[str]) -> Optional[str]:
    if lesson_id:
        return lesson_id
    config = LocalConfig.load()
    return config.lesson_id if config else None


def resolve_language(lang: Optional[str]) -> str:
    if lang:
        return lang
    config = LocalConfig.load()
    return config.default_language if config else "python"


def load_lesson(app: AppContext, lesson_id: str) -> Lesson:
    try:
        return LessonClient(app.api).get_lesson(lesson_id)
    except ApiError as e:
        fail(f"Failed to load lesson: {e}")


def pick_challenge(lesson: Lesson, ref: Optional[str]) -> Challenge:
    challenge = lesson.find_challenge(ref)
    if challenge is None:
        if ref is None:
            fail(f"Lesson '{lesson.title}' has no challenges.")
        fail(f"Challenge not found: {ref}")
    return challenge


@click.group()
@click.version_option(version=__version__)
@click.option("--debug", is_flag=True, default=False, help="Enable debug output")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    envvar="CODELAB_CONFIG",
    default=None,
    help="Global config file (default: ~/.codelab_py.global)",
)
@click.option(
    "--base-url",
    envvar="CODELAB_BASE_URL",
    default=None,
    help="API base URL for this invocation (not saved)",
)
@click.option(
    "--token",
    envvar="CODELAB_TOKEN",
    default=None,
    help="Session token for this invocation (not saved)",
)
@click.pass_context
def cli(
    ctx,
    debug: bool,
    config_path: Optional[Path],
    base_url: Optional[str],
    token: Optional[str],
):
    """codelab_py - CLI workspace for the learning platform."""
    setup_logging(debug)
    ctx.obj = AppContext(config_path, base_url=base_url, token=token)


@cli.command()
@click.option("--email", help="Account email")
@click.option("--password", help="Account password")
@click.pass_obj
def login(app: AppContext, email: Optional[str], password: Optional[str]):
    """Log in and save the session token."""
    if email is None:
        email = click.prompt("Email", default=app.config.email or None)
    if password is None:
        password = click.prompt("Password", hide_input=True)

    try:
        user = app.api.login(email, password)
    except ApiError as e:
        fail(f"Login failed: {e}")

    app.config.token = app.session.token
    app.config.email = email
    app.save()

    console.print(f"[green]Successfully logged in as {user.name or user.email}[/green]")


@cli.command()
@click.pass_obj
def logout(app: AppContext):
    """Forget the saved session token."""
    app.session.logout()
    app.config.token = ""
    app.save()
    console.print("[green]Logged out[/green]")


@cli.command()
@click.pass_obj
def whoami(app: AppContext):
    """Show the logged in user."""
    require_login(app)
    try:
        user = app.api.me()
    except ApiError as e:
        fail(f"Failed to fetch user: {e}")

    console.print("\n[bold cyan]User Information:[/bold cyan]")
    if user.name:
        console.print(f"[bold]Name:[/bold] {user.name}")
    console.print(f"[bold]Email:[/bold] {user.email}")
    console.print(f"[bold]Role:[/bold] {user.role}")


@cli.command()
@click.pass_obj
def courses(app: AppContext):
    """List enrolled courses and their progress."""
    require_login(app)
    try:
        enrollments = app.api.enrollments()
    except ApiError as e:
        fail(f"Failed to fetch enrollments: {e}")

    if not enrollments:
        console.print("[yellow]You are not enrolled in any course.[/yellow]")
        return

    table = create_table("Enrolled Courses", ["ID", "Title", "Progress", "Last Accessed"])
    for enrollment in enrollments:
        table.add_row(
            enrollment.course_id,
            Text(enrollment.title),
            f"{enrollment.completed_lessons}/{enrollment.total_lessons}",
            enrollment.last_accessed_at or "-",
        )
    console.print(table)


@cli.group()
def lesson():
    """Inspect and select lessons."""
    pass


@lesson.command(name="show")
@click.argument("lesson_id", required=False)
@click.pass_obj
def lesson_show(app: AppContext, lesson_id: Optional[str]):
    """Display a lesson, its challenges and visible test cases."""
    require_login(app)
    lesson_id = resolve_lesson_id(lesson_id)
    if lesson_id is None:
        fail("No lesson given and none selected. Use 'codelab lesson use'.")

    data = load_lesson(app, lesson_id)

    header = f"Lesson {data.order_index}" if data.order_index is not None else "Lesson"
    console.print(f"\n[bold cyan]{header}:[/bold cyan] {data.title} [dim]({data.type})[/dim]")
    if data.status:
        console.print(f"[bold cyan]Status:[/bold cyan] {data.status}")
    if data.prev_lesson_id or data.next_lesson_id:
        console.print(
            f"[dim]Previous: {data.prev_lesson_id or '-'}  "
            f"Next: {data.next_lesson_id or '-'}[/dim]"
        )

    if not data.challenges:
        console.print("[yellow]This lesson has no challenges.[/yellow]")
        return

    table = create_table("Challenges", ["#", "ID", "Title", "Languages", "Tests"])
    for idx, challenge in enumerate(data.challenges):
        table.add_row(
            str(idx),
            challenge.id,
            challenge.title,
            ", ".join(challenge.languages()) or "-",
            str(len(challenge.test_cases)),
        )
    console.print(table)

    for challenge in data.challenges:
        if not challenge.test_cases:
            continue
        table = Table(
            title=f"Test Cases: {challenge.title}",
            show_header=True,
            header_style="bold magenta",
        )
        table.add_column("#", style="cyan")
        table.add_column("Input", style="white")
        for case in case_views(challenge.test_cases):
            if case.hidden:
                table.add_row(str(case.ordinal), "[italic dim]Hidden test case[/italic dim]")
            else:
                table.add_row(str(case.ordinal), Text(case.input_text))
        console.print(table)


@lesson.command(name="list")
@click.argument("course_id")
@click.pass_obj
def lesson_list(app: AppContext, course_id: str):
    """List the lessons of a course."""
    require_login(app)
    try:
        lessons = LessonClient(app.api).get_course_lessons(course_id)
    except ApiError as e:
        fail(f"Failed to load course lessons: {e}")

    if not lessons:
        console.print(f"[yellow]No lessons found for course {course_id}[/yellow]")
        return

    table = create_table(f"Course {course_id}", ["#", "ID", "Title", "Type", "Status"])
    for item in lessons:
        table.add_row(
            str(item.order_index) if item.order_index is not None else "-",
            item.id,
            Text(item.title),
            item.type,
            item.status or "-",
        )
    console.print(table)


@lesson.command(name="use")
@click.argument("lesson_id")
def lesson_use(lesson_id: str):
    """Select the lesson used by run/submit in this directory."""
    config = LocalConfig.load() or LocalConfig()
    config.lesson_id = lesson_id
    config.save()
    console.print(f"[green]Using lesson {lesson_id}[/green]")


@cli.command(name="set-language")
@click.argument("language")
def set_language(language: str):
    """Choose the default language for this directory."""
    config = LocalConfig.load() or LocalConfig()
    config.default_language = language
    config.save()
    console.print(f"[green]Default language set to: {language}[/green]")


@cli.command()
@click.option("-l", "--lesson", "lesson_id", help="Lesson ID (default: from local config)")
@click.option("-c", "--challenge", "challenge_ref", help="Challenge ID or index (default: 0)")
@click.option("--lang", help="Language (default: from local config)")
@click.option("-o", "--output", type=click.Path(dir_okay=False, path_type=Path), help="Output file path")
@click.pass_obj
def starter(
    app: AppContext,
    lesson_id: Optional[str],
    challenge_ref: Optional[str],
    lang: Optional[str],
    output: Optional[Path],
):
    """Write the starter code of a challenge."""
    require_login(app)
    lesson_id = resolve_lesson_id(lesson_id)
    if lesson_id is None:
        fail("No lesson given and none selected. Use 'codelab lesson use'.")

    challenge = pick_challenge(load_lesson(app, lesson_id), challenge_ref)
    if lang and lang not in challenge.starter_codes:
        fail(
            f"No starter code for {lang}. "
            f"Available: {', '.join(challenge.languages()) or 'none'}"
        )

    workspace = WorkspaceController(
        JudgeClient(app.api),
        challenge=challenge,
        language=lang,
        default_language=resolve_language(None),
    )

    if output is None:
        click.echo(workspace.buffer.text)
        return

    output.write_text(workspace.buffer.text, encoding="utf-8")
    console.print(
        f"[green]Wrote {workspace.buffer.language} starter code for "
        f"'{challenge.title}' to {output}[/green]"
    )


def execute_file(
    app: AppContext,
    file: Path,
    lesson_id: Optional[str],
    challenge_ref: Optional[str],
    lang: Optional[str],
    submit: bool,
):
    """Load a workspace for the file and run or submit it."""
    require_login(app)
    lesson_id = resolve_lesson_id(lesson_id)

    lesson_data = None
    challenge = None
    if lesson_id is not None:
        lesson_data = load_lesson(app, lesson_id)
        challenge = pick_challenge(lesson_data, challenge_ref)
    elif submit:
        console.print("[yellow]No lesson selected; running without submitting.[/yellow]")

    def record_completion(completed: Challenge, result: SubmissionResult):
        try:
            LessonClient(app.api).complete_lesson(lesson_data.id)
        except ApiError as e:
            console.print(f"[yellow]Could not record progress: {e}[/yellow]")
            return
        console.print(f"[green]Lesson '{lesson_data.title}' marked as completed[/green]")

    workspace = WorkspaceController(
        JudgeClient(app.api),
        challenge=challenge,
        language=lang,
        on_completed=record_completion,
        default_language=resolve_language(None),
    )
    workspace.set_buffer(file.read_text(encoding="utf-8"))

    if challenge is not None:
        console.print(
            f"[cyan]{'Submitting' if submit else 'Running'} {file.name}[/cyan] "
            f"[yellow]Challenge: {challenge.title}[/yellow] "
            f"[magenta]Language: {workspace.buffer.language}[/magenta]"
        )

    with console.status("[bold green]Judging..."):
        result = workspace.submit() if submit else workspace.run()

    print_output(workspace.view())
    if result is not None:
        console.print(f"[bold]Result:[/bold] {format_verdict_color(result.verdict)}")


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("-l", "--lesson", "lesson_id", help="Lesson ID (default: from local config)")
@click.option("-c", "--challenge", "challenge_ref", help="Challenge ID or index (default: 0)")
@click.option("--lang", help="Language (default: from local config)")
@click.pass_obj
def run(
    app: AppContext,
    file: Path,
    lesson_id: Optional[str],
    challenge_ref: Optional[str],
    lang: Optional[str],
):
    """Run a solution file without submitting it."""
    execute_file(app, file, lesson_id, challenge_ref, lang, submit=False)


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("-l", "--lesson", "lesson_id", help="Lesson ID (default: from local config)")
@click.option("-c", "--challenge", "challenge_ref", help="Challenge ID or index (default: 0)")
@click.option("--lang", help="Language (default: from local config)")
@click.pass_obj
def submit(
    app: AppContext,
    file: Path,
    lesson_id: Optional[str],
    challenge_ref: Optional[str],
    lang: Optional[str],
):
    """Submit a solution file for judging."""
    execute_file(app, file, lesson_id, challenge_ref, lang, submit=True)


@cli.command()
def version():
    """Show version information."""
    console.print(f"[bold cyan]codelab_py[/bold cyan] version [green]{__version__}[/green]")
    console.print("CLI workspace for the learning platform")


def main():
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
