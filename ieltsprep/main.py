"""Main application entry point for the IELTS practice client."""

import asyncio
import sys
import logging
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from . import __version__
from .api.client import ApiClient
from .audio.recorder import Recorder
from .config import IeltsPrepConfig
from .errors import IeltsPrepError, NetworkFailure
from .models.audio import AudioBlob
from .models.auth import ROLE_ADMIN
from .services.auth_service import (
    LOGIN_ROUTE,
    TEST_TAKER_DASHBOARD_ROUTE,
    AuthContext,
    AuthService,
    check_route,
    dashboard_route_for,
)
from .services.practice_service import PRACTICE_CARDS, PracticeService
from .services.response_session import ResponseSession
from .services.submission_service import ResponsePayload, Submitter
from .storage.credential_store import CredentialStore
from .ui import catalog_view
from .ui.countdown_screen import CountdownScreen
from .ui.response_screen import ResponseScreen

logger = logging.getLogger(__name__)

LOAD_FAILED_MESSAGE = "Failed to load tests. Is the backend running?"


def setup_logging(config: IeltsPrepConfig, level: str = "INFO") -> None:
    """Set up logging configuration from YAML config."""
    log_file_path = config.get('logging.file_path', 'data/logs/ieltsprep.log')
    console_output = config.get('logging.console_output', True)

    log_dir = Path(log_file_path).parent
    log_dir.mkdir(parents=True, exist_ok=True)

    handlers = []

    # File handler - always write to file
    file_handler = logging.FileHandler(log_file_path)
    file_handler.setLevel(logging.DEBUG)
    file_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
    )
    file_handler.setFormatter(file_formatter)
    handlers.append(file_handler)

    # Console handler - warnings and above, only if enabled in config
    if console_output:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(logging.WARNING)
        console_formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        console_handler.setFormatter(console_formatter)
        handlers.append(console_handler)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, level.upper()))
    for handler in handlers:
        root_logger.addHandler(handler)

    logger.info("=" * 50)
    logger.info("IELTS practice client starting up")
    logger.info(f"Log file: {log_file_path}")
    logger.info(f"Log level set to: {level}")
    logger.info("=" * 50)


class App:
    """Objects shared by every command: config, console and the login."""

    def __init__(self, config_path: Optional[str], log_level: Optional[str]):
        self.config = IeltsPrepConfig(config_path)
        setup_logging(self.config, log_level or self.config.get('logging.level', 'INFO'))
        self.console = Console()
        self.auth = AuthContext(CredentialStore(self.config.get_data_directory()))

    @property
    def placeholder_mime_type(self) -> str:
        return self.config.get('audio.mime_type', 'audio/wav')

    def client(self) -> ApiClient:
        return ApiClient.from_config(self.config, token=self.auth.token)

    def fail(self, message: str) -> None:
        catalog_view.render_message(self.console, message, error=True)
        sys.exit(1)

    def require(self, route: str) -> None:
        """Exit with a redirect notice unless the login may open ``route``."""
        redirect = check_route(self.auth, route)
        if redirect is None:
            return
        logger.info(f"Access to {route} denied, redirecting to {redirect}")
        if redirect == LOGIN_ROUTE:
            self.fail("Please log in first: ieltsprep login")
        self.fail(f"Your account ({self.auth.role}) cannot open {route}")


pass_app = click.make_pass_decorator(App)


@click.group()
@click.option("--config", "config_path", type=click.Path(dir_okay=False),
              help="Path to configuration YAML file (default: ./ieltsprep.yaml)")
@click.option("--log-level", type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
              help="Set logging level (default: from config)")
@click.version_option(version=__version__, prog_name="ieltsprep")
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[str], log_level: Optional[str]) -> None:
    """IELTS speaking & listening practice from the terminal."""
    ctx.obj = App(config_path, log_level)


# Auth

@cli.command()
@click.option("--email", prompt=True)
@click.option("--password", prompt=True, hide_input=True)
@pass_app
def login(app: App, email: str, password: str) -> None:
    """Log in and remember the account."""
    service = AuthService(app.client(), app.auth)
    try:
        user = asyncio.run(service.login(email, password))
    except IeltsPrepError as e:
        app.fail(e.message)
    app.console.print(f"Logged in as {user.email} ({user.role})", style="bold green")
    app.console.print(f"Dashboard: {dashboard_route_for(user.role)} (ieltsprep dashboard)")


@cli.command()
@pass_app
def logout(app: App) -> None:
    """Forget the stored account."""
    AuthService(app.client(), app.auth).logout()
    app.console.print("Logged out", style="bold blue")


@cli.command()
@pass_app
def whoami(app: App) -> None:
    """Show the logged-in account."""
    if not app.auth.is_authenticated:
        app.console.print("Not logged in", style="dim")
        return
    app.console.print(f"{app.auth.user.email} ({app.auth.role})")


# Dashboards and practice

@cli.command()
@pass_app
def dashboard(app: App) -> None:
    """Open the dashboard for the logged-in role."""
    route = dashboard_route_for(app.auth.role)
    app.require(route)
    if app.auth.role == ROLE_ADMIN:
        _show_admin_dashboard(app)
    else:
        catalog_view.render_dashboard(app.console, PRACTICE_CARDS)


def _show_admin_dashboard(app: App) -> None:
    async def load():
        async with app.client() as client:
            return (await client.list_speaking_tests(),
                    await client.list_sample_questions(),
                    await client.list_listening_tests())

    try:
        speaking, samples, listening = asyncio.run(load())
    except NetworkFailure as e:
        logger.error(f"Admin dashboard load failed: {e}")
        app.fail(LOAD_FAILED_MESSAGE)

    table = Table(title="Admin Dashboard", header_style="bold magenta")
    table.add_column("Catalog")
    table.add_column("Entries", justify="right", style="cyan")
    table.add_row("Speaking tests", str(len(speaking)))
    table.add_row("Sample questions", str(len(samples)))
    table.add_row("Listening tests", str(len(listening)))
    app.console.print(table)


@cli.command()
@click.option("--part", "question_id", type=int, help="Question/part number; random when omitted")
@click.option("--text", default="", help="Written response sent with (or instead of) the recording")
@click.option("--save", "save_path", type=click.Path(dir_okay=False),
              help="Where to save the recording after submitting")
@pass_app
def practice(app: App, question_id: Optional[int], text: str, save_path: Optional[str]) -> None:
    """Answer a speaking question: record, review and submit."""
    app.require(TEST_TAKER_DASHBOARD_ROUTE)
    practice_service = PracticeService()
    try:
        question = practice_service.pick(question_id)
    except IeltsPrepError as e:
        app.fail(e.message)

    session = ResponseSession(
        test_id=question.id,
        recorder=Recorder.from_config(app.config),
        submitter=Submitter(app.client(), app.placeholder_mime_type),
    )
    session.text = text
    screen = ResponseScreen(session, question=question, console=app.console, save_path=save_path)
    if screen.run():
        practice_service.mark_answered(question.id)
        app.console.print(session.message, style="bold green")
        app.console.print(f"You have answered {practice_service.answered_count} question(s) in this session.")


@cli.command()
@click.option("--test-id", type=int, required=True, help="Speaking test the answer belongs to")
@click.option("--audio", "audio_path", type=click.Path(exists=True, dir_okay=False),
              help="Recorded answer to upload")
@click.option("--text", default="", help="Written response")
@pass_app
def submit(app: App, test_id: int, audio_path: Optional[str], text: str) -> None:
    """Submit an existing recording and/or text without the interactive screen."""
    audio = AudioBlob.from_file(audio_path) if audio_path else None
    payload = ResponsePayload(test_id=test_id, text=text, audio=audio)

    async def deliver():
        async with app.client() as client:
            return await Submitter(client, app.placeholder_mime_type).submit(payload)

    try:
        result = asyncio.run(deliver())
    except IeltsPrepError as e:
        app.fail(e.message)

    for attempt in result.attempts:
        status = "ok" if attempt.ok else f"failed ({attempt.error})"
        app.console.print(f"  {attempt.strategy} {attempt.path}: {status}", style="dim")
    if not result.success:
        app.fail(result.error)
    suffix = f" (id {result.server_id})" if result.server_id else ""
    app.console.print(f"Response submitted successfully!{suffix}", style="bold green")


@cli.command()
@click.option("--minutes", type=float, help="Countdown length (default: practice.countdown_minutes)")
@pass_app
def timer(app: App, minutes: Optional[float]) -> None:
    """Countdown timer with pause/resume."""
    minutes = minutes if minutes is not None else app.config.get('practice.countdown_minutes', 2)
    if CountdownScreen(minutes, console=app.console).run():
        app.console.print("Time is up!", style="bold red")


@cli.command()
@pass_app
def instructions(app: App) -> None:
    """Show the speaking test instructions."""
    catalog_view.render_instructions(app.console)


# Speaking tests

@cli.group()
def speaking() -> None:
    """Manage speaking tests."""


@speaking.command("list")
@pass_app
def speaking_list(app: App) -> None:
    try:
        tests = asyncio.run(app.client().list_speaking_tests())
    except NetworkFailure as e:
        logger.error(f"Listing speaking tests failed: {e}")
        app.fail(LOAD_FAILED_MESSAGE)
    catalog_view.render_speaking_tests(app.console, tests)


@speaking.command("create")
@click.argument("question")
@pass_app
def speaking_create(app: App, question: str) -> None:
    if not question.strip():
        app.fail("Question cannot be empty")
    try:
        test = asyncio.run(app.client().create_speaking_test(question))
    except NetworkFailure as e:
        app.fail(f"Failed to create test: {e.message}")
    app.console.print(f"Created speaking test {test.id}", style="bold green")


@speaking.command("delete")
@click.argument("test_id", type=int)
@pass_app
def speaking_delete(app: App, test_id: int) -> None:
    try:
        asyncio.run(app.client().delete_speaking_test(test_id))
    except NetworkFailure as e:
        logger.error(f"Deleting speaking test {test_id} failed: {e}")
        app.fail("Failed to delete test")
    app.console.print(f"Deleted speaking test {test_id}")


# Sample questions

@cli.group()
def samples() -> None:
    """Manage sample speaking questions."""


@samples.command("list")
@pass_app
def samples_list(app: App) -> None:
    try:
        questions = asyncio.run(app.client().list_sample_questions())
    except NetworkFailure as e:
        logger.error(f"Listing sample questions failed: {e}")
        app.fail("Failed to load sample questions.")
    catalog_view.render_sample_questions(app.console, questions)


@samples.command("add")
@click.argument("text")
@click.option("--category", default="General", show_default=True)
@click.option("--difficulty", type=click.Choice(["Easy", "Medium", "Hard"]), default="Medium",
              show_default=True)
@pass_app
def samples_add(app: App, text: str, category: str, difficulty: str) -> None:
    if not text.strip():
        app.fail("Question text cannot be empty")
    try:
        question = asyncio.run(app.client().create_sample_question(text, category, difficulty))
    except NetworkFailure as e:
        app.fail(f"Failed to create sample question: {e.message}")
    app.console.print(f"Added sample question {question.id}", style="bold green")


@samples.command("delete")
@click.argument("question_id", type=int)
@pass_app
def samples_delete(app: App, question_id: int) -> None:
    try:
        asyncio.run(app.client().delete_sample_question(question_id))
    except NetworkFailure as e:
        logger.error(f"Deleting sample question {question_id} failed: {e}")
        app.fail("Failed to delete sample question")
    app.console.print(f"Deleted sample question {question_id}")


# Listening tests

@cli.group()
def listening() -> None:
    """Manage listening tests."""


@listening.command("list")
@pass_app
def listening_list(app: App) -> None:
    client = app.client()
    try:
        tests = asyncio.run(client.list_listening_tests())
    except NetworkFailure as e:
        logger.error(f"Listing listening tests failed: {e}")
        app.fail("Failed to load tests. Please try again.")
    catalog_view.render_listening_tests(app.console, tests, audio_url_for=client.listening_audio_url)


@listening.command("upload")
@click.argument("question")
@click.argument("audio_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--user-id", type=int, default=1, show_default=True)
@pass_app
def listening_upload(app: App, question: str, audio_path: str, user_id: int) -> None:
    if not question.strip():
        app.fail("Please provide both a question and an audio file")
    try:
        test = asyncio.run(app.client().upload_listening_test(question, audio_path, user_id))
    except NetworkFailure as e:
        logger.error(f"Uploading listening test failed: {e}")
        app.fail("Failed to upload test. Please try again.")
    app.console.print(f"Uploaded listening test {test.id}", style="bold green")


@listening.command("delete")
@click.argument("test_id", type=int)
@pass_app
def listening_delete(app: App, test_id: int) -> None:
    try:
        asyncio.run(app.client().delete_listening_test(test_id))
    except NetworkFailure as e:
        logger.error(f"Deleting listening test {test_id} failed: {e}")
        app.fail("Failed to delete test")
    app.console.print(f"Deleted listening test {test_id}")


def main() -> None:
    """Main entry point for the IELTS practice client."""
    try:
        cli()
    except KeyboardInterrupt:
        print("\n👋 Goodbye!")


if __name__ == "__main__":
    main()
