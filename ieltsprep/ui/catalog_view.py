"""Rich renderings of dashboards and test catalogs."""

from typing import List

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..models.practice import ListeningTest, Question, SpeakingTest
from ..services.practice_service import PracticeCard, TEST_INSTRUCTIONS, TEST_TIP

DIFFICULTY_STYLES = {"Easy": "green", "Medium": "yellow", "Hard": "red"}


def render_dashboard(console: Console, cards: List[PracticeCard], answered_count: int = 0) -> None:
    table = Table(title="Available Tests", show_header=True, header_style="bold magenta")
    table.add_column("#", style="cyan", justify="right")
    table.add_column("Test", style="bold")
    table.add_column("Description")
    table.add_column("Start with")
    for index, card in enumerate(cards, start=1):
        command = f"ieltsprep practice --part {card.question_id}" if card.question_id else "ieltsprep practice"
        table.add_row(str(index), card.title, card.description, command)
    console.print(Panel(Text("Welcome to your personal IELTS Speaking Test dashboard."),
                        title="Test Taker Dashboard", border_style="blue"))
    console.print(table)
    if answered_count:
        console.print(f"You have answered {answered_count} question(s) in this session.")


def render_speaking_tests(console: Console, tests: List[SpeakingTest]) -> None:
    if not tests:
        console.print("No speaking tests yet.", style="dim")
        return
    table = Table(title="Speaking Tests", header_style="bold magenta")
    table.add_column("ID", style="cyan", justify="right")
    table.add_column("Question")
    table.add_column("Created", style="dim")
    for test in tests:
        table.add_row(str(test.id), test.question, test.created_at or "")
    console.print(table)


def render_sample_questions(console: Console, questions: List[Question]) -> None:
    if not questions:
        console.print("No sample questions yet.", style="dim")
        return
    table = Table(title="Sample Questions", header_style="bold magenta")
    table.add_column("ID", style="cyan", justify="right")
    table.add_column("Question")
    table.add_column("Category")
    table.add_column("Difficulty")
    for question in questions:
        style = DIFFICULTY_STYLES.get(question.difficulty, "white")
        table.add_row(str(question.id), question.text, question.category,
                      Text(question.difficulty, style=style))
    console.print(table)


def render_listening_tests(console: Console, tests: List[ListeningTest],
                           audio_url_for=None) -> None:
    if not tests:
        console.print("No listening tests yet.", style="dim")
        return
    table = Table(title="Listening Tests", header_style="bold magenta")
    table.add_column("ID", style="cyan", justify="right")
    table.add_column("Question")
    table.add_column("Audio", style="blue")
    for test in tests:
        audio = ""
        if test.audio_file:
            audio = audio_url_for(test.audio_file) if audio_url_for else test.audio_file
        table.add_row(str(test.id), test.question, audio)
    console.print(table)


def render_instructions(console: Console) -> None:
    lines = "\n".join(f"• {line}" for line in TEST_INSTRUCTIONS)
    body = Text.assemble(lines, "\n\n", ("Tip: ", "bold"), TEST_TIP)
    console.print(Panel(body, title="IELTS Speaking Test Instructions", border_style="cyan"))


def render_message(console: Console, message: str, error: bool = False) -> None:
    if error:
        console.print(Text.assemble(("Error: ", "bold red"), (message, "red")))
    else:
        console.print(message, style="bold green")
