"""Interactive prompts."""

from typing import Callable, List, Optional, Sequence, Tuple

from rich.prompt import Confirm, IntPrompt, Prompt

from ..utils.logger import console

Choice = Tuple[str, str]


class Prompter:
    """Asks the user questions on the terminal.

    Workflows only talk to this interface, so tests can swap in a
    scripted implementation.
    """

    def text(
        self,
        question: str,
        default: Optional[str] = None,
        validate: Optional[Callable[[str], Optional[str]]] = None,
        password: bool = False
    ) -> str:
        """Ask for free text. ``validate`` returns an error message or None."""
        while True:
            answer = Prompt.ask(
                question,
                console=console,
                default=default if default is not None else "",
                show_default=bool(default),
                password=password
            )
            answer = (answer or "").strip()
            if validate:
                error = validate(answer)
                if error:
                    console.print(f"[red]{error}[/red]")
                    continue
            return answer

    def confirm(self, question: str, default: bool = True) -> bool:
        return Confirm.ask(question, console=console, default=default)

    def select(self, question: str, choices: Sequence[Choice], default: Optional[str] = None) -> str:
        """Pick one of ``choices`` (value, label) by number. Returns the value."""
        console.print(f"[bold]{question}[/bold]")
        for index, (_, label) in enumerate(choices, start=1):
            console.print(f"  [cyan]{index}[/cyan]. {label}")

        values: List[str] = [value for value, _ in choices]
        default_index = values.index(default) + 1 if default in values else 1
        while True:
            picked = IntPrompt.ask("Choose", console=console, default=default_index)
            if 1 <= picked <= len(choices):
                return values[picked - 1]
            console.print(f"[red]Enter a number between 1 and {len(choices)}[/red]")
