"""latex-infix command line translator.

Usage:
    latex-infix EXPR...                 # Translate each expression
    latex-infix --lenient EXPR...       # Permissive mode, never fails
    latex-infix --strict EXPR...        # Override LATEX_INFIX_MODE=lenient
    latex-infix --trace EXPR            # Show every pipeline stage
    latex-infix --at x=1,y=2 EXPR...    # Also evaluate with SymPy
    latex-infix                         # Interactive prompt
"""

from __future__ import annotations

import sys

import questionary
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from latex_infix import config
from latex_infix.errors import EvaluationError, TranslationError
from latex_infix.evaluator import evaluate
from latex_infix.translator import Translator

USAGE = "Usage: latex-infix [--lenient | --strict] [--trace] [--at x=1,y=2] [EXPR...]"


def parse_bindings(spec: str) -> dict[str, float]:
    """Parse ``x=1,y=2`` into a bindings dict."""
    bindings: dict[str, float] = {}
    for pair in spec.split(","):
        name, sep, value = pair.partition("=")
        name = name.strip()
        if not sep or not name:
            raise ValueError(f"expected name=value, got {pair!r}")
        bindings[name] = float(value)
    return bindings


def char_index(latex: str, offset: int) -> int:
    """Character column of a UTF-8 byte offset."""
    return len(latex.encode("utf-8")[:offset].decode("utf-8", errors="ignore"))


def print_error(latex: str, exc: TranslationError, console: Console) -> None:
    """Print the error kind and a caret under the offending fragment."""
    console.print(f"[red]{exc.kind.value}[/]: {escape(exc.message)}")
    console.print(f"  {escape(latex)}", highlight=False)
    if exc.offset is not None:
        column = char_index(latex, exc.offset)
        width = max(len(exc.fragment), 1)
        console.print(f"  {' ' * column}[bold red]{'^' * width}[/]")
        console.print(f"  [dim]byte offset {exc.offset}[/]")


def print_trace(translator: Translator, latex: str, console: Console) -> bool:
    try:
        trace = translator.trace(latex)
    except TranslationError as exc:
        print_error(latex, exc, console)
        return False
    table = Table(title=f"Trace ({translator.mode})", show_lines=False)
    table.add_column("Stage", style="bold")
    table.add_column("Output")
    table.add_row("input", Text(latex))
    for name, value in trace.stages():
        table.add_row(name, Text(value))
    console.print(table)
    return True


def translate_all(
    translator: Translator,
    expressions: list[str],
    console: Console,
    bindings: dict[str, float] | None = None,
) -> bool:
    """Translate expressions into a results table; False if any failed."""
    table = Table(title=f"latex-infix ({translator.mode})", show_lines=False)
    table.add_column("LaTeX")
    table.add_column("Infix", style="bold")
    if bindings is not None:
        table.add_column("Value", justify="right")

    failures: list[tuple[str, TranslationError]] = []
    for latex in expressions:
        try:
            result = translator.translate(latex)
        except TranslationError as exc:
            failures.append((latex, exc))
            row = [Text(latex), Text(exc.kind.value, style="red")]
            if bindings is not None:
                row.append(Text(""))
            table.add_row(*row)
            continue
        row = [Text(latex), Text(result)]
        if bindings is not None:
            try:
                row.append(Text(f"{evaluate(result, bindings):g}"))
            except EvaluationError as exc:
                row.append(Text(str(exc), style="yellow"))
        table.add_row(*row)

    console.print(table)
    for latex, exc in failures:
        console.print()
        print_error(latex, exc, console)
    return not failures


def interactive(translator: Translator, console: Console) -> None:
    """Prompt for expressions until an empty line or Ctrl+C."""
    console.print(f"[bold]latex-infix[/] ({translator.mode}), empty line to quit")
    while True:
        latex = questionary.text("LaTeX:").ask()
        if not latex:
            break
        try:
            result = translator.translate(latex)
        except TranslationError as exc:
            print_error(latex, exc, console)
            continue
        console.print(f"  [green]{escape(result)}[/]", highlight=False)


def main(args: list[str] | None = None) -> None:
    """CLI entry point."""
    console = Console()
    argv = list(args if args is not None else sys.argv[1:])

    lenient = config.get_mode() == "lenient"
    show_trace = False
    bindings: dict[str, float] | None = None
    expressions: list[str] = []

    while argv:
        arg = argv.pop(0)
        if arg in ("-h", "--help"):
            console.print(USAGE, markup=False, highlight=False)
            return
        if arg == "--lenient":
            lenient = True
        elif arg == "--strict":
            lenient = False
        elif arg == "--trace":
            show_trace = True
        elif arg == "--at":
            if not argv:
                console.print("[red]--at needs a value such as x=1,y=2[/]")
                sys.exit(2)
            try:
                bindings = parse_bindings(argv.pop(0))
            except ValueError as exc:
                console.print(f"[red]Invalid --at value:[/] {escape(str(exc))}")
                sys.exit(2)
        elif arg == "--":
            expressions.extend(argv)
            argv = []
        else:
            expressions.append(arg)

    translator = Translator(lenient=lenient)

    if not expressions:
        try:
            interactive(translator, console)
        except KeyboardInterrupt:
            console.print()
        return

    if show_trace:
        success = all(
            [print_trace(translator, latex, console) for latex in expressions]
        )
    else:
        success = translate_all(translator, expressions, console, bindings)
    if not success:
        sys.exit(1)


if __name__ == "__main__":
    main()
