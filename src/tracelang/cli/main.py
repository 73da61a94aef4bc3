# src/tracelang/cli/main.py
import logging
import sys

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.tree import Tree

from .. import __version__
from ..config import TraceLangConfig
from ..errors import TraceLangError, TraceLangSyntaxError
from ..evaluator import Interpreter
from ..lexer import Lexer
from ..parser import parse_program
from ..tracelang_token import EOF

console = Console()
err_console = Console(stderr=True)

_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def setup_logging(level):
    handler = RichHandler(console=err_console, show_path=False)
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    logger = logging.getLogger("tracelang")
    logger.handlers[:] = [handler]
    logger.setLevel(level)
    logger.propagate = False


def load_settings(**overrides):
    try:
        return TraceLangConfig.load(**overrides)
    except ValueError as exc:
        raise click.BadParameter(str(exc))


def read_source(file):
    with open(file, 'r', encoding='utf-8') as f:
        return f.read()


def report_error(exc):
    if isinstance(exc, TraceLangSyntaxError):
        console.print("[bold red]Syntax Errors:[/bold red]")
        for error in exc.errors:
            console.print(f"  {escape(error)}")
        return
    console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
    for frame in exc.frames:
        console.print(f"  [dim]{escape(frame)}[/dim]")


def print_traces(interp):
    table = Table(title="Traced variables")
    table.add_column("Variable", style="cyan")
    table.add_column("History", style="green")
    for name, values in interp.tracer.histories().items():
        table.add_row(escape(name), escape(" -> ".join(repr(v) for v in values) or "(unchanged)"))
    console.print(table)


def print_stats(interp):
    table = Table(title="Execution statistics")
    table.add_column("Counter", style="cyan")
    table.add_column("Value", style="yellow", justify="right")
    for key, value in interp.stats.items():
        table.add_row(key.replace("_", " "), str(value))
    table.add_row("max context depth", str(interp.context.max_depth))
    console.print(table)


def build_tree(node, label):
    """Rich tree of an instruction sequence."""
    tree = Tree(label)
    for instr in node:
        branch = tree.add(escape(describe_instruction(instr)))
        if hasattr(instr, "start"):
            branch.add(escape("init: " + describe_instruction(instr.start)))
            branch.add(escape("step: " + describe_instruction(instr.step)))
        if hasattr(instr, "func"):
            branch.children.append(build_tree(instr.func.instructions, "body"))
        elif hasattr(instr, "instructions"):
            branch.children.append(build_tree(instr.instructions, "then" if hasattr(instr, "else_instructions") else "body"))
        if getattr(instr, "else_instructions", None):
            branch.children.append(build_tree(instr.else_instructions, "else"))
    return tree


def describe_instruction(instr):
    name = type(instr).__name__
    line = f"line {instr.line_index}"
    if hasattr(instr, "var_expr"):
        return f"{name} {instr.var_type} {instr.var_name} = {instr.var_expr.expr} ({line})"
    if hasattr(instr, "target"):
        return f"{name} {instr.var_name} = {instr.var_value.expr} ({line})"
    if hasattr(instr, "function_name"):
        args = ", ".join(arg.expr for arg in instr.args)
        return f"{name} {instr.function_name}({args}) ({line})"
    if hasattr(instr, "func"):
        return f"{name} {instr.func.name}({', '.join(instr.func.parameters)}) ({line})"
    if hasattr(instr, "traced_vars"):
        return f"{name} {', '.join(expr.expr for expr in instr.traced_vars)} ({line})"
    if hasattr(instr, "loop"):
        return f"{name} {instr.loop.condition.expr} ({line})"
    if hasattr(instr, "condition"):
        return f"{name} {instr.condition.expr} ({line})"
    if getattr(instr, "value", None) is not None:
        return f"{name} {instr.value.expr} ({line})"
    return f"{name} ({line})"


@click.group()
@click.version_option(version=__version__, prog_name="tracelang")
def cli():
    """tracelang - a typed teaching language with variable tracing"""
    pass


@cli.command()
@click.argument('file', type=click.Path(exists=True, dir_okay=False))
@click.option('--entry', default=None, help="Function to call after the script has run.")
@click.option('--show-traces/--no-show-traces', default=None, help="Print the history of traced variables.")
@click.option('--stats', 'show_stats', is_flag=True, help="Print execution statistics.")
@click.option('--max-call-depth', type=int, default=None, help="Maximum nesting of function calls.")
@click.option('--log-level', type=click.Choice(_LOG_LEVELS, case_sensitive=False), default=None)
def run(file, entry, show_traces, show_stats, max_call_depth, log_level):
    """Run a tracelang program"""
    settings = load_settings(
        log_level=log_level, max_call_depth=max_call_depth, show_traces=show_traces
    )
    setup_logging(settings.log_level)
    interp = Interpreter(settings)

    try:
        interp.execute_source(read_source(file), file)
        if entry is not None:
            result = interp.call(entry)
            text = result.inspect() if result is not None else "none"
            console.print(f"[bold green]Result:[/bold green] {escape(text)}")
    except TraceLangError as exc:
        report_error(exc)
        sys.exit(1)
    finally:
        if settings.show_traces and len(interp.tracer):
            print_traces(interp)
        if show_stats:
            print_stats(interp)


@cli.command()
@click.argument('file', type=click.Path(exists=True, dir_okay=False))
def check(file):
    """Check syntax of a tracelang file"""
    try:
        program = parse_program(read_source(file), file)
    except TraceLangSyntaxError as exc:
        report_error(exc)
        sys.exit(1)
    console.print(f"[bold green]Syntax is valid![/bold green] ({len(program.statements)} statements)")


@cli.command()
@click.argument('file', type=click.Path(exists=True, dir_okay=False))
def ast(file):
    """Show the instruction tree of a tracelang file"""
    try:
        program = parse_program(read_source(file), file)
    except TraceLangSyntaxError as exc:
        report_error(exc)
        sys.exit(1)
    console.print(Panel.fit(
        build_tree(program.statements, escape(file)),
        title="[bold blue]Instructions[/bold blue]",
        border_style="blue"
    ))


@cli.command()
@click.argument('file', type=click.Path(exists=True, dir_okay=False))
def tokens(file):
    """Show tokens of a tracelang file"""
    lexer = Lexer(read_source(file), file)

    table = Table(title="Tokens")
    table.add_column("Type", style="cyan")
    table.add_column("Literal", style="green")
    table.add_column("Line", style="yellow")
    table.add_column("Column", style="yellow")

    for token in lexer.tokens():
        if token.type == EOF:
            break
        table.add_row(token.type, escape(repr(token.literal)), str(token.line), str(token.column))

    console.print(table)
    for error in lexer.errors:
        console.print(f"[red]{escape(error)}[/red]")


@cli.command()
def repl():
    """Start the tracelang REPL"""
    settings = load_settings()
    setup_logging(settings.log_level)
    interp = Interpreter(settings)
    console.print(f"[bold green]tracelang REPL v{__version__}[/bold green]")
    console.print("Type 'exit' to quit, 'traces' to show traced variables\n")

    while True:
        try:
            code = console.input("[bold blue]>>> [/bold blue]")
        except (KeyboardInterrupt, EOFError):
            console.print("\nGoodbye!")
            break

        if code.strip() in ['exit', 'quit']:
            break
        if code.strip() == 'traces':
            print_traces(interp)
            continue
        if not code.strip():
            continue

        try:
            interp.execute_source(code, "<repl>")
        except TraceLangError as exc:
            report_error(exc)


if __name__ == "__main__":
    cli()
