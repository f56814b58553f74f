from __future__ import annotations

import atexit
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Optional

from pydantic import BaseModel
from rich.console import Console
from rich.panel import Panel
from rich.pretty import Pretty
from rich.table import Table
from rich.text import Text
from rich.traceback import install as rich_traceback_install

from firespread.core.models import BurnSnapshot

# Pretty tracebacks for unhandled exceptions
rich_traceback_install(show_locals=False)


# ---- Console singleton ------------------------------------------------------
_console: Optional[Console] = None


def get_console() -> Console:
    global _console
    if _console is None:
        # not recording by default; setup_console() can enable it
        _console = Console()
    return _console


# ---- Export configuration & atexit writer -----------------------------------
@dataclass
class _ExportConf:
    enabled: bool = False
    output_folder: Path = Path(".")
    basename: str = "firespread_run"
    export_text: bool = True


_export_conf: _ExportConf = _ExportConf()
_export_registered: bool = False


def _export_once() -> None:
    """
    Called at process exit by atexit; writes whatever is recorded.
    If recording was never turned on, nothing is exported.
    """
    c = get_console()
    if not _export_conf.enabled or not c.record:
        return

    outdir = _export_conf.output_folder
    outdir.mkdir(parents=True, exist_ok=True)

    if _export_conf.export_text:
        (outdir / f"{_export_conf.basename}.log").write_text(
            c.export_text(clear=False), encoding="utf-8"
        )


def setup_console(
    *,
    record_path: str | Path | None = None,
    basename: str = "firespread_run",
    export_text: bool = True,
) -> Console:
    """
    Setup the global console for the CLI.
    The console will always print to terminal, regardless of recording.

    Parameters
    ----------
    record_path: str|Path|None
        Optional. Enables recording and writes the run log at exit.
    basename: str
        Base name for exported files (without extension).
    export_text: bool
        If True, export plain text log file.

    Returns
    -------
    Console
        The global Console instance.
    """
    c = get_console()

    if record_path is not None:
        _export_conf.enabled = True
        _export_conf.output_folder = Path(record_path)
        _export_conf.basename = basename
        _export_conf.export_text = export_text

        c.record = True  # start buffering everything printed from now on

        global _export_registered
        if not _export_registered:
            atexit.register(_export_once)
            _export_registered = True

    return c


# ---------- message helpers ----------
def info_msg(message: str) -> None:
    get_console().print(Text(message))


def ok_msg(message: str) -> None:
    get_console().print(Text(message, style="bold green"))


def error_msg(message: str) -> None:
    get_console().print(
        Panel.fit(Text(message, style="bold red"), border_style="red")
    )


def format_status(snapshot: BurnSnapshot, verbose: bool = False) -> str:
    """One-line status of a snapshot."""
    stats = snapshot.stats
    msg = (
        f"Step: {snapshot.step:>5} | "
        f"Burning: {stats.n_burning:>5} | "
        f"Burnt out: {stats.n_burnt_out:>5}"
    )
    if verbose:
        msg += f" | Unburnt: {stats.n_unburnt:>6}"
    return msg


def status_msg(snapshot: BurnSnapshot, verbose: bool = False) -> None:
    get_console().print(format_status(snapshot, verbose))


# ---------- printers ----------
def print_table(
    models: dict[str, BaseModel | dict[str, Any]],
    *,
    title: Optional[str] = "Models",
    skip_none: bool = False,
    skip_fields: Optional[list[str]] = None,
    section_style: str = "bold magenta",
    header_style: str = "bold blue",
) -> None:
    """
    Print a single Rich table with a 'Section' column and two data
    columns, 'field' and 'value'. Each entry in `models` becomes a section.

    Parameters
    ----------
    models: dict[str, BaseModel|dict]
        Mapping of section title -> BaseModel or dict of fields.
    title: str|None
        Optional table title.
    skip_none: bool
        If True, omit fields whose value is None.
    skip_fields: list[str]
        Fields to skip in every section.
    """
    table = Table(title=title, header_style=header_style, show_lines=True)
    table.add_column("Section", style=section_style, no_wrap=True)
    table.add_column("field", no_wrap=True)
    table.add_column("value", overflow="fold")

    def iter_fields(
        obj: BaseModel | dict[str, Any],
    ) -> Iterable[tuple[str, Any]]:
        if isinstance(obj, BaseModel):
            items = [
                (name, getattr(obj, name)) for name in type(obj).model_fields
            ]
        elif isinstance(obj, dict):
            items = list(obj.items())
        else:
            raise TypeError(f"Unsupported model type: {type(obj).__name__}")
        return sorted(items, key=lambda x: str(x[0]).lower())

    skip = skip_fields or []
    for section, model in models.items():
        rows = [
            (fname, fval)
            for fname, fval in iter_fields(model)
            if fname not in skip and not (skip_none and fval is None)
        ]

        if not rows:
            table.add_row(
                section, "[dim](no fields)[/dim]", "", end_section=True
            )
            continue

        for i, (fname, fval) in enumerate(rows):
            section_cell = section if i == 0 else ""
            is_last = i == len(rows) - 1
            value_cell = "-" if fval is None else Pretty(fval, overflow="fold")
            table.add_row(
                section_cell, str(fname), value_cell, end_section=is_last
            )
    get_console().print(table)


def print_boundary_conditions_table(
    bcs: Iterable[Any],
    *,
    title="Boundary Conditions",
):
    """
    Print a table summarizing the boundary conditions.

    Parameters
    ----------
    bcs: Iterable[Any]
        An iterable of TimedInput with attributes step, wind, ignitions.
    """
    table = Table(title=title, show_lines=True)
    table.add_column("step", justify="right", style="bold cyan", no_wrap=True)
    table.add_column("w_dir [°]", justify="right", no_wrap=True)
    table.add_column("w_speed [m/s]", justify="right", no_wrap=True)
    table.add_column("ignitions", overflow="fold", style="green")

    for ti in bcs:
        wind = getattr(ti, "wind", None)
        w_dir = getattr(wind, "direction", None)
        w_speed = getattr(wind, "speed", None)
        igns = getattr(ti, "ignitions", None)

        table.add_row(
            str(getattr(ti, "step", "-")),
            "-" if w_dir is None else f"{w_dir:g}",
            "-" if w_speed is None else f"{w_speed:g}",
            "-" if not igns else ", ".join(str(i) for i in igns),
        )
    get_console().print(table)
