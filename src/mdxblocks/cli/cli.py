"""CLI entrypoint: Typer app definition and command registration"""

import typer

from mdxblocks.cli.commands import convert_cmd, report_cmd, scan_cmd


app = typer.Typer(name="mdxblocks", no_args_is_help=True, help="MDX to structured content block converter")

app.command(name="convert")(convert_cmd)
app.command(name="scan")(scan_cmd)
app.command(name="report")(report_cmd)
