import click

from .config import load_settings
from .errors import ConfigError
from .report import format_diagnostics, format_status_table, format_summary_line
from .run import run
from .runtime import clamp_jobs, reset_verbose_logging, set_verbose_logging

_DIR = click.Path(exists=True, file_okay=False, dir_okay=True)


def validate_jobs(ctx, param, value):
    if value is not None and value <= 0:
        raise click.BadParameter("must be a positive integer")
    return value


def _merge_settings(settings, extension, source_ext, latex_ext, ignore):
    from dataclasses import replace

    overrides = {}
    if extension is not None:
        overrides["extension"] = extension
    if source_ext:
        overrides["source_extensions"] = list(source_ext)
    if latex_ext:
        overrides["latex_extensions"] = list(latex_ext)
    if ignore:
        overrides["ignore"] = [*settings.ignore, *ignore]
    return replace(settings, **overrides)


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--latex",
    "latex_dir",
    required=True,
    type=_DIR,
    help="Root directory of the LaTeX document.",
)
@click.option(
    "--source",
    "source_dir",
    required=True,
    type=_DIR,
    help="Root directory of source files.",
)
@click.option(
    "--target",
    "target_dir",
    required=True,
    type=_DIR,
    help="Directory where snippets will be stored.",
)
@click.option(
    "--extract",
    is_flag=True,
    help="Write snippet files. Without it, only scan and report (dry run).",
)
@click.option(
    "--ext",
    "extension",
    default=None,
    help="Extension for snippet files (default: the source file's extension).",
)
@click.option(
    "--source-ext",
    multiple=True,
    help="Only scan source files with this extension. Repeatable.",
)
@click.option(
    "--latex-ext",
    multiple=True,
    help="Document file extensions to scan (default: .tex). Repeatable.",
)
@click.option(
    "--ignore",
    multiple=True,
    help="Gitignore-style pattern to skip while walking. Repeatable.",
)
@click.option(
    "-j",
    "--jobs",
    type=int,
    default=None,
    callback=validate_jobs,
    help="Worker threads for scanning and writing (default: $SNIPPER_JOBS or 4).",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Config file (default: $XDG_CONFIG_HOME/snipper/config.yaml).",
)
@click.option(
    "--list/--no-list",
    "show_table",
    default=True,
    show_default=True,
    help="Print the snippet status table.",
)
@click.option("-v", "--verbose", is_flag=True, help="Log progress to stderr.")
@click.pass_context
def cli(
    ctx,
    latex_dir,
    source_dir,
    target_dir,
    extract,
    extension,
    source_ext,
    latex_ext,
    ignore,
    jobs,
    config_path,
    show_table,
    verbose,
):
    """
    Snipper - collects snippets of code from source files into separate files
    for simple inclusion in LaTeX documents.

    Snippets are marked in source files with

      // SNIPPET:BEGIN {name}  ...  // SNIPPET:END {name}

    and included in the document with \\lstinputlisting{.../name.cpp}.
    Prefix both markers with '_' to freeze a snippet: it is written once and
    never overwritten afterwards.
    """
    try:
        settings = load_settings(config_path)
    except ConfigError as e:
        raise click.ClickException(str(e)) from e
    settings = _merge_settings(settings, extension, source_ext, latex_ext, ignore)

    token = set_verbose_logging(verbose)
    try:
        summary = run(
            source_dir,
            target_dir,
            latex_dir,
            extract=extract,
            settings=settings,
            jobs=clamp_jobs(jobs) if jobs else None,
        )
    finally:
        reset_verbose_logging(token)

    if show_table and summary.records:
        click.echo(format_status_table(summary))
    for line in format_diagnostics(summary):
        click.echo(line, err=True)
    click.echo(format_summary_line(summary))

    if not summary.ok:
        if summary.written:
            outcome = f"{summary.written_count} file(s) written before the failure."
        else:
            outcome = "target directory left untouched."
        click.echo(f"Aborted: {len(summary.errors)} error(s), {outcome}", err=True)
        ctx.exit(1)


def main():
    cli()


if __name__ == "__main__":
    main()
