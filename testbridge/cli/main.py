"""Main CLI entry point for testbridge."""

import asyncio
import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from ..adapters.io.enhanced_logging import level_for_verbosity, setup_enhanced_logging
from ..adapters.io.filesystem import LocalFileSystem
from ..adapters.package.package_provider import FileDiskPackageProvider
from ..adapters.toolchain.swift_toolchain import SwiftToolchain
from ..application.navigation_usecase import NavigationUseCase
from ..application.suggest_test_files import SuggestTestFilesUseCase
from ..config.loader import ConfigLoader, ConfigurationError
from ..config.models import ConfirmationMode, EmitImportDeclarationsMode, TestBridgeConfig
from ..domain.conventions import SOURCE_FILE_EXTENSION
from ..domain.diagnostics import summarize_diagnostics
from ..domain.models import (
    DiagnosticRecord,
    NavigationResult,
    SuggestTestFilesResult,
    TestBridgeError,
    TestFileDescriptor,
)

logger = logging.getLogger(__name__)


class ClickContext:
    """Context object for Click commands."""

    def __init__(self) -> None:
        self.config: TestBridgeConfig = TestBridgeConfig()
        self.root: Path = Path.cwd()
        self.console: Console = Console(soft_wrap=True, highlight=False)
        self.err_console: Console = Console(stderr=True, highlight=False)
        self.verbose: bool = False

    def file_system(self) -> LocalFileSystem:
        return LocalFileSystem(search_root=self.root)

    def package_provider(self, file_system: LocalFileSystem) -> FileDiskPackageProvider:
        toolchain = SwiftToolchain(
            swift_executable=self.config.toolchain.swift_executable,
            timeout=self.config.toolchain.timeout,
        )
        return FileDiskPackageProvider(file_system, toolchain)


@click.group()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to configuration file",
)
@click.option(
    "--root",
    "-r",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Workspace root searched for manifests (defaults to the working directory)",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option("--quiet", "-q", is_flag=True, help="Only log errors")
@click.pass_context
def app(
    ctx: click.Context,
    config: Path | None,
    root: Path | None,
    verbose: bool,
    quiet: bool,
) -> None:
    """testbridge - map Swift package sources to their unit tests and back."""
    ctx.ensure_object(ClickContext)
    ctx.obj.verbose = verbose

    setup_enhanced_logging(ctx.obj.err_console, level_for_verbosity(verbose, quiet))

    if root is not None:
        ctx.obj.root = root.resolve()

    try:
        loader = ConfigLoader(config, search_dir=ctx.obj.root)
        ctx.obj.config = loader.load_config()
    except ConfigurationError as e:
        ctx.obj.err_console.print(f"[red]Configuration error:[/] {e}")
        logger.debug("Configuration loading failed", exc_info=True)
        sys.exit(1)


# ============================================================================
# NAVIGATION
# ============================================================================


@app.command("test-path")
@click.argument("files", nargs=-1, required=True, type=click.Path(path_type=Path))
@click.pass_context
def test_path_command(ctx: click.Context, files: tuple[Path, ...]) -> None:
    """Print the test file that mirrors each source FILE."""
    obj: ClickContext = ctx.obj

    async def run() -> list[NavigationResult]:
        file_system = obj.file_system()
        navigation = NavigationUseCase(obj.package_provider(file_system), file_system, obj.config)
        return [await navigation.goto_test_file(_absolute(path)) for path in files]

    results = _run(obj, run())
    _print_navigation(obj, results)


@app.command("source-path")
@click.argument("file", type=click.Path(path_type=Path))
@click.option(
    "--heuristics/--no-heuristics",
    default=None,
    help="Search for the source file by file name before consulting the manifest",
)
@click.pass_context
def source_path_command(ctx: click.Context, file: Path, heuristics: bool | None) -> None:
    """Print the source file exercised by the test FILE."""
    obj: ClickContext = ctx.obj

    config = obj.config
    if heuristics is not None:
        config = config.model_copy(
            update={
                "goto_test_file": config.goto_test_file.model_copy(
                    update={"use_filename_heuristics": heuristics}
                )
            }
        )

    async def run() -> NavigationResult:
        file_system = obj.file_system()
        navigation = NavigationUseCase(obj.package_provider(file_system), file_system, config)
        return await navigation.goto_source_file(_absolute(file))

    result = _run(obj, run())
    _print_navigation(obj, [result])


# ============================================================================
# TEST FILE GENERATION
# ============================================================================


_emit_imports_option = click.option(
    "--emit-imports",
    type=click.Choice([mode.value for mode in EmitImportDeclarationsMode]),
    default=None,
    help="Which detected imports to copy into the generated test files",
)


@app.command()
@click.argument("files", nargs=-1, required=True, type=click.Path(path_type=Path))
@click.option("--json", "as_json", is_flag=True, help="Print the result as JSON")
@_emit_imports_option
@click.pass_context
def suggest(
    ctx: click.Context, files: tuple[Path, ...], as_json: bool, emit_imports: str | None
) -> None:
    """Propose test files for the source FILES without writing them."""
    obj: ClickContext = ctx.obj
    config = _with_emit_imports(obj.config, emit_imports)

    result = _run(obj, _suggest(obj, config, [_absolute(path) for path in files]))

    if as_json:
        click.echo(result.model_dump_json(indent=2))
        return

    if result.test_files:
        table = Table(show_header=True, header_style="bold")
        table.add_column("Source")
        table.add_column("Test file")
        table.add_column("Exists", justify="center")
        for descriptor in result.test_files:
            table.add_row(
                _display(obj, descriptor.original_file),
                _display(obj, descriptor.path),
                "yes" if descriptor.exists_on_disk else "no",
            )
        obj.console.print(table)

    _print_diagnostics(obj, result.diagnostics)
    if not result.test_files:
        ctx.exit(1)


@app.command()
@click.argument(
    "paths", nargs=-1, required=True, type=click.Path(exists=True, path_type=Path)
)
@click.option("--yes", "-y", is_flag=True, help="Write files without asking for confirmation")
@_emit_imports_option
@click.pass_context
def generate(
    ctx: click.Context, paths: tuple[Path, ...], yes: bool, emit_imports: str | None
) -> None:
    """Create the missing test files for source files and directories in PATHS."""
    obj: ClickContext = ctx.obj
    config = _with_emit_imports(obj.config, emit_imports)

    async def run() -> SuggestTestFilesResult:
        files = await _expand_paths([_absolute(path) for path in paths])
        return await _suggest(obj, config, files)

    result = _run(obj, run())
    _print_diagnostics(obj, result.diagnostics)

    pending = [descriptor for descriptor in result.test_files if not descriptor.exists_on_disk]
    if not pending:
        obj.console.print("No test files to create.")
        return

    has_directories = any(path.is_dir() for path in paths)
    if not yes and needs_confirmation(config.file_gen.confirmation, len(pending), has_directories):
        for descriptor in pending:
            obj.console.print(f"  {_display(obj, descriptor.path)}")
        click.confirm(f"Create {len(pending)} test file(s)?", abort=True)

    for descriptor in pending:
        write_test_file(descriptor)
        obj.console.print(f"[green]Created[/] {_display(obj, descriptor.path)}")


def needs_confirmation(mode: ConfirmationMode, file_count: int, has_directories: bool) -> bool:
    """Whether writing ``file_count`` files requires the user's confirmation."""
    if mode == ConfirmationMode.ALWAYS:
        return True
    if mode == ConfirmationMode.ONLY_IF_MULTI_FILE:
        return file_count > 1
    if mode == ConfirmationMode.ONLY_ON_DIRECTORIES:
        return has_directories
    return False


def write_test_file(descriptor: TestFileDescriptor) -> None:
    """Create ``descriptor.path`` with its contents, refusing to overwrite."""
    descriptor.path.parent.mkdir(parents=True, exist_ok=True)
    try:
        with open(descriptor.path, "x", encoding="utf-8") as f:
            f.write(descriptor.contents)
    except FileExistsError:
        logger.warning("Skipping %s: file already exists", descriptor.path)


# ============================================================================
# HELPERS
# ============================================================================


async def _suggest(
    obj: ClickContext, config: TestBridgeConfig, files: list[Path]
) -> SuggestTestFilesResult:
    file_system = obj.file_system()
    use_case = SuggestTestFilesUseCase(obj.package_provider(file_system), file_system, config)
    return await use_case.suggest_test_files(files)


async def _expand_paths(paths: list[Path]) -> list[Path]:
    """Replace directories with the Swift files below them, keeping order."""
    files: list[Path] = []
    for path in paths:
        if path.is_dir():
            found = await LocalFileSystem(search_root=path).find_files(
                f"**/*{SOURCE_FILE_EXTENSION}"
            )
            logger.debug("Expanded %s to %d file(s)", path, len(found))
            files.extend(found)
        else:
            files.append(path)
    return files


def _with_emit_imports(config: TestBridgeConfig, emit_imports: str | None) -> TestBridgeConfig:
    if emit_imports is None:
        return config
    return config.model_copy(
        update={
            "file_gen": config.file_gen.model_copy(
                update={"emit_import_declarations": EmitImportDeclarationsMode(emit_imports)}
            )
        }
    )


def _run(obj: ClickContext, coroutine):
    try:
        return asyncio.run(coroutine)
    except TestBridgeError as e:
        obj.err_console.print(f"[red]Error:[/] {e}")
        logger.debug("Command failed", exc_info=obj.verbose)
        sys.exit(1)


def _print_navigation(obj: ClickContext, results: list[NavigationResult]) -> None:
    diagnostics = [record for result in results for record in result.diagnostics]
    for result in results:
        if result.destination is None:
            continue
        suffix = "" if result.exists_on_disk else "  [dim](does not exist)[/]"
        obj.console.print(f"{_display(obj, result.destination)}{suffix}")

    _print_diagnostics(obj, diagnostics)
    if any(result.destination is None for result in results):
        sys.exit(1)


def _print_diagnostics(obj: ClickContext, diagnostics: list[DiagnosticRecord]) -> None:
    for summary in summarize_diagnostics(diagnostics):
        style = "yellow" if summary.is_blocking else "dim"
        obj.err_console.print(summary.message, style=style, markup=False)


def _absolute(path: Path) -> Path:
    return path if path.is_absolute() else Path.cwd() / path


def _display(obj: ClickContext, path: Path) -> str:
    try:
        return str(path.relative_to(obj.root))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    app()
