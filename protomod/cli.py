import logging
import traceback
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn

from protomod.build import Build
from protomod.compiler import collect_artifacts
from protomod.config import load_config_data, validate_config
from protomod.exceptions import ProtomodError
from protomod.modgen import PlanEmitter, modularize as plan_artifacts
from protomod.patcher import PatchOutcome, patch_file

console = Console()
app = typer.Typer(
    name='protomod',
    help='Compile protobuf files into a Python package tree',
    no_args_is_help=True,
)


@app.callback()
def main(
    verbose: Annotated[
        bool, typer.Option('--verbose', '-v', help='Enable debug logging')
    ] = False,
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s',
        force=True,
    )


def _fail(e: Exception) -> None:
    console.print(f'[red]Error:[/red] {e}')
    if logging.getLogger().isEnabledFor(logging.DEBUG):
        traceback.print_exc()
    raise typer.Exit(1)


def _load_config(config: str | None, overrides: dict):
    try:
        data, config_path = load_config_data(config)
    except FileNotFoundError:
        if config:
            raise
        data, config_path = {}, None

    data = {
        **data,
        **{
            key: value
            for key, value in overrides.items()
            if value not in (None, [], ())
        },
    }
    return validate_config(data, config_path=config_path)


@app.command()
def generate(
    source: Annotated[
        Path | None,
        typer.Argument(help='Directory containing the .proto files to compile'),
    ] = None,
    config: Annotated[
        str | None,
        typer.Option(
            '--config', '-c', help='Path to configuration file (YAML or JSON)'
        ),
    ] = None,
    output: Annotated[
        Path | None,
        typer.Option('--output', '-o', help='Output directory for the package tree'),
    ] = None,
    plugin: Annotated[
        str | None,
        typer.Option(
            '--plugin',
            '-p',
            help='protoc plugin (--<plugin>_out) writing one flat file per package',
        ),
    ] = None,
    plugin_options: Annotated[
        list[str] | None,
        typer.Option(
            '--plugin-opt',
            help=(
                'Option passed to the plugin, repeatable. gRPC client or server '
                'stubs and well-known types are enabled through the options '
                'the plugin defines'
            ),
        ),
    ] = None,
    artifact_suffix: Annotated[
        str | None,
        typer.Option('--suffix', help='File name suffix of generated files'),
    ] = None,
    include_paths: Annotated[
        list[Path] | None,
        typer.Option(
            '--include-path',
            '-I',
            help='Add a directory to the protobuf import path',
        ),
    ] = None,
    protoc: Annotated[
        str | None, typer.Option('--protoc', help='protoc executable')
    ] = None,
    temp_dir: Annotated[
        Path | None,
        typer.Option('--temp-dir', help='Parent of the temporary working directory'),
    ] = None,
    file_descriptor_set: Annotated[
        Path | None,
        typer.Option(
            '--file-descriptor-set', help='Store a FileDescriptorSet at this path'
        ),
    ] = None,
    overwrite: Annotated[
        bool | None,
        typer.Option(
            '--overwrite/--no-overwrite', help='Replace existing output files'
        ),
    ] = None,
    clean: Annotated[
        bool | None,
        typer.Option(
            '--clean/--no-clean', help='Remove a previous output directory first'
        ),
    ] = None,
) -> None:
    """Patch, compile and modularize protobuf files.

    Settings come from the configuration file (protomod.yaml, protomod.json
    or [tool.protomod] in pyproject.toml); options given on the command line
    take precedence.

    The plugin must write one flat `<package><suffix>` file per Protobuf
    package, e.g. `crabs.disney.ariel.py`. Generators that write one file
    per schema, such as protoc's built-in `python`, do not fit.

    Examples:
        protomod generate ./proto --plugin myplugin -o ./out
        protomod generate ./proto -p myplugin --plugin-opt build_server=true
        protomod generate --config protomod.yaml
    """
    try:
        build_config = _load_config(
            config,
            {
                'source': source,
                'output': output,
                'plugin': plugin,
                'plugin_options': plugin_options,
                'artifact_suffix': artifact_suffix,
                'include_paths': include_paths,
                'protoc': protoc,
                'temp_dir': temp_dir,
                'file_descriptor_set': file_descriptor_set,
                'overwrite': overwrite,
                'clean_output': clean,
            },
        )

        with Progress(
            SpinnerColumn(),
            TextColumn('[progress.description]{task.description}'),
            console=console,
        ) as progress:
            task = progress.add_task(
                f'Generating package tree for {build_config.source} '
                f'in {build_config.output}...',
                total=None,
            )

            result = Build(build_config).run()

            progress.update(task, description='Generation completed!')

        console.print(
            f'Successfully generated {len(result.artifacts)} packages '
            f'({len(result.written)} files)'
        )
        console.print('[dim]Generated files:[/dim]')
        for path in result.plan.paths():
            console.print(f'  - {build_config.output}/{path}')

    except (ProtomodError, FileNotFoundError) as e:
        _fail(e)


@app.command()
def patch(
    source: Annotated[Path, typer.Argument(help='Directory containing .proto files')],
    dest: Annotated[Path, typer.Argument(help='Directory for the patched copies')],
) -> None:
    """Rewrite edition declarations to proto3 syntax declarations."""
    try:
        if not source.is_dir():
            raise FileNotFoundError(f'source directory not found: {source}')

        replaced = 0
        files = sorted(path for path in source.rglob('*.proto') if path.is_file())

        for src in files:
            outcome = patch_file(src, dest / src.relative_to(source))
            if outcome is PatchOutcome.REPLACED:
                replaced += 1
                console.print(f'  [green]patched[/green] {src.relative_to(source)}')

        console.print(
            f'Patched {replaced} of {len(files)} files, '
            f'{len(files) - replaced} left untouched'
        )
    except (ProtomodError, FileNotFoundError) as e:
        _fail(e)


@app.command()
def modularize(
    source: Annotated[
        Path, typer.Argument(help='Directory with flat per-package generated files')
    ],
    dest: Annotated[Path, typer.Argument(help='Output directory for the package tree')],
    suffix: Annotated[
        str, typer.Option('--suffix', help='File name suffix of generated files')
    ] = '.py',
    overwrite: Annotated[
        bool, typer.Option('--overwrite', help='Replace existing output files')
    ] = False,
) -> None:
    """Reorganize already generated flat files into a package tree."""
    try:
        if not source.is_dir():
            raise FileNotFoundError(f'source directory not found: {source}')

        emission = plan_artifacts(collect_artifacts(source, suffix=suffix))
        written = PlanEmitter(dest, overwrite=overwrite).emit(emission)

        console.print(f'Successfully wrote {len(written)} files to {dest}')
    except (ProtomodError, FileNotFoundError) as e:
        _fail(e)


@app.command()
def version() -> None:
    """Show the version of protomod."""
    try:
        from protomod._version import version

        console.print(f'protomod version: {version}')
    except ImportError:
        console.print('protomod version: unknown')


if __name__ == '__main__':
    app()
