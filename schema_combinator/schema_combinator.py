import json

import click

from .cli_utils import reconstruct_command_line
from .logging_utils import configure_logging
from .pipeline import CombinatorConfig, CombinatorError, OutputMode, PipelineGenerator, SourceFileSink, load_description_file


@click.command()
@click.option("--language", "-l", default="python", type=click.Choice(["python", "cs"]))
@click.option("--config", "-c", default=None, type=click.Path(exists=True, dir_okay=False, resolve_path=True))
@click.option("--force", "-f", is_flag=True, default=False, help="Overwrite an existing output file")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log extraction, combination and writes")
@click.argument("description", type=click.Path(exists=True, dir_okay=False, resolve_path=True))
@click.argument("output_dir", type=click.Path(file_okay=False, resolve_path=True))
def schema_combinator(language, config, force, verbose, description, output_dir):
    """Synthesize the type described by DESCRIPTION into OUTPUT_DIR."""
    configure_logging(verbose=verbose)

    if config is not None:
        with open(config) as f:
            try:
                config = CombinatorConfig.from_dict(json.load(f))
            except (json.JSONDecodeError, ValueError) as e:
                raise click.ClickException(f"Invalid config file: {e}") from e
    else:
        config = CombinatorConfig()

    # CLI flag overrides the config file
    if force:
        config.output.mode = OutputMode.FORCE

    try:
        directives = load_description_file(description)
        artifact = PipelineGenerator(directives, config).generate()
        sink = SourceFileSink(output_dir, language, config, reconstruct_command_line(schema_combinator))
        path = sink.register(artifact.qualified_name, artifact)
    except CombinatorError as e:
        raise click.ClickException(str(e)) from e

    click.echo(str(path))
