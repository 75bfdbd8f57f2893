import logging
from pathlib import Path

import click

from .cli_utils import reconstruct_command_line
from .pipeline import DocumentStore, SchemaGenerator, SchemaGeneratorConfig, StructToOpenAPIError


@click.command()
@click.option("--output", "-o", required=True, type=click.Path(resolve_path=True))
@click.option("--format", "-f", "output_format", default=None, type=click.Choice(["json", "yaml"]), help="Defaults to the output file extension")
@click.option("--config", "-c", default=None, type=click.Path(exists=True, resolve_path=True))
@click.option("--base", "-b", default=None, type=click.Path(exists=True, resolve_path=True), help="Existing OpenAPI document to add the schemas to")
@click.option("--title", default=None, type=str)
@click.option("--api-version", default=None, type=str)
@click.option("--no-validate", is_flag=True, default=False, help="Skip reference and structure validation")
@click.option("--verbose", "-v", is_flag=True, default=False)
@click.argument("paths", nargs=-1, required=True, type=click.Path(exists=True, resolve_path=True))
def struct_to_openapi(output, output_format, config, base, title, api_version, no_validate, verbose, paths):
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING, format="%(levelname)s %(name)s: %(message)s")

    if output_format is None:
        output_format = "yaml" if Path(output).suffix in (".yaml", ".yml") else "json"

    try:
        config = SchemaGeneratorConfig.from_file(config) if config is not None else SchemaGeneratorConfig()
        # CLI values override the config file
        if title is not None:
            config.title = title
        if api_version is not None:
            config.version = api_version

        store = DocumentStore.from_file(base, config) if base is not None else DocumentStore(config=config)
        if config.add_generation_comment and base is None:
            store.document["info"]["description"] = f"Generated by: {reconstruct_command_line(struct_to_openapi)}"

        result = SchemaGenerator(config).generate_from_paths(paths, store)
        for warning in result.warnings:
            click.echo(f"warning: {warning}", err=True)

        if not no_validate:
            store.validate()

        if output_format == "yaml":
            store.save_yaml(output)
        else:
            store.save_json(output)
    except (StructToOpenAPIError, OSError) as e:
        raise click.ClickException(str(e)) from e

    click.echo(f"{len(result.schemas)} schemas written to {output}")
