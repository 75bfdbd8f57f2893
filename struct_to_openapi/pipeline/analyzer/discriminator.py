"""
Discriminator builder for oneOf schemas.
"""

from __future__ import annotations

from collections.abc import Callable

from ...utils import to_upper_snake_case
from ..errors import DiscriminatorMappingError
from ..schema.nodes import Discriminator, SchemaRef, ref_name

ONE_OF_SOURCE = "oneOf"
UPPER_SNAKE_PARSER = "upperSnake"


def build_discriminator(
    declaration: str,
    property_name: str,
    parsed_mode: str | None,
    parser_mode: str | None,
    one_of: list[SchemaRef],
    mapping_keys: dict[int, str],
    warn: Callable[[str, str], None],
) -> Discriminator:
    """
    Build the discriminator of a declaration.

    Mapping keys default to the referenced schema name, optionally recased
    with the upperSnake parser. Keys given explicitly with `oapi_oneOf: key`
    are used verbatim.

    Args:
        declaration: Name of the declaration, for messages
        property_name: Discriminating property
        parsed_mode: Where variants come from; only "oneOf" is supported
        parser_mode: Key transform; only "upperSnake" is supported
        one_of: The schema's oneOf members
        mapping_keys: oneOf index -> explicit mapping key
        warn: Called with (message, directive text) for unsupported modes

    Returns:
        The discriminator, with a mapping when parsed_mode is "oneOf"

    Raises:
        DiscriminatorMappingError: If two variants produce the same key
    """
    discriminator = Discriminator(property_name=property_name)
    if parsed_mode is None:
        return discriminator
    if parsed_mode != ONE_OF_SOURCE:
        warn(f"unsupported discriminator source '{parsed_mode}'", f"oapi_discriminator_mapped_parsed:{parsed_mode}")
        return discriminator
    if parser_mode is not None and parser_mode != UPPER_SNAKE_PARSER:
        warn(f"unsupported discriminator key parser '{parser_mode}'", f"oapi_discriminator_mapped_parser:{parser_mode}")
        parser_mode = None

    for index, member in enumerate(one_of):
        if not member.is_reference:
            continue
        key = mapping_keys.get(index)
        if key is None:
            key = ref_name(member.ref)
            if parser_mode == UPPER_SNAKE_PARSER:
                key = to_upper_snake_case(key)
        if key in discriminator.mapping:
            raise DiscriminatorMappingError(declaration, key, discriminator.mapping[key], member.ref)
        discriminator.mapping[key] = member.ref
    return discriminator
