"""Known shapes of the application's registration literals.

Each registration map has changed its declared type across framework
releases. The variants below are tried in order and the first one present in
the file is patched, so newer and older projects are both supported.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from src.scaffolder.paths import camel_case, pascal_case, snake_case, title_case
from src.scaffolder.patcher import (
    LiteralKind,
    LiteralSignature,
    RegistrationEdit,
    RegistrationRule,
)


@dataclass(frozen=True)
class SchemaVariant:
    """A literal signature and how to render entries for it."""

    signature: LiteralSignature
    render: Callable[[str], tuple[str, ...]]


def _factory_entry(class_name: str) -> tuple[str, ...]:
    return (f"{class_name}: () => {class_name}()",)


def _instance_entry(class_name: str) -> tuple[str, ...]:
    return (f"{class_name}: {class_name}()",)


def _model_entries(class_name: str) -> tuple[str, ...]:
    return (
        f"List<{class_name}>: (data) => List.from(data)"
        f".map((json) => {class_name}.fromJson(json)).toList()",
        f"{class_name}: (data) => {class_name}.fromJson(data)",
    )


def _theme_entry(name: str) -> tuple[str, ...]:
    snake = snake_case(name)
    return (
        "BaseThemeConfig<ColorStyles>(\n"
        f"    id: '{snake}_theme',\n"
        f'    description: "{title_case(name)} theme",\n'
        f"    theme: {camel_case(name)}Theme,\n"
        f"    colors: {pascal_case(name)}ThemeColors(),\n"
        "  )",
    )


CONTROLLERS: tuple[SchemaVariant, ...] = (
    SchemaVariant(
        LiteralSignature("controllers:dynamic", "final Map<Type, dynamic> controllers"),
        _factory_entry,
    ),
    SchemaVariant(
        LiteralSignature(
            "controllers:factory",
            "final Map<Type, BaseController Function()> controllers",
        ),
        _factory_entry,
    ),
    SchemaVariant(
        LiteralSignature("controllers:instance", "final Map<Type, BaseController> controllers"),
        _instance_entry,
    ),
)

MODEL_DECODERS: tuple[SchemaVariant, ...] = (
    SchemaVariant(
        LiteralSignature("model_decoders:dynamic", "final Map<Type, dynamic> modelDecoders"),
        _model_entries,
    ),
)

API_DECODERS: tuple[SchemaVariant, ...] = (
    SchemaVariant(
        LiteralSignature("api_decoders:dynamic", "final Map<Type, dynamic> apiDecoders"),
        _instance_entry,
    ),
    SchemaVariant(
        LiteralSignature(
            "api_decoders:base_api_service",
            "final Map<Type, BaseApiService> apiDecoders",
        ),
        _instance_entry,
    ),
    SchemaVariant(
        LiteralSignature(
            "api_decoders:ny_api_service",
            "final Map<Type, NyApiService> apiDecoders",
        ),
        _instance_entry,
    ),
)

PROVIDERS: tuple[SchemaVariant, ...] = (
    SchemaVariant(
        LiteralSignature("providers:ny_provider", "final Map<Type, NyProvider> providers"),
        _instance_entry,
    ),
)

EVENTS: tuple[SchemaVariant, ...] = (
    SchemaVariant(
        LiteralSignature("events:ny_event", "final Map<Type, NyEvent> events"),
        _instance_entry,
    ),
)

THEMES: tuple[SchemaVariant, ...] = (
    SchemaVariant(
        LiteralSignature(
            "themes:base_theme_config",
            "final List<BaseThemeConfig<ColorStyles>> appThemes",
            LiteralKind.LIST,
        ),
        _theme_entry,
    ),
)


def build_edit(
    target: str,
    import_line: str,
    variants: tuple[SchemaVariant, ...],
    name: str,
) -> RegistrationEdit:
    """Render ``name`` against every variant into one ``RegistrationEdit``."""
    return RegistrationEdit(
        target=target,
        import_line=import_line,
        rules=tuple(
            RegistrationRule(variant.signature, variant.render(name))
            for variant in variants
        ),
    )
