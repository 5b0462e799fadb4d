"""Model, aspect ratio and size legality tables.

Every rule here is table-driven and offline. A request is never built for a
(model, aspect) or (model, size) pair these functions reject.
"""

from types import MappingProxyType

from nanobanana.models.errors import ErrorCode, InvalidOptionError
from nanobanana.models.requests import ModelVariant, ResolvedModel

# Alias -> canonical model identifier
MODEL_ALIASES = MappingProxyType(
    {
        ModelVariant.FLASH: "gemini-3.1-flash-image-preview",
        ModelVariant.PRO: "gemini-3-pro-image-preview",
        ModelVariant.LEGACY: "gemini-2.5-flash-image",
    }
)

# Canonical identifier -> variant, so full names get their variant's rules
IDENTIFIER_VARIANTS = MappingProxyType({ident: variant for variant, ident in MODEL_ALIASES.items()})

# Custom identifiers must contain this separator
CUSTOM_MODEL_SEPARATOR = "-"

BASE_ASPECTS = frozenset({"1:1", "2:3", "3:2", "3:4", "4:3", "4:5", "5:4", "9:16", "16:9", "21:9"})
EXTENDED_ASPECTS = frozenset({"1:4", "4:1", "1:8", "8:1"})

ASPECTS_BY_VARIANT = MappingProxyType(
    {
        ModelVariant.FLASH: BASE_ASPECTS | EXTENDED_ASPECTS,
        ModelVariant.PRO: BASE_ASPECTS,
        ModelVariant.LEGACY: BASE_ASPECTS,
        ModelVariant.CUSTOM: BASE_ASPECTS,
    }
)

# Size token -> (width, height)
SIZE_DIMENSIONS = MappingProxyType(
    {
        "512": (512, 512),
        "1K": (1024, 1024),
        "2K": (2048, 2048),
        "4K": (3840, 2160),
    }
)

SIZES_BY_VARIANT = MappingProxyType(
    {
        ModelVariant.FLASH: frozenset({"512", "1K", "2K"}),
        ModelVariant.PRO: frozenset({"1K", "2K", "4K"}),
        ModelVariant.LEGACY: frozenset({"1K"}),
        ModelVariant.CUSTOM: frozenset({"1K", "2K"}),
    }
)


def _ratio_key(token: str) -> tuple[float, int]:
    width, height = token.split(":")
    return int(width) / int(height), int(width)


def _size_key(token: str) -> int:
    width, height = SIZE_DIMENSIONS[token]
    return width * height


def resolve_model(name: str) -> ResolvedModel:
    """
    Resolve a model alias or full identifier.

    Args:
        name: "flash", "pro", "legacy", or a full model identifier

    Returns:
        ResolvedModel with its variant and canonical identifier

    Raises:
        InvalidOptionError: If the name is neither a known alias nor a plausible identifier
    """
    try:
        variant = ModelVariant(name)
    except ValueError:
        variant = None

    if variant is not None and variant in MODEL_ALIASES:
        return ResolvedModel(variant=variant, identifier=MODEL_ALIASES[variant])

    if name in IDENTIFIER_VARIANTS:
        return ResolvedModel(variant=IDENTIFIER_VARIANTS[name], identifier=name)

    if CUSTOM_MODEL_SEPARATOR in name:
        return ResolvedModel(variant=ModelVariant.CUSTOM, identifier=name)

    aliases = [v.value for v in MODEL_ALIASES]
    raise InvalidOptionError(
        ErrorCode.INVALID_MODEL,
        f"unknown model {name!r} (valid: {', '.join(aliases)}, or a full model name)",
        valid=aliases,
    )


def valid_aspects(model: ResolvedModel) -> list[str]:
    """Aspect ratios legal for a model, ordered narrow to wide."""
    return sorted(ASPECTS_BY_VARIANT[model.variant], key=_ratio_key)


def valid_sizes(model: ResolvedModel) -> list[str]:
    """Size tokens legal for a model, ordered small to large."""
    return sorted(SIZES_BY_VARIANT[model.variant], key=_size_key)


def validate_aspect(model: ResolvedModel, aspect: str) -> None:
    """Raise InvalidOptionError unless the aspect ratio is legal for the model."""
    if aspect in ASPECTS_BY_VARIANT[model.variant]:
        return

    valid = valid_aspects(model)
    if aspect in EXTENDED_ASPECTS:
        message = f"aspect ratio {aspect!r} requires --model {ModelVariant.FLASH.value}"
    else:
        message = f"invalid aspect ratio {aspect!r} (valid: {', '.join(valid)})"
    raise InvalidOptionError(ErrorCode.INVALID_ASPECT, message, valid=valid)


def validate_size(model: ResolvedModel, size: str) -> None:
    """Raise InvalidOptionError unless the size token is legal for the model."""
    if size in SIZES_BY_VARIANT[model.variant]:
        return

    valid = valid_sizes(model)
    if size in SIZE_DIMENSIONS:
        owners = [v.value for v, sizes in SIZES_BY_VARIANT.items() if size in sizes and v in MODEL_ALIASES]
        message = f"{size} size is not available for {model.identifier} (requires --model {' or '.join(owners)})"
    else:
        message = f"invalid size {size!r} (valid: {', '.join(valid)})"
    raise InvalidOptionError(ErrorCode.INVALID_SIZE, message, valid=valid)


def size_dimensions(size: str) -> tuple[int, int]:
    """Pixel dimensions a size token stands for."""
    return SIZE_DIMENSIONS[size]
