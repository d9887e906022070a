"""
pricing.py — Price and SKU Derivation from a Pricebook

Pure functions over `(pricebook, selection)`. Nothing here performs I/O, so
the same selection always yields the same price and the same SKU.

Pricing:
    unit price = base[orientation][size]
                 + price of every flat add whose selection value is truthy
                 + price of the chosen label of every choice add
    rounded half-up to cents.

SKU:
    1. `sku_map` override keyed by `selection_key()`
    2. `sku.format` with `{token}` placeholders filled from sanitized tokens
"""

import re
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict

from .logging_config import get_logger
from .models import ChoiceAdd, FlatAdd, Pricebook, Selection

log = get_logger(__name__)

DEFAULT_SKU_FORMAT = "{prefix}-{orientation}-{size}"
DEFAULT_SKU_PREFIX = "SKU"
MISSING_TOKEN = "NA"

CENT = Decimal("0.01")

_WHITESPACE = re.compile(r"\s+")
_NOT_SKU_SAFE = re.compile(r"[^A-Z0-9\-]")
_PLACEHOLDER = re.compile(r"\{([^{}]*)\}")


def _text(value: Any) -> str:
    # Booleans as JSON spells them, so "true" matches merchant-authored keys
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def selection_value_text(add, value: Any) -> str:
    """
    Renders the selection value of one add as text.

    An unset flat add reads as "false" (unchecked), an unset choice add as "".
    """
    if value is None:
        return "false" if isinstance(add, FlatAdd) else ""
    return _text(value)


def compute_price(pricebook: Pricebook, selection: Selection) -> float:
    """
    Computes the unit price of a selection.

    Args:
        pricebook (Pricebook): Validated pricing rules of the product.
        selection (Selection): The customer's configuration.

    Returns:
        float: Unit price rounded half-up to two decimals. An unknown
        orientation/size combination contributes 0, so the result may be 0.
    """
    base = pricebook.base.get(selection.orientation or "", {}).get(selection.size or "", 0)
    total = Decimal(str(base))

    for key, add in pricebook.adds.items():
        value = selection.get(key)
        if isinstance(add, FlatAdd):
            if value:
                total += Decimal(str(add.price))
        elif isinstance(add, ChoiceAdd):
            if value is None:
                continue
            label = _text(value)
            if label in add.choices:
                total += Decimal(str(add.choices[label]))
            else:
                log.debug(f"Choice '{label}' of add '{key}' has no price, counting 0.")

    return float(total.quantize(CENT, rounding=ROUND_HALF_UP))


def sanitize_token(value: Any) -> str:
    """
    Makes a value safe for use inside a SKU.

    None becomes "NA"; whitespace is removed, the text is uppercased and
    everything outside [A-Z0-9-] is dropped. Sanitizing twice changes nothing.
    """
    text = MISSING_TOKEN if value is None else _text(value)
    text = _WHITESPACE.sub("", text).upper()
    return _NOT_SKU_SAFE.sub("", text)


def selection_key(pricebook: Pricebook, selection: Selection) -> str:
    """Canonical `orientation|size|key:value|...` key used by `sku_map`."""
    parts = [_text(selection.orientation or ""), _text(selection.size or "")]
    for key, add in pricebook.adds.items():
        parts.append(f"{key}:{selection_value_text(add, selection.get(key))}")
    return "|".join(parts)


def sku_tokens(pricebook: Pricebook, selection: Selection) -> Dict[str, str]:
    """Builds the sanitized token mapping used to fill `sku.format`."""
    codes = pricebook.sku.codes

    orientation_code = codes.get("orientation", {}).get(selection.orientation or "")
    tokens = {
        "prefix": pricebook.sku.prefix or DEFAULT_SKU_PREFIX,
        "orientation": orientation_code if orientation_code is not None else selection.orientation,
        "size": selection.size,
    }

    for key, add in pricebook.adds.items():
        value = selection.get(key)
        add_codes = codes.get(key, {})
        if isinstance(add, FlatAdd):
            flag = "true" if value else "false"
            code = add_codes.get(flag)
            tokens[key] = code if code is not None else flag.upper()
        else:
            code = add_codes.get(_text(value)) if value is not None else None
            tokens[key] = code if code is not None else value

    return {name: sanitize_token(value) for name, value in tokens.items()}


def build_sku(pricebook: Pricebook, selection: Selection) -> str:
    """
    Derives the SKU of a selection.

    A literal `sku_map` entry for the canonical selection key wins. Otherwise
    every `{token}` in `sku.format` is replaced by its sanitized value,
    unknown tokens by "NA". The formatted result never contains braces.
    """
    if pricebook.sku_map:
        override = pricebook.sku_map.get(selection_key(pricebook, selection))
        if override:
            return override

    template = pricebook.sku.format or DEFAULT_SKU_FORMAT
    tokens = sku_tokens(pricebook, selection)

    sku = _PLACEHOLDER.sub(lambda match: tokens.get(match.group(1), MISSING_TOKEN), template)
    return sku.replace("{", "").replace("}", "")
