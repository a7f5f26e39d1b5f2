# src/cli/__main__.py
import sys, json
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from src.core.quote_message import compose_multi_item_quote
from src.core.variants import extract_variants, group_products_by_model
from src.server.schemas.catalog import Product
from src.services.cart_store import decode_cart
from src.core.errors import StorageCorruption

USAGE = """Usage:
  python -m src.cli quote <cart.json>
  python -m src.cli variants <products.json> [model_id]

Examples:
  python -m src.cli quote knowledge/storage/mercado_do_vale_quote_cart.json
  python -m src.cli variants products.json
  python -m src.cli variants products.json galaxy-a55
"""

def _read_text(p: str) -> str:
    try:
        return Path(p).read_text(encoding="utf-8")
    except OSError as e:
        print(f"Error reading '{p}': {e}", file=sys.stderr)
        sys.exit(2)

def _cmd_quote(path: str) -> None:
    try:
        items = decode_cart(_read_text(path))
    except StorageCorruption as e:
        print(f"Error reading cart '{path}': {e}", file=sys.stderr)
        sys.exit(2)
    print(compose_multi_item_quote(items))

def _cmd_variants(path: str, model_id: str = None) -> None:
    try:
        rows = json.loads(_read_text(path))
        products = [Product.model_validate(r) for r in rows]
    except (ValueError, TypeError, PydanticValidationError) as e:
        print(f"Error reading products '{path}': {e}", file=sys.stderr)
        sys.exit(2)

    groups = group_products_by_model(products)
    if model_id is not None:
        if model_id not in groups:
            print(f"Model '{model_id}' not found", file=sys.stderr)
            sys.exit(1)
        groups = {model_id: groups[model_id]}

    out = {key: extract_variants(group).model_dump() for key, group in groups.items()}
    print(json.dumps(out, ensure_ascii=False, indent=2))

def main():
    if len(sys.argv) < 3:
        print(USAGE, file=sys.stderr); sys.exit(1)

    cmd = sys.argv[1].lower()
    path = sys.argv[2]

    if cmd == "quote":
        _cmd_quote(path)
        return

    if cmd == "variants":
        model_id = sys.argv[3] if len(sys.argv) > 3 else None
        _cmd_variants(path, model_id)
        return

    print(USAGE, file=sys.stderr)
    sys.exit(1)

if __name__ == "__main__":
    main()
