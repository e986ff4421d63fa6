"""
Mise en forme de l'inventaire

- Résumé texte : une ligne par élément, regroupées par type
- Sortie structurée : tableau JSON de records à forme fixe
"""

import json
from typing import List

from .collector import InventoryResult
from .record import Record, group_by_kind

SUMMARY_MODES = ('text', 'summary')
STRUCTURED_MODES = ('json', 'structured')


def format_inventory(inventory, mode: str = 'text') -> str:
    """
    Met en forme l'inventaire

    Args:
        inventory: InventoryResult ou séquence de Record
        mode: "text"/"summary" ou "json"/"structured"

    Returns:
        str: Inventaire mis en forme

    Raises:
        ValueError: si le mode est inconnu
    """
    records = inventory.records if isinstance(inventory, InventoryResult) else list(inventory)

    if mode in SUMMARY_MODES:
        return format_summary(records)
    if mode in STRUCTURED_MODES:
        return format_structured(records)

    raise ValueError(f"Format de sortie inconnu: {mode}")


def format_summary(records: List[Record]) -> str:
    lines = []
    for kind, group in group_by_kind(records).items():
        lines.append(f"{kind}:")
        for record in group:
            label = f"{record.name} {record.version}" if record.version else record.name
            lines.append(f"  {label}")
    return "\n".join(lines) + "\n"


def format_structured(records: List[Record]) -> str:
    return json.dumps([record.to_dict() for record in records], indent=2, ensure_ascii=False) + "\n"


def load_inventory(text: str) -> List[Record]:
    """
    Relit une sortie structurée

    Args:
        text: JSON produit par format_structured()

    Returns:
        list: Records reconstruits, dans le même ordre
    """
    return [Record.from_dict(item) for item in json.loads(text)]
