from typing import List, Tuple
from .data_models import BinCategory, BinType

# Checked in order, first match wins. "Food and General Waste" is food waste.
KEYWORD_CATEGORIES: List[Tuple[Tuple[str, ...], BinCategory]] = [
    (("food",), BinCategory.FOOD_WASTE),
    (("garden",), BinCategory.GARDEN_WASTE),
    (("recycl",), BinCategory.RECYCLING),
    (("general", "refuse", "rubbish"), BinCategory.GENERAL_WASTE),
]


def normalise_bin_type(raw_text: str) -> BinType:
    """Maps free text such as 'Refuse collection' onto a BinType."""
    lowered = raw_text.lower()
    for keywords, category in KEYWORD_CATEGORIES:
        if any(keyword in lowered for keyword in keywords):
            return BinType.of(category)
    return BinType.other(raw_text)
