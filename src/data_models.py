from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Optional, List, Tuple, Dict, Any, Union


class BinCategory(str, Enum):
    """Closed set of bin categories a collection can be reported under."""
    FOOD_WASTE = "Food Waste"
    GARDEN_WASTE = "Garden Waste"
    RECYCLING = "Recycling"
    GENERAL_WASTE = "General Waste"
    OTHER = "Other"


@dataclass(frozen=True)
class BinType:
    """A normalised bin type. For OTHER the label keeps the original text."""
    category: BinCategory
    label: str

    @classmethod
    def of(cls, category: BinCategory) -> "BinType":
        return cls(category=category, label=category.value)

    @classmethod
    def other(cls, raw_text: str) -> "BinType":
        return cls(category=BinCategory.OTHER, label=raw_text.strip())


@dataclass(frozen=True)
class CollectionEntry:
    """Represents a single upcoming bin collection."""
    date: date
    bin_type: BinType

    def to_dict(self) -> dict:
        return {"date": self.date.isoformat(), "type": self.bin_type.label}


@dataclass(frozen=True)
class ScrapeSuccess:
    """Deduplicated, date-ordered collections and the URL they came from."""
    collections: Tuple[CollectionEntry, ...]
    source: str
    cached: bool = False

    success = True

    def collections_as_dicts(self) -> List[dict]:
        return [collection.to_dict() for collection in self.collections]

    def to_dict(self) -> Dict[str, Any]:
        data = {"success": True, "collections": self.collections_as_dicts(), "source": self.source}
        if self.cached:
            data["cached"] = True
        return data


@dataclass(frozen=True)
class ScrapeFailure:
    """A scrape that produced no collections, with whatever the operator needs to debug it."""
    diagnostic: Dict[str, Any] = field(default_factory=dict)
    error: Optional[str] = None

    success = False

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"success": False}
        if self.error:
            data["error"] = self.error
        data.update(self.diagnostic)
        return data


ScrapeResult = Union[ScrapeSuccess, ScrapeFailure]


@dataclass(frozen=True)
class CacheEntry:
    result: ScrapeSuccess
    fetched_at: datetime


@dataclass
class PageContent:
    """
    Acquisition-neutral view of a page, as handed to the extractor.

    rows holds the cell texts of every table row, text_spans the candidate
    free-text fragments, and diagnostic what to report if nothing is found.
    """
    rows: List[List[str]] = field(default_factory=list)
    text_spans: List[str] = field(default_factory=list)
    diagnostic: Dict[str, Any] = field(default_factory=dict)
