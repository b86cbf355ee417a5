"""Data Transfer Objects (DTOs) for the catalog and synonym stores."""

from dataclasses import dataclass, field
from typing import List, Optional, Dict, Any
from datetime import datetime


@dataclass
class SynonymEntry:
    """One canonical/synonym pair from the synonym store."""
    canonical: str
    synonym: str
    weight: float = 1.0
    language: str = 'en'
    category_hint: Optional[str] = None
    usage_count: int = 0
    active: bool = True
    source: str = 'admin'
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    last_used_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'id': self.id,
            'canonical': self.canonical,
            'synonym': self.synonym,
            'weight': self.weight,
            'language': self.language,
            'category_hint': self.category_hint,
            'usage_count': self.usage_count,
            'active': self.active,
            'source': self.source,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'last_used_at': self.last_used_at.isoformat() if self.last_used_at else None
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SynonymEntry':
        """Create from dictionary."""
        return cls(
            canonical=data['canonical'],
            synonym=data['synonym'],
            weight=float(data.get('weight', 1.0)),
            language=data.get('language', 'en'),
            category_hint=data.get('category_hint'),
            usage_count=int(data.get('usage_count', 0)),
            active=bool(data.get('active', True)),
            source=data.get('source', 'admin'),
            id=data.get('id')
        )


@dataclass
class CategoryRecord:
    """A catalog category."""
    id: int
    name: str
    slug: str
    icon: Optional[str] = None
    sort_order: int = 0


@dataclass
class TagRecord:
    """A catalog tag."""
    id: int
    name: str
    slug: str
    color: Optional[str] = None
    group_id: Optional[int] = None


@dataclass
class CatalogItem:
    """A furniture record returned by search.

    ``relevance_boost`` is only used while re-ranking and never leaves
    the search service.
    """
    id: int
    name: str
    price: Optional[float] = None
    image_url: Optional[str] = None
    created_at: Optional[str] = None
    categories: List[Dict[str, Any]] = field(default_factory=list)
    tags: List[Dict[str, Any]] = field(default_factory=list)
    relevance_boost: float = 1.0

    def category_slugs(self) -> List[str]:
        return [c['slug'] for c in self.categories if c.get('slug')]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization (boost stripped)."""
        return {
            'id': self.id,
            'name': self.name,
            'price': self.price,
            'image_url': self.image_url,
            'created_at': self.created_at,
            'categories': list(self.categories),
            'tags': list(self.tags)
        }


@dataclass
class PageRequest:
    """Normalized pagination arguments for a store query."""
    page: int = 1
    per_page: int = 50

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.per_page
