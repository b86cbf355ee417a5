"""Administrative management of synonym entries."""

from typing import Any, Dict, List, Optional, Tuple
import logging

from storage.models import PageRequest, SynonymEntry
from .exceptions import SynonymValidationError
from .fuzzy_matcher import FuzzyMatcher
from .language import SUPPORTED_LANGUAGES
from .synonym_index import SynonymIndex

logger = logging.getLogger(__name__)

MAX_TERM_LENGTH = 100


def validate_entry_fields(fields: Dict[str, Any], partial: bool = False) -> List[str]:
    """
    Validate synonym fields.

    Args:
        fields: Field values keyed by SynonymEntry attribute name
        partial: Only validate the fields present (updates)

    Returns:
        List of error messages, empty when valid
    """
    errors = []

    for name in ('canonical', 'synonym'):
        if name not in fields:
            if not partial:
                errors.append(f"{name.capitalize()} is required")
            continue
        value = fields[name]
        if not isinstance(value, str) or not value.strip():
            errors.append(f"{name.capitalize()} cannot be empty")
        elif len(value.strip()) > MAX_TERM_LENGTH:
            errors.append(f"{name.capitalize()} too long (max {MAX_TERM_LENGTH} characters)")

    if 'canonical' in fields and 'synonym' in fields and not errors:
        if fields['canonical'].strip().lower() == fields['synonym'].strip().lower():
            errors.append("Synonym must differ from its canonical term")

    if 'weight' in fields:
        try:
            weight = float(fields['weight'])
        except (TypeError, ValueError):
            errors.append(f"Invalid weight: {fields['weight']!r}")
        else:
            if not 0.0 < weight <= 1.0:
                errors.append("Weight must be greater than 0 and at most 1")

    if 'language' in fields and fields['language'] not in SUPPORTED_LANGUAGES:
        errors.append(f"Invalid language: {fields['language']}")

    return errors


def _normalize(fields: Dict[str, Any]) -> Dict[str, Any]:
    normalized = dict(fields)
    for name in ('canonical', 'synonym'):
        if name in normalized:
            normalized[name] = normalized[name].strip().lower()
    if 'weight' in normalized:
        normalized['weight'] = float(normalized['weight'])
    if normalized.get('category_hint') is not None:
        normalized['category_hint'] = normalized['category_hint'].strip() or None
    return normalized


class SynonymAdmin:
    """Validated CRUD over the synonym store.

    Every successful mutation invalidates the synonym index cache and the
    fuzzy-match memo so searches see the change on their next lookup.
    """

    def __init__(self, synonym_store, synonym_index: Optional[SynonymIndex] = None,
                 fuzzy_matcher: Optional[FuzzyMatcher] = None):
        self.synonym_store = synonym_store
        self.synonym_index = synonym_index
        self.fuzzy_matcher = fuzzy_matcher

    def _invalidate(self) -> None:
        if self.synonym_index is not None:
            self.synonym_index.invalidate()
        if self.fuzzy_matcher is not None:
            self.fuzzy_matcher.clear_cache()

    def list(self, page: int = 1, per_page: int = 50,
             search: Optional[str] = None) -> Tuple[List[SynonymEntry], int]:
        """Paginated listing, optionally filtered by a substring of either term."""
        request = PageRequest(page=max(1, page), per_page=min(max(1, per_page), 100))
        return self.synonym_store.list_synonyms(request, search=search or None)

    def get(self, synonym_id: int) -> Optional[SynonymEntry]:
        return self.synonym_store.get_synonym(synonym_id)

    def create(self, canonical: str, synonym: str, weight: float = 1.0,
               language: str = 'en', category_hint: Optional[str] = None,
               source: str = 'admin') -> SynonymEntry:
        """
        Create (or refresh) a canonical/synonym pair.

        Raises:
            SynonymValidationError: Invalid input
            DuplicateSynonymError: The synonym already belongs to another canonical
        """
        fields = {
            'canonical': canonical,
            'synonym': synonym,
            'weight': weight,
            'language': language,
            'category_hint': category_hint,
        }
        errors = validate_entry_fields(fields)
        if errors:
            raise SynonymValidationError('; '.join(errors))

        entry = SynonymEntry(source=source, **_normalize(fields))
        entry.id = self.synonym_store.upsert_synonym(entry)
        self._invalidate()
        logger.info(f"Saved synonym '{entry.synonym}' -> '{entry.canonical}' (id={entry.id})")
        return entry

    def update(self, synonym_id: int, **fields) -> bool:
        """Update selected fields. Returns False if the entry does not exist."""
        errors = validate_entry_fields(fields, partial=True)
        if errors:
            raise SynonymValidationError('; '.join(errors))

        if ('canonical' in fields) != ('synonym' in fields):
            current = self.synonym_store.get_synonym(synonym_id)
            if current is None:
                return False
            pair = {'canonical': current.canonical, 'synonym': current.synonym}
            pair.update((k, fields[k]) for k in pair if k in fields)
            if pair['canonical'].strip().lower() == pair['synonym'].strip().lower():
                raise SynonymValidationError("Synonym must differ from its canonical term")

        updated = self.synonym_store.update_synonym(synonym_id, _normalize(fields))
        if updated:
            self._invalidate()
            logger.info(f"Updated synonym {synonym_id}: {', '.join(sorted(fields))}")
        return updated

    def deactivate(self, synonym_id: int) -> bool:
        """Soft-delete: the entry stays in the store but stops expanding queries."""
        return self.update(synonym_id, active=False)

    def delete(self, synonym_id: int) -> bool:
        deleted = self.synonym_store.delete_synonym(synonym_id)
        if deleted:
            self._invalidate()
            logger.info(f"Deleted synonym {synonym_id}")
        return deleted
