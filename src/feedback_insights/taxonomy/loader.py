"""
Label taxonomy loading and validation.

The anchor label texts are versioned data, not code. Each category lists its
labels in enumeration order (ties between anchors go to the earlier one) and
the canonical values a label may resolve to. The canonical label of an anchor
is the first whitespace-separated token of its text.

Validation happens in two passes:
1. JSON Schema (structure, types, uniqueness)
2. Semantic checks (first tokens are allowed values, allowed values are
   members of the storage enums)
"""

import json
from functools import lru_cache
from pathlib import Path

import structlog
from jsonschema import Draft202012Validator
from pydantic import BaseModel, ConfigDict

from feedback_insights.models.enums import CATEGORY_LABEL_ENUMS, Category
from feedback_insights.taxonomy.exceptions import TaxonomyError


logger = structlog.get_logger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parent / "label_taxonomy.schema.json"


def first_token(label_text: str) -> str:
    """
    Canonical label of an anchor text.

    >>> first_token("feature_request enhancement new capability")
    'feature_request'
    """
    parts = label_text.split()
    if not parts:
        raise TaxonomyError("Empty label text", details={"label_text": label_text})
    return parts[0]


class CategoryTaxonomy(BaseModel):
    """Labels and allowed values of one category."""

    model_config = ConfigDict(frozen=True)

    category: Category
    storage_column: str
    allowed_values: tuple[str, ...]
    labels: tuple[str, ...]


class LabelTaxonomy(BaseModel):
    """A validated label taxonomy, categories in Category order."""

    model_config = ConfigDict(frozen=True)

    version: str
    categories: tuple[CategoryTaxonomy, ...]

    def __getitem__(self, category: Category) -> CategoryTaxonomy:
        for entry in self.categories:
            if entry.category == category:
                return entry
        raise KeyError(category)

    def __iter__(self):
        return iter(self.categories)


@lru_cache()
def _schema_validator() -> Draft202012Validator:
    with open(SCHEMA_PATH, "r", encoding="utf-8") as f:
        schema = json.load(f)
    return Draft202012Validator(schema)


def parse_taxonomy(document: dict) -> LabelTaxonomy:
    """
    Validate a taxonomy document and build a LabelTaxonomy.

    Args:
        document: Parsed taxonomy JSON

    Returns:
        LabelTaxonomy with categories in Category enum order

    Raises:
        TaxonomyError: On schema violations or inconsistent labels
    """
    errors = list(_schema_validator().iter_errors(document))
    if errors:
        messages = []
        for error in errors[:10]:
            path = ".".join(str(p) for p in error.path) if error.path else "root"
            messages.append(f"{path}: {error.message}")
        raise TaxonomyError(
            f"Label taxonomy failed schema validation with {len(errors)} error(s)",
            details={"errors": messages},
        )

    categories = []
    for category in Category:
        raw = document["categories"][category.value]
        allowed = tuple(raw["allowed_values"])

        label_enum = CATEGORY_LABEL_ENUMS.get(category)
        if label_enum is not None:
            enum_values = {member.value for member in label_enum}
            unknown = [v for v in allowed if v not in enum_values]
            if unknown:
                raise TaxonomyError(
                    f"Allowed values for '{category.value}' are not valid {label_enum.__name__} members",
                    details={"category": category.value, "unknown": unknown},
                )

        for label_text in raw["labels"]:
            token = first_token(label_text)
            if token not in allowed:
                raise TaxonomyError(
                    f"Label '{label_text}' resolves to '{token}', not an allowed value for '{category.value}'",
                    details={"category": category.value, "allowed_values": list(allowed)},
                )

        categories.append(
            CategoryTaxonomy(
                category=category,
                storage_column=raw["storage_column"],
                allowed_values=allowed,
                labels=tuple(raw["labels"]),
            )
        )

    return LabelTaxonomy(version=document["version"], categories=tuple(categories))


def load_taxonomy(path: str | Path) -> LabelTaxonomy:
    """
    Load and validate a taxonomy file.

    Args:
        path: Path to the taxonomy JSON file

    Raises:
        TaxonomyError: File missing, not JSON, or invalid
    """
    taxonomy_path = Path(path)
    if not taxonomy_path.exists():
        raise TaxonomyError(
            f"Label taxonomy file not found: {taxonomy_path}",
            details={"path": str(taxonomy_path)},
        )

    try:
        with open(taxonomy_path, "r", encoding="utf-8") as f:
            document = json.load(f)
    except json.JSONDecodeError as e:
        raise TaxonomyError(
            f"Label taxonomy is not valid JSON: {e}",
            details={"path": str(taxonomy_path)},
        ) from e

    taxonomy = parse_taxonomy(document)
    logger.info(
        "Loaded label taxonomy",
        path=str(taxonomy_path),
        version=taxonomy.version,
        label_count=sum(len(c.labels) for c in taxonomy),
    )
    return taxonomy
