"""
Versioned label taxonomy (anchor texts per category).

- labels_v1.json: the anchor label texts and allowed values
- label_taxonomy.schema.json: JSON Schema for taxonomy files
- loader.py: load + validate, first-token label extraction
"""

from feedback_insights.taxonomy.exceptions import TaxonomyError
from feedback_insights.taxonomy.loader import (
    CategoryTaxonomy,
    LabelTaxonomy,
    first_token,
    load_taxonomy,
    parse_taxonomy,
)

__all__ = [
    "CategoryTaxonomy",
    "LabelTaxonomy",
    "TaxonomyError",
    "first_token",
    "load_taxonomy",
    "parse_taxonomy",
]
