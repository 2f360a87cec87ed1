"""Model Versioning: schema evolution for structured data records.

WHY: A record type's wire representation changes over time (fields are
renamed, split, retyped, removed), but old and new documents must keep
working with a single in-memory model. Writing ad-hoc migration code at
every read and write site does not scale.

HOW: Three-stage pipeline: parse (DocumentTree), convert (version-aware
engine driven by a per-type registry), bind (dataclass binding). Each
model type registers its current version and two author-supplied
converters; the engine upgrades incoming documents and down-converts
outgoing ones.

RULES:
- Conversion logic between versions is always author-supplied
- Unregistered types pass through the engine unmodified
- The registry is written during setup and only read afterwards
"""

__version__ = "0.1.0"
