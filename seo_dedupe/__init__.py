"""SEO duplicate-content remediation for catalog exports.

Detects duplicated titles / descriptions / HTML bodies across rows of a
catalog CSV export and rewrites the duplicates with a language model.
"""

__version__ = "0.3.0"
