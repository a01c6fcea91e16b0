"""Rich-text helpers for eadkit.

Rich-text fields in a finding aid carry embedded presentation markup
(<emph>, <lb/>, <extref>, ...). The transcoder flattens one field's inner
markup into annotated text that downstream renderers can style.

Security notes:
- Fragments are untrusted input; parsing goes through defusedxml.
"""

from .transcoder import LineBreakMode, transcode, transcode_literal
from .whitespace import cleanup_whitespace, filter_label, filter_strings

__all__ = [
    "LineBreakMode",
    "transcode",
    "transcode_literal",
    "cleanup_whitespace",
    "filter_label",
    "filter_strings",
]
