"""Common literal values used across textbook_parser.

These constants keep element names, language tables, and template strings
centralized so the Markdown engine, the DOM passes, and tests can import the
same values without drifting. Intended for internal use within the
textbook_parser package.

Examples
--------
>>> from textbook_parser import _constants
>>> _constants.CODE_LANGUAGE_CLASSES["py"]
'language-python'
>>> _constants.EQUATION_PLACEHOLDER_TEMPLATE.format(index=3)
'XEQUATIONX3XEQUATIONX'
"""

STEP_TAG = "x-step"
TITLE_MARKER_TAG = "x-title"

EQUATION_PLACEHOLDER_TEMPLATE = "XEQUATIONX{index}XEQUATIONX"
DISPLAY_EQUATION_TEMPLATE = "\\begin{{align*}}{body}\\end{{align*}}"

DEFAULT_ASSET_PREFIX = "/resources/{doc_id}/images/"
DEFAULT_EMOJI_IMAGE = "/images/emoji/{codepoint}.png"

# Short tags accepted on code spans (``{py}x = 1``) and fenced code blocks.
CODE_LANGUAGE_CLASSES: dict[str, str] = {
    "py": "language-python",
    "js": "language-js",
    "c": "language-clike",
    "jl": "language-julia",
    "r": "language-r",
    "code": "language-markup",
    "sh": "language-bash",
}

# Pygments lexer names for the short tags above.
PYGMENTS_LEXERS: dict[str, str] = {
    "py": "python",
    "js": "javascript",
    "c": "c",
    "jl": "julia",
    "r": "r",
    "code": "html",
    "sh": "bash",
}

VOID_ELEMENTS = frozenset(
    {
        "area",
        "base",
        "br",
        "col",
        "embed",
        "hr",
        "img",
        "input",
        "link",
        "meta",
        "param",
        "source",
        "track",
        "wbr",
    }
)

__all__ = [
    "CODE_LANGUAGE_CLASSES",
    "DEFAULT_ASSET_PREFIX",
    "DEFAULT_EMOJI_IMAGE",
    "DISPLAY_EQUATION_TEMPLATE",
    "EQUATION_PLACEHOLDER_TEMPLATE",
    "PYGMENTS_LEXERS",
    "STEP_TAG",
    "TITLE_MARKER_TAG",
    "VOID_ELEMENTS",
]
