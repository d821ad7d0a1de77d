"""Line preprocessors that lift fenced code and raw HTML lines out of the source."""

from __future__ import annotations

import html
import re
import typing as typ

from markdown.preprocessors import Preprocessor
from pygments import highlight
from pygments.formatters.html import HtmlFormatter
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

from textbook_parser._constants import DISPLAY_EQUATION_TEMPLATE, PYGMENTS_LEXERS

if typ.TYPE_CHECKING:
    from markdown import Markdown

    from textbook_parser.context import CompileContext

FENCED_INDENT_PATTERN = re.compile(r"^[ ]{1,3}([`~]{3,})", re.MULTILINE)
FENCED_BLOCK_PATTERN = re.compile(
    r"^(?P<fence>`{3,}|~{3,})[ ]*(?P<lang>[\w#.+-]*)[^\n]*\n"
    r"(?P<code>.*?)(?<=\n)(?P=fence)[ ]*$",
    re.MULTILINE | re.DOTALL,
)
EQUATION_FENCE = "latex"


def highlight_code(language: str, code: str, *, enabled: bool = True) -> str:
    """Return the escaped or Pygments-highlighted body of a code fence.

    Parameters
    ----------
    language : str
        Short language tag from the fence, such as ``py``.
    code : str
        Fence content.
    enabled : bool, optional
        When ``False`` the code is only HTML-escaped.

    Returns
    -------
    str
        Markup for the inside of the ``<code>`` element; unknown languages
        fall back to the plain text lexer.
    """
    if not enabled:
        return html.escape(code, quote=False)
    try:
        lexer = get_lexer_by_name(PYGMENTS_LEXERS.get(language, language))
    except ClassNotFound:
        lexer = get_lexer_by_name("text")
    return highlight(code, lexer, HtmlFormatter(nowrap=True))


class FencedCodePreprocessor(Preprocessor):
    """Replace fenced code blocks with stashed markup.

    ``latex`` fences become display equation placeholders, other tagged fences
    become ``<pre>`` blocks carrying the language class, and untagged fences
    are escaped verbatim.
    """

    def __init__(self, md: Markdown, context: CompileContext) -> None:
        super().__init__(md)
        self.context = context

    def run(self, lines: list[str]) -> list[str]:
        """Stash each fenced block and leave its placeholder on its own line."""
        text = FENCED_INDENT_PATTERN.sub(r"\1", "\n".join(lines))

        def _replace(match: re.Match[str]) -> str:
            markup = self.render(match.group("lang"), match.group("code"))
            return f"\n\n{self.md.htmlStash.store(markup)}\n\n"

        return FENCED_BLOCK_PATTERN.sub(_replace, text).split("\n")

    def render(self, language: str, code: str) -> str:
        """Return the markup that replaces one fenced block."""
        if language == EQUATION_FENCE:
            expression = DISPLAY_EQUATION_TEMPLATE.format(body=code.rstrip("\n"))
            token = self.context.equations.placeholder(expression, inline=False)
            return f'<p class="text-center">{token}</p>'
        if not language:
            return f"<pre><code>{html.escape(code, quote=False)}</code></pre>"
        config = self.context.config
        class_name = config.code_languages.get(language, f"language-{language}")
        body = highlight_code(language, code, enabled=config.highlight_code)
        return f'<pre class="{html.escape(class_name)}"><code>{body}</code></pre>'


class RawHtmlLinePreprocessor(Preprocessor):
    """Stash single lines of HTML that stand alone between blank lines.

    Only the line itself is treated as raw markup, so Markdown between an
    opening and a closing tag line (as produced by ``:::`` directives) is
    still parsed.
    """

    def run(self, lines: list[str]) -> list[str]:
        """Replace every standalone HTML line with a stash placeholder."""
        output: list[str] = []
        last = len(lines) - 1
        for index, line in enumerate(lines):
            blank_before = index == 0 or not lines[index - 1].strip()
            blank_after = index == last or not lines[index + 1].strip()
            if line.startswith("<") and blank_before and blank_after:
                output.append(self.md.htmlStash.store(line.rstrip()))
            else:
                output.append(line)
        return output


__all__ = [
    "FencedCodePreprocessor",
    "RawHtmlLinePreprocessor",
    "highlight_code",
]
