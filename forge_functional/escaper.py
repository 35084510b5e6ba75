"""Output escaping for forge_functional views and controllers."""

import html
import re
from urllib.parse import quote

_JS_SAFE = re.compile(r"[A-Za-z0-9,._ ]")
_ATTR_SAFE = re.compile(r"[A-Za-z0-9,.\-_]")


class Escaper:
    """Escapes untrusted text for HTML, attribute, URL and JavaScript contexts."""

    def __init__(self, encoding: str = "utf-8", double_encode: bool = True) -> None:
        self.encoding = encoding
        self.double_encode = double_encode

    def escape_html(self, text: object) -> str:
        if text is None:
            return ""
        value = str(text)
        if not self.double_encode:
            value = html.unescape(value)
        return html.escape(value, quote=True)

    def escape_html_attr(self, text: object) -> str:
        if text is None:
            return ""
        return "".join(c if _ATTR_SAFE.match(c) else f"&#x{ord(c):02X};" for c in str(text))

    def escape_url(self, text: object) -> str:
        if text is None:
            return ""
        return quote(str(text), safe="", encoding=self.encoding)

    def escape_js(self, text: object) -> str:
        if text is None:
            return ""
        return "".join(c if _JS_SAFE.match(c) else _js_escape(c) for c in str(text))


def _js_escape(char: str) -> str:
    code = ord(char)
    if code < 0x100:
        return f"\\x{code:02X}"
    if code < 0x10000:
        return f"\\u{code:04X}"
    # Astral characters are emitted as a UTF-16 surrogate pair
    code -= 0x10000
    return f"\\u{0xD800 + (code >> 10):04X}\\u{0xDC00 + (code & 0x3FF):04X}"
