"""Allow-list HTML cleaning for feature content coming from the rich-text editor."""

import re
from typing import Optional

import bleach

ALLOWED_TAGS = frozenset([
    'p', 'br', 'strong', 'em', 'u', 's', 'ul', 'ol', 'li',
    'h1', 'h2', 'h3', 'a', 'img', 'video', 'div', 'span',
])

# Mesmos atributos para todas as tags permitidas
ALLOWED_ATTRIBUTES = ['href', 'src', 'alt', 'class', 'target']

ALLOWED_PROTOCOLS = frozenset(['http', 'https', 'mailto'])


def sanitize_html(content: Optional[str]) -> Optional[str]:
    """
    Remove tags, atributos e protocolos fora da allow-list.

    None continua None; tags proibidas são removidas (strip) em vez de
    escapadas, e o conteúdo de <script>/<style> nunca é preservado.
    """
    if content is None:
        return None
    cleaner = bleach.Cleaner(
        tags=ALLOWED_TAGS,
        attributes=ALLOWED_ATTRIBUTES,
        protocols=ALLOWED_PROTOCOLS,
        strip=True,
        strip_comments=True,
    )
    return cleaner.clean(_drop_script_bodies(content))


def _drop_script_bodies(content: str) -> str:
    # bleach com strip=True mantém o texto interno de <script>; remove o bloco inteiro
    return re.sub(r'<(script|style)\b[^>]*>.*?</\1\s*>', '', content, flags=re.IGNORECASE | re.DOTALL)
