from flask import request


def wants_json() -> bool:
    """True quando o cliente é uma chamada de API/XHR e não um navegador."""
    fmt = (request.args.get('format') or '').strip().lower()
    if fmt in {'json', 'true', '1'}:
        return True
    accept_header = (request.headers.get('Accept', '') or '').lower()
    return (
        'application/json' in accept_header
        or request.headers.get('X-Requested-With', '') == 'XMLHttpRequest'
        or request.is_json
    )
