import json
import logging
import traceback
from datetime import datetime, timezone

# Campos passados via `extra=` que vão para o JSON
EXTRA_FIELDS = ('security', 'audit')


class StructuredFormatter(logging.Formatter):
    """
    Uma linha JSON por registro, para o arquivo de log (LOG_JSON=true).

    `log_security_event` e `audit_log` anexam seus dicionários em
    `security`/`audit`; os demais atributos do record são ignorados.
    """

    def format(self, record):
        entry = {
            'timestamp': datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno,
        }

        if record.exc_info:
            exc_type, exc_value, _ = record.exc_info
            entry['exception'] = {
                'type': exc_type.__name__ if exc_type else None,
                'message': str(exc_value),
                'traceback': traceback.format_exception(*record.exc_info),
            }

        for field in EXTRA_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                entry[field] = value

        return json.dumps(entry, ensure_ascii=False, default=str)
