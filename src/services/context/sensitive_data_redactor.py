import posixpath
import re
from typing import Dict, Pattern

SENSITIVE_PATTERNS: Dict[str, Pattern] = {
    # API keys and tokens
    "api_key": re.compile(r"""(?:api[_-]?key|apikey)\s*[=:]\s*["']?([a-zA-Z0-9_\-]{20,})["']?""", re.I),
    "bearer_token": re.compile(r"Bearer\s+([a-zA-Z0-9_\-.]{20,})", re.I),
    "auth_token": re.compile(r"""(?:auth[_-]?token|token)\s*[=:]\s*["']?([a-zA-Z0-9_\-]{20,})["']?""", re.I),
    # AWS
    "aws_access_key": re.compile(r"(?:AKIA|ABIA|ACCA|ASIA)[A-Z0-9]{16}", re.I),
    "aws_secret_key": re.compile(
        r"""(?:aws[_-]?secret[_-]?(?:access[_-]?)?key)\s*[=:]\s*["']?([a-zA-Z0-9/+=]{40})["']?""", re.I
    ),
    # GitHub
    "github_token": re.compile(r"gh[pousr]_[A-Za-z0-9_]{36,}", re.I),
    "github_pat": re.compile(r"github_pat_[A-Za-z0-9_]{22,}", re.I),
    "polar_token": re.compile(r"polar_(?:live|test)_[a-zA-Z0-9]{24,}", re.I),
    "db_url": re.compile(r"(?:mysql|postgres|mongodb|redis)://[^@\s]+:[^@\s]+@\S+", re.I),
    "private_key": re.compile(r"-----BEGIN (?:RSA |EC |DSA |OPENSSH )?PRIVATE KEY-----", re.I),
    "password_config": re.compile(r"""(?:password|passwd|pwd)\s*[=:]\s*["']?([^\s"']{8,})["']?""", re.I),
    "jwt": re.compile(r"eyJ[a-zA-Z0-9_-]*\.eyJ[a-zA-Z0-9_-]*\.[a-zA-Z0-9_-]*", re.I),
    "secret": re.compile(r"""(?:secret|client[_-]?secret)\s*[=:]\s*["']?([a-zA-Z0-9_\-]{16,})["']?""", re.I),
    "slack_token": re.compile(r"xox[baprs]-[a-zA-Z0-9-]+", re.I),
    "sendgrid_key": re.compile(r"SG\.[a-zA-Z0-9_-]{22,}\.[a-zA-Z0-9_-]{43,}", re.I),
    "twilio_key": re.compile(r"SK[a-f0-9]{32}", re.I),
}

SENSITIVE_FILES = frozenset({
    ".env",
    ".env.local",
    ".env.production",
    ".env.staging",
    ".env.development",
    "credentials.json",
    "service-account.json",
    "secrets.yaml",
    "secrets.yml",
    ".npmrc",
    ".pypirc",
    "id_rsa",
    "id_ed25519",
    ".htpasswd",
})


class SensitiveDataRedactor:
    """
    Masks secrets in diff text before it is sent to a model.

    Each match is replaced by ``[REDACTED:<type>:<first 4 chars>***]`` so a
    reviewer can still tell what kind of value was there.
    """

    def redact(self, text: str) -> str:
        for name, pattern in SENSITIVE_PATTERNS.items():
            text = pattern.sub(lambda match, kind=name: self._redaction(kind, match.group(0)), text)
        return text

    def is_sensitive_file(self, path: str) -> bool:
        filename = posixpath.basename(path).lower()
        return filename in SENSITIVE_FILES or filename.startswith(".env")

    @staticmethod
    def _redaction(kind: str, original: str) -> str:
        return f"[REDACTED:{kind}:{original[:4]}***]"
