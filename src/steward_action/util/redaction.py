from __future__ import annotations

"""Redaction utility.

CONTRACT
- Inputs: text strings, optional explicit secret values
- Outputs:
  - redacted text string
- Invariants:
  - Replaces known GitHub token shapes and registered secrets with [REDACTED]
  - Best-effort; does not guarantee all secrets are caught
- Failure:
  - None (returns original text when nothing matches)
"""

import re
from dataclasses import dataclass, field

DEFAULT_PATTERNS = [
    re.compile(r"gh[pousr]_[A-Za-z0-9]{20,}"),
    re.compile(r"github_pat_[A-Za-z0-9_]{20,}"),
    re.compile(r"-----BEGIN [A-Z ]*PRIVATE KEY-----.*?-----END [A-Z ]*PRIVATE KEY-----", re.S),
]


@dataclass(frozen=True)
class Redactor:
    patterns: list[re.Pattern] = field(default_factory=lambda: list(DEFAULT_PATTERNS))
    secrets: tuple[str, ...] = ()

    def with_secrets(self, *values: str | None) -> Redactor:
        extra = tuple(v for v in values if v)
        return Redactor(patterns=self.patterns, secrets=self.secrets + extra)

    def redact(self, text: str) -> str:
        out = text
        for secret in self.secrets:
            out = out.replace(secret, "[REDACTED]")
        for pat in self.patterns:
            out = pat.sub("[REDACTED]", out)
        return out


if __name__ == "__main__":
    import argparse
    import sys

    parser = argparse.ArgumentParser(description="Redact secrets from text")
    parser.add_argument("--text", help="Text to redact")
    args = parser.parse_args()

    if args.text:
        print(Redactor().redact(args.text))
    else:
        parser.print_help()
        sys.exit(1)
