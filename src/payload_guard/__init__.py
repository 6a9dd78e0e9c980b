"""
Payload Guard for the proposal analysis pipeline.

Turns raw proposal/integration records into a privacy-safe, size-bounded
tree before it is handed to an external LLM or displayed:
- Field-name and path-pattern policies (allow, keep, drop)
- Sensitive content detection (CPF/CNPJ, tokens, PEM keys, binary blobs)
- Optional time-windowed field encryption for disallowed values
- Hard byte budget with explicit loss accounting

Architecture: pure recursive tree transforms + immutable per-process context
"""

__version__ = "0.1.0"
