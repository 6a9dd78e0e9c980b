"""
Unit tests for Payload Guard.

Test individual components in isolation:
- Policy models (presets, immutability, validation)
- Normalizer and path matcher
- Path filter (keepPaths / dropPaths)
- Detectors (national IDs, secrets, URLs)
- Field encryptor
- Recursive sanitizer (per policy variant)
- Budget enforcer
- Log redaction
- Pipeline orchestration
"""
