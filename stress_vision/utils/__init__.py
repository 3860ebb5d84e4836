"""
Utility subpackage for SVN:
- config_loader   → YAML loader, JSON overrides & engine defaults
- logging_utils   → unified logger setup (console, file, JSONL)
"""
