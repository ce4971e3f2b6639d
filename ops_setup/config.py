# ops_setup/config.py
# -*- coding: utf-8 -*-
"""
Centralized static constants for the host operations scripts.

Mutable runtime configuration (directories, container image, credentials)
lives in 'ops_setup/config_models.py' and is resolved by
'ops_setup/config_loader.py'.
"""

SCRIPT_VERSION: str = "1.0"

LOG_PREFIX: str = "[HOST-OPS]"

SYMBOLS: dict[str, str] = {
    "success": "✅",
    "error": "❌",
    "warning": "⚠️",
    "info": "ℹ️",
    "step": "➡️",
    "gear": "⚙️",
    "package": "📦",
    "rocket": "🚀",
    "sparkles": "✨",
    "critical": "🔥",
    "debug": "🐛",
}
