"""
Process-wide settings and environment configuration.

These are the knobs that are not part of the per-instance configuration
record: remote model selection, resilience constants and cache sizing.
"""

from __future__ import annotations

import os

# Anthropic
ANTHROPIC_MODEL = os.getenv("ROASTLOG_ANTHROPIC_MODEL", "claude-3-haiku-20240307")
ANTHROPIC_MAX_TOKENS = int(os.getenv("ROASTLOG_ANTHROPIC_MAX_TOKENS", "150"))
API_KEY_PREFIX = "sk-ant-"

# Retry / circuit breaker
REMOTE_MAX_ATTEMPTS = 3
REMOTE_BASE_DELAY_SECONDS = 1.0
REMOTE_MAX_DELAY_SECONDS = 10.0
CIRCUIT_FAIL_MAX = 5
CIRCUIT_RESET_TIMEOUT_SECONDS = 60.0

# Rate limit window
RATE_LIMIT_REQUESTS = 100
RATE_LIMIT_WINDOW_SECONDS = 60.0

# Response validation
MAX_ANNOTATION_CHARS = 150

# Cache
CACHE_KEY_LENGTH = 16
CACHE_NORMALIZED_MAX_CHARS = 1000
CACHE_DEFAULT_MAX_AGE_SECONDS = 24 * 60 * 60

# Classification
MAX_OBJECT_DEPTH = 10
MAX_SERIALIZED_NODES = 1000
