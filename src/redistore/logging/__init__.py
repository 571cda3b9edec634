"""redistore logging — structlog setup for the session store."""

from redistore.logging.structlog_adapter import StructlogAdapter, mask_session_ids

__all__ = ["StructlogAdapter", "mask_session_ids"]
