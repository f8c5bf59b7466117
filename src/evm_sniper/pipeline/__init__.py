"""Raw log intake: validation gate and drain queue."""

from evm_sniper.pipeline.queue import EventQueue
from evm_sniper.pipeline.validator import is_processable, rejection_reason

__all__ = ["EventQueue", "is_processable", "rejection_reason"]
