"""Background workers for batch generation."""

from shotlab.workers.batch_worker import (
    BatchRunner,
    process_batch,
    recover_interrupted_entries,
    submit_batch,
)

__all__ = [
    "BatchRunner",
    "submit_batch",
    "process_batch",
    "recover_interrupted_entries",
]
