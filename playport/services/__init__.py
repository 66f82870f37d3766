"""Service layer (transfer orchestration)."""
from .transfer_service import TransferService, TransferResult, TransferProgress

__all__ = ["TransferService", "TransferResult", "TransferProgress"]
