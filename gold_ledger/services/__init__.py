"""Services package."""

from gold_ledger.services.delivery import (
    DeliveryError,
    DeliveryInterface,
    OutboxDelivery,
)
from gold_ledger.services.render import (
    Artifact,
    ArtifactFormat,
    ArtifactRenderer,
    LedgerFormatter,
    RenderError,
)
from gold_ledger.services.storage import (
    AuditStorageInterface,
    CorruptDocumentError,
    IdentityDirectoryInterface,
    JsonIdentityDirectory,
    JsonLedgerStorage,
    JsonLinesAuditStorage,
    LedgerStorageInterface,
    StorageError,
)

__all__ = [
    # Delivery
    "DeliveryError",
    "DeliveryInterface",
    "OutboxDelivery",
    # Rendering
    "Artifact",
    "ArtifactFormat",
    "ArtifactRenderer",
    "LedgerFormatter",
    "RenderError",
    # Storage
    "AuditStorageInterface",
    "CorruptDocumentError",
    "IdentityDirectoryInterface",
    "JsonIdentityDirectory",
    "JsonLedgerStorage",
    "JsonLinesAuditStorage",
    "LedgerStorageInterface",
    "StorageError",
]
