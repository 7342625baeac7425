"""
Storage

Record and artifact stores used by the orchestrator:
- CustomerStore: reads customer records by id
- ProposalStore: writes proposal rows and issues sequential numbers
- ArtifactStorage: stores rendered documents and returns a URL

In-memory and local filesystem implementations are provided; a hosted CRM
or object store plugs in behind the same interfaces.
"""

import asyncio
import logging
import os
import uuid
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


# ============================================================================
# RECORDS
# ============================================================================

@dataclass
class CustomerRecord:
    """Customer fields the pipeline reads."""
    id: str
    company_name: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    contact_name: Optional[str] = None
    website: Optional[str] = None
    industry: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    notes: Optional[str] = None
    average_deal_size: Optional[float] = None
    profit_per_deal: Optional[float] = None
    conversion_rate: Optional[float] = None

    @property
    def display_name(self) -> str:
        """Company name, or the person's name for sole traders."""
        if self.company_name and self.company_name.strip():
            return self.company_name.strip()
        return " ".join(part for part in (self.first_name, self.last_name) if part).strip()

    @property
    def location(self) -> Optional[str]:
        parts = [part.strip() for part in (self.city, self.state, self.country) if part and part.strip()]
        return ", ".join(parts) or None


@dataclass
class ProposalRecord:
    """Summary row written after a successful generation."""
    id: str
    proposal_number: str
    customer_id: str
    url: str
    package_tier: str
    proposal_mode: str
    template_style: str
    company_name: str
    created_at: datetime = field(default_factory=datetime.now)
    total_tokens: int = 0
    total_cost: float = 0.0
    duration_seconds: float = 0.0
    output_format: str = "pdf"
    storage_key: Optional[str] = None
    # Snapshots used to re-render without another Claude call
    content: Optional[Dict[str, Any]] = None
    research: Optional[Dict[str, Any]] = None
    updated_at: Optional[datetime] = None

    def to_dict(self, include_content: bool = False) -> Dict[str, Any]:
        data = asdict(self)
        data["created_at"] = self.created_at.isoformat()
        data["updated_at"] = self.updated_at.isoformat() if self.updated_at else None
        if not include_content:
            data.pop("content")
            data.pop("research")
        return data


# ============================================================================
# RECORD STORES
# ============================================================================

class CustomerStore(ABC):
    """Read access to customer records."""

    @abstractmethod
    async def get_customer(self, customer_id: str) -> Optional[CustomerRecord]:
        pass


class ProposalStore(ABC):
    """Write access to proposal rows."""

    @abstractmethod
    async def next_proposal_number(self) -> str:
        """Reserve the next number (P-0001, P-0002, ...)."""
        pass

    @abstractmethod
    async def create_proposal(self, record: ProposalRecord) -> ProposalRecord:
        pass

    @abstractmethod
    async def get_proposal(self, proposal_id: str) -> Optional[ProposalRecord]:
        pass

    @abstractmethod
    async def update_proposal(self, record: ProposalRecord) -> ProposalRecord:
        """Replace the stored row with the same id."""
        pass

    @abstractmethod
    async def list_proposals(self, customer_id: Optional[str] = None) -> List[ProposalRecord]:
        pass


class InMemoryCustomerStore(CustomerStore):
    """Customer records held in a dict (development and tests)."""

    def __init__(self, customers: Optional[List[CustomerRecord]] = None):
        self._customers: Dict[str, CustomerRecord] = {c.id: c for c in customers or []}

    def add(self, customer: CustomerRecord) -> None:
        self._customers[customer.id] = customer

    async def get_customer(self, customer_id: str) -> Optional[CustomerRecord]:
        return self._customers.get(customer_id)


def format_proposal_number(sequence: int) -> str:
    return f"P-{sequence:04d}"


class InMemoryProposalStore(ProposalStore):
    """Proposal rows held in memory with sequential numbering."""

    def __init__(self):
        self._proposals: List[ProposalRecord] = []
        self._sequence = 0
        self._lock = asyncio.Lock()

    async def next_proposal_number(self) -> str:
        async with self._lock:
            self._sequence += 1
            return format_proposal_number(self._sequence)

    async def create_proposal(self, record: ProposalRecord) -> ProposalRecord:
        self._proposals.append(record)
        logger.info(f"Created proposal {record.proposal_number} for customer {record.customer_id}")
        return record

    async def get_proposal(self, proposal_id: str) -> Optional[ProposalRecord]:
        return next((p for p in self._proposals if p.id == proposal_id), None)

    async def update_proposal(self, record: ProposalRecord) -> ProposalRecord:
        for index, existing in enumerate(self._proposals):
            if existing.id == record.id:
                self._proposals[index] = record
                return record
        raise KeyError(f"Proposal {record.id} not found")

    async def list_proposals(self, customer_id: Optional[str] = None) -> List[ProposalRecord]:
        rows = [p for p in self._proposals if customer_id is None or p.customer_id == customer_id]
        return sorted(rows, key=lambda p: p.created_at, reverse=True)


def new_proposal_id() -> str:
    return str(uuid.uuid4())


# ============================================================================
# ARTIFACT STORAGE
# ============================================================================

class ArtifactStorage(ABC):
    """Abstract base class for rendered-document storage."""

    @abstractmethod
    async def save_binary(self, key: str, data: bytes, content_type: str = "application/octet-stream") -> str:
        """Save binary data. Returns the storage key."""
        pass

    @abstractmethod
    async def load_binary(self, key: str) -> Optional[bytes]:
        pass

    @abstractmethod
    async def delete(self, key: str) -> bool:
        pass

    @abstractmethod
    def get_url(self, key: str) -> Optional[str]:
        """URL for a stored artifact."""
        pass


class FileStorage(ArtifactStorage):
    """
    File system storage backend.

    URLs are built from public_base_url when set (a static file server in
    front of base_path), otherwise file:// URLs are returned.
    """

    def __init__(self, base_path: Optional[str] = None, public_base_url: Optional[str] = None):
        """
        Initialize file storage.

        Args:
            base_path: Root directory for storage.
                      Defaults to PROPOSAL_STORAGE_PATH or ~/.proposal_engine/storage/
            public_base_url: Base URL the directory is served from
        """
        if base_path is None:
            base_path = os.getenv(
                "PROPOSAL_STORAGE_PATH",
                str(Path.home() / ".proposal_engine" / "storage")
            )

        self.base_path = Path(base_path)
        self.base_path.mkdir(parents=True, exist_ok=True)
        self.public_base_url = public_base_url.rstrip("/") if public_base_url else None

        logger.info(f"FileStorage initialized at {self.base_path}")

    def _get_path(self, key: str) -> Path:
        """Get full path for a key."""
        safe_key = key.replace("..", "").lstrip("/")
        return self.base_path / safe_key

    async def save_binary(self, key: str, data: bytes, content_type: str = "application/octet-stream") -> str:
        path = self._get_path(key)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "wb") as f:
            f.write(data)

        logger.debug(f"Saved {content_type} to {path} ({len(data)} bytes)")
        return str(path.relative_to(self.base_path))

    async def load_binary(self, key: str) -> Optional[bytes]:
        path = self._get_path(key)
        if not path.exists():
            return None
        with open(path, "rb") as f:
            return f.read()

    async def delete(self, key: str) -> bool:
        path = self._get_path(key)
        if path.exists():
            path.unlink()
            logger.debug(f"Deleted {path}")
            return True
        return False

    def get_url(self, key: str) -> Optional[str]:
        path = self._get_path(key)
        if not path.exists():
            return None
        if self.public_base_url:
            return f"{self.public_base_url}/{path.relative_to(self.base_path).as_posix()}"
        return f"file://{path.absolute()}"


class InMemoryArtifactStorage(ArtifactStorage):
    """Artifacts kept in a dict; URLs use a memory:// scheme."""

    def __init__(self):
        self.objects: Dict[str, bytes] = {}
        self.content_types: Dict[str, str] = {}

    async def save_binary(self, key: str, data: bytes, content_type: str = "application/octet-stream") -> str:
        self.objects[key] = data
        self.content_types[key] = content_type
        return key

    async def load_binary(self, key: str) -> Optional[bytes]:
        return self.objects.get(key)

    async def delete(self, key: str) -> bool:
        self.content_types.pop(key, None)
        return self.objects.pop(key, None) is not None

    def get_url(self, key: str) -> Optional[str]:
        return f"memory://{key}" if key in self.objects else None
