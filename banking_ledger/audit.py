"""
Audit Trail Module

Hash-chained in-memory audit log with SHA-256 for tamper detection.
Account creation, postings, rejected transactions and login attempts
are logged here. Never records passwords or credential hashes.
"""

import hashlib
import json
from datetime import datetime, timezone
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Any
from enum import Enum
from decimal import Decimal
import uuid


class AuditEventType(Enum):
    """Types of audit events"""
    # Account events
    ACCOUNT_CREATED = "account_created"

    # Transaction events
    DEPOSIT_POSTED = "deposit_posted"
    WITHDRAWAL_POSTED = "withdrawal_posted"
    TRANSACTION_REJECTED = "transaction_rejected"

    # Login events
    LOGIN_SUCCESS = "login_success"
    LOGIN_FAILED = "login_failed"


def _serialize_value(value):
    """Convert metadata values to JSON-serializable format"""
    if isinstance(value, Decimal):
        return str(value)
    elif isinstance(value, datetime):
        return value.isoformat()
    elif isinstance(value, Enum):
        return value.value
    elif isinstance(value, dict):
        return {k: _serialize_value(v) for k, v in value.items()}
    elif isinstance(value, (list, tuple)):
        return [_serialize_value(v) for v in value]
    else:
        return value


@dataclass
class AuditEvent:
    """
    Immutable audit event with hash chaining for tamper detection
    """
    id: str
    created_at: datetime
    event_type: AuditEventType
    entity_type: str  # account, directory
    entity_id: str    # username the event applies to
    previous_hash: str  # Hash of previous audit event for chaining
    current_hash: str   # SHA-256 hash of this event
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if self.metadata:
            self.metadata = {k: _serialize_value(v) for k, v in self.metadata.items()}

    def calculate_hash(self) -> str:
        """
        Calculate SHA-256 hash of this event
        Hash includes all fields except current_hash to prevent circular reference
        """
        hash_data = {
            'id': self.id,
            'created_at': self.created_at.isoformat(),
            'event_type': self.event_type.value,
            'entity_type': self.entity_type,
            'entity_id': self.entity_id,
            'previous_hash': self.previous_hash,
            'metadata': self.metadata
        }

        # Create deterministic JSON string
        json_data = json.dumps(hash_data, sort_keys=True, separators=(',', ':'))
        return hashlib.sha256(json_data.encode('utf-8')).hexdigest()

    def verify_hash(self) -> bool:
        """Verify that the current hash is correct"""
        return self.current_hash == self.calculate_hash()


class AuditTrail:
    """
    Hash-chained audit trail for tamper detection
    """

    def __init__(self):
        self._events: List[AuditEvent] = []

    def log_event(
        self,
        event_type: AuditEventType,
        entity_type: str,
        entity_id: str,
        metadata: Optional[Dict[str, Any]] = None
    ) -> AuditEvent:
        """
        Log an audit event with hash chaining

        Args:
            event_type: Type of audit event
            entity_type: Type of entity being audited
            entity_id: ID of the entity
            metadata: Additional event-specific data

        Returns:
            Created AuditEvent
        """
        event = AuditEvent(
            id=str(uuid.uuid4()),
            created_at=datetime.now(timezone.utc),
            event_type=event_type,
            entity_type=entity_type,
            entity_id=entity_id,
            previous_hash=self.get_latest_hash() or "",
            current_hash="",  # Will be calculated below
            metadata=metadata or {}
        )
        event.current_hash = event.calculate_hash()
        self._events.append(event)
        return event

    def get_events_for_entity(
        self,
        entity_type: str,
        entity_id: str,
        limit: Optional[int] = None
    ) -> List[AuditEvent]:
        """Get audit events for one entity in chronological order"""
        events = [
            e for e in self._events
            if e.entity_type == entity_type and e.entity_id == entity_id
        ]
        if limit:
            events = events[-limit:]  # Get most recent N events
        return events

    def get_events_by_type(
        self,
        event_type: AuditEventType,
        limit: Optional[int] = None
    ) -> List[AuditEvent]:
        """Get audit events of one type in chronological order"""
        events = [e for e in self._events if e.event_type == event_type]
        if limit:
            events = events[-limit:]
        return events

    def get_all_events(self) -> List[AuditEvent]:
        return list(self._events)

    def verify_integrity(self) -> Dict[str, Any]:
        """
        Verify the integrity of the entire audit chain

        Returns:
            Dictionary with integrity check results
        """
        result = {
            'valid': True,
            'total_events': len(self._events),
            'hash_errors': [],
            'chain_breaks': [],
        }

        # Verify each event's hash
        for i, event in enumerate(self._events):
            if not event.verify_hash():
                result['valid'] = False
                result['hash_errors'].append({
                    'event_id': event.id,
                    'position': i,
                    'expected_hash': event.calculate_hash(),
                    'actual_hash': event.current_hash
                })

        # Verify chain continuity
        previous_hash = ""
        for i, event in enumerate(self._events):
            if event.previous_hash != previous_hash:
                result['valid'] = False
                result['chain_breaks'].append({
                    'event_id': event.id,
                    'position': i,
                    'expected_previous_hash': previous_hash,
                    'actual_previous_hash': event.previous_hash
                })
            previous_hash = event.current_hash

        return result

    def count_events(self) -> int:
        """Get total number of audit events"""
        return len(self._events)

    def get_latest_hash(self) -> Optional[str]:
        """Get the hash of the most recent audit event"""
        if not self._events:
            return None
        return self._events[-1].current_hash
