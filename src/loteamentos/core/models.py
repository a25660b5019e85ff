# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Domain records and their persisted (camelCase JSON) form.

Enum values are the persisted Portuguese labels,
member names are the English identifiers used in code.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class _LabelEnum(str, Enum):
    @classmethod
    def parse(cls, raw: Any) -> Optional["_LabelEnum"]:
        """Resolve a stored label or an English member name, else None."""
        if isinstance(raw, cls):
            return raw
        s = str(raw or "").strip()
        if not s:
            return None
        for member in cls:
            if member.value == s:
                return member
        return cls.__members__.get(s.upper())


class AreaType(_LabelEnum):
    CONDOMINIUM = "Condomínio"
    OPEN = "Aberto"
    LOGISTICS = "Logístico"


class AreaStatus(_LabelEnum):
    INTEREST = "Interesse"
    PROSPECTING = "Em Prospecção"
    PROSPECTED = "Prospectado"
    LOST = "Perdido"

    @property
    def is_closed(self) -> bool:
        return self in (AreaStatus.PROSPECTED, AreaStatus.LOST)


class Role(_LabelEnum):
    ADMIN = "admin"
    USER = "user"


CHECKLIST_KEYS = (
    ("visita_tecnica", "visitaTecnica"),
    ("levantamento_documental", "levantamentoDocumental"),
    ("proposta_apresentada", "propostaApresentada"),
    ("aprovacao_gestor", "aprovacaoGestor"),
)


@dataclass(frozen=True)
class Checklist:
    visita_tecnica: bool = False
    levantamento_documental: bool = False
    proposta_apresentada: bool = False
    aprovacao_gestor: bool = False

    def completed_steps(self) -> int:
        return sum(1 for attr, _ in CHECKLIST_KEYS if getattr(self, attr))

    def to_dict(self) -> Dict[str, bool]:
        return {key: bool(getattr(self, attr)) for attr, key in CHECKLIST_KEYS}

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "Checklist":
        data = data or {}
        return cls(**{attr: bool(data.get(key, False)) for attr, key in CHECKLIST_KEYS})


@dataclass(frozen=True)
class Area:
    """A tracked prospecting opportunity."""

    id: str
    name: str
    type: AreaType
    size: float
    broker: str
    status: AreaStatus
    price_per_square_meter: float = 0.0
    total_value: float = 0.0
    created_at: str = ""
    updated_at: str = ""
    next_action: str = ""
    next_action_date: str = ""
    observations: str = ""
    attachments: List[str] = field(default_factory=list)
    checklist: Checklist = field(default_factory=Checklist)
    location: str = ""
    area_size: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type.value,
            "location": self.location,
            "size": self.size,
            "areaSize": self.area_size,
            "broker": self.broker,
            "status": self.status.value,
            "pricePerSquareMeter": self.price_per_square_meter,
            "totalValue": self.total_value,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "nextAction": self.next_action,
            "nextActionDate": self.next_action_date,
            "observations": self.observations,
            "attachments": list(self.attachments),
            "checklist": self.checklist.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Area":
        area_type = AreaType.parse(data.get("type"))
        status = AreaStatus.parse(data.get("status"))
        if area_type is None or status is None:
            raise ValueError(f"Área '{data.get('id')}' com tipo/status desconhecido")
        return cls(
            id=str(data.get("id") or ""),
            name=str(data.get("name") or ""),
            type=area_type,
            location=str(data.get("location") or ""),
            size=float(data.get("size") or 0),
            area_size=str(data.get("areaSize") or ""),
            broker=str(data.get("broker") or ""),
            status=status,
            price_per_square_meter=float(data.get("pricePerSquareMeter") or 0),
            total_value=float(data.get("totalValue") or 0),
            created_at=str(data.get("createdAt") or ""),
            updated_at=str(data.get("updatedAt") or ""),
            next_action=str(data.get("nextAction") or ""),
            next_action_date=str(data.get("nextActionDate") or ""),
            observations=str(data.get("observations") or ""),
            attachments=[str(a) for a in (data.get("attachments") or [])],
            checklist=Checklist.from_dict(data.get("checklist")),
        )


@dataclass(frozen=True)
class HistoryEntry:
    """Audit record of one area status transition."""

    id: str
    area_id: str
    area_name: str
    user: str
    date: str
    previous_status: str
    new_status: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "id": self.id,
            "areaId": self.area_id,
            "areaName": self.area_name,
            "user": self.user,
            "date": self.date,
            "previousStatus": self.previous_status,
            "newStatus": self.new_status,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HistoryEntry":
        return cls(
            id=str(data.get("id") or ""),
            area_id=str(data.get("areaId") or ""),
            area_name=str(data.get("areaName") or ""),
            user=str(data.get("user") or ""),
            date=str(data.get("date") or ""),
            previous_status=str(data.get("previousStatus") or ""),
            new_status=str(data.get("newStatus") or ""),
        )


@dataclass(frozen=True)
class User:
    """Directory account. `password_hash` never leaves the directory."""

    id: str
    name: str
    email: str
    password_hash: str
    role: Role
    created_at: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "password": self.password_hash,
            "role": self.role.value,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "User":
        return cls(
            id=str(data.get("id") or ""),
            name=str(data.get("name") or ""),
            email=str(data.get("email") or ""),
            password_hash=str(data.get("password") or ""),
            role=Role.parse(data.get("role")) or Role.USER,
            created_at=str(data.get("createdAt") or ""),
        )


@dataclass(frozen=True)
class SessionUser:
    """Identity kept inside a session (no credentials)."""

    id: str
    name: str
    email: str
    role: Role

    @classmethod
    def of(cls, user: User) -> "SessionUser":
        return cls(id=user.id, name=user.name, email=user.email, role=user.role)

    def to_dict(self) -> Dict[str, str]:
        return {"id": self.id, "name": self.name, "email": self.email, "role": self.role.value}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SessionUser":
        uid = str(data.get("id") or "").strip()
        if not uid:
            raise ValueError("Sessão sem usuário")
        return cls(
            id=uid,
            name=str(data.get("name") or ""),
            email=str(data.get("email") or ""),
            role=Role.parse(data.get("role")) or Role.USER,
        )
