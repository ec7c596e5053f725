"""
Tweak Protocol - declarative configuration changes loaded from the document.

A Tweak groups zero or more entries per resource kind:
- ServiceEntry: service startup type
- ScheduledTaskEntry: scheduled task enabled state
- RegistryEntry: registry value and type

Field names are matched case-insensitively on ingestion.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Any


REMOVE_ENTRY = "<RemoveEntry>"


def _lower_keys(data: Dict[str, Any]) -> Dict[str, Any]:
    """Return a copy of data with lower-cased keys."""
    return {str(k).lower(): v for k, v in data.items()}


def _text(value: Any) -> str:
    """Normalize a scalar document value to text."""
    if value is None:
        return ""
    return str(value)


@dataclass(frozen=True)
class ServiceEntry:
    """A Windows service startup type change."""
    name: str
    startup_type: str = ""
    original_type: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ServiceEntry":
        d = _lower_keys(data)
        return cls(
            name=_text(d.get("name")),
            startup_type=_text(d.get("startuptype")),
            original_type=_text(d.get("originaltype")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "Name": self.name,
            "StartupType": self.startup_type,
            "OriginalType": self.original_type,
        }


@dataclass(frozen=True)
class ScheduledTaskEntry:
    """A scheduled task enabled/disabled change."""
    name: str
    state: str = ""
    original_state: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScheduledTaskEntry":
        d = _lower_keys(data)
        return cls(
            name=_text(d.get("name")),
            state=_text(d.get("state")),
            original_state=_text(d.get("originalstate")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "Name": self.name,
            "State": self.state,
            "OriginalState": self.original_state,
        }


@dataclass(frozen=True)
class RegistryEntry:
    """
    A registry value change.

    `value` of "<RemoveEntry>" deletes the value instead of writing it.
    """
    path: str
    name: str
    type: str = "String"
    value: str = ""
    original_value: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RegistryEntry":
        d = _lower_keys(data)
        return cls(
            path=_text(d.get("path")),
            name=_text(d.get("name")),
            type=_text(d.get("type")) or "String",
            value=_text(d.get("value")),
            original_value=_text(d.get("originalvalue")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "Path": self.path,
            "Name": self.name,
            "Type": self.type,
            "Value": self.value,
            "OriginalValue": self.original_value,
        }


@dataclass
class Tweak:
    """
    One named change from the configuration document.

    InvokeScript/UndoScript/appx are carried for display only; the engine
    does not execute them.
    """
    key: str
    content: str = ""
    description: str = ""
    category: str = ""
    panel: str = ""
    order: str = ""
    link: Optional[str] = None

    service: List[ServiceEntry] = field(default_factory=list)
    scheduled_task: List[ScheduledTaskEntry] = field(default_factory=list)
    registry: List[RegistryEntry] = field(default_factory=list)

    invoke_script: List[str] = field(default_factory=list)
    undo_script: List[str] = field(default_factory=list)
    appx: List[str] = field(default_factory=list)

    @property
    def has_entries(self) -> bool:
        """True if the engine has anything to apply for this tweak."""
        return bool(self.service or self.scheduled_task or self.registry)

    @property
    def has_scripts(self) -> bool:
        return bool(self.invoke_script or self.undo_script or self.appx)

    @property
    def title(self) -> str:
        return self.content or self.key

    @classmethod
    def from_dict(cls, key: str, data: Dict[str, Any]) -> "Tweak":
        """Create from a document record; unknown fields are ignored."""
        d = _lower_keys(data)
        return cls(
            key=key,
            content=_text(d.get("content")),
            description=_text(d.get("description")),
            category=_text(d.get("category")),
            panel=_text(d.get("panel")),
            order=_text(d.get("order")),
            link=d.get("link"),
            service=[ServiceEntry.from_dict(e) for e in d.get("service") or []],
            scheduled_task=[ScheduledTaskEntry.from_dict(e) for e in d.get("scheduledtask") or []],
            registry=[RegistryEntry.from_dict(e) for e in d.get("registry") or []],
            invoke_script=[_text(s) for s in d.get("invokescript") or []],
            undo_script=[_text(s) for s in d.get("undoscript") or []],
            appx=[_text(s) for s in d.get("appx") or []],
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the document representation."""
        result: Dict[str, Any] = {
            "Content": self.content,
            "Description": self.description,
            "category": self.category,
            "panel": self.panel,
            "Order": self.order,
        }
        if self.link:
            result["link"] = self.link
        if self.service:
            result["service"] = [e.to_dict() for e in self.service]
        if self.scheduled_task:
            result["ScheduledTask"] = [e.to_dict() for e in self.scheduled_task]
        if self.registry:
            result["registry"] = [e.to_dict() for e in self.registry]
        if self.invoke_script:
            result["InvokeScript"] = list(self.invoke_script)
        if self.undo_script:
            result["UndoScript"] = list(self.undo_script)
        if self.appx:
            result["appx"] = list(self.appx)
        return result


@dataclass
class TweakDocument:
    """Ordered mapping of tweak key to Tweak."""
    tweaks: Dict[str, Tweak] = field(default_factory=dict)
    source: str = ""

    def __len__(self) -> int:
        return len(self.tweaks)

    def __contains__(self, key: str) -> bool:
        return key in self.tweaks

    def get(self, key: str) -> Optional[Tweak]:
        return self.tweaks.get(key)

    def keys(self) -> List[str]:
        return list(self.tweaks.keys())

    @classmethod
    def from_dict(cls, data: Dict[str, Any], source: str = "") -> "TweakDocument":
        tweaks = {
            key: Tweak.from_dict(key, record)
            for key, record in data.items()
            if isinstance(record, dict)
        }
        return cls(tweaks=tweaks, source=source)

    def to_dict(self) -> Dict[str, Any]:
        return {key: tweak.to_dict() for key, tweak in self.tweaks.items()}
