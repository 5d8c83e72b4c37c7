"""
Job and material binding types.

A multi-material job file carries one ToolRequirement per tool. Before it
can start, every tool must be bound to a loaded station slot; the result
of that is a list of MaterialBinding records sent with the job start.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, model_validator

from spoolbind.utils import tool_label

# Placeholder stored in a binding when the slot reports no color
UNKNOWN_SLOT_COLOR = "#333333"


class JobMetadataType(str, Enum):
    """Kind of metadata the printer reports for a job file."""
    BASIC = "basic"
    MULTI_MATERIAL = "multi_material"


@dataclass(frozen=True)
class ToolRequirement:
    """Material required by one tool of a job."""
    tool_id: int  # 0-based
    material_name: str
    material_color: str = ""
    filament_weight: float = 0.0

    @property
    def label(self) -> str:
        return tool_label(self.tool_id)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ToolRequirement":
        return cls(
            tool_id=int(data["toolId"]),
            material_name=data.get("materialName") or "",
            material_color=data.get("materialColor") or "",
            filament_weight=float(data.get("filamentWeight") or 0.0),
        )


@dataclass(frozen=True)
class JobFile:
    """A job file on the printer, with its per-tool requirements."""
    file_name: str
    display_name: str = ""
    metadata_type: JobMetadataType = JobMetadataType.BASIC
    tools: List[ToolRequirement] = field(default_factory=list)
    printing_time: float = 0.0
    total_filament_weight: Optional[float] = None
    uses_material_station: bool = False

    def __post_init__(self):
        if isinstance(self.metadata_type, str):
            object.__setattr__(self, "metadata_type", JobMetadataType(self.metadata_type))
        seen = set()
        for tool in self.tools:
            if tool.tool_id in seen:
                raise ValueError(f"Duplicate toolId in job {self.file_name}: {tool.tool_id}")
            seen.add(tool.tool_id)

    @property
    def name(self) -> str:
        return self.display_name or self.file_name

    @property
    def tool_count(self) -> int:
        return len(self.tools)

    def is_multi_material(self) -> bool:
        """Job carries material metadata and declares at least one tool."""
        return self.metadata_type == JobMetadataType.MULTI_MATERIAL and len(self.tools) > 0

    def requires_station(self) -> bool:
        """Job uses more than one tool and so needs the material station."""
        return self.is_multi_material() and len(self.tools) > 1

    def get_tool(self, tool_id: int) -> Optional[ToolRequirement]:
        for tool in self.tools:
            if tool.tool_id == tool_id:
                return tool
        return None

    def material_summary(self) -> str:
        """Tooltip text listing what each tool requires."""
        if not self.is_multi_material():
            return "Multi-color job"
        lines = ["Requires material station"]
        lines.extend(f"{t.label}: {t.material_name}" for t in self.tools)
        return "\n".join(lines)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "JobFile":
        """
        Build from the printer job listing shape.

        Raises:
            ValueError: if the file name is missing or toolIds repeat
        """
        file_name = data.get("fileName")
        if not file_name:
            raise ValueError("Job file has no fileName")

        raw_type = data.get("metadataType", JobMetadataType.BASIC.value)
        # Printer listings tag multi-material metadata with the model name
        if raw_type == "ad5x":
            raw_type = JobMetadataType.MULTI_MATERIAL.value

        tool_datas = data.get("toolDatas")
        tools = [ToolRequirement.from_dict(t) for t in tool_datas] if isinstance(tool_datas, list) else []
        if tool_datas is None and raw_type == JobMetadataType.MULTI_MATERIAL.value:
            raw_type = JobMetadataType.BASIC.value

        return cls(
            file_name=file_name,
            display_name=data.get("displayName") or file_name,
            metadata_type=JobMetadataType(raw_type),
            tools=tools,
            printing_time=float(data.get("printingTime") or 0.0),
            total_filament_weight=data.get("totalFilamentWeight"),
            uses_material_station=bool(data.get("useMatlStation", False)),
        )


@dataclass(frozen=True)
class MaterialBinding:
    """A tool bound to a station slot, with what was known at bind time."""
    tool_id: int
    slot_id: int  # 1-based display id
    material_name: str
    tool_material_color: str
    slot_material_color: str

    def to_payload(self) -> Dict[str, Any]:
        """Wire shape used in the job start request."""
        return {
            "toolId": self.tool_id,
            "slotId": self.slot_id,
            "materialName": self.material_name,
            "toolMaterialColor": self.tool_material_color,
            "slotMaterialColor": self.slot_material_color,
        }


class MaterialMappingModel(BaseModel):
    toolId: int = Field(ge=0)
    slotId: int = Field(ge=1)
    materialName: str = Field(min_length=1)
    toolMaterialColor: str = Field(min_length=1)
    slotMaterialColor: str = Field(min_length=1)


class JobStartRequest(BaseModel):
    """Validated job start payload."""
    filename: str = Field(min_length=1)
    leveling: bool = False
    startNow: bool = True
    materialMappings: Optional[List[MaterialMappingModel]] = Field(default=None, min_length=1)

    @model_validator(mode="after")
    def check_unique_mappings(self) -> "JobStartRequest":
        if not self.materialMappings:
            return self
        tool_ids = set()
        slot_ids = set()
        for mapping in self.materialMappings:
            if mapping.toolId in tool_ids:
                raise ValueError(f"Duplicate toolId in materialMappings: {mapping.toolId}")
            if mapping.slotId in slot_ids:
                raise ValueError(f"Duplicate slotId in materialMappings: {mapping.slotId}")
            tool_ids.add(mapping.toolId)
            slot_ids.add(mapping.slotId)
        return self

    @classmethod
    def build(cls, filename: str, leveling: bool, bindings: List[MaterialBinding]) -> "JobStartRequest":
        return cls(
            filename=filename,
            leveling=leveling,
            startNow=True,
            materialMappings=[MaterialMappingModel(**b.to_payload()) for b in bindings] or None,
        )
