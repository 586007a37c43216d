# model/api.py
from typing import Any, List, Optional
from pydantic import BaseModel, ConfigDict, Field
from util.enums import Platform


class DeltaRequest(BaseModel):
    assets: List[str] = Field(default_factory=list)


class StackFrame(BaseModel):
    # Unknown keys sent by the client are echoed back on untouched frames.
    model_config = ConfigDict(extra="allow")

    methodName: Optional[str] = None
    file: Optional[str] = None
    lineNumber: Optional[int] = None
    column: Optional[int] = None
    arguments: Optional[List[Any]] = None


class SymbolicateEnvelope(BaseModel):
    stack: List[StackFrame]

    def dump(self) -> str:
        return self.model_dump_json(exclude_unset=True)


class BundleReference(BaseModel):
    store_id: str
    platform: Platform
    bundle_id: str
