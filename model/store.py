# model/store.py
from typing import Dict, List
from pydantic import BaseModel, Field
from util.enums import Platform


class Bundle(BaseModel):
    id: str
    platform: Platform
    sourceMap: str
    timestamp: int


class Store(BaseModel):
    id: str
    accessKey: str
    bundles: List[Bundle] = Field(default_factory=list)


class AssetRecord(BaseModel):
    """Existence marker for an asset hash; the bytes live on disk."""


class MetadataDocument(BaseModel):
    assets: Dict[str, AssetRecord] = Field(default_factory=dict)
    stores: Dict[str, Store] = Field(default_factory=dict)
