from __future__ import annotations

from typing import Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class ImageSource(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    original_src: Optional[str] = Field(None, alias="originalSrc")


class MediaImage(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    typename: Literal["MediaImage"] = Field("MediaImage", alias="__typename")
    id: Optional[str] = None
    alt: Optional[str] = None
    image: Optional[ImageSource] = None

    def source_url(self) -> Optional[str]:
        return self.image.original_src if self.image else None


class GenericFile(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    typename: Literal["GenericFile"] = Field("GenericFile", alias="__typename")
    id: Optional[str] = None
    alt: Optional[str] = None
    url: Optional[str] = None
    file_status: Optional[str] = Field(None, alias="fileStatus")

    def source_url(self) -> Optional[str]:
        return self.url


StoreFile = Union[MediaImage, GenericFile]

_FILE_MODELS = {
    "MediaImage": MediaImage,
    "GenericFile": GenericFile,
}


def parse_file(node: Dict[str, Any]) -> Optional[StoreFile]:
    """
    Build the model matching the node's ``__typename``.

    Returns ``None`` for file types outside the union (videos, external
    videos...), which have no URL the destination can side-load.
    """
    model = _FILE_MODELS.get((node or {}).get("__typename"))
    if model is None:
        return None
    return model.model_validate(node)
