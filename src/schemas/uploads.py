from pydantic import BaseModel, ConfigDict, Field


class UploadRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    path: str | None = None
    data_url: str | None = Field(default=None, alias="dataUrl")


class UploadResponse(BaseModel):
    object_path: str = Field(serialization_alias="objectPath")


class HealthResponse(BaseModel):
    ok: bool = True
