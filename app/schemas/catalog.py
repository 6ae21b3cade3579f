from app.schemas.common import ApiModel

class MakeCreate(ApiModel):
    make_name: str = ""
    country_origin: str | None = None
    is_active: bool = True

class MakeUpdate(ApiModel):
    make_name: str | None = None
    country_origin: str | None = None
    is_active: bool | None = None

class ModelCreate(ApiModel):
    make_id: int = 0
    model_name: str = ""
    body_type: str | None = None
    fuel_type: str | None = None
    transmission_type: str | None = None
    engine_size_cc: int | None = None
    is_active: bool = True

class ModelUpdate(ApiModel):
    model_name: str | None = None
    body_type: str | None = None
    fuel_type: str | None = None
    transmission_type: str | None = None
    engine_size_cc: int | None = None
    is_active: bool | None = None
