from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

# ======================================================
# Configuration Commune Pydantic
# ======================================================

class CamelModel(BaseModel):
    """Base des schémas échangés avec le front et les fichiers de version.

    Les clés sont sérialisées en camelCase (``productLineId``, ``uiRate``...)
    et acceptées indifféremment en camelCase ou en snake_case.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

def dump_camel(model: BaseModel) -> dict:
    """Sérialise un modèle en dict JSON-compatible (alias camelCase, sans None)."""
    return model.model_dump(by_alias=True, mode="json", exclude_none=True)
