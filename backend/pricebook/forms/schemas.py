"""
Descripteurs déclaratifs des formulaires d'édition du catalogue.

Chaque type d'entité (``mfg``, ``line``, ``prod``, ``addon``) est décrit par une
liste de ``FieldDescriptor``. Les valeurs calculées passent uniquement par des
callables Python typés (``value``, ``formatter``) : aucune chaîne n'est jamais
évaluée. Ces callables sont exclus de la sérialisation JSON.
"""
import logging
import math
from typing import Any, Callable, Dict, Iterator, List, Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

from pricebook.forms.exceptions import InvalidFormValueException, UnknownFormKindException

logger = logging.getLogger(__name__)

FieldType = Literal["readonly", "text", "number", "select", "checkbox", "pricingGroup", "section", "group"]

# (item, context) -> valeur affichée
ValueCallback = Callable[[Mapping[str, Any], Mapping[str, Any]], Any]
# (valeur brute, item, context) -> valeur affichée
FormatterCallback = Callable[[Any, Mapping[str, Any], Mapping[str, Any]], Any]

INPUT_FIELD_TYPES = ("text", "number", "select", "checkbox")
TRUTHY_FORM_VALUES = ("on", "true", "1", "yes")

class SelectOption(BaseModel):
    value: str
    label: str

class FieldDescriptor(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: FieldType = "text"
    label: Optional[str] = None
    key: Optional[str] = None
    id: Optional[str] = None
    help: Optional[str] = None
    placeholder: Optional[str] = None
    step: Optional[str] = None
    integer: bool = False # nombre entier (bornes UI)
    list_field: bool = Field(default=False, alias="listField") # liste saisie "a, b"
    options: List[SelectOption] = Field(default_factory=list)
    # pricingGroup
    model_key: Optional[str] = Field(default=None, alias="modelKey")
    ui_field: Optional["FieldDescriptor"] = Field(default=None, alias="uiField")
    flat_field: Optional["FieldDescriptor"] = Field(default=None, alias="flatField")
    # group
    class_name: Optional[str] = Field(default=None, alias="className")
    fields: List["FieldDescriptor"] = Field(default_factory=list)

    value: Optional[ValueCallback] = Field(default=None, exclude=True)
    formatter: Optional[FormatterCallback] = Field(default=None, exclude=True)

FieldDescriptor.model_rebuild()

class FormSchema(BaseModel):
    title: str
    collection: str
    fields: List[FieldDescriptor]

def _join_list(value: Any, item: Mapping[str, Any], context: Mapping[str, Any]) -> str:
    return ", ".join(value or [])

PRICING_MODEL_OPTIONS = [
    SelectOption(value="UI", label="Au UI"),
    SelectOption(value="FLAT", label="Prix fixe"),
]

def _pricing_group(prefix: str) -> FieldDescriptor:
    return FieldDescriptor(
        type="pricingGroup",
        model_key="pricingModel",
        ui_field=FieldDescriptor(label="Taux UI ($/UI)", key="uiRate", type="number",
                                 id=f"edit-{prefix}-ui-rate", step="0.01"),
        flat_field=FieldDescriptor(label="Prix fixe", key="flatPrice", type="number",
                                   id=f"edit-{prefix}-flat-price", step="0.01"),
    )

FIELD_SCHEMAS: Dict[str, FormSchema] = {
    "mfg": FormSchema(
        title="Modifier le fabricant",
        collection="manufacturers",
        fields=[FieldDescriptor(label="Nom", key="name", type="text", id="edit-mfg-name")],
    ),
    "line": FormSchema(
        title="Modifier la gamme",
        collection="productLines",
        fields=[FieldDescriptor(label="Nom", key="name", type="text", id="edit-line-name")],
    ),
    "prod": FormSchema(
        title="Modifier le produit",
        collection="products",
        fields=[
            FieldDescriptor(
                label="Type de produit (non modifiable)",
                type="readonly",
                value=lambda item, context: item.get("productType") or "N/A",
                help="Le type de produit détermine les options disponibles.",
            ),
            FieldDescriptor(
                label="Gamme (non modifiable)",
                type="readonly",
                value=lambda item, context: context.get("productLineName") or "N/A",
                help="La gamme ne peut pas être changée après la création.",
            ),
            FieldDescriptor(label="Nom", key="name", type="text", id="edit-prod-name"),
            FieldDescriptor(label="Code type de produit", key="productTypeCode", type="text", id="edit-prod-code"),
            FieldDescriptor(label="Modèle de prix", key="pricingModel", type="select",
                            id="edit-prod-model", options=PRICING_MODEL_OPTIONS),
            _pricing_group("prod"),
            FieldDescriptor(label="UI minimum", key="minimumUI", type="number",
                            id="edit-prod-min-ui", integer=True),
            FieldDescriptor(label="UI maximum (vide = illimité)", key="maximumUI", type="number",
                            id="edit-prod-max-ui", integer=True),
        ],
    ),
    "addon": FormSchema(
        title="Modifier l'option",
        collection="addons",
        fields=[
            FieldDescriptor(label="Nom", key="name", type="text", id="edit-addon-name"),
            FieldDescriptor(label="Modèle de prix", key="pricingModel", type="select",
                            id="edit-addon-model", options=PRICING_MODEL_OPTIONS),
            _pricing_group("addon"),
            FieldDescriptor(label="Groupe exclusif (optionnel)", key="exclusiveGroup", type="text",
                            id="edit-addon-exclusive"),
            FieldDescriptor(label="Obligatoire", key="mandatory", type="checkbox", id="edit-addon-mandatory"),
            FieldDescriptor(label="Masquée au client", key="hiddenFromCustomer", type="checkbox",
                            id="edit-addon-hidden"),
            FieldDescriptor(label="Option de chantier (globale)", key="isJobBased", type="checkbox",
                            id="edit-addon-job-based"),
            FieldDescriptor(type="section", label="Restrictions (optionnelles)"),
            FieldDescriptor(
                type="group",
                class_name="form-row",
                fields=[
                    FieldDescriptor(label="Types de produits autorisés", key="allowedProductTypes",
                                    type="text", id="edit-addon-product-types",
                                    placeholder="ex: Window, Door", list_field=True, formatter=_join_list),
                    FieldDescriptor(label="Gammes autorisées", key="allowedProductLines",
                                    type="text", id="edit-addon-product-lines",
                                    placeholder="ex: Premium, Standard", list_field=True, formatter=_join_list),
                    FieldDescriptor(label="Taille max", key="maxSize", type="number",
                                    id="edit-addon-max-size", step="0.01"),
                    FieldDescriptor(label="Taille min", key="minSize", type="number",
                                    id="edit-addon-min-size", step="0.01"),
                ],
            ),
        ],
    ),
}

def get_form_schema(kind: str) -> FormSchema:
    schema = FIELD_SCHEMAS.get(kind)
    if schema is None:
        raise UnknownFormKindException(kind)
    return schema

def resolve_field_value(field: FieldDescriptor, item: Mapping[str, Any],
                        context: Optional[Mapping[str, Any]] = None) -> Any:
    """Valeur affichée d'un champ pour une entité (dict camelCase)."""
    context = context or {}
    if field.value is not None:
        return field.value(item, context)
    raw_value = item.get(field.key) if field.key else ""
    if field.formatter is not None:
        return field.formatter(raw_value, item, context)
    return raw_value

def _iter_input_fields(fields: List[FieldDescriptor]) -> Iterator[FieldDescriptor]:
    for field in fields:
        if field.type == "group":
            yield from _iter_input_fields(field.fields)
        elif field.type == "pricingGroup":
            yield from (f for f in (field.ui_field, field.flat_field) if f is not None)
        elif field.type in INPUT_FIELD_TYPES and field.key:
            yield field

def _describe_field(field: FieldDescriptor, item: Mapping[str, Any], context: Mapping[str, Any]) -> Dict[str, Any]:
    described = field.model_dump(by_alias=True, exclude_none=True)
    if field.type == "group":
        described["fields"] = [_describe_field(f, item, context) for f in field.fields]
    elif field.type == "pricingGroup":
        described["modelValue"] = item.get(field.model_key) or "UI"
        for attr, alias in (("ui_field", "uiField"), ("flat_field", "flatField")):
            inner = getattr(field, attr)
            if inner is not None:
                described[alias] = _describe_field(inner, item, context)
    elif field.type != "section":
        described["resolvedValue"] = resolve_field_value(field, item, context)
    return described

def describe_form(kind: str, item: Optional[Mapping[str, Any]] = None,
                  context: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    """Descripteur JSON d'un formulaire (sans callbacks), valeurs résolues pour ``item``."""
    schema = get_form_schema(kind)
    item = item or {}
    context = context or {}
    return {
        "kind": kind,
        "title": schema.title,
        "collection": schema.collection,
        "fields": [_describe_field(f, item, context) for f in schema.fields],
    }

def _parse_number(field: FieldDescriptor, raw: str) -> Optional[float]:
    try:
        number = float(raw)
    except ValueError:
        raise InvalidFormValueException(field.key, raw)
    if not math.isfinite(number):
        raise InvalidFormValueException(field.key, raw)
    return int(number) if field.integer else number

def parse_form_values(kind: str, form: Mapping[str, Any]) -> Dict[str, Any]:
    """Convertit les valeurs soumises (chaînes) en payload d'entité camelCase.

    Nombres convertis, cases à cocher absentes = False, listes séparées par des
    virgules, champ vide = None. Les champs en lecture seule sont ignorés.
    """
    schema = get_form_schema(kind)
    payload: Dict[str, Any] = {}
    for field in _iter_input_fields(schema.fields):
        raw = form.get(field.key)
        if field.type == "checkbox":
            payload[field.key] = raw is True or str(raw or "").strip().lower() in TRUTHY_FORM_VALUES
            continue
        if raw is None:
            continue
        text = str(raw).strip()
        if not text:
            payload[field.key] = None
        elif field.type == "number":
            payload[field.key] = _parse_number(field, text)
        elif field.list_field:
            payload[field.key] = [part.strip() for part in text.split(",") if part.strip()] or None
        else:
            payload[field.key] = text
    logger.debug(f"[Forms] Formulaire '{kind}' converti: {sorted(payload)}")
    return payload
