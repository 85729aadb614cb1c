"""
Export / import des versions de catalogue (JSON et CSV).

Codec pur : aucune lecture du store, aucun accès disque. L'export produit un
``ExportedFile`` (nom + contenu), l'import retourne un ``CatalogData`` complet.

Le CSV contient quatre sections fixes (MANUFACTURERS, PRODUCT LINES, PRODUCTS,
ADDONS). L'import est positionnel : les lignes de titres de colonnes sont
sautées, jamais lues.
"""
import csv
import io
import json
import logging
import math
from typing import Any, Callable, Dict, List, Optional

from pydantic import BaseModel, ValidationError

from pricebook.catalog.models import (
    PRICING_MODEL_FLAT,
    Addon,
    CatalogData,
    Manufacturer,
    Product,
    ProductLine,
)
from pricebook.core.schemas import dump_camel
from pricebook.versions.exceptions import InvalidVersionFormatException
from pricebook.versions.models import ExportedFile

logger = logging.getLogger(__name__)

JSON_MEDIA_TYPE = "application/json"
CSV_MEDIA_TYPE = "text/csv"

SECTION_MANUFACTURERS = "MANUFACTURERS"
SECTION_PRODUCT_LINES = "PRODUCT LINES"
SECTION_PRODUCTS = "PRODUCTS"
SECTION_ADDONS = "ADDONS"

# Libellé de section -> (titres de colonnes, nombre minimal de colonnes à l'import)
CSV_SECTIONS = {
    SECTION_MANUFACTURERS: ("ID,Name", 2),
    SECTION_PRODUCT_LINES: ("ID,Manufacturer ID,Name", 3),
    SECTION_PRODUCTS: (
        "ID,Product Line ID,Product Type,Type Code,Name,Pricing Model,"
        "UI Rate,Flat Price,Minimum UI,Maximum UI",
        5,
    ),
    SECTION_ADDONS: (
        "ID,Name,Pricing Model,UI Rate,Flat Price,Exclusive Group,Mandatory,"
        "Hidden From Customer,Job Based,Allowed Product Types,Allowed Product Lines,"
        "Min Size,Max Size",
        4,
    ),
}

LIST_SEPARATOR = "; "

# ======================================================
# Export
# ======================================================

def _export_filename(version: BaseModel, extension: str) -> str:
    base = getattr(version, "name", None) or getattr(version, "id", None) or "catalog"
    return f"{base}.{extension}"

def export_as_json(version: BaseModel) -> ExportedFile:
    """Sérialise l'instantané complet (indentation stable de 2 espaces)."""
    content = json.dumps(dump_camel(version), indent=2, ensure_ascii=False)
    return ExportedFile(
        filename=_export_filename(version, "json"),
        content=content,
        media_type=JSON_MEDIA_TYPE,
    )

def _csv_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "YES" if value else "NO"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)

def _csv_list(values: Optional[List[str]]) -> str:
    return LIST_SEPARATOR.join(values or [])

def _manufacturer_row(m: Manufacturer) -> List[Any]:
    return [m.id, m.name]

def _product_line_row(pl: ProductLine) -> List[Any]:
    return [pl.id, pl.manufacturer_id, pl.name]

def _product_row(p: Product) -> List[Any]:
    return [
        p.id, p.product_line_id, p.product_type, p.product_type_code, p.name,
        p.pricing_model, p.ui_rate, p.flat_price, p.minimum_ui, p.maximum_ui,
    ]

def _addon_row(a: Addon) -> List[Any]:
    return [
        a.id, a.name, a.pricing_model, a.ui_rate, a.flat_price, a.exclusive_group,
        a.mandatory, a.hidden_from_customer, a.is_job_based,
        _csv_list(a.allowed_product_types), _csv_list(a.allowed_product_lines),
        a.min_size, a.max_size,
    ]

def export_as_csv(version: CatalogData) -> ExportedFile:
    """Exporte les quatre collections en CSV sectionné, champs entre guillemets."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")

    sections = [
        (SECTION_MANUFACTURERS, version.manufacturers, _manufacturer_row),
        (SECTION_PRODUCT_LINES, version.product_lines, _product_line_row),
        (SECTION_PRODUCTS, version.products, _product_row),
        (SECTION_ADDONS, version.addons, _addon_row),
    ]
    for index, (label, entities, to_row) in enumerate(sections):
        if index:
            buffer.write("\n")
        buffer.write(f"{label}\n{CSV_SECTIONS[label][0]}\n")
        for entity in entities.values():
            writer.writerow([_csv_value(v) for v in to_row(entity)])

    return ExportedFile(
        filename=_export_filename(version, "csv"),
        content=buffer.getvalue(),
        media_type=CSV_MEDIA_TYPE,
    )

# ======================================================
# Import
# ======================================================

def _with_ids(name: str, collection: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Complète l'``id`` de chaque entité à partir de sa clé si absent."""
    if collection is None:
        return {}
    if not isinstance(collection, dict):
        raise InvalidVersionFormatException(
            f"Collection '{name}' invalide: objet indexé par id attendu, {type(collection).__name__} reçu."
        )
    result = {}
    for key, entity in collection.items():
        if isinstance(entity, dict) and "id" not in entity:
            entity = {**entity, "id": key}
        result[key] = entity
    return result

def import_from_json(content: str) -> CatalogData:
    """Décode un fichier de version JSON.

    Raises:
        InvalidVersionFormatException: JSON illisible, ou ``id``/``manufacturers`` absents.
    """
    try:
        version_data = json.loads(content)
    except json.JSONDecodeError as e:
        raise InvalidVersionFormatException(f"JSON de version illisible: {e}")

    if not isinstance(version_data, dict) or not version_data.get("id") \
            or version_data.get("manufacturers") is None:
        raise InvalidVersionFormatException("Format JSON de version invalide (id ou manufacturers manquant).")

    try:
        return CatalogData.model_validate({
            "manufacturers": _with_ids("manufacturers", version_data.get("manufacturers")),
            "productLines": _with_ids("productLines", version_data.get("productLines")),
            "products": _with_ids("products", version_data.get("products")),
            "addons": _with_ids("addons", version_data.get("addons")),
        })
    except ValidationError as e:
        raise InvalidVersionFormatException(f"Entité de catalogue invalide: {e}")

def _opt_str(value: str) -> Optional[str]:
    return value or None

def _opt_number(value: str, parse: Callable[[str], Any], section: str, line_num: int) -> Optional[Any]:
    if not value:
        return None
    try:
        return parse(value)
    except (ValueError, OverflowError):
        raise InvalidVersionFormatException(
            f"Valeur numérique invalide '{value}' (section {section}, ligne {line_num})."
        )

def _parse_float(value: str) -> float:
    number = float(value)
    if not math.isfinite(number):
        raise ValueError(value)
    return number

def _parse_int(value: str) -> int:
    return int(_parse_float(value))

def _is_yes(value: str) -> bool:
    return value.upper() == "YES"

def _split_list(value: str) -> Optional[List[str]]:
    items = [part.strip() for part in value.split(";") if part.strip()]
    return items or None

def _parse_product(values: List[str], line_num: int) -> Product:
    fields = {
        "id": values[0],
        "product_line_id": _opt_str(values[1]),
        "product_type": _opt_str(values[2]),
        "product_type_code": _opt_str(values[3]),
        "name": values[4],
        "ui_rate": _opt_number(values[6], _parse_float, SECTION_PRODUCTS, line_num),
        "flat_price": _opt_number(values[7], _parse_float, SECTION_PRODUCTS, line_num),
        "maximum_ui": _opt_number(values[9], _parse_int, SECTION_PRODUCTS, line_num),
    }
    minimum_ui = _opt_number(values[8], _parse_int, SECTION_PRODUCTS, line_num)
    if minimum_ui is not None:
        fields["minimum_ui"] = minimum_ui
    if values[5]:
        fields["pricing_model"] = values[5]
    return Product(**fields)

def _parse_addon(values: List[str], line_num: int) -> Addon:
    return Addon(
        id=values[0],
        name=values[1],
        pricing_model=values[2] or PRICING_MODEL_FLAT,
        ui_rate=_opt_number(values[3], _parse_float, SECTION_ADDONS, line_num),
        flat_price=_opt_number(values[4], _parse_float, SECTION_ADDONS, line_num),
        exclusive_group=_opt_str(values[5]),
        mandatory=_is_yes(values[6]),
        hidden_from_customer=_is_yes(values[7]),
        is_job_based=_is_yes(values[8]),
        allowed_product_types=_split_list(values[9]),
        allowed_product_lines=_split_list(values[10]),
        min_size=_opt_number(values[11], _parse_float, SECTION_ADDONS, line_num),
        max_size=_opt_number(values[12], _parse_float, SECTION_ADDONS, line_num),
    )

def import_from_csv(content: str) -> CatalogData:
    """Décode un export CSV sectionné.

    Une ligne de libellé change de section et consomme la ligne de titres qui
    la suit. Un champ vide vaut absence (jamais zéro).

    Raises:
        InvalidVersionFormatException: CSV illisible ou valeur numérique invalide.
    """
    data = CatalogData()
    reader = csv.reader(io.StringIO(content.lstrip("\ufeff").strip()))
    current_section: Optional[str] = None

    try:
        for row in reader:
            values = [value.strip() for value in row]
            if not any(values):
                continue

            if len(values) == 1 and values[0] in CSV_SECTIONS:
                current_section = values[0]
                next(reader, None) # titres de colonnes
                continue

            if current_section is None:
                continue

            column_titles, min_columns = CSV_SECTIONS[current_section]
            if len(values) < min_columns:
                logger.debug(f"Ligne CSV {reader.line_num} ignorée ({len(values)} colonnes, section {current_section}).")
                continue
            values += [""] * (column_titles.count(",") + 1 - len(values))

            if current_section == SECTION_MANUFACTURERS:
                data.manufacturers[values[0]] = Manufacturer(id=values[0], name=values[1])
            elif current_section == SECTION_PRODUCT_LINES:
                data.product_lines[values[0]] = ProductLine(
                    id=values[0], manufacturer_id=_opt_str(values[1]), name=values[2]
                )
            elif current_section == SECTION_PRODUCTS:
                product = _parse_product(values, reader.line_num)
                data.products[product.id] = product
            else:
                addon = _parse_addon(values, reader.line_num)
                data.addons[addon.id] = addon
    except csv.Error as e:
        raise InvalidVersionFormatException(f"CSV de version illisible (ligne {reader.line_num}): {e}")
    except ValidationError as e:
        raise InvalidVersionFormatException(f"Entité de catalogue invalide (ligne {reader.line_num}): {e}")

    return data

def import_version_file(filename: str, content: str) -> CatalogData:
    """Choisit le décodeur selon l'extension du fichier (.json ou .csv)."""
    lowered = filename.lower()
    if lowered.endswith(".json"):
        return import_from_json(content)
    if lowered.endswith(".csv"):
        return import_from_csv(content)
    raise InvalidVersionFormatException(f"Extension de fichier non supportée: {filename}")
