"""
Moteur de tarification.

Fonctions pures, sans dépendance au store ni à l'API : chaque opération reçoit
les données nécessaires et retourne de nouvelles données.
"""
import copy
import logging
import math
import time
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from pricebook.catalog.models import Addon, Product, PRICING_MODEL_FLAT, PRICING_MODEL_UI
from pricebook.pricing.exceptions import (
    ExclusiveGroupConflictException,
    InvalidConfigurationException,
    NegativeUpliftException,
    PriceFloorViolationException,
)
from pricebook.pricing.models import (
    AppliedAddon,
    JobBasedAddon,
    LineItem,
    QuoteTotals,
    QuoteVersion,
    ValidationResult,
)

logger = logging.getLogger(__name__)

Number = Union[int, float]

def round_money(amount: Number) -> Number:
    """Arrondit un montant au cent."""
    return round(amount, 2)

# --- Dimensions ---

def calculate_ui(width: Number, height: Number) -> int:
    """United Inches : largeur + hauteur, toujours arrondi au supérieur."""
    return max(0, math.ceil(width + height))

def calculate_square_footage(width: Number, height: Number) -> float:
    """Surface en pieds carrés (pouces² / 144). Sert uniquement à l'affichage."""
    return (width * height) / 144

# --- Éligibilité des options ---

def _product_type_of(product: Product) -> Optional[str]:
    return product.product_type or product.legacy_field("type") or product.product_type_code

def _product_line_of(product: Product) -> Optional[str]:
    return product.product_line_id or product.legacy_field("productLine")

def is_addon_allowed(addon: Addon, product: Product, ui: Number) -> bool:
    """Vérifie qu'une option est autorisée pour un produit et une taille donnés.

    Toutes les restrictions doivent passer. Les tailles min/max sont comparées
    directement à l'UI.
    """
    if addon.allowed_product_types:
        product_type = _product_type_of(product)
        if not product_type or product_type not in addon.allowed_product_types:
            return False

    if addon.allowed_product_lines:
        product_line = _product_line_of(product)
        if not product_line or product_line not in addon.allowed_product_lines:
            return False

    if addon.max_size is not None and ui > addon.max_size:
        return False

    if addon.min_size is not None and ui < addon.min_size:
        return False

    return True

def get_available_addons_for_product(product: Product, ui: Number,
                                     all_addons: Mapping[str, Addon]) -> List[str]:
    """Identifiants des options autorisées, dans l'ordre du catalogue."""
    return [addon_id for addon_id, addon in all_addons.items()
            if is_addon_allowed(addon, product, ui)]

# --- Prix unitaires ---

def _priced_amount(entity: Union[Product, Addon], ui: Number) -> float:
    """Prix d'un produit ou d'une option selon son modèle de tarification."""
    if entity.pricing_model == PRICING_MODEL_UI:
        if entity.ui_rate is None:
            raise InvalidConfigurationException(entity.id, "taux UI manquant pour un modèle UI.")
        return ui * entity.ui_rate
    if entity.pricing_model == PRICING_MODEL_FLAT:
        if entity.flat_price is None:
            raise InvalidConfigurationException(entity.id, "prix forfaitaire manquant pour un modèle FLAT.")
        return entity.flat_price
    raise InvalidConfigurationException(entity.id, f"modèle de tarification inconnu: {entity.pricing_model}")

# --- Ligne de devis ---

def calculate_line_item(product: Product, width: Number, height: Number,
                        selected_addon_ids: Optional[Iterable[str]] = None,
                        all_addons: Optional[Mapping[str, Addon]] = None) -> LineItem:
    """Calcule le prix plancher d'une ligne de devis.

    Les options obligatoires du produit sont toujours ajoutées à la sélection.
    L'éligibilité utilise l'UI réelle, les prix utilisent l'UI effective
    (bornée par le minimum du produit).

    Raises:
        InvalidConfigurationException: modèle de tarification inconnu ou incomplet.
        ExclusiveGroupConflictException: deux options retenues partagent un groupe.
    """
    all_addons = all_addons or {}

    ui = calculate_ui(width, height)
    effective_ui = max(ui, product.minimum_ui or 0)

    base_price = _priced_amount(product, effective_ui)

    mandatory_ids = [addon_id for addon_id in product.allowed_addons
                     if addon_id in all_addons and all_addons[addon_id].mandatory]
    # Dédoublonnage en conservant l'ordre : obligatoires d'abord
    addon_ids = list(dict.fromkeys([*mandatory_ids, *(selected_addon_ids or [])]))

    applied_addons: List[AppliedAddon] = []
    used_groups = set()
    addon_total = 0.0

    for addon_id in addon_ids:
        addon = all_addons.get(addon_id)
        if addon is None:
            continue
        if not is_addon_allowed(addon, product, ui):
            logger.debug(f"Option {addon_id} ignorée pour le produit {product.id} (UI={ui}).")
            continue

        if addon.exclusive_group:
            if addon.exclusive_group in used_groups:
                raise ExclusiveGroupConflictException(addon.exclusive_group)
            used_groups.add(addon.exclusive_group)

        addon_price = _priced_amount(addon, effective_ui)
        addon_total += addon_price
        applied_addons.append(AppliedAddon(
            id=addon_id,
            name=addon.name,
            price=addon_price,
            hidden=addon.hidden_from_customer,
        ))

    return LineItem(
        ui=effective_ui,
        base_price=base_price,
        addon_total=addon_total,
        line_item_par_total=base_price + addon_total,
        applied_addons=applied_addons,
    )

def calculate_job_based_addon(addon: Addon, total_ui: Number) -> JobBasedAddon:
    """Tarifie une option de chantier (une seule fois par devis).

    Les options au modèle UI sont tarifées sur l'UI effective cumulée du devis.
    """
    return JobBasedAddon(id=addon.id, name=addon.name, price=_priced_amount(addon, total_ui))

# --- Totaux ---

def calculate_quote(line_items: Sequence[LineItem],
                    job_based_addons: Optional[Sequence[JobBasedAddon]] = None,
                    sales_uplift: Number = 0) -> QuoteTotals:
    """Calcule les totaux du devis : plancher + options de chantier + marge commerciale."""
    if sales_uplift < 0:
        raise NegativeUpliftException(sales_uplift)

    job_based_addons = list(job_based_addons or [])
    total_par_price = round_money(sum(item.line_item_par_total for item in line_items))
    job_addon_total = round_money(sum(addon.price or 0 for addon in job_based_addons))

    final_price = round_money(total_par_price + job_addon_total + sales_uplift)

    # Garantie structurelle : le prix plancher n'est jamais entamé
    if final_price < total_par_price:
        raise PriceFloorViolationException(final_price, total_par_price)

    return QuoteTotals(
        total_par_price=total_par_price,
        job_addon_total=job_addon_total,
        job_based_addons=job_based_addons,
        sales_uplift=sales_uplift,
        final_price=final_price,
    )

# --- Versions verrouillées ---

def copy_line_item(item: LineItem) -> LineItem:
    """Copie structurelle d'une ligne (nouvelles listes et nouvelles options)."""
    return LineItem(
        ui=item.ui,
        base_price=item.base_price,
        addon_total=item.addon_total,
        line_item_par_total=item.line_item_par_total,
        applied_addons=[
            AppliedAddon(id=a.id, name=a.name, price=a.price, hidden=a.hidden)
            for a in item.applied_addons
        ],
    )

def create_quote_version(quote_id: str, line_items: Sequence[LineItem],
                         sales_uplift: Number = 0,
                         metadata: Optional[Dict[str, Any]] = None,
                         job_based_addons: Optional[Sequence[JobBasedAddon]] = None) -> QuoteVersion:
    """Crée un instantané verrouillé d'un devis.

    Les totaux sont recalculés puis figés : une modification ultérieure du
    catalogue ou des lignes d'origine ne change plus cette version.
    """
    totals = calculate_quote(line_items, job_based_addons=job_based_addons, sales_uplift=sales_uplift)
    millis = int(time.time() * 1000)

    version = QuoteVersion(
        id=f"{quote_id}_v{millis}_{uuid.uuid4().hex[:6]}",
        quote_id=quote_id,
        timestamp=datetime.now(timezone.utc),
        line_items=[copy_line_item(item) for item in line_items],
        total_par_price=totals.total_par_price,
        job_addon_total=totals.job_addon_total,
        sales_uplift=totals.sales_uplift,
        final_price=totals.final_price,
        locked=True,
        metadata=copy.deepcopy(metadata or {}),
    )
    logger.debug(f"Version {version.id} créée pour le devis {quote_id} (total {version.final_price}).")
    return version

# --- Validation des dimensions ---

def validate_size(product: Product, width: Number, height: Number) -> ValidationResult:
    """Vérifie les dimensions contre ``sizeLimits``. Retourne toutes les violations."""
    limits = product.size_limits
    if limits is None:
        return ValidationResult(valid=True, errors=[])

    errors = []
    if limits.min_width is not None and width < limits.min_width:
        errors.append(f'La largeur doit être d\'au moins {limits.min_width}"')
    if limits.max_width is not None and width > limits.max_width:
        errors.append(f'La largeur ne peut pas dépasser {limits.max_width}"')
    if limits.min_height is not None and height < limits.min_height:
        errors.append(f'La hauteur doit être d\'au moins {limits.min_height}"')
    if limits.max_height is not None and height > limits.max_height:
        errors.append(f'La hauteur ne peut pas dépasser {limits.max_height}"')

    return ValidationResult(valid=not errors, errors=errors)

def validate_ui(product: Product, ui: Number) -> ValidationResult:
    """Vérifie l'UI contre ``minimumUI``/``maximumUI``. Retourne toutes les violations."""
    errors = []
    if product.minimum_ui and ui < product.minimum_ui:
        errors.append(f"L'UI doit être d'au moins {product.minimum_ui}")
    if product.maximum_ui is not None and ui > product.maximum_ui:
        errors.append(f"L'UI ne peut pas dépasser {product.maximum_ui}")

    return ValidationResult(valid=not errors, errors=errors)
