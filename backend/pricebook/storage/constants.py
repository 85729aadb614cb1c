# Clés logiques du Catalog Store

MANUFACTURERS = "manufacturers"
PRODUCT_LINES = "productLines"
PRODUCTS = "products"
ADDONS = "addons"
QUOTES = "quotes"
QUOTE_VERSIONS = "quoteVersions" # quoteId -> liste ordonnée de versions
PRICING_VERSIONS = "pricingVersions" # liste ordonnée
CURRENT_VERSION_ID = "currentVersionId"
GLOBAL_SETTINGS = "globalSettings"

CATALOG_KEYS = (MANUFACTURERS, PRODUCT_LINES, PRODUCTS, ADDONS)

# Ordre d'écriture lors d'un import de sauvegarde complète
BACKUP_KEYS = (
    MANUFACTURERS, PRODUCT_LINES, PRODUCTS, ADDONS,
    QUOTES, QUOTE_VERSIONS, PRICING_VERSIONS, CURRENT_VERSION_ID, GLOBAL_SETTINGS,
)

# Forme attendue de chaque section d'une sauvegarde
BACKUP_SECTION_TYPES = {
    MANUFACTURERS: dict,
    PRODUCT_LINES: dict,
    PRODUCTS: dict,
    ADDONS: dict,
    QUOTES: dict,
    QUOTE_VERSIONS: dict,
    PRICING_VERSIONS: list,
    CURRENT_VERSION_ID: str,
    GLOBAL_SETTINGS: dict,
}
