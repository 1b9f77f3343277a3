"""Constants for lint rules, GDAL options and action storage."""

REGIONS: list[str] = [
    "northland",
    "auckland",
    "waikato",
    "bay-of-plenty",
    "gisborne",
    "hawkes-bay",
    "taranaki",
    "manawatu-whanganui",
    "wellington",
    "tasman",
    "nelson",
    "marlborough",
    "west-coast",
    "canterbury",
    "otago",
    "southland",
]

IMAGERY_BUCKET_NAMES: list[str] = ["linz-imagery", "nz-imagery"]

IMAGERY_PRODUCTS: list[str] = ["rgb"]

EPSG_NZTM2000 = "2193"
IMAGERY_CRS: list[str] = [EPSG_NZTM2000]

ACTION_MANIFEST_PREFIX = "actions/manifest-"
DEFAULT_MANIFEST_GROUP = 1000
