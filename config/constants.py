"""Application constants.

Centralized location for all magic numbers and strings used by the
formula engines, persistence and tools.
"""

import sys
from decimal import Decimal

# ============================================================================
# Numeric tolerance
# ============================================================================

# A weight or ratio is "significant" when its magnitude exceeds machine
# epsilon; below that it is treated as floating-point noise from scaling.
WEIGHT_EPSILON = Decimal(repr(sys.float_info.epsilon))

# ============================================================================
# Model defaults
# ============================================================================

DEFAULT_PIECES = 1
DEFAULT_PIECE_WEIGHT_G = Decimal("1000")
DEFAULT_STARTER_HYDRATION = Decimal("100")
DEFAULT_BUILD_HOURS = Decimal("12")
DEFAULT_SOAK_HOURS = Decimal("8")
DEFAULT_TEMPERATURE = Decimal("21")  # Celsius
DEFAULT_FINAL_MIX_TEMPERATURE = Decimal("24")  # Celsius

# ============================================================================
# Validation thresholds (percentages of total flour unless noted)
# ============================================================================

HYDRATION_ERROR_LOW = Decimal("45")
HYDRATION_WARNING_LOW = Decimal("55")
HYDRATION_WARNING_HIGH = Decimal("85")
HYDRATION_ERROR_HIGH = Decimal("110")

SALT_WARNING_LOW = Decimal("1.0")
SALT_INFO_LOW = Decimal("1.5")
SALT_INFO_HIGH = Decimal("3.0")
SALT_WARNING_HIGH = Decimal("3.5")

PREFERMENTED_FLOUR_INFO = Decimal("40")
PREFERMENTED_FLOUR_WARNING = Decimal("60")

YEAST_WARNING_HIGH = Decimal("3")
YEAST_INFO_LOW = Decimal("0.2")

POOLISH_TARGET_HYDRATION = Decimal("100")
POOLISH_HYDRATION_TOLERANCE = Decimal("5")
BIGA_HYDRATION_MIN = Decimal("45")
BIGA_HYDRATION_MAX = Decimal("65")

BUILD_HOURS_SHORT = Decimal("4")  # hours
BUILD_HOURS_LONG = Decimal("24")  # hours

SOAKER_HYDRATION_LOW = Decimal("50")  # percent of grain weight
SOAKER_HYDRATION_HIGH = Decimal("200")  # percent of grain weight
SOAK_HOURS_SHORT = Decimal("2")  # hours

INCLUSION_WARNING = Decimal("30")
ENRICHMENT_INFO = Decimal("20")
WHOLE_GRAIN_INFO = Decimal("50")

# ============================================================================
# Production planning (hours)
# ============================================================================

MIXING_HOURS_PER_BATCH = Decimal("0.25")
BULK_FERMENTATION_HOURS = Decimal("3.0")
DIVIDE_AND_SHAPE_HOURS = Decimal("0.5")
FINAL_PROOF_HOURS = Decimal("1.5")
BAKING_HOURS = Decimal("0.75")

GRAMS_PER_KG = Decimal("1000")

# ============================================================================
# File Paths
# ============================================================================

SAVES_DIRECTORY = "saves"
EXPORTS_DIRECTORY = "exports"
COLLECTION_FILE = "formulas.json"

SAVES_DIRECTORY_ENV = "FORMULA_SAVES_DIR"
EXPORTS_DIRECTORY_ENV = "FORMULA_EXPORT_DIR"

# ============================================================================
# Application Metadata
# ============================================================================

APP_NAME = "Bakers Formula"
APP_VERSION = "0.1.0"
FORMAT_VERSION = 1
