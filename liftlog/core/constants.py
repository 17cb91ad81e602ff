"""Application constants."""

# Rest timer fallback when a completed set has no rest configured
DEFAULT_REST_SECONDS = 120

# Template rest fallback when neither the set nor its exercise has one
TEMPLATE_FALLBACK_REST_SECONDS = 90

# Effective sets: primary involvement counts 1.0, auxiliary 0.5
AUXILIARY_SET_WEIGHT = 0.5

# Bucket for exercises missing from the library and custom exercises
UNKNOWN_MUSCLE = "Unknown"

# RPE bounds accepted by the estimator and the engine
MIN_RPE = 1.0
MAX_RPE = 10.0
