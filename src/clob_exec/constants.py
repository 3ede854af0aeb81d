"""
Constants for the CLOB execution client.
"""

# API Configuration
DEFAULT_HOST = "https://clob.polymarket.com"
DEFAULT_CHAIN_ID = 137  # Polygon mainnet
DEFAULT_TIMEOUT = 30.0
DEFAULT_ORDER_PATH = "/orders"

# Metadata endpoints
TICK_SIZE_PATH = "/tick-size"
NEG_RISK_PATH = "/neg-risk"
FEE_RATE_PATH = "/fee-rate"

# Authentication headers
POLY_API_KEY = "POLY-API-KEY"
POLY_API_SIGNATURE = "POLY-API-SIGNATURE"
POLY_API_TIMESTAMP = "POLY-API-TIMESTAMP"
POLY_API_PASSPHRASE = "POLY-API-PASSPHRASE"
POLY_API_SIGNATURE_TYPE = "POLY-API-SIGNATURE-TYPE"
SIGNATURE_TYPE_GNOSIS_SAFE = "GnosisSafe"
CONTENT_TYPE_JSON = "application/json"

# Signature types understood by the order builder
SIGNATURE_TYPE_EOA = 0
SIGNATURE_TYPE_POLY_PROXY = 1
SIGNATURE_TYPE_POLY_GNOSIS_SAFE = 2

# Loop defaults
DEFAULT_ITERATIONS = 3
DEFAULT_DELAY_SECONDS = 1.0

# Asset ids are uint256
MAX_TOKEN_ID = 2 ** 256 - 1

# Bottleneck classification
NETWORK_BOUND = "network-bound"
CRYPTO_BOUND = "crypto-bound"
BALANCED = "balanced"
BOTTLENECK_RATIO = 2.0
