"""Ledger and upstream service constants."""

# Smallest native units (lamports) per SOL
LAMPORTS_PER_SOL = 10**9
NATIVE_DECIMALS = 9

# Wrapped SOL mint, used as the asset identifier for native balances
SOL_MINT = "So11111111111111111111111111111111111111112"
SOL_COINGECKO_ID = "solana"

DEFAULT_ACCOUNTS: list[str] = [
    "akgSyoqae5tWyiuAxZJv5VKzthtHruUkQxgSuPmhWRa",
    "Fqi2c66QRr4wLghXNnhNg4Dr9u4LV4Djy3aL9jcsM5fi",
]

SOLSCAN_PUBLIC_API_URL = "https://public-api.solscan.io"
SOLSCAN_PRO_API_URL = "https://pro-api.solscan.io/v2.0"
SOLSCAN_PRO_PAGE_SIZE = 40

JUPITER_PRICE_URL = "https://lite-api.jup.ag/price/v3"
COINGECKO_API_URL = "https://api.coingecko.com/api/v3"

DEFAULT_ALLOWED_ORIGINS: list[str] = [
    "http://localhost:3000",
    "http://localhost:5173",
]

# HTTP statuses worth retrying
RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})
