import os

ENV_FACTOR_MODE = os.getenv("ENV_FACTOR_MODE", "random").lower()
ENV_FACTOR_SEED = int(os.environ["ENV_FACTOR_SEED"]) if os.getenv("ENV_FACTOR_SEED") else None
FIXED_WEATHER = os.getenv("FIXED_WEATHER", "Clear")
FIXED_TRAFFIC = os.getenv("FIXED_TRAFFIC", "Free Flow")
DEFAULT_TRUST_SCORE = float(os.getenv("DEFAULT_TRUST_SCORE", "80"))
SEED_SAMPLE_ASSETS = os.getenv("SEED_SAMPLE_ASSETS", "true").lower() in {"1", "true", "yes"}
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
