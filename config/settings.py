from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # Ledger (defaults match solana-test-validator for local dev)
    SOLANA_RPC_URL: str = "http://127.0.0.1:8899"
    DARKPOOL_PROGRAM_ID: str = ""  # required once the relay is built
    DARKPOOL_ADMIN_KEYPAIR: str = "~/.config/solana/id.json"

    # Verification: "local" (stub attestation) or "network" (MPC)
    VERIFICATION_MODE: str = "local"
    MPC_NETWORK_URL: str | None = None
    MPC_API_KEY: str | None = None
    MPC_COMP_DEF_ID: str | None = None
    MPC_CLUSTER_OFFSET: int | None = None
    MPC_KEY_FETCH_ATTEMPTS: int = 20
    MPC_KEY_FETCH_DELAY_MS: int = 500
    MPC_FINALIZE_TIMEOUT_S: float = 120.0
    MPC_POLL_INTERVAL_MS: int = 1000
    MPC_HTTP_TIMEOUT_S: float = 30.0

    # Matching round: 0 means every open intent is submitted
    BATCH_MAX_PER_SIDE: int = 0

    # App
    APP_NAME: str = "Dark Pool Relayer"
    PORT: int = 8080
    LOG_LEVEL: str = "INFO"
    DEBUG: bool = False


settings = Settings()
