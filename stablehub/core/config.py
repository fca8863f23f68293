from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    BUSINESS_NAME: str = "Meadowbrook Equestrian"
    BUSINESS_TIMEZONE: str = "Africa/Johannesburg"
    DEFAULT_PICKUP_LOCATION: str = "Meadowbrook Equestrian"

    STORE_PROVIDER: str = "memory"
    DATA_DIR: str = "./data"
    PROOF_STORAGE_DIR: str = "./data/payment-proofs"
    PROOF_PUBLIC_BASE_URL: str | None = None

    OPENAI_API_KEY: str | None = None
    OPENAI_MODEL_VERIFY: str = "gpt-4o-mini"
    OPENAI_TEMPERATURE_VERIFY: float = 0.0

    EMAILJS_SERVICE_ID: str | None = None
    EMAILJS_TEMPLATE_ID: str | None = None
    EMAILJS_PUBLIC_KEY: str | None = None
    EMAILJS_PRIVATE_KEY: str | None = None
    EMAILJS_SEND_ENDPOINT: str = "https://api.emailjs.com/api/v1.0/email/send"

    OPERATOR_EMAIL: str = "bookings@example.com"
    ADMIN_EMAILS: str = ""

    MAX_PROOF_BYTES: int = 10 * 1024 * 1024
    LIMITED_THRESHOLD: int = 2

    def admin_emails(self) -> set[str]:
        return {e.strip().lower() for e in self.ADMIN_EMAILS.split(",") if e.strip()}


settings = Settings()
