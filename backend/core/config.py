"""Core configuration with Pydantic v2 Settings."""

from decimal import Decimal

from pydantic_settings import BaseSettings

from agents.qrbill.dto import QRBillConfig


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    app_env: str = "development"
    log_level: str = "INFO"

    # Company-level VAT configuration (MWST)
    QRBILL_TAX_ENABLED: bool = False
    QRBILL_DEFAULT_TAX_RATE: Decimal = Decimal("8.1")
    # Payment slip: CHF|EUR and ISO country of the issuer
    QRBILL_CURRENCY: str = "CHF"
    QRBILL_HOME_COUNTRY: str = "CH"
    # Label in front of the document number in the unstructured message
    QRBILL_MESSAGE_LABEL: str = "Rechnung"

    def to_qrbill_config(self) -> QRBillConfig:
        return QRBillConfig(
            tax_enabled=self.QRBILL_TAX_ENABLED,
            default_tax_rate=self.QRBILL_DEFAULT_TAX_RATE,
            currency=self.QRBILL_CURRENCY.upper(),
            home_country=self.QRBILL_HOME_COUNTRY.upper(),
        )


# Global settings instance
settings = Settings()
