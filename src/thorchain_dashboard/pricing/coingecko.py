"""CoinGecko pricing service for RUNE fiat exchange rates."""

from decimal import Decimal

import httpx

from thorchain_dashboard.api.errors import PricingError
from thorchain_dashboard.core.models import ExchangeRates
from thorchain_dashboard.data import get_pricing_config


class CoinGeckoPricing:
    """
    Fetches RUNE spot prices in fiat currencies from CoinGecko.

    This is a single-endpoint fetch; it does not go through the failover
    client and does not cache.

    Parameters
    ----------
    base_url : str
        CoinGecko API base URL
    coin_id : str
        CoinGecko coin identifier
    currencies : list[str] | None
        Currency codes to request (default: USD, EUR, GBP, JPY)
    timeout : float
        Request timeout in seconds
    http_client : httpx.Client | None
        HTTP client to use. An owned client is created if None.

    """

    BASE_URL = "https://api.coingecko.com/api/v3"
    DEFAULT_CURRENCIES = ["USD", "EUR", "GBP", "JPY"]

    def __init__(
        self,
        base_url: str = BASE_URL,
        coin_id: str = "thorchain",
        currencies: list[str] | None = None,
        timeout: float = 30.0,
        http_client: httpx.Client | None = None,
    ) -> None:
        self.base_url = base_url
        self.coin_id = coin_id
        self.currencies = [c.upper() for c in (currencies or self.DEFAULT_CURRENCIES)]
        self._owns_client = http_client is None
        self.client = http_client if http_client is not None else httpx.Client(timeout=timeout)

    @classmethod
    def from_config(cls, http_client: httpx.Client | None = None) -> "CoinGeckoPricing":
        """Build a pricing client from the packaged configuration."""
        config = get_pricing_config("coingecko")
        return cls(
            base_url=config["base_url"],
            coin_id=config["coin_id"],
            currencies=config["currencies"],
            timeout=float(config.get("timeout_seconds", 30)),
            http_client=http_client,
        )

    def get_exchange_rates(self) -> ExchangeRates:
        """
        Fetch the RUNE price in every configured currency.

        Returns
        -------
        ExchangeRates
            Mapping of currency code to RUNE price

        Raises
        ------
        PricingError
            If the API request fails or the coin is missing from the response

        """
        params = {"ids": self.coin_id, "vs_currencies": ",".join(c.lower() for c in self.currencies)}

        try:
            response = self.client.get(f"{self.base_url}/simple/price", params=params)
            response.raise_for_status()
            data = response.json()
        except httpx.TimeoutException as e:
            msg = f"Request timeout: {e}"
            raise PricingError(msg) from e
        except httpx.HTTPStatusError as e:
            msg = f"HTTP error {e.response.status_code}: {e}"
            raise PricingError(msg) from e
        except httpx.HTTPError as e:
            msg = f"HTTP request failed: {e}"
            raise PricingError(msg) from e
        except ValueError as e:
            msg = f"Invalid JSON from CoinGecko: {e}"
            raise PricingError(msg) from e

        prices = data.get(self.coin_id) if isinstance(data, dict) else None
        if not prices:
            msg = f"No price data for {self.coin_id}"
            raise PricingError(msg)

        rates = {}
        for currency in self.currencies:
            value = prices.get(currency.lower())
            if value is not None:
                rates[currency] = Decimal(str(value))

        return ExchangeRates(rates=rates)

    def get_price(self, currency: str = "USD") -> Decimal | None:
        """
        Fetch the RUNE price in a single currency.

        Parameters
        ----------
        currency : str
            Currency code

        Returns
        -------
        Decimal | None
            Price, or None if the currency was not returned

        """
        return self.get_exchange_rates().rates.get(currency.upper())

    def close(self) -> None:
        """Close HTTP client."""
        if self._owns_client:
            self.client.close()

    def __enter__(self) -> "CoinGeckoPricing":
        """Context manager entry."""
        return self

    def __exit__(self, exc_type: type, exc_val: Exception, exc_tb: object) -> None:
        """Context manager exit."""
        self.close()
